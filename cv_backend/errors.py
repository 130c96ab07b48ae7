"""Error kinds raised by the credential store, document store and token verifier.

Routers translate each kind into an HTTP status; nothing in the stores knows
about HTTP.
"""


class CVBackendError(Exception):
    """Base class for all store and token errors."""


class InvalidCredentials(CVBackendError):
    """Unknown username or wrong password. The two causes are never told apart."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class NotFoundError(CVBackendError):
    """A targeted lookup or mutation matched no row."""


class StorageError(CVBackendError):
    """Database unavailable, transaction failure or unreadable payload."""


class InvalidToken(CVBackendError):
    """Bad signature, malformed or expired token."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)
