from cv_backend.models.user import User
from cv_backend.models.cv_file import CVFile

__all__ = [
    "User",
    "CVFile",
]
