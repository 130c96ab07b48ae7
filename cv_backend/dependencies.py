import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from cv_backend.database import get_db
from cv_backend.core.security import verify_access_token
from cv_backend.errors import InvalidToken, NotFoundError, StorageError
from cv_backend.repos.user_repo import get_user

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def get_current_username(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if not credentials:
        logger.info("Auth failed: missing bearer credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        return verify_access_token(credentials.credentials)
    except InvalidToken:
        logger.info("Auth failed: invalid or expired token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_current_user(
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username),
):
    try:
        return get_user(db, username)
    except NotFoundError:
        logger.info("Auth failed: user from token not found")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    except StorageError as e:
        logger.exception("Auth failed: user lookup error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get user info",
        ) from e


def require_rotated_password(
    user=Depends(get_current_user),
):
    """Require a user who has replaced the initial seeded password."""
    if user.first_login:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Change your initial password first",
        )
    return user
