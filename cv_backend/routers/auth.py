import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cv_backend.database import get_db
from cv_backend.dependencies import get_current_user, get_current_username
from cv_backend.schemas.auth import (
    LoginRequest,
    LoginResponse,
    VerifyResponse,
    ChangePasswordRequest,
    ChangePasswordResponse,
)
from cv_backend.core.security import create_access_token
from cv_backend.errors import InvalidCredentials, NotFoundError, StorageError
from cv_backend.repos.user_repo import authenticate, rotate_password
from cv_backend.models.user import User

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = authenticate(db, data.username, data.password)
        token = create_access_token(user.username)
        logger.info("User logged in: %s (login #%d)", user.username, user.login_count)
        return LoginResponse(token=token, first_login=user.first_login)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    except Exception as e:
        logger.exception("Login failed for username=%s: %s", data.username, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Login failed") from e


@router.get("/verify", response_model=VerifyResponse)
def verify_token(user: User = Depends(get_current_user)):
    return VerifyResponse(username=user.username, first_login=user.first_login)


@router.put("/change-password", response_model=ChangePasswordResponse)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username),
):
    """Rotate the caller's password after re-checking the current one."""
    try:
        authenticate(db, username, data.current_password)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )
    except StorageError as e:
        logger.exception("Change-password lookup failed for user=%s: %s", username, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to change password") from e

    try:
        rotate_password(db, username, data.new_password)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except Exception as e:
        logger.exception("Change-password failed for user=%s: %s", username, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to change password") from e
    return ChangePasswordResponse(success=True, message="Password changed successfully")
