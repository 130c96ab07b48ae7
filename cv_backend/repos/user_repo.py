import logging
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cv_backend.models.user import User
from cv_backend.core.security import hash_password, verify_password, generate_id
from cv_backend.errors import InvalidCredentials, NotFoundError, StorageError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Compared against when the username is unknown so both failures cost one bcrypt check
    return hash_password("no-such-user-placeholder")


def get_by_username(db: Session, username: str) -> User | None:
    try:
        return db.query(User).filter(User.username == username).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to look up user: {e}") from e


def get_user(db: Session, username: str) -> User:
    user = get_by_username(db, username)
    if not user:
        raise NotFoundError(f"user not found: {username}")
    return user


def ensure_seed_user(db: Session, username: str, password: str) -> User:
    """Create the bootstrap account if it does not exist yet. Existing users are left alone."""
    existing = get_by_username(db, username)
    if existing:
        return existing

    now = datetime.now(timezone.utc)
    user = User(
        id=generate_id(),
        username=username,
        password_hash=hash_password(password),
        first_login=True,
        login_count=0,
        last_password_change=now,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # Another worker seeded the same username first
        db.rollback()
        logger.info("Seed user %s created concurrently; keeping existing row", username)
        return get_user(db, username)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to create user: {e}") from e
    logger.info("Seed user created: %s", username)
    return user


def _record_login(db: Session, user: User) -> None:
    """Bump login stats. Failures are logged and swallowed so a valid login still succeeds."""
    now = datetime.now(timezone.utc)
    try:
        db.query(User).filter(User.id == user.id).update(
            {
                User.login_count: User.login_count + 1,
                User.last_login_at: now,
                User.updated_at: now,
            },
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Failed to update login stats for %s: %s", user.username, e)
        return
    try:
        db.refresh(user)
    except SQLAlchemyError as e:
        logger.warning("Login stats updated but re-read failed for %s: %s", user.username, e)


def authenticate(db: Session, username: str, password: str) -> User:
    user = get_by_username(db, username)
    if not user:
        verify_password(password, _dummy_hash())
        logger.info("Login rejected: invalid credentials")
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        logger.info("Login rejected: invalid credentials")
        raise InvalidCredentials()

    _record_login(db, user)
    return user


def rotate_password(db: Session, username: str, new_password: str) -> None:
    """Replace the password hash and clear the first-login flag.

    The caller must already have verified the current password via authenticate().
    """
    now = datetime.now(timezone.utc)
    new_hash = hash_password(new_password)
    try:
        rows = (
            db.query(User)
            .filter(User.username == username)
            .update(
                {
                    User.password_hash: new_hash,
                    User.first_login: False,
                    User.last_password_change: now,
                    User.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        if rows == 0:
            db.rollback()
            raise NotFoundError(f"user not found: {username}")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to update password: {e}") from e
    logger.info("Password rotated for %s", username)
