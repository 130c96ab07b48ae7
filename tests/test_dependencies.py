import pytest
from fastapi import HTTPException

import cv_backend.dependencies as deps
from cv_backend.errors import InvalidToken, NotFoundError, StorageError


class _Creds:
    def __init__(self, token: str):
        self.credentials = token


class _User:
    def __init__(self, username="admin", first_login=False):
        self.username = username
        self.first_login = first_login


def _raise(exc):
    raise exc


def test_get_current_username_missing_credentials():
    with pytest.raises(HTTPException) as ex:
        deps.get_current_username(credentials=None)
    assert ex.value.status_code == 401
    assert ex.value.detail == "Not authenticated"


def test_get_current_username_invalid_token(monkeypatch):
    monkeypatch.setattr(deps, "verify_access_token", lambda token: _raise(InvalidToken()))
    with pytest.raises(HTTPException) as ex:
        deps.get_current_username(credentials=_Creds("bad"))
    assert ex.value.status_code == 401
    assert ex.value.detail == "Invalid or expired token"


def test_get_current_username_success(monkeypatch):
    monkeypatch.setattr(deps, "verify_access_token", lambda token: "admin")
    assert deps.get_current_username(credentials=_Creds("tok")) == "admin"


def test_get_current_user_not_found(monkeypatch):
    monkeypatch.setattr(deps, "get_user", lambda db, username: _raise(NotFoundError(username)))
    with pytest.raises(HTTPException) as ex:
        deps.get_current_user(db=object(), username="ghost")
    assert ex.value.status_code == 401


def test_get_current_user_storage_error(monkeypatch):
    monkeypatch.setattr(deps, "get_user", lambda db, username: _raise(StorageError("down")))
    with pytest.raises(HTTPException) as ex:
        deps.get_current_user(db=object(), username="admin")
    assert ex.value.status_code == 500


def test_get_current_user_success(monkeypatch):
    user = _User()
    monkeypatch.setattr(deps, "get_user", lambda db, username: user)
    assert deps.get_current_user(db=object(), username="admin") is user


def test_require_rotated_password_blocks_first_login():
    with pytest.raises(HTTPException) as ex:
        deps.require_rotated_password(user=_User(first_login=True))
    assert ex.value.status_code == 403


def test_require_rotated_password_success():
    user = _User(first_login=False)
    assert deps.require_rotated_password(user=user) is user
