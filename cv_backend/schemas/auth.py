from pydantic import BaseModel, field_validator

MIN_PASSWORD_LENGTH = 8


class LoginRequest(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("Username is required")
        return v


class LoginResponse(BaseModel):
    token: str
    message: str = "Login successful"
    first_login: bool = False


class VerifyResponse(BaseModel):
    valid: bool = True
    username: str
    message: str = "Token is valid"
    first_login: bool = False


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return v


class ChangePasswordResponse(BaseModel):
    success: bool
    message: str
