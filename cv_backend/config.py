from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Required from environment (.env / deployment secrets)
    database_url: str
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24 hours
    app_env: str = "development"  # development, staging, production

    # CORS origins as comma-separated values
    # Example: "https://cv.example.com,https://admin.example.com"
    cors_allow_origins: str = "http://localhost:3000,http://localhost:5173"

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # Seed account created on startup when missing. Must be rotated on first login.
    admin_username: str = "admin"
    admin_password: str = "change-me-on-first-login"
    bcrypt_rounds: int = 12

    # Stored CV naming
    stored_cv_name: str = "current_cv.pdf"
    cv_download_filename: str = "CV.pdf"

    # Upload and request guards
    max_cv_upload_mb: int = 10
    rate_limit_login_per_min: int = 10

    # Startup connection retry (linear backoff: attempt * backoff seconds)
    db_connect_max_retries: int = 10
    db_connect_backoff_seconds: float = 2.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
