import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from cv_backend.config import settings
from cv_backend.core.rate_limiter import login_limiter
from cv_backend.database import SessionLocal, engine, init_db, wait_for_database
from cv_backend.logging_config import setup_logging
from cv_backend.repos.user_repo import ensure_seed_user
from cv_backend.routers import auth, cv

setup_logging()
logger = logging.getLogger(__name__)

PLACEHOLDER_SECRET_KEY = "replace-with-a-long-random-secret-key"
PLACEHOLDER_ADMIN_PASSWORD = "change-me-on-first-login"
RATE_LIMITED_PATHS = {"/api/login"}

app = FastAPI(
    title="CV Backend API",
    description="Single current CV storage with authenticated upload and password rotation.",
    version="1.0.0",
)

cors_origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(cv.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.middleware("http")
async def apply_rate_limits(request, call_next):
    if request.method != "POST" or request.url.path not in RATE_LIMITED_PATHS:
        return await call_next(request)

    limit = settings.rate_limit_login_per_min
    if limit > 0:
        client_ip = request.client.host if request.client else "unknown"
        allowed, retry_after = login_limiter.allow(f"{client_ip}:{request.url.path}", limit=limit, window_seconds=60)
        if not allowed:
            logger.warning("Login rate limit exceeded for %s", client_ip)
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many login attempts. Please retry shortly."},
                headers={"Retry-After": str(retry_after)},
            )

    return await call_next(request)


@app.get("/health")
def health():
    return {"status": "ok", "service": "cv-backend"}


@app.get("/health/ready")
def health_ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception:
        logger.exception("Readiness check failed")
        return JSONResponse(status_code=503, content={"status": "not_ready"})


def _check_placeholders() -> None:
    problems = []
    if settings.secret_key == PLACEHOLDER_SECRET_KEY:
        problems.append("SECRET_KEY uses the placeholder default")
    if "username:password@" in settings.database_url:
        problems.append("DATABASE_URL uses placeholder credentials")
    if settings.admin_password == PLACEHOLDER_ADMIN_PASSWORD:
        problems.append("ADMIN_PASSWORD uses the placeholder default")
    if not problems:
        return
    env = (settings.app_env or "development").lower()
    if env in {"production", "prod"}:
        raise RuntimeError("; ".join(problems) + " (not allowed in production)")
    for problem in problems:
        logger.warning("%s. Set it in .env for secure deployments.", problem)


def seed_admin_user() -> None:
    db = SessionLocal()
    try:
        ensure_seed_user(db, settings.admin_username, settings.admin_password)
        logger.info("Admin username: %s", settings.admin_username)
    except Exception as e:
        logger.warning("Failed to initialize default user %s: %s", settings.admin_username, e)
    finally:
        db.close()


@app.on_event("startup")
def on_startup():
    logger.info("Starting CV Backend API")
    _check_placeholders()
    wait_for_database()
    init_db()
    seed_admin_user()
