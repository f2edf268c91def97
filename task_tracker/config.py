from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from repo root and package-level .env (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

ENVIRONMENTS = ("development", "test", "production")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").strip().lower()
DEBUG = ENVIRONMENT == "development"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./task_tracker.db")

DEFAULT_SECRET_KEY = "change-me"
SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))
API_PREFIX = os.getenv("API_PREFIX", "").rstrip("/")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text" if DEBUG else "json")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]


def validate_config() -> None:
    """Fail fast on settings the service cannot run with."""
    if ENVIRONMENT not in ENVIRONMENTS:
        raise ValueError(
            f"ENVIRONMENT must be one of {', '.join(ENVIRONMENTS)}, got '{ENVIRONMENT}'"
        )
    if len(SECRET_KEY) < 10 and ENVIRONMENT != "development":
        raise ValueError("SECRET_KEY must be at least 10 characters long")
    if ENVIRONMENT == "production" and SECRET_KEY == DEFAULT_SECRET_KEY:
        raise ValueError("SECRET_KEY environment variable is required in production")
    if ACCESS_TOKEN_EXPIRE_MINUTES <= 0:
        raise ValueError("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
    if MAX_PAGE_LIMIT <= 0:
        raise ValueError("MAX_PAGE_LIMIT must be positive")
