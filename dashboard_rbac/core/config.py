import logging
import sys

from dashboard_rbac.core.logging import InterceptHandler
from loguru import logger
from starlette.config import Config
from starlette.datastructures import Secret

# Load .env
config = Config(".env")

# Core App Settings
API_PREFIX = "/api/v1"
VERSION = "0.1.0"

# Session token signing
# Load SECRET_KEY as Starlette Secret, fallback default included
try:
    SECRET_KEY: Secret = config("SECRET_KEY", cast=Secret)
except Exception:
    SECRET_KEY = Secret("testsecretkey1234567890")

ALGORITHM: str = config("ALGORITHM", default="HS256")

# Sessions always last exactly one day; only the cookie transport is tunable.
SESSION_TTL_SECONDS: int = 24 * 60 * 60
SESSION_COOKIE_NAME: str = config("SESSION_COOKIE_NAME", default="token")
SESSION_COOKIE_SECURE: bool = config("SESSION_COOKIE_SECURE", cast=bool, default=True)

# Page paths used by the route guard
AUTH_PATH: str = config("AUTH_PATH", default="/auth")
DASHBOARD_PATH: str = config("DASHBOARD_PATH", default="/dashboard")

# Authorization
PERMISSION_CACHE_TTL_SECONDS: float = config("PERMISSION_CACHE_TTL_SECONDS", cast=float, default=30.0)
SEED_ON_STARTUP: bool = config("SEED_ON_STARTUP", cast=bool, default=True)
CREATE_TABLES_ON_STARTUP: bool = config("CREATE_TABLES_ON_STARTUP", cast=bool, default=True)

DEBUG: bool = config("DEBUG", cast=bool, default=False)
DESCRIPTION: str = config("DESCRIPTION", default="Role-based access control for the admin dashboard")
DOCS_URL: str = config("DOCS_URL", default="/api/v1/docs")
PROJECT_NAME: str = config("PROJECT_NAME", default="dashboard-rbac")

# DB Connection Pieces
POSTGRES_HOST: str = config("POSTGRES_HOST", default="127.0.0.1")
POSTGRES_PORT: str = config("POSTGRES_PORT", default="5432")
POSTGRES_USER: str = config("POSTGRES_USER", default="postgres")
POSTGRES_PASSWORD: str = config("POSTGRES_PASSWORD", default="password")
POSTGRES_DB: str = config("POSTGRES_DB", default="dashboard")

# Full URL for SQLAlchemy; DATABASE_URL wins when set explicitly
DATABASE_URL: str = config(
    "DATABASE_URL",
    default=(
        f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}"
        f"@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
    ),
)

# Uvicorn settings
HOST: str = config("HOST", default="0.0.0.0")
PORT: int = config("PORT", cast=int, default=8080)
RELOAD: bool = config("RELOAD", cast=bool, default=True)

# Logging
LOGGING_LEVEL = logging.DEBUG if DEBUG else logging.INFO
logging.basicConfig(
    handlers=[InterceptHandler(level=LOGGING_LEVEL)],
    level=LOGGING_LEVEL,
)
logger.configure(handlers=[{"sink": sys.stderr, "level": LOGGING_LEVEL}])
