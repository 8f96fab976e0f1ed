import os
from pathlib import Path


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


BASE_DIR = Path(__file__).resolve().parent.parent.parent

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("PASSI_DATABASE_URL", f"sqlite:///{BASE_DIR}/passi.db")
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

# None keeps the engine default (READ COMMITTED on Postgres / MySQL).
SNAPSHOT_ISOLATION_LEVEL = os.getenv("SNAPSHOT_ISOLATION_LEVEL") or None
WRITE_ISOLATION_LEVEL = os.getenv("WRITE_ISOLATION_LEVEL") or None

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# user_role.role_id values
ROLE_STUDENT = 1
ROLE_INSTRUCTOR = 2


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("PASSI_DATABASE_URL must point at a server database in production.")
