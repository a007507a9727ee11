import os  # lets us read environment variables (from the OS)
from functools import (
    lru_cache,  # tiny built-in cache; we use it to reuse one Settings object
)

from dotenv import load_dotenv  # loads variables from a local .env file
from pydantic import BaseModel  # Pydantic gives us a typed, validated settings class

load_dotenv()  # read .env and put those key=value pairs into environment variables


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):  # our typed container for config values
    # read SECRET_KEY from env; if missing, fall back to this default
    # change effect: new value changes how session cookies are signed (must be secret)
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-change")

    # database connection string; default is a SQLite file in the project folder
    # change effect: point to a different DB (e.g., Postgres) or file path
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./breakeven.db")

    # the cookie name used to store the session ID in the browser
    # change effect: renames the cookie (harmless); users will be logged out on rename
    session_cookie: str = os.getenv("SESSION_COOKIE_NAME", "be_session")

    # defaults for a budget created lazily on first access
    default_daily_cents: int = int(os.getenv("DEFAULT_DAILY_CENTS", "2000"))
    default_currency: str = os.getenv("DEFAULT_CURRENCY", "CAD")
    default_timezone: str = os.getenv("DEFAULT_TIMEZONE", "America/Toronto")

    # true: a missing previous-day ledger mid-walk raises instead of carrying 0
    ledger_strict_gaps: bool = _env_bool("LEDGER_STRICT_GAPS")

    # walks longer than this many days are logged as a warning (never capped)
    recompute_warn_days: int = int(os.getenv("RECOMPUTE_WARN_DAYS", "366"))

    # root log level for setup_logging()
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache  # make sure Settings() is created once and reused (fast + consistent)
def get_settings() -> Settings:
    return Settings()  # build from env (already loaded by load_dotenv())
