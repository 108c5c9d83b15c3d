import os
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

def _get_env(key: str, default: str | None = None) -> str:
    val = os.getenv(key, default)
    if val is None:
        raise RuntimeError(f"Missing required env var: {key}")
    return val

APP_ENV = _get_env("APP_ENV", "local")
DATABASE_URL = _get_env("DATABASE_URL", "sqlite:///./alumnet.db")
LOG_LEVEL = _get_env("LOG_LEVEL", "DEBUG")
# empty string disables the file sink
LOG_FILE = _get_env("LOG_FILE", "logs/app.log")

# Supabase project (auth is delegated to it)
SUPABASE_URL = _get_env("SUPABASE_URL", "http://localhost:54321")
SUPABASE_ANON_KEY = _get_env("SUPABASE_ANON_KEY", "")
SUPABASE_JWT_SECRET = _get_env("SUPABASE_JWT_SECRET", "")

# "remote" (Supabase get_user only), "hs256" or "jwks" (local signature pre-check)
AUTH_VERIFY_MODE = _get_env("AUTH_VERIFY_MODE", "remote").lower()
JWKS_TTL_SECONDS = int(_get_env("JWKS_TTL_SECONDS", "600"))

# Base URL of the web client, used for password reset redirects
SITE_URL = _get_env("SITE_URL", "http://localhost:5173")

RECENT_JOINS_DAYS = int(_get_env("RECENT_JOINS_DAYS", "30"))

logger.debug(
    f"Config loaded: APP_ENV={APP_ENV}, DATABASE_URL={DATABASE_URL}, "
    f"LOG_LEVEL={LOG_LEVEL}, AUTH_VERIFY_MODE={AUTH_VERIFY_MODE}"
)
