import os
from dotenv import load_dotenv

load_dotenv()

# -----------------------
# Environment
# -----------------------
APP_ENV = os.getenv("APP_ENV", "development").lower()
IS_PROD = APP_ENV == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "4000"))
BASE_URL = os.getenv("BASE_URL", "http://localhost:3000")

# -----------------------
# Database Config
# -----------------------
DB_TYPE = os.getenv("DB_TYPE", "sqlite").lower()

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres setup")
elif DB_TYPE == "sqlite":
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./quotations.db")
else:
    raise ValueError(f"Unsupported DB_TYPE: {DB_TYPE}")

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "0"))
DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", "10"))

# Retry / timeout budget for database calls (seconds)
DB_RETRY_ATTEMPTS = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
DB_RETRY_DELAY = float(os.getenv("DB_RETRY_DELAY", "1.0"))
DB_QUERY_TIMEOUT = float(os.getenv("DB_QUERY_TIMEOUT", "10"))
DB_HEALTH_TIMEOUT = float(os.getenv("DB_HEALTH_TIMEOUT", "5"))

# -----------------------
# Identity provider (Clerk)
# -----------------------
CLERK_SECRET_KEY = os.getenv("CLERK_SECRET_KEY")
CLERK_API_URL = os.getenv("CLERK_API_URL", "https://api.clerk.com/v1").rstrip("/")
CLERK_API_VERSION = os.getenv("CLERK_API_VERSION", "2023-05-12")
PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT", "10"))

# -----------------------
# Mail provider (SendGrid)
# -----------------------
SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
SENDGRID_FROM_EMAIL = os.getenv("SENDGRID_FROM_EMAIL")
SENDGRID_API_URL = os.getenv("SENDGRID_API_URL", "https://api.sendgrid.com/v3").rstrip("/")
SEND_WELCOME_EMAIL = os.getenv("SEND_WELCOME_EMAIL", "false").lower() in ("1", "true", "yes", "on")
