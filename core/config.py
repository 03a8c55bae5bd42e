import os
import logging
from dotenv import load_dotenv
from urllib.parse import urlparse

# Load .env from project root
try:
    load_dotenv(dotenv_path=os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".env")))
except Exception:
    try:
        load_dotenv()
    except Exception:
        pass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _clean(value: str) -> str:
    return (value or "").strip().strip('"').strip("'").strip('`')


APP_NAME = os.getenv("APP_NAME", "Shiv Fashion Mart Intake")
BRAND_NAME = os.getenv("BRAND_NAME", "Shiv Fashion Mart")
ENV = (os.getenv("ENV") or os.getenv("NODE_ENV") or "development").strip().lower()

# Storage (use /tmp in production for writable serverless filesystems)
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_default_db_path = (
    os.path.join("/tmp", "submissions.db")
    if ENV == "production"
    else os.path.join(_PROJECT_ROOT, "data", "submissions.db")
)
SUBMISSIONS_DB_PATH = _clean(os.getenv("SUBMISSIONS_DB_PATH", "")) or _default_db_path
DATABASE_URL = _clean(os.getenv("DATABASE_URL", "")) or f"sqlite:///{SUBMISSIONS_DB_PATH}"

# Cloudinary (CLOUDINARY_URL=cloudinary://<key>:<secret>@<cloud_name> is also accepted)
CLOUDINARY_CLOUD_NAME = _clean(os.getenv("CLOUDINARY_CLOUD_NAME", ""))
CLOUDINARY_API_KEY = _clean(os.getenv("CLOUDINARY_API_KEY", ""))
CLOUDINARY_API_SECRET = _clean(os.getenv("CLOUDINARY_API_SECRET", ""))
_cloudinary_url = _clean(os.getenv("CLOUDINARY_URL", ""))
if _cloudinary_url and not (CLOUDINARY_CLOUD_NAME and CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET):
    try:
        _parsed = urlparse(_cloudinary_url)
        CLOUDINARY_CLOUD_NAME = CLOUDINARY_CLOUD_NAME or (_parsed.hostname or "")
        CLOUDINARY_API_KEY = CLOUDINARY_API_KEY or (_parsed.username or "")
        CLOUDINARY_API_SECRET = CLOUDINARY_API_SECRET or (_parsed.password or "")
    except Exception:
        pass
CLOUDINARY_FOLDER = _clean(os.getenv("CLOUDINARY_FOLDER", "")) or "shiv-fashion-mart"
CLOUDINARY_API_BASE = os.getenv("CLOUDINARY_API_BASE", "https://api.cloudinary.com/v1_1").rstrip("/")

UPLOAD_TIMEOUT_SEC = float(os.getenv("UPLOAD_TIMEOUT_SEC", "30"))
UPLOAD_CONCURRENCY = max(1, int(os.getenv("UPLOAD_CONCURRENCY", "1")))
MAX_IMAGES = int(os.getenv("MAX_IMAGES", "6"))

# Mail relay
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_STARTTLS = _env_bool("SMTP_STARTTLS", False)
SMTP_TIMEOUT_SEC = float(os.getenv("SMTP_TIMEOUT_SEC", "20"))
MAIL_FROM = os.getenv("MAIL_FROM") or os.getenv("FROM_EMAIL") or SMTP_USER
NOTIFY_TO = os.getenv("NOTIFY_TO") or SMTP_USER

# Admin listing guard
ADMIN_SECRET = (os.getenv("ADMIN_SECRET") or "").strip()
ADMIN_ALLOWLIST_IPS = [ip.strip() for ip in (os.getenv("ADMIN_ALLOWLIST_IPS", "").split(",") if os.getenv("ADMIN_ALLOWLIST_IPS") else []) if ip.strip()]
# Only honour X-Forwarded-For when running behind a trusted reverse proxy
TRUST_PROXY_HEADERS = _env_bool("TRUST_PROXY_HEADERS", False)

# Abuse protection on the public form
SUBMIT_RATE_LIMIT_PER_HOUR = int(os.getenv("SUBMIT_RATE_LIMIT_PER_HOUR", "30"))
REDIS_URL = os.getenv("REDIS_URL", "").strip()

_default_origins = ",".join([
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
])
_origins_env = os.getenv("ALLOWED_ORIGINS") or os.getenv("CORS_ORIGINS") or _default_origins
ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]

# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("shivmart")

TEMPLATES_DIR = os.path.join(_PROJECT_ROOT, "templates")
