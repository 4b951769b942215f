"""
Django settings for the crm_ledger project.

Every deployment-specific value is read from the environment so the same
module serves local development, the test suite and production.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = env_bool("DJANGO_DEBUG", default=True)
ALLOWED_HOSTS = [
    h.strip()
    for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "ledger_core.apps.LedgerCoreConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    # attaches request.org for the logged-in user (after authentication)
    "ledger_core.middleware.CurrentOrganizationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "crm_ledger.urls"
WSGI_APPLICATION = "crm_ledger.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# SQLite for development and tests, PostgreSQL when LEDGER_DB_ENGINE=postgres
if os.environ.get("LEDGER_DB_ENGINE", "sqlite") == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("LEDGER_DB_NAME", "crm_ledger"),
            "USER": os.environ.get("LEDGER_DB_USER", "postgres"),
            "PASSWORD": os.environ.get("LEDGER_DB_PASSWORD", ""),
            "HOST": os.environ.get("LEDGER_DB_HOST", "localhost"),
            "PORT": os.environ.get("LEDGER_DB_PORT", "5432"),
            # every request runs in read committed; posting/closing use
            # explicit transaction.atomic() blocks
            "ATOMIC_REQUESTS": False,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.environ.get("LEDGER_DB_NAME", str(BASE_DIR / "ledger.sqlite3")),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Custom user carries default_organization
AUTH_USER_MODEL = "ledger_core.User"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# ---------- Ledger ----------
# Equity account that receives the net result when a period is closed,
# used when the organization has no retained_earnings_account set
LEDGER_RETAINED_EARNINGS_CODE = os.environ.get("LEDGER_RETAINED_EARNINGS_CODE", "3200")
# Upper bound of rows returned by the general ledger report
LEDGER_GENERAL_LEDGER_LIMIT = int(os.environ.get("LEDGER_GENERAL_LEDGER_LIMIT", "1000"))

# ---------- Celery ----------
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "memory://")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", "cache+memory://")
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", default=False)
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]

# ---------- Logging ----------
LEDGER_LOG_LEVEL = os.environ.get("LEDGER_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "ledger_core": {
            "handlers": ["console"],
            "level": LEDGER_LOG_LEVEL,
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    },
}
