"""Django settings for the vendor ops notification backend."""

from __future__ import annotations

import os
from pathlib import Path

from config.env import env_bool, env_int, env_list, load_env

BASE_DIR = Path(__file__).resolve().parent.parent

load_env(BASE_DIR)

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", "*")

INSTALLED_APPS = [
    "config.apps.OpsAdminConfig",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_object_actions",
    "django_json_widget",
    "apps.notifications",
    "apps.push",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "config.urls"

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

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DJANGO_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# --- Logging ---
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "apps": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}

# --- Celery ---
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TASK_EAGER_PROPAGATES = True

# --- Notifications ---
NOTIFICATIONS_TRACKING_ENABLED = env_bool("NOTIFICATIONS_TRACKING_ENABLED", True)
NOTIFICATIONS_PAGE_SIZE = env_int("NOTIFICATIONS_PAGE_SIZE", 20)
NOTIFICATIONS_DEFAULT_DISMISS_REASON = os.environ.get(
    "NOTIFICATIONS_DEFAULT_DISMISS_REASON", "Dismissed by admin"
)
NOTIFICATIONS_API_BASE_URL = os.environ.get("NOTIFICATIONS_API_BASE_URL", "http://localhost:8000")
NOTIFICATIONS_API_TOKEN = os.environ.get("NOTIFICATIONS_API_TOKEN", "")
NOTIFICATIONS_API_TIMEOUT = env_int("NOTIFICATIONS_API_TIMEOUT", 30)
# Fan out new notifications to push subscribers via Celery.
NOTIFICATIONS_FAN_OUT_ENABLED = env_bool("NOTIFICATIONS_FAN_OUT_ENABLED", True)

# --- Push ---
PUSH_VAPID_PUBLIC_KEY = os.environ.get("PUSH_VAPID_PUBLIC_KEY", "")
PUSH_GATEWAY = os.environ.get("PUSH_GATEWAY", "logging")
PUSH_GATEWAY_ENDPOINT = os.environ.get("PUSH_GATEWAY_ENDPOINT", "")
PUSH_FALLBACK_AUTO_DISMISS_SECONDS = env_int("PUSH_FALLBACK_AUTO_DISMISS_SECONDS", 5)
PUSH_DEFAULT_URL = os.environ.get("PUSH_DEFAULT_URL", "/admin/orders")
