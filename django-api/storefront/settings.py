"""Django settings for the storefront API.

Configuration comes from the environment (optionally a local .env file).
Payment gateway credentials are read here but validated where they are used,
so the catalog keeps working on a deployment without a gateway.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, default))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, default))


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "insecure-development-key")
DEBUG = os.getenv("DJANGO_DEBUG", "false").lower() == "true"
ALLOWED_HOSTS = os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "ebooks.apps.EbooksConfig",
    "checkout.apps.CheckoutConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "storefront.urls"

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
        "NAME": os.getenv("SQLITE_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "storefront",
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
USE_TZ = True
TIME_ZONE = "UTC"
STATIC_URL = "static/"

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
}

# Payment gateway
PAYMENT_GATEWAY_API_KEY = os.getenv("PAYMENT_GATEWAY_API_KEY", "")
PAYMENT_GATEWAY_BASE_URL = os.getenv("PAYMENT_GATEWAY_BASE_URL", "https://api.kirvano.com.br/v1")
PAYMENT_GATEWAY_WEBHOOK_SECRET = os.getenv("PAYMENT_GATEWAY_WEBHOOK_SECRET", "")
PAYMENT_GATEWAY_TIMEOUT = _env_float("PAYMENT_GATEWAY_TIMEOUT", 10.0)

# Checkout
FRONTEND_BASE_URL = os.getenv("FRONTEND_BASE_URL", "http://localhost:3000")
CHECKOUT_SUCCESS_URL = os.getenv("CHECKOUT_SUCCESS_URL", f"{FRONTEND_BASE_URL}/success")
CHECKOUT_CANCEL_URL = os.getenv("CHECKOUT_CANCEL_URL", f"{FRONTEND_BASE_URL}/")
CHECKOUT_CURRENCY = os.getenv("CHECKOUT_CURRENCY", "BRL")
CHECKOUT_ACCESS_PRICE = _env_int("CHECKOUT_ACCESS_PRICE", 1999)
CHECKOUT_POLL_INTERVAL = _env_float("CHECKOUT_POLL_INTERVAL", 2.0)
CHECKOUT_POLL_TIMEOUT = _env_float("CHECKOUT_POLL_TIMEOUT", 900.0)
CHECKOUT_RETURN_POLL_TIMEOUT = _env_float("CHECKOUT_RETURN_POLL_TIMEOUT", 10.0)
CHECKOUT_NOT_FOUND_GRACE = _env_float("CHECKOUT_NOT_FOUND_GRACE", 60.0)
CHECKOUT_CREATE_ATTEMPTS = _env_int("CHECKOUT_CREATE_ATTEMPTS", 3)
CHECKOUT_RETRY_DELAY = _env_float("CHECKOUT_RETRY_DELAY", 0.5)

# Catalog
EBOOK_DEFAULT_PRICE = _env_int("EBOOK_DEFAULT_PRICE", 499)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

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
        "checkout": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": True},
        "ebooks": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": True},
    },
}
