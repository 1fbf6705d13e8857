"""
Django settings for core_backend project.

Secrets and deployment-specific values are read from the environment.
"""

import os
from pathlib import Path

from celery.schedules import crontab

from business_hours.services import beat_timezone_name

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-dev-only-key")
DEBUG = os.environ.get("DEBUG", "True").lower() in ("true", "1", "yes")
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "channels",
    # Local apps
    "core_backend",
    "companies",
    "users",
    "meals",
    "business_hours",
    "orders",
    "payments",
    "refunds",
    "recommendations",
    "notifications",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core_backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "core_backend.wsgi.application"
ASGI_APPLICATION = "core_backend.asgi.application"

# Database: PostgreSQL when DATABASE_NAME is set, SQLite otherwise
if os.environ.get("DATABASE_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("DATABASE_NAME"),
            "USER": os.environ.get("DATABASE_USER", "postgres"),
            "PASSWORD": os.environ.get("DATABASE_PASSWORD", ""),
            "HOST": os.environ.get("DATABASE_HOST", "localhost"),
            "PORT": os.environ.get("DATABASE_PORT", "5432"),
            "ATOMIC_REQUESTS": False,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

AUTH_USER_MODEL = "users.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --- Cache (used for sweep locks) ---
if os.environ.get("REDIS_URL"):
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": os.environ.get("REDIS_URL"),
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "mealops-default",
        }
    }

# --- Channels ---
if os.environ.get("REDIS_URL"):
    CHANNEL_LAYERS = {
        "default": {
            "BACKEND": "channels_redis.core.RedisChannelLayer",
            "CONFIG": {"hosts": [os.environ.get("REDIS_URL")]},
        }
    }
else:
    CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}

# --- REST framework ---
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "EXCEPTION_HANDLER": "core_backend.exception_handler.mealops_exception_handler",
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 10,
}

# --- Email ---
EMAIL_BACKEND = os.environ.get(
    "EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend"
)
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "orders@nutribreakfast.ng")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

# --- Business time & ordering window ---
# Fixed offset from UTC in minutes (West Africa Time = +60)
BUSINESS_UTC_OFFSET_MINUTES = int(os.environ.get("BUSINESS_UTC_OFFSET_MINUTES", "60"))
ORDER_CUTOFF_HOUR = int(os.environ.get("ORDER_CUTOFF_HOUR", "22"))
ORDER_CUTOFF_MINUTE = int(os.environ.get("ORDER_CUTOFF_MINUTE", "0"))

# Grace intervals (minutes) and kitchen hours for autonomous progression
ORDER_PROGRESSION = {
    "PREPARE_AFTER_MINUTES": 30,
    "DISPATCH_AFTER_MINUTES": 15,
    "DELIVER_AFTER_MINUTES": 30,
    "KITCHEN_PREP_START_HOUR": 6,
    "KITCHEN_DISPATCH_START_HOUR": 7,
}
RIDER_DISPATCHER = "orders.services.dispatch.PlaceholderRiderDispatcher"

# --- Billing ---
CURRENCY = "NGN"
INVOICE_TAX_RATE = "0.075"
INVOICE_DUE_DAYS = 14
# "flag": log + mark invoice and continue, "reject": refuse the payment
PAYMENT_AMOUNT_MISMATCH_POLICY = os.environ.get("PAYMENT_AMOUNT_MISMATCH_POLICY", "flag")

PAYSTACK_BASE_URL = os.environ.get("PAYSTACK_BASE_URL", "https://api.paystack.co")
PAYSTACK_SECRET_KEY = os.environ.get("PAYSTACK_SECRET_KEY", "")
PAYSTACK_WEBHOOK_SECRET = os.environ.get("PAYSTACK_WEBHOOK_SECRET", PAYSTACK_SECRET_KEY)
PAYSTACK_TIMEOUT_SECONDS = 30

# --- Recommendations ---
RECOMMENDATION_TTL_HOURS = 24
RECOMMENDATION_PROVIDER = "recommendations.rankers.rule_based_ranking"

# --- Celery ---
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
# Beat crontab hours are business-local
CELERY_TIMEZONE = os.environ.get("CELERY_TIMEZONE") or beat_timezone_name(BUSINESS_UTC_OFFSET_MINUTES)
CELERY_TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "False").lower() == "true"
SCHEDULER_LOCK_TIMEOUT_SECONDS = 15 * 60

CELERY_BEAT_SCHEDULE = {
    "advance-order-statuses": {
        "task": "orders.tasks.advance_order_statuses",
        "schedule": crontab(minute="*/30", hour="6-20"),
    },
    "complete-deliveries": {
        "task": "orders.tasks.complete_deliveries",
        "schedule": crontab(minute="*/10", hour="6-21"),
    },
    "send-order-reminders": {
        "task": "orders.tasks.send_order_reminders",
        "schedule": crontab(minute=30, hour=14),
    },
    "generate-monthly-invoices": {
        "task": "payments.tasks.generate_monthly_invoices",
        "schedule": crontab(minute=0, hour=1, day_of_month=1),
    },
    "mark-overdue-invoices": {
        "task": "payments.tasks.mark_overdue_invoices",
        "schedule": crontab(minute=0, hour=9),
    },
    "repair-paid-flags": {
        "task": "payments.tasks.repair_paid_flags",
        "schedule": crontab(minute=30, hour=9),
    },
    "cleanup-expired-recommendations": {
        "task": "recommendations.tasks.cleanup_expired_recommendations",
        "schedule": crontab(minute=0, hour=3),
    },
}

# --- Logging ---
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "orders": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "payments": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "refunds": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "notifications": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "recommendations": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "business_hours": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
