# openspace/settings_test.py
from .settings import *  # noqa

# Make tests predictable
DEBUG = True

# Faster hashing for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# In-memory email + cache
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "throttle-cache",
    }
}

# DRF: make throttles generous so they don't trip unrelated tests.
# (Tests that *expect* throttling use override_settings to set narrow rates.)
REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # keep whatever is set in settings.py
    "DEFAULT_THROTTLE_RATES": {
        "login": "10000/hour",
        "register": "10000/hour",
        "otp-verify": "10000/hour",
        "otp-resend": "10000/hour",
        "password-reset": "10000/hour",
        "password-reset-confirm": "10000/hour",
    },
    "TEST_REQUEST_DEFAULT_FORMAT": "json",
}

ADMIN_SETUP_CODE = "setup-code-for-tests"
OTP_ECHO_IN_RESPONSE = False
AUTH_COOKIE_SECURE = False

# ---- Celery: run tasks eagerly in tests; no external broker needed ----
CELERY_BROKER_URL = "redis://localhost:6379/0"
CELERY_RESULT_BACKEND = "redis://localhost:6379/1"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

TIME_ZONE = "Asia/Manila"
USE_TZ = True
