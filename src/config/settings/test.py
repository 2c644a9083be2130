"""Test settings - uses SQLite for fast local testing."""
from .base import *  # noqa: F401,F403

DEBUG = True

# SQLite by default; TEST_DATABASE_URL switches to PostgreSQL for the concurrency tests
DATABASES = {
    "default": env.db("TEST_DATABASE_URL", default="sqlite://:memory:"),  # noqa: F405
}
DATABASES["default"]["ATOMIC_REQUESTS"] = False

# Faster password hashing in tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable API throttling in tests for deterministic runs
REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []  # noqa: F405
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}  # noqa: F405

TIME_ZONE = "UTC"
SHIFT_PAYMENT_SPLIT_MODE = "estimated"

# Disable logging noise during tests
LOGGING["root"]["level"] = "WARNING"  # noqa: F405
LOGGING["handlers"].pop("file")  # noqa: F405
LOGGING["loggers"]["shiftledger"]["handlers"] = []  # noqa: F405
LOGGING["loggers"]["shiftledger"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["shiftledger"]["propagate"] = True  # noqa: F405
