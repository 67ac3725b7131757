"""Test environment: in-memory SQLite, cheap bcrypt, fixed JWT secret."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["DB_RECONNECT_MAX_RETRIES"] = "1"
os.environ["DB_RECONNECT_BASE_DELAY_SEC"] = "0"
os.environ.setdefault("LOG_LEVEL", "WARNING")
