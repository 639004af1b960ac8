import os
from datetime import timedelta
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

# SQLite database location (override with DASHBOARD_DATABASE_URL, e.g. PostgreSQL)
DATABASE_URL = os.getenv(
    "DASHBOARD_DATABASE_URL", f"sqlite:///{BASE_DIR / 'dashboard.db'}"
)

# Browser session cookie
SESSION_COOKIE_NAME = "dashboard_session"
SESSION_TTL = timedelta(hours=float(os.getenv("DASHBOARD_SESSION_TTL_HOURS", "8")))
SECURE_COOKIES = os.getenv("DASHBOARD_SECURE_COOKIES", "").strip().lower() in {
    "1",
    "true",
    "yes",
    "on",
}

# Provider id used for email/password accounts
CREDENTIAL_PROVIDER = "credential"

# Minimum password length for users created from the admin dashboard
MIN_PASSWORD_LENGTH = 8

# Default users created by seed_users.py
SEED_USERS = [
    {
        "email": "admin@test.com",
        "password": "admin123",
        "name": "Admin",
        "role": "ADMIN",
    },
    {
        "email": "direction@test.com",
        "password": "direction123",
        "name": "Direction Test",
        "role": "DIRECTION",
    },
]
