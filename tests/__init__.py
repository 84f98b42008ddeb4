"""
Test package. Environment is set here, before any app module is imported,
because app.core.config builds settings (and the engine) at import time.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-0123456789abcdef0123456789abcdef"
os.environ["JWT_EXPIRE_MINUTES"] = "60"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["LOGIN_RATE_LIMIT_ATTEMPTS"] = "5"
os.environ["LOGIN_RATE_LIMIT_WINDOW_MINUTES"] = "15"
os.environ["SUPERADMIN_ROLE"] = "superadmin"
