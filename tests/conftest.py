"""
Shared test setup.

Settings are read when app.config is first imported, so the environment
has to be in place before any test module imports the app.
"""

import os

os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("EMAIL_INTENT_STORE", "memory")
os.environ.setdefault("TRACKING_URL", "")
os.environ.setdefault("DETAILS_STEP", "none")
