"""Test configuration shared by all test modules."""

import os
from pathlib import Path

# Configuration is read once at import time; pin the values the tests rely on
# before anything under src is imported.
os.environ["APP_CONFIG_FILE"] = str(Path(__file__).resolve().parents[1] / "config.yaml")
os.environ["APP_ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret-key-for-auth-api"
os.environ["JWT_ISSUER"] = "auth-api-test"
os.environ["MAIL_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ.pop("LOG_FILE", None)

from tests.fixtures import *  # noqa: E402,F401,F403
