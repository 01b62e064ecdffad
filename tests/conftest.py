"""
Test environment.

Settings are read at import time, so the environment is pointed at a
throwaway directory before any manp_api module is imported.
"""

import os
import shutil
import tempfile

TEST_ROOT = tempfile.mkdtemp(prefix="manp_test_")

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(TEST_ROOT, 'reports_test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(TEST_ROOT, "uploads")
os.environ["TOKEN_PATH"] = os.path.join(TEST_ROOT, "drive_token.json")
os.environ["CLIENT_ID"] = "test-client-id"
os.environ["CLIENT_SECRET"] = "test-client-secret"
os.environ["REDIRECT_URI"] = "http://localhost:3000/oauth2callback"
os.environ["DRIVE_ROOT_FOLDER_ID"] = "root-folder"
os.environ["LOG_LEVEL"] = "WARNING"


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(TEST_ROOT, ignore_errors=True)
