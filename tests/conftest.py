"""Shared fixtures for the backup tests."""

import json
import logging

import pytest

from gdrive_backup.config.settings import ClientCredentials
from gdrive_backup.exceptions import TransferError


class FakeExecutor:
    """Records sync calls and fails for the configured sources."""

    def __init__(self, fail_sources=()):
        self.fail_sources = set(fail_sources)
        self.calls = []

    def sync(self, source, destination, config_path, item=None):
        self.calls.append((source, destination, config_path))
        if source in self.fail_sources:
            raise TransferError(item, RuntimeError("exit status 1"), "permission denied")
        return f"copied {source}"


@pytest.fixture
def credentials():
    return ClientCredentials(
        client_id="client-123.apps.googleusercontent.com",
        client_secret="s3cret",
    )


@pytest.fixture
def client_config(credentials):
    """Client-secrets document as downloaded from the Google Cloud console."""
    return {"installed": {
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
        "project_id": "backup-project",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "redirect_uris": ["http://localhost"],
    }}


@pytest.fixture
def token_json():
    return json.dumps({
        "access_token": "ya29.token",
        "token_type": "Bearer",
        "refresh_token": "1//refresh",
        "expiry": "2030-01-01T00:00:00Z",
    }, separators=(",", ":"))


@pytest.fixture
def credentials_file(tmp_path, client_config):
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps(client_config))
    return path


@pytest.fixture
def fake_executor():
    return FakeExecutor


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Undo handlers and levels installed by setup_logging."""
    app_logger = logging.getLogger("gdrive_backup")
    yield
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
