"""Tests for configuration models."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from gdrive_backup.config.settings import BackupSettings, ClientCredentials, OAuthToken


class TestBackupSettings:

    def test_defaults(self):
        settings = BackupSettings()

        assert settings.credentials_file == Path("credentials/credentials.json")
        assert settings.token_file == Path("credentials/token.json")
        assert settings.remote_name == "gdrive"
        assert settings.rclone_binary == "rclone"
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BACKUP_TARGETS", "/a:b")
        monkeypatch.setenv("GDRIVE_BACKUP_REMOTE", "drive2")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = BackupSettings.from_env()

        assert settings.targets == "/a:b"
        assert settings.remote_name == "drive2"
        assert settings.log_level == "DEBUG"

    def test_from_env_reads_dotenv(self, monkeypatch, tmp_path):
        monkeypatch.delenv("BACKUP_TARGETS", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("BACKUP_TARGETS=/from/dotenv:dest\n")

        try:
            settings = BackupSettings.from_env(env_file)
        finally:
            monkeypatch.delenv("BACKUP_TARGETS", raising=False)

        assert settings.targets == "/from/dotenv:dest"

    def test_yaml_roundtrip(self, tmp_path):
        path = tmp_path / "config" / "settings.yaml"
        BackupSettings(targets="/a:b", log_file=Path("logs/backup.log")).to_yaml(path)

        loaded = BackupSettings.from_yaml(path)

        assert loaded.targets == "/a:b"
        assert loaded.log_file == Path("logs/backup.log")

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BackupSettings.from_yaml(tmp_path / "nope.yaml")

    @pytest.mark.parametrize("name", ["", "g:drive", "[x]"])
    def test_invalid_remote_name(self, name):
        with pytest.raises(ValidationError):
            BackupSettings(remote_name=name)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            BackupSettings(log_level="LOUD")


class TestClientCredentials:

    def test_from_client_config(self, client_config):
        creds = ClientCredentials.from_client_config(client_config["installed"])

        assert creds.client_id == "client-123.apps.googleusercontent.com"
        assert creds.client_secret == "s3cret"

    @pytest.mark.parametrize("section", [{}, {"client_id": "x"}, {"client_id": "", "client_secret": "s"}])
    def test_missing_fields(self, section):
        with pytest.raises(ValidationError):
            ClientCredentials.from_client_config(section)


class TestOAuthToken:

    def test_json_is_single_line(self):
        token = OAuthToken(access_token="a", refresh_token="r",
                           expiry=datetime(2025, 1, 1, tzinfo=timezone.utc))

        text = token.to_json()

        assert "\n" not in text
        assert OAuthToken.from_json(text).model_dump() == token.model_dump()

    def test_reads_go_style_expiry(self):
        token = OAuthToken.from_json(
            '{"access_token":"a","token_type":"Bearer","refresh_token":"r",'
            '"expiry":"2025-03-01T12:30:00.123456789+01:00"}'
        )

        assert token.expiry.utcoffset() == timedelta(hours=1)

    def test_naive_expiry_is_utc(self):
        token = OAuthToken(access_token="a", expiry=datetime(2025, 1, 1))

        assert token.expiry.tzinfo == timezone.utc

    def test_invalid_json(self):
        with pytest.raises(ValueError):
            OAuthToken.from_json("{")
