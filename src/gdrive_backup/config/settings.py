"""Configuration settings and models for the backup application."""

import json
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_CREDENTIALS_FILE = Path("credentials/credentials.json")
DEFAULT_TOKEN_FILE = Path("credentials/token.json")

NANOSECONDS_RE = re.compile(r"(\.\d{6})\d+")


class BackupSettings(BaseModel):
    """Main application settings."""
    targets: str = ""
    credentials_file: Path = DEFAULT_CREDENTIALS_FILE
    token_file: Path = DEFAULT_TOKEN_FILE
    remote_name: str = "gdrive"
    rclone_binary: str = "rclone"
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @field_validator('remote_name')
    @classmethod
    def validate_remote_name(cls, v):
        if not v or any(c in v for c in ":[]"):
            raise ValueError('remote_name must be non-empty and must not contain ":", "[" or "]"')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f'unknown log level: {v}')
        return v.upper()

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "BackupSettings":
        """Load settings from environment variables, reading a .env file first.

        Without ``env_file`` the nearest .env at or above the working directory is used.
        A missing .env file is not an error.
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))

        values = {
            'targets': os.getenv('BACKUP_TARGETS'),
            'credentials_file': os.getenv('GDRIVE_BACKUP_CREDENTIALS'),
            'token_file': os.getenv('GDRIVE_BACKUP_TOKEN'),
            'remote_name': os.getenv('GDRIVE_BACKUP_REMOTE'),
            'rclone_binary': os.getenv('RCLONE_BINARY'),
            'log_level': os.getenv('LOG_LEVEL'),
            'log_file': os.getenv('LOG_FILE'),
        }
        return cls(**{k: v for k, v in values.items() if v})

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "BackupSettings":
        """Load settings from YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def to_yaml(self, config_path: Union[str, Path]) -> None:
        """Save settings to YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.model_dump(mode='json', exclude_none=True), f,
                      default_flow_style=False, indent=2)


class ClientCredentials(BaseModel):
    """OAuth client ID and secret written into the rclone config."""
    client_id: str
    client_secret: str

    @field_validator('client_id', 'client_secret')
    @classmethod
    def validate_not_empty(cls, v, info):
        if not v:
            raise ValueError(f'{info.field_name} must not be empty')
        return v

    @classmethod
    def from_client_config(cls, client_config: dict) -> "ClientCredentials":
        """Pick the client fields out of an ``installed`` or ``web`` client section."""
        return cls(
            client_id=client_config.get('client_id', ''),
            client_secret=client_config.get('client_secret', ''),
        )


class OAuthToken(BaseModel):
    """OAuth2 token in the JSON shape rclone reads from its config."""
    model_config = ConfigDict(extra='ignore')

    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None

    @field_validator('expiry', mode='before')
    @classmethod
    def truncate_nanoseconds(cls, v):
        # Tokens written by Go tools carry nanosecond precision
        if isinstance(v, str):
            return NANOSECONDS_RE.sub(r'\1', v)
        return v

    @field_validator('expiry')
    @classmethod
    def ensure_timezone(cls, v):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_json(self) -> str:
        """Serialize to single-line JSON, as rclone requires inside its config."""
        return json.dumps(self.model_dump(mode='json', exclude_none=True), separators=(',', ':'))

    @classmethod
    def from_json(cls, text: str) -> "OAuthToken":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"failed to decode token JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("failed to decode token JSON: expected an object")
        return cls(**data)
