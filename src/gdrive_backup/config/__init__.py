"""Configuration management for the Google Drive backup application."""

from .settings import BackupSettings, ClientCredentials, OAuthToken

__all__ = ["BackupSettings", "ClientCredentials", "OAuthToken"]
