"""Authentication module for Google Drive."""

from .google_auth import GoogleDriveAuth

__all__ = ["GoogleDriveAuth"]
