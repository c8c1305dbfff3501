"""
Google Drive Backup Application

Mirrors local directories into Google Drive with rclone, using OAuth2
credentials obtained through a browser consent flow.
"""

__version__ = "1.0.0"
__author__ = "Google Drive Backup Tool"
__description__ = "Backup local directories to Google Drive with rclone"

from .config.settings import BackupSettings
from .sync.backup_runner import BackupRunner

__all__ = ["BackupSettings", "BackupRunner"]
