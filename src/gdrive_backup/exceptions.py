"""Exception types raised by the backup application."""

from typing import Optional


class GdriveBackupError(Exception):
    """Base class for all backup errors."""


class InvalidConfigError(GdriveBackupError):
    """Raised when the backup target string is empty or malformed."""


class ConfigWriteError(GdriveBackupError):
    """Raised when the generated rclone configuration cannot be written."""


class AuthenticationError(GdriveBackupError):
    """Raised when an OAuth exchange, refresh or API call fails."""


class TransferError(GdriveBackupError):
    """Raised when a single rclone invocation fails.

    Attributes:
        item: The backup item that failed
        cause: Underlying error (launch failure or non-zero exit)
        output: Combined stdout/stderr captured from rclone
    """

    def __init__(self, item, cause: Exception, output: str = ""):
        self.item = item
        self.cause = cause
        self.output = output
        message = f"failed to execute rclone: {cause}"
        if output:
            message = f"{message}, {output.strip()}"
        super().__init__(message)


class BackupFailedError(GdriveBackupError):
    """Raised in fail-fast mode with the first transfer error of a run."""

    def __init__(self, error: TransferError):
        self.error = error
        item = error.item
        where: Optional[str] = None
        if item is not None:
            where = f"{item.source} -> {item.destination}"
        message = f"backup failed: {error}" if where is None else f"backup of {where} failed: {error}"
        super().__init__(message)
