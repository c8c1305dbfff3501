"""Backup execution: target parsing, rclone invocation and scheduling."""

from .backup_runner import BackupRunner
from .rclone import RcloneExecutor
from .scheduler import run_schedule
from .targets import BackupItem, parse_targets

__all__ = ["BackupItem", "BackupRunner", "RcloneExecutor", "parse_targets", "run_schedule"]
