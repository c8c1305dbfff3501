"""Backup runner executing one rclone sync per target."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..config.settings import ClientCredentials
from ..exceptions import BackupFailedError, TransferError
from ..utils.logging import ContextualLogger, get_logger
from .rclone import DEFAULT_REMOTE_NAME, RcloneExecutor, remote_path, render_config, write_config
from .targets import BackupItem, parse_targets


class BackupRunner:
    """Mirror every configured target into Google Drive, one after another.

    Each runner writes its own rclone config to a unique temporary file, so
    separate runners never share state. Use it as a context manager (or call
    :meth:`close`) to remove the file once the run is done.
    """

    def __init__(
        self,
        raw_targets: str,
        credentials: ClientCredentials,
        token: str,
        logger: Optional[Union[logging.Logger, ContextualLogger]] = None,
        executor: Optional[RcloneExecutor] = None,
        remote_name: str = DEFAULT_REMOTE_NAME,
        config_dir: Optional[Union[str, Path]] = None,
    ):
        """Initialize backup runner.

        Args:
            raw_targets: Target list, ``source:dest,source:dest``
            credentials: OAuth client credentials
            token: Token JSON on a single line
            logger: Logger for progress and non-fatal failures
            executor: Object with a ``sync(source, destination, config_path, item)`` method
            remote_name: rclone remote section name
            config_dir: Directory for the temporary config (system temp by default)

        Raises:
            InvalidConfigError: If the target list is empty or malformed
            ConfigWriteError: If the rclone config cannot be written
        """
        self.items: List[BackupItem] = parse_targets(raw_targets)
        self.remote_name = remote_name
        self.executor = executor or RcloneExecutor()

        if logger is None:
            logger = get_logger("backup")
        if isinstance(logger, logging.Logger):
            logger = ContextualLogger(logger, {"system": "backup"})
        self.logger = logger

        contents = render_config(
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            token=token,
            remote_name=remote_name,
        )
        self.config_path: Path = write_config(contents, config_dir)

        self.logger.info("Backup config initialized", targets=len(self.items))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Remove the temporary rclone config."""
        try:
            self.config_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Unable to remove rclone config", path=self.config_path, err=e)

    def run(self, stop_on_first_failure: bool) -> None:
        """Back up all targets in order.

        With ``stop_on_first_failure`` the first failing target ends the run.
        Otherwise every failure is logged and the remaining targets still run;
        the run itself then always succeeds.

        Raises:
            BackupFailedError: Only when ``stop_on_first_failure`` is set
        """
        for item in self.items:
            try:
                self.transfer(item)
            except TransferError as e:
                if stop_on_first_failure:
                    raise BackupFailedError(e) from e
                self.logger.error(
                    "Backup failed",
                    source=item.source,
                    destination=item.destination,
                    err=e,
                )

    def transfer(self, item: BackupItem) -> str:
        """Mirror a single item.

        Returns:
            Captured rclone output

        Raises:
            TransferError: If rclone fails
        """
        self.logger.info("Backup started", source=item.source, destination=item.destination)

        output = self.executor.sync(
            item.source,
            remote_path(self.remote_name, item.destination),
            self.config_path,
            item=item,
        )

        self.logger.info(
            "Backup completed successfully",
            source=item.source,
            destination=item.destination,
            stdout=output,
        )
        return output
