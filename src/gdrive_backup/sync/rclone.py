"""rclone configuration rendering and process execution."""

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Sequence, Union

from ..exceptions import ConfigWriteError, TransferError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_NAME = "gdrive"
CONFIG_ENV_VAR = "RCLONE_CONFIG"

CONFIG_TEMPLATE = """
[{remote_name}]
type = drive
client_id = {client_id}
client_secret = {client_secret}
scope = drive
token = {token}
team_drive =
"""


def render_config(client_id: str, client_secret: str, token: str,
                  remote_name: str = DEFAULT_REMOTE_NAME) -> str:
    """Render the rclone config for a single Google Drive remote.

    Args:
        client_id: OAuth client ID
        client_secret: OAuth client secret
        token: Token JSON on a single line
        remote_name: Section name of the remote

    Returns:
        Config file contents
    """
    return CONFIG_TEMPLATE.format(
        remote_name=remote_name,
        client_id=client_id,
        client_secret=client_secret,
        token=token,
    )


def write_config(contents: str, directory: Optional[Union[str, Path]] = None) -> Path:
    """Write rclone config to a fresh temporary file readable only by the owner.

    Raises:
        ConfigWriteError: If the file cannot be created or written
    """
    try:
        fd, path = tempfile.mkstemp(prefix="rclone-", suffix=".conf", dir=directory)
    except OSError as e:
        raise ConfigWriteError(f"unable to write rclone config: {e}") from e

    try:
        f = os.fdopen(fd, "w", encoding="utf-8")
    except OSError as e:
        os.close(fd)
        _remove_quietly(path)
        raise ConfigWriteError(f"unable to write rclone config: {e}") from e

    try:
        with f:
            f.write(contents)
    except OSError as e:
        # A partial file would still hold the client secret
        _remove_quietly(path)
        raise ConfigWriteError(f"unable to write rclone config: {e}") from e

    return Path(path)


def _remove_quietly(path: Union[str, Path]) -> None:
    try:
        os.unlink(path)
    except OSError as e:
        logger.warning(f"Unable to remove partial rclone config {path}: {e}")


def remote_path(remote_name: str, destination: str) -> str:
    """Build the ``remote:path`` argument rclone expects."""
    return f"{remote_name}:{destination}"


class RcloneExecutor:
    """Run ``rclone sync`` for one source/destination pair."""

    def __init__(self, binary: str = "rclone", extra_args: Sequence[str] = ()):
        """Initialize executor.

        Args:
            binary: rclone executable name or path
            extra_args: Additional flags appended after the mirror flags
        """
        self.binary = binary
        self.extra_args = list(extra_args)

    def build_command(self, source: str, destination: str) -> list:
        """Build argv for a one-way mirror that keeps symlinks as links."""
        return [self.binary, "sync", "--links", *self.extra_args, source, destination]

    def sync(self, source: str, destination: str, config_path: Union[str, Path], item=None) -> str:
        """Mirror ``source`` into ``destination``.

        The config path is handed to rclone through the child environment only,
        so the user's global rclone config is never read or modified.

        Args:
            source: Local path
            destination: ``remote:path`` string
            config_path: Path to the rendered rclone config
            item: Backup item attached to any raised error

        Returns:
            Combined stdout/stderr of rclone

        Raises:
            TransferError: If rclone cannot be started or exits non-zero
        """
        command = self.build_command(source, destination)
        env = dict(os.environ)
        env[CONFIG_ENV_VAR] = str(config_path)

        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=env,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise TransferError(item, e) from e

        output = result.stdout or ""
        if result.returncode != 0:
            cause = subprocess.CalledProcessError(result.returncode, command, output=output)
            raise TransferError(item, cause, output)

        return output
