"""Command-line interface for the Google Drive backup application."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .auth.google_auth import GoogleDriveAuth
from .config.settings import BackupSettings
from .sync.backup_runner import BackupRunner
from .sync.rclone import RcloneExecutor
from .sync.scheduler import run_schedule
from .sync.targets import parse_targets
from .utils.logging import TimedOperation, get_logger, setup_logging

console = Console()
logger = get_logger("cli")


@click.group()
@click.version_option(version="1.0.0")
@click.option('--config', '-c',
              type=click.Path(exists=True, path_type=Path),
              default=None,
              help='Path to YAML settings file (default: environment and .env)')
@click.option('--log-level',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
              default=None,
              help='Override the configured log level')
@click.option('--log-file',
              type=click.Path(path_type=Path),
              default=None,
              help='Also write logs to this file')
@click.pass_context
def cli(ctx, config: Optional[Path], log_level: Optional[str], log_file: Optional[Path]):
    """Google Drive Backup Tool

    Mirrors local directories into Google Drive with rclone. Targets are
    given as BACKUP_TARGETS=source1:dest1,source2:dest2.
    """
    try:
        settings = BackupSettings.from_yaml(config) if config else BackupSettings.from_env()
    except Exception as e:
        console.print(f"❌ Error loading settings: {e}", style="red bold")
        sys.exit(1)

    setup_logging(
        log_level=log_level or settings.log_level,
        log_file=log_file or settings.log_file,
    )
    ctx.obj = settings


def _load_auth(settings: BackupSettings) -> GoogleDriveAuth:
    return GoogleDriveAuth.from_client_secrets_file(settings.credentials_file, token_path=settings.token_file)


def _run_backup(settings: BackupSettings, stop_on_first_failure: bool) -> None:
    """Run one backup pass with freshly loaded credentials and token."""
    auth = _load_auth(settings)
    token = auth.load_token()

    runner = BackupRunner(
        settings.targets,
        auth.credentials,
        token.to_json(),
        executor=RcloneExecutor(binary=settings.rclone_binary),
        remote_name=settings.remote_name,
    )
    with runner, TimedOperation(logger, "backup"):
        runner.run(stop_on_first_failure)


@cli.command()
@click.pass_obj
def auth(settings: BackupSettings):
    """Authorize with Google Drive."""
    try:
        drive_auth = _load_auth(settings)

        console.print("Go to the following link in your browser then paste the redirect URL:")
        console.print(drive_auth.authorization_url(), style="cyan", soft_wrap=True)
        redirect_url = click.prompt("Redirect URL")

        code = GoogleDriveAuth.parse_redirect_url(redirect_url)
        token = drive_auth.exchange_code(code)
        path = drive_auth.save_token(token)

        console.print(f"✅ Token saved to {path}", style="green")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)


@cli.command('check-auth')
@click.pass_obj
def check_auth(settings: BackupSettings):
    """Check existing authentication."""
    try:
        drive_auth = _load_auth(settings)
        with console.status("Contacting Google Drive..."):
            user = drive_auth.get_user_info()

        console.print(f"Logged in as {user.get('displayName')} ({user.get('emailAddress')})")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)


@cli.command()
@click.pass_obj
def backup(settings: BackupSettings):
    """Run backup of all targets, stopping at the first failure."""
    try:
        _run_backup(settings, stop_on_first_failure=True)
        console.print("✅ Backup completed successfully", style="green")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)


@cli.command()
@click.option('--interval', '-i',
              type=click.IntRange(min=1),
              required=True,
              help='Interval (seconds) between scheduled backups')
@click.pass_obj
def schedule(settings: BackupSettings, interval: int):
    """Run backups forever, every INTERVAL seconds.

    A failing target is logged and skipped; the remaining targets still run.
    """
    console.print(f"🕒 Running backups every {interval}s (Ctrl+C to stop)")
    try:
        run_schedule(lambda: _run_backup(settings, stop_on_first_failure=False), interval)
    except KeyboardInterrupt:
        console.print("Stopped", style="yellow")


@cli.command()
@click.pass_obj
def targets(settings: BackupSettings):
    """Show the configured backup targets."""
    try:
        items = parse_targets(settings.targets)
    except Exception as e:
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)

    table = Table(title="Backup Targets")
    table.add_column("#", justify="right")
    table.add_column("Source", style="cyan")
    table.add_column("Destination", style="magenta")

    for index, item in enumerate(items, start=1):
        table.add_row(str(index), item.source, f"{settings.remote_name}:{item.destination}")

    console.print(table)


if __name__ == '__main__':
    cli()
