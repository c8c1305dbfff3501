"""Parsing of the backup target list."""

from dataclasses import dataclass
from typing import List

from ..exceptions import InvalidConfigError

TARGET_SEPARATOR = ","
PATH_SEPARATOR = ":"


@dataclass(frozen=True)
class BackupItem:
    """A single local directory to mirror into the remote."""
    source: str
    destination: str


def parse_targets(raw: str) -> List[BackupItem]:
    """Parse a ``source:destination`` list into backup items.

    Entries are separated by commas. Each entry is split on its first colon
    only, so ``"a:b:c"`` yields source ``a`` and destination ``b:c``.

    Args:
        raw: Raw target string, e.g. ``"/home/me/docs:backup/docs,/etc:backup/etc"``

    Returns:
        Backup items in input order

    Raises:
        InvalidConfigError: If the string is empty or an entry has no colon
    """
    if not raw:
        raise InvalidConfigError("no backup targets specified")

    segments = raw.split(TARGET_SEPARATOR)
    if not segments:
        raise InvalidConfigError("no backup targets specified")

    items = []
    for segment in segments:
        parts = segment.split(PATH_SEPARATOR, 1)
        if len(parts) != 2:
            raise InvalidConfigError(f'invalid backup target format: "{segment}"')
        items.append(BackupItem(source=parts[0], destination=parts[1]))

    return items
