"""Fixed-interval backup loop."""

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def run_schedule(
    job: Callable[[], None],
    interval: int,
    sleep: Callable[[float], None] = time.sleep,
    max_runs: Optional[int] = None,
) -> int:
    """Run ``job`` repeatedly, sleeping ``interval`` seconds after each pass.

    A failing pass is logged and never stops the loop.

    Args:
        job: One backup pass
        interval: Seconds to wait between passes
        sleep: Sleep function
        max_runs: Stop after this many passes (run forever when None)

    Returns:
        Number of passes run
    """
    if interval <= 0:
        raise ValueError("interval must be a positive number of seconds")

    runs = 0
    while max_runs is None or runs < max_runs:
        try:
            job()
        except Exception as e:
            logger.error(f"Backup failed: {e}")
        runs += 1
        sleep(interval)

    return runs
