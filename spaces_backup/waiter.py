"""Timed wait with periodic progress, for scheduler pipelines that need a pause step."""

import logging
import time
from typing import Callable, Optional, Tuple

from spaces_backup.errors import InvalidArgument

logger = logging.getLogger(__name__)

DEFAULT_MINUTES = 5
DEFAULT_INTERVAL_SECONDS = 15


def _positive_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid {name}: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            raise InvalidArgument(f"Invalid {name}: {value!r}. Please provide a positive whole number.") from None
    if number <= 0:
        raise InvalidArgument(f"Invalid {name}: {value!r}. Please provide a positive whole number.")
    return number


def parse_wait_arguments(minutes=None, interval=None) -> Tuple[int, int]:
    """Validate raw ``wait`` arguments, applying defaults for missing ones.

    Raises:
        InvalidArgument: If either value is not a positive integer
    """
    minutes = DEFAULT_MINUTES if minutes is None else minutes
    interval = DEFAULT_INTERVAL_SECONDS if interval is None else interval
    return _positive_int(minutes, 'minutes'), _positive_int(interval, 'interval seconds')


def format_progress(elapsed: float, remaining: float, minutes: int) -> str:
    elapsed = int(elapsed)
    remaining = max(int(remaining), 0)
    if minutes >= 2:
        return (f"⏳ Time elapsed: {elapsed // 60}m {elapsed % 60}s, "
                f"Remaining: {remaining // 60}m {remaining % 60}s")
    return f"⏳ Time elapsed: {elapsed}s, Remaining: {remaining}s"


class Waiter:
    """Block for a fixed number of minutes."""

    def __init__(self, clock: Optional[Callable[[], float]] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep

    def wait(self, minutes=DEFAULT_MINUTES, interval=DEFAULT_INTERVAL_SECONDS) -> float:
        """Wait ``minutes`` minutes, reporting progress every ``interval`` seconds.

        Arguments are validated before any waiting happens.

        Returns:
            Elapsed seconds

        Raises:
            InvalidArgument: If minutes or interval is not a positive integer
        """
        minutes, interval = parse_wait_arguments(minutes, interval)
        total = minutes * 60

        logger.info(f"⏰ Starting {minutes}-minute wait timer...")
        logger.info(f"🕐 This command will wait for {minutes} minute(s) before completing")

        start = self._clock()
        while True:
            remaining = total - (self._clock() - start)
            if remaining <= 0:
                break
            self._sleep(min(interval, remaining))
            elapsed = self._clock() - start
            if elapsed < total:
                logger.info(format_progress(elapsed, total - elapsed, minutes))

        elapsed = self._clock() - start
        logger.info(f"✓ Wait command completed successfully after {minutes} minute(s)!")
        return elapsed
