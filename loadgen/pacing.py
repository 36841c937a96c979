"""Fixed-delay pacing between delivered batches."""

import time
from typing import Callable


class Pacer:
    """Sleeps for a constant delay after each delivery. Zero means no sleep."""

    def __init__(self, delay_ms: int, sleep: Callable[[float], None] = time.sleep):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must not be negative, got {delay_ms}")
        self._delay = delay_ms / 1000.0
        self._sleep = sleep

    @property
    def delay_seconds(self) -> float:
        return self._delay

    def pace(self) -> None:
        if self._delay > 0:
            self._sleep(self._delay)
