from typing import Callable

import maya
from twisted.internet import reactor
from twisted.internet.interfaces import IReactorTime
from twisted.python.failure import Failure

from timelock.config.constants import DEFAULT_RELEASE_MARGIN, TICK_INTERVAL
from timelock.utilities.task import SimpleTask


def is_ready(release_timestamp: int, margin: int, now: float) -> bool:
    """True once `now` has reached the release timestamp plus the publication margin."""
    return now >= release_timestamp + margin


def remaining(release_timestamp: int, now: float) -> int:
    """Whole seconds until the release timestamp, never negative.  For display only."""
    return max(0, int(release_timestamp - now))


class ReleaseClock:
    """
    Wall-clock view of one release timestamp.

    Every question is answered from a fresh reading of the time source,
    never from a countdown kept between ticks: ticks can be late or skipped.
    """

    def __init__(self,
                 release_timestamp: int,
                 margin: int = DEFAULT_RELEASE_MARGIN,
                 clock: IReactorTime = reactor):
        if margin < 0:
            raise ValueError(f"Release margin must not be negative; got {margin}")
        self.release_timestamp = int(release_timestamp)
        self.margin = margin
        self.clock = clock

    def __repr__(self):
        return f"{self.__class__.__name__}({self.release_timestamp}, margin={self.margin})"

    def now(self) -> float:
        return self.clock.seconds()

    def is_ready(self) -> bool:
        return is_ready(self.release_timestamp, margin=self.margin, now=self.now())

    def remaining(self) -> int:
        return remaining(self.release_timestamp, now=self.now())

    @property
    def release_time(self) -> maya.MayaDT:
        return maya.MayaDT(self.release_timestamp)

    @property
    def ready_time(self) -> maya.MayaDT:
        return maya.MayaDT(self.release_timestamp + self.margin)


class ReleaseTicker(SimpleTask):
    """Calls `on_tick` once per interval until stopped."""

    INTERVAL = TICK_INTERVAL

    def __init__(self,
                 on_tick: Callable[[], None],
                 on_error: Callable[[Failure], None],
                 *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._on_tick = on_tick
        self._on_error = on_error

    def run(self) -> None:
        self._on_tick()

    def handle_errors(self, failure: Failure) -> None:
        cleaned_traceback = self.clean_traceback(failure)
        self.log.error(f"Unhandled error during release tick: {cleaned_traceback}")
        self._on_error(failure)
