"""Per-event energy deposition accumulator."""

import math

from ..utils.logging import get_logger
from ..utils.validation import SequencingError


logger = get_logger()


class DepositionAccumulator:
    """Sums the step energy deposits of the currently open event.

    The expected call sequence for one event is ``reset``, any number of
    ``accumulate``, then ``read``. ``close`` ends the event; the accumulator
    must be reset again before the next one.

    Attributes:
        total: Energy deposited so far in the open event, in MeV
    """

    def __init__(self):
        self.total = 0.0
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def reset(self) -> None:
        self.total = 0.0
        self._open = True

    def accumulate(self, delta: float) -> None:
        """Add one step deposit. Zero, negative and non-finite values are ignored."""
        if not self._open:
            raise SequencingError("accumulate() called before reset() for this event")
        if delta > 0 and math.isfinite(delta):
            self.total += delta
        elif delta < 0 or not math.isfinite(delta):
            logger.debug(f"Ignoring invalid energy deposit: {delta}")

    def read(self) -> float:
        if not self._open:
            raise SequencingError("read() called before reset() for this event")
        return self.total

    def close(self) -> None:
        if not self._open:
            raise SequencingError("close() called without an open event")
        self._open = False
