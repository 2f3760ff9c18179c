"""Begin/end-of-event hooks wired into the transport engine."""

from enum import Enum
from typing import Callable, Optional

from .deposition import DepositionAccumulator
from .units import keV
from ..utils.logging import get_logger
from ..utils.validation import SequencingError


logger = get_logger()


class EventState(Enum):
    IDLE = 'idle'
    OPEN = 'open'
    CLOSED = 'closed'


def log_event_energy(energy: float) -> None:
    logger.info(f"Total energy deposited in event: {energy / keV:.3f} keV")


class EventLifecycleHooks:
    """Resets the accumulator when an event begins and reports it when it ends.

    The hooks only respond to notifications from the engine; they never start
    or skip events. Each event must see exactly one ``on_begin`` followed by
    exactly one ``on_end``.

    Attributes:
        accumulator: Deposition accumulator shared with the stepping callback
        report: Called with the event total (MeV) at end of event
        state: Current lifecycle state
        completed_events: Number of events closed so far
        last_energy: Total deposited in the most recently closed event (MeV)
    """

    def __init__(
        self,
        accumulator: DepositionAccumulator,
        report: Optional[Callable[[float], None]] = None
    ):
        self.accumulator = accumulator
        self.report = report or log_event_energy
        self.state = EventState.IDLE
        self.completed_events = 0
        self.last_energy: Optional[float] = None

    def on_begin(self) -> None:
        if self.state is EventState.OPEN:
            raise SequencingError("begin-of-event received while an event is still open")
        self.accumulator.reset()
        self.state = EventState.OPEN

    def on_end(self) -> None:
        if self.state is not EventState.OPEN:
            raise SequencingError(
                f"end-of-event received in state '{self.state.value}'"
            )
        energy = self.accumulator.read()
        self.accumulator.close()
        self.last_energy = energy
        self.completed_events += 1
        self.state = EventState.CLOSED
        self.report(energy)
