"""Transport engine contract consumed by the scan driver."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.data_models import DetectorGeometry, EmissionParameters


SteppingCallback = Callable[[float], None]
EventCallback = Callable[[], None]


class EngineFailure(RuntimeError):
    """Raised when the transport engine is misused or aborts during an event."""
    pass


@dataclass(frozen=True)
class PhysicsListHandle:
    """Opaque reference to a pre-built physics list (e.g. 'FTFP_BERT')."""
    name: str


class TransportEngine(ABC):
    """Interface of the physics toolkit driving particle transport.

    Registrations happen once, before ``initialize``. After that the engine
    only accepts ``simulate_event`` and UI commands. ``simulate_event`` is
    blocking: every stepping and event callback it triggers runs synchronously
    inside the call, in order.
    """

    def __init__(self):
        self.geometry: Optional[DetectorGeometry] = None
        self.physics_list: Optional[PhysicsListHandle] = None
        self.emitter: Optional[EmissionParameters] = None
        self.stepping_callback: Optional[SteppingCallback] = None
        self.begin_of_event: Optional[EventCallback] = None
        self.end_of_event: Optional[EventCallback] = None
        self.initialized = False

    def _check_not_initialized(self, what: str) -> None:
        if self.initialized:
            raise EngineFailure(f"Cannot register {what} after the engine is initialized")

    def register_geometry(self, geometry: DetectorGeometry) -> None:
        self._check_not_initialized('geometry')
        self.geometry = geometry

    def register_physics(self, physics_list: PhysicsListHandle) -> None:
        self._check_not_initialized('physics list')
        self.physics_list = physics_list

    def register_emitter(self, emission: EmissionParameters) -> None:
        """Register the live emitter state; later mutations are seen by the next event."""
        self._check_not_initialized('emitter')
        self.emitter = emission

    def register_stepping_callback(self, callback: SteppingCallback) -> None:
        self._check_not_initialized('stepping callback')
        self.stepping_callback = callback

    def register_event_callbacks(self, on_begin: EventCallback, on_end: EventCallback) -> None:
        self._check_not_initialized('event callbacks')
        self.begin_of_event = on_begin
        self.end_of_event = on_end

    def _check_ready(self) -> None:
        missing = [
            name for name, value in (
                ('geometry', self.geometry),
                ('physics list', self.physics_list),
                ('emitter', self.emitter),
                ('stepping callback', self.stepping_callback),
                ('event callbacks', self.begin_of_event),
            )
            if value is None
        ]
        if missing:
            raise EngineFailure(f"Cannot initialize engine, missing: {', '.join(missing)}")

    def _check_initialized(self) -> None:
        if not self.initialized:
            raise EngineFailure("simulate_event() called before initialize()")

    @abstractmethod
    def find_material(self, name: str):
        """Resolve a material identifier; raises ConfigurationError if unknown."""

    @abstractmethod
    def find_particle(self, name: str):
        """Resolve a particle name; raises ConfigurationError if unknown."""

    @abstractmethod
    def initialize(self) -> None:
        """Build geometry and physics tables. Called once after all registrations."""

    @abstractmethod
    def simulate_event(self, count: int = 1) -> None:
        """Run ``count`` events and return once all their callbacks have completed."""

    @abstractmethod
    def apply_command(self, command: str) -> bool:
        """Apply one UI command. Returns False if the command was rejected."""

    @abstractmethod
    def start_session(self) -> None:
        """Hand control to an interactive session until the user exits."""
