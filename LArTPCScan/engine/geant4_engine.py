"""Geant4 backend of the transport engine contract (via geant4_pybind).

Geant4 works in mm and MeV, which matches the internal units of the driver,
so geometry extents and emission parameters are passed through unchanged.
"""

import sys
from typing import List, Optional

import geant4_pybind as g4

from .base import EngineFailure, TransportEngine
from ..core.data_models import DetectorGeometry, EmissionParameters
from ..utils.logging import get_logger
from ..utils.validation import ConfigurationError


logger = get_logger()


class _DetectorConstruction(g4.G4VUserDetectorConstruction):

    def __init__(self, geometry: DetectorGeometry):
        super().__init__()
        self._geometry = geometry
        # Geant4 does not own Python-created solids and volumes
        self._keep_alive = []

    def Construct(self):
        nist = g4.G4NistManager.Instance()
        world = self._geometry.world
        detector = self._geometry.detector

        world_solid = g4.G4Box(world.name, *world.half_extents)
        world_logic = g4.G4LogicalVolume(
            world_solid, nist.FindOrBuildMaterial(world.material), world.name
        )
        world_phys = g4.G4PVPlacement(
            None, g4.G4ThreeVector(*world.offset), world_logic, world.name, None, False, 0
        )

        detector_solid = g4.G4Box(detector.name, *detector.half_extents)
        detector_logic = g4.G4LogicalVolume(
            detector_solid, nist.FindOrBuildMaterial(detector.material), detector.name
        )
        detector_phys = g4.G4PVPlacement(
            None, g4.G4ThreeVector(*detector.offset), detector_logic, detector.name,
            world_logic, False, 0
        )

        self._keep_alive.extend([
            world_solid, world_logic, world_phys,
            detector_solid, detector_logic, detector_phys,
        ])
        return world_phys


class _PrimaryGenerator(g4.G4VUserPrimaryGeneratorAction):

    def __init__(self, emission: EmissionParameters, particle_definition):
        super().__init__()
        self._emission = emission
        self._gun = g4.G4ParticleGun(1)
        self._gun.SetParticleDefinition(particle_definition)

    def GeneratePrimaries(self, event):
        emission = self._emission
        self._gun.SetParticleEnergy(float(emission.kinetic_energy))
        self._gun.SetParticleMomentumDirection(g4.G4ThreeVector(*map(float, emission.direction)))
        self._gun.SetParticlePosition(g4.G4ThreeVector(*map(float, emission.position)))
        self._gun.GeneratePrimaryVertex(event)


class _SteppingAction(g4.G4UserSteppingAction):

    def __init__(self, callback):
        super().__init__()
        self._callback = callback

    def UserSteppingAction(self, step):
        self._callback(step.GetTotalEnergyDeposit())


class _EventAction(g4.G4UserEventAction):

    def __init__(self, on_begin, on_end):
        super().__init__()
        self._on_begin = on_begin
        self._on_end = on_end

    def BeginOfEventAction(self, event):
        self._on_begin()

    def EndOfEventAction(self, event):
        self._on_end()


class _ActionInitialization(g4.G4VUserActionInitialization):

    def __init__(self, engine: 'Geant4TransportEngine', particle_definition):
        super().__init__()
        self._engine = engine
        self._particle_definition = particle_definition
        self._actions = []

    def Build(self):
        engine = self._engine
        actions = [
            _PrimaryGenerator(engine.emitter, self._particle_definition),
            _SteppingAction(engine.stepping_callback),
            _EventAction(engine.begin_of_event, engine.end_of_event),
        ]
        for action in actions:
            self.SetUserAction(action)
        self._actions.extend(actions)


class Geant4TransportEngine(TransportEngine):
    """Transport engine backed by a serial Geant4 run manager.

    Attributes:
        interactive: Whether a UI executive is created for a later session
        seed: Optional seed forwarded to the Geant4 random engine
    """

    def __init__(self, interactive: bool = False, seed: Optional[int] = None, argv: Optional[List[str]] = None):
        super().__init__()
        self.interactive = interactive
        self.seed = seed
        self._argv = list(argv) if argv is not None else sys.argv[:1]

        # The UI executive has to exist before the vis manager opens a viewer
        self._ui = g4.G4UIExecutive(len(self._argv), self._argv) if interactive else None
        self._run_manager = g4.G4RunManagerFactory.CreateRunManager(g4.G4RunManagerType.Serial)
        self._vis_manager = None
        self._physics = None
        self._detector_construction = None
        self._action_initialization = None

    def find_material(self, name: str):
        material = g4.G4NistManager.Instance().FindOrBuildMaterial(name)
        if material is None:
            raise ConfigurationError(f"Unknown material: {name}")
        return material

    def find_particle(self, name: str):
        particle = g4.G4ParticleTable.GetParticleTable().FindParticle(name)
        if particle is None:
            raise ConfigurationError(f"Unknown particle: {name}")
        return particle

    def _build_physics_list(self):
        factory = g4.G4PhysListFactory()
        if not factory.IsReferencePhysList(self.physics_list.name):
            raise ConfigurationError(f"Unknown reference physics list: {self.physics_list.name}")
        return factory.GetReferencePhysList(self.physics_list.name)

    def initialize(self) -> None:
        if self.initialized:
            raise EngineFailure("Engine is already initialized")
        self._check_ready()

        if self.seed is not None:
            g4.G4Random.setTheSeed(self.seed)

        self._detector_construction = _DetectorConstruction(self.geometry)
        self._run_manager.SetUserInitialization(self._detector_construction)

        # Registering the physics list constructs the particle definitions
        self._physics = self._build_physics_list()
        self._run_manager.SetUserInitialization(self._physics)

        particle_definition = self.find_particle(self.emitter.particle)
        self._action_initialization = _ActionInitialization(self, particle_definition)
        self._run_manager.SetUserInitialization(self._action_initialization)

        try:
            self._run_manager.Initialize()
        except RuntimeError as e:
            raise EngineFailure(f"Geant4 initialization failed: {e}") from e

        self.initialized = True
        logger.info(f"Geant4TransportEngine initialized: physics={self.physics_list.name}")

    def simulate_event(self, count: int = 1) -> None:
        self._check_initialized()
        if count < 0:
            raise EngineFailure(f"Event count must be non-negative, got {count}")
        try:
            self._run_manager.BeamOn(count)
        except RuntimeError as e:
            raise EngineFailure(f"Geant4 aborted the run: {e}") from e

    def apply_command(self, command: str) -> bool:
        if command.startswith('/vis/') and self._vis_manager is None:
            self._vis_manager = g4.G4VisExecutive()
            self._vis_manager.Initialize()
        status = g4.G4UImanager.GetUIpointer().ApplyCommand(command)
        if status != 0:
            logger.warning(f"Geant4 rejected command '{command}' (status {status})")
            return False
        return True

    def start_session(self) -> None:
        if self._ui is None:
            self._ui = g4.G4UIExecutive(len(self._argv), self._argv)
        self._ui.SessionStart()
