"""Angular scan driver orchestrating geometry, source, hooks and engine."""

import math
from typing import Iterable, Iterator, List, Optional, Sequence
import numpy as np

from .data_models import DetectorGeometry, EmissionParameters, ScanGridPoint, ScanResult
from .deposition import DepositionAccumulator
from .directional_source import DirectionalSource
from .event_hooks import EventLifecycleHooks
from .geometry_builder import geometry_from_config
from .units import m
from .visualization import VisualizationSetup
from ..engine import EngineFailure, PhysicsListHandle, TransportEngine, create_engine
from ..utils.config import ScanConfig
from ..utils.logging import log_banner, setup_logger
from ..utils.validation import ConfigurationError, validate_config


_GRID_TOLERANCE = 1e-9


def scan_angles(step_deg: float, max_deg: float, inclusive: bool) -> List[float]:
    """Evenly spaced angles starting at 0.

    Args:
        step_deg: Angular step in degrees
        max_deg: Upper bound in degrees
        inclusive: Whether ``max_deg`` itself belongs to the range

    Returns:
        Ascending list of angles
    """
    if step_deg <= 0:
        raise ValueError(f"step_deg must be positive, got {step_deg}")
    ratio = max_deg / step_deg
    if inclusive:
        count = int(math.floor(ratio + _GRID_TOLERANCE)) + 1
    else:
        count = int(math.ceil(ratio - _GRID_TOLERANCE))
    return [i * step_deg for i in range(max(count, 0))]


def scan_grid(
    theta_values: Iterable[float],
    phi_values: Sequence[float],
    energy_GeV: float
) -> Iterator[ScanGridPoint]:
    """Yield grid points with theta as the outer and phi as the inner loop."""
    index = 0
    for theta in theta_values:
        for phi in phi_values:
            yield ScanGridPoint(float(theta), float(phi), float(energy_GeV), index)
            index += 1


def response_map(
    results: Iterable[ScanResult],
    theta_values: Sequence[float],
    phi_values: Sequence[float]
) -> np.ndarray:
    """Arrange scan results as a [n_theta, n_phi] array of deposits in keV.

    Grid cells without a result are NaN.
    """
    theta_index = {float(t): i for i, t in enumerate(theta_values)}
    phi_index = {float(p): j for j, p in enumerate(phi_values)}
    grid = np.full((len(theta_index), len(phi_index)), np.nan)
    for result in results:
        i = theta_index[result.point.theta_deg]
        j = phi_index[result.point.phi_deg]
        grid[i, j] = result.deposited_energy_keV
    return grid


class ScanDriver:
    """Main orchestration class for the angular response scan.

    Owns the deposition accumulator, the lifecycle hooks and the emitter state
    and hands them to the engine at set-up time. The scan itself is a single
    threaded loop issuing one blocking event per grid point.

    Attributes:
        config: Scan configuration
        engine: Transport engine
        accumulator: Per-event deposition accumulator
        hooks: Begin/end-of-event hooks
        emission: Emitter state shared with the engine
        source: Directional source mutating ``emission``
        geometry: Geometry handle, available after ``setup``
        results: Results of every grid point run so far
        logger: Logger instance
    """

    def __init__(
        self,
        config: ScanConfig,
        engine: Optional[TransportEngine] = None,
        interactive: bool = False
    ):
        """Initialize ScanDriver.

        Args:
            config: Scan configuration
            engine: Transport engine; built from ``config.engine`` if omitted
            interactive: Whether to start an interactive session after the scan
        """
        validate_config(config)
        self.config = config
        self.interactive = interactive

        self.logger = setup_logger(log_file=config.log_file)
        self.logger.info("ScanDriver initialized")
        self.logger.info(
            f"Configuration: particle={config.particle}, energy={config.energy_GeV:g} GeV, "
            f"engine={config.engine}, physics={config.physics_list}"
        )

        self.engine = engine if engine is not None else create_engine(config, interactive=interactive)
        self.accumulator = DepositionAccumulator()
        self.hooks = EventLifecycleHooks(self.accumulator)
        self.emission = EmissionParameters(particle=config.particle)
        self.source = DirectionalSource(self.emission, config.launch_radius_m * m)
        self.geometry: Optional[DetectorGeometry] = None
        self.results: List[ScanResult] = []
        self._is_set_up = False

    def setup(self) -> None:
        """Build the geometry, register everything with the engine and initialize it.

        Raises:
            ConfigurationError: If the geometry, materials, particle or launch
                radius are invalid
            EngineFailure: If the engine fails to initialize
        """
        if self._is_set_up:
            return

        self.logger.info("Step 1: Building detector geometry")
        self.geometry = geometry_from_config(self.config, resolve_material=self.engine.find_material)

        launch_radius = self.source.launch_radius
        if not self.geometry.detector.bounding_radius < launch_radius < min(self.geometry.world.half_extents):
            raise ConfigurationError(
                f"Launch radius {launch_radius:g} mm must lie between the detector bounding "
                f"radius ({self.geometry.detector.bounding_radius:g} mm) and the world boundary"
            )
        for line in self.geometry.summary().splitlines():
            self.logger.info(line)

        self.logger.info("Step 2: Registering geometry, physics and user actions")
        self.engine.register_geometry(self.geometry)
        self.engine.register_physics(PhysicsListHandle(self.config.physics_list))
        self.engine.register_emitter(self.emission)
        self.engine.register_stepping_callback(self.accumulator.accumulate)
        self.engine.register_event_callbacks(self.hooks.on_begin, self.hooks.on_end)

        self.logger.info("Step 3: Initializing transport engine")
        self.engine.initialize()
        self._is_set_up = True

    def run_scan(
        self,
        theta_values: Iterable[float],
        phi_values: Iterable[float],
        energy_GeV: float
    ) -> List[ScanResult]:
        """Simulate one event per (theta, phi) grid point.

        Args:
            theta_values: Polar angles in degrees (outer loop)
            phi_values: Azimuthal angles in degrees (inner loop)
            energy_GeV: Primary kinetic energy for every point

        Returns:
            One ScanResult per grid point, in traversal order

        Raises:
            EngineFailure: If the engine aborts; remaining points are not run
        """
        self.setup()

        theta_values = list(theta_values)
        phi_values = list(phi_values)
        n_points = len(theta_values) * len(phi_values)
        self.logger.info(
            f"Starting angular scan: {len(theta_values)} x {len(phi_values)} = "
            f"{n_points} points at {energy_GeV:g} GeV"
        )

        results = []
        for point in scan_grid(theta_values, phi_values, energy_GeV):
            result = self._simulate_point(point)
            results.append(result)
            self.results.append(result)

        self.logger.info(f"Angular scan complete: {len(results)} events simulated")
        return results

    def _simulate_point(self, point: ScanGridPoint) -> ScanResult:
        self.source.configure(point.theta_deg, point.phi_deg, point.energy_GeV)
        self.logger.debug(f"Grid point {point.index}: {self.emission}")

        completed_before = self.hooks.completed_events
        self.engine.simulate_event(1)
        completed = self.hooks.completed_events - completed_before
        if completed != 1:
            raise EngineFailure(
                f"Expected exactly one completed event for grid point {point.index}, "
                f"got {completed}"
            )

        result = ScanResult(point=point, deposited_energy=self.hooks.last_energy)
        self.logger.info(
            f"theta={point.theta_deg:g} phi={point.phi_deg:g} energy={point.energy_GeV:g} GeV "
            f"edep={result.deposited_energy_keV:.3f} keV"
        )
        return result

    def run_point(self, theta_deg: float, phi_deg: float, energy_GeV: float) -> ScanResult:
        """Fixed-direction run: a scan over a single grid point."""
        return self.run_scan([theta_deg], [phi_deg], energy_GeV)[0]

    def grid_angles(self):
        """Theta and phi values of the configured scan grid."""
        theta_values = scan_angles(self.config.theta_step_deg, self.config.theta_max_deg, inclusive=True)
        phi_values = scan_angles(self.config.phi_step_deg, self.config.phi_max_deg, inclusive=False)
        return theta_values, phi_values

    def run_grid(self) -> List[ScanResult]:
        theta_values, phi_values = self.grid_angles()
        return self.run_scan(theta_values, phi_values, self.config.energy_GeV)

    def run(self) -> List[ScanResult]:
        """Run the complete program: set-up, viewer, scan, then the optional session.

        Returns:
            Results of the configured scan grid
        """
        import time

        start_time = time.time()

        log_banner(self.logger, "Starting angular scan simulation")

        self.setup()

        if self.config.visualization:
            self.logger.info("Step 4: Setting up visualization")
            VisualizationSetup.from_config(self.config).apply(self.engine)

        self.logger.info("Step 5: Running angular scan")
        results = self.run_grid()

        elapsed_time = time.time() - start_time
        log_banner(self.logger, f"Simulation completed in {elapsed_time:.2f} seconds")

        if self.interactive:
            self.logger.info("Step 6: Starting interactive session")
            self.engine.start_session()

        return results
