"""Configuration management for angular scan simulations."""

from dataclasses import dataclass, asdict
from typing import Optional, Tuple
import math
import yaml
from pathlib import Path

from .validation import ConfigurationError, validate_extents


SUPPORTED_ENGINES = ('reference', 'geant4')


@dataclass
class ScanConfig:
    """Configuration for an angular response scan.

    Lengths are given in metres and energies in GeV; the driver converts
    them to internal units when it builds the geometry and the source.

    Attributes:
        world_half_extents_m: World box half-extents (x, y, z) in m
        world_material: NIST material of the world volume
        detector_half_extents_m: Detector box half-extents (x, y, z) in m
        detector_material: NIST material of the detector volume
        particle: Primary particle name (e.g. 'mu-')
        energy_GeV: Primary kinetic energy used for every grid point
        launch_radius_m: Radius of the sphere primaries start from
        theta_step_deg: Polar angle step of the scan grid
        theta_max_deg: Last polar angle of the grid (inclusive)
        phi_step_deg: Azimuthal angle step of the scan grid
        phi_max_deg: Azimuthal upper bound of the grid (exclusive)
        physics_list: Reference physics list name handed to the engine
        engine: Transport engine backend ('reference' or 'geant4')
        step_length_mm: Step length of the reference engine
        straggling_fraction: Relative width of per-step energy loss fluctuations
        random_seed: Random seed for reproducibility (None for random)
        device: Torch device for the reference engine ('cpu' or 'cuda')
        log_file: Optional log file path
        visualization: Whether to send visualization commands before scanning
        vis_driver: Graphics system opened by '/vis/open'
        viewpoint_theta_deg: Initial viewer polar angle
        viewpoint_phi_deg: Initial viewer azimuthal angle
    """
    world_half_extents_m: Tuple[float, float, float] = (2.0, 2.0, 2.0)
    world_material: str = 'G4_AIR'
    detector_half_extents_m: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    detector_material: str = 'G4_lAr'
    particle: str = 'mu-'
    energy_GeV: float = 1.0
    launch_radius_m: float = 1.9
    theta_step_deg: float = 30.0
    theta_max_deg: float = 180.0
    phi_step_deg: float = 30.0
    phi_max_deg: float = 360.0
    physics_list: str = 'FTFP_BERT'
    engine: str = 'reference'
    step_length_mm: float = 10.0
    straggling_fraction: float = 0.1
    random_seed: Optional[int] = None
    device: str = 'cpu'
    log_file: Optional[str] = None
    visualization: bool = True
    vis_driver: str = 'TSGQT'
    viewpoint_theta_deg: float = 90.0
    viewpoint_phi_deg: float = 0.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.world_half_extents_m = validate_extents('World', self.world_half_extents_m)
        self.detector_half_extents_m = validate_extents('Detector', self.detector_half_extents_m)
        self._validate()

    def _validate(self) -> None:
        """Validate configuration parameters."""
        import torch
        from .logging import get_logger
        logger = get_logger()

        for field_name in ('world_material', 'detector_material', 'particle', 'physics_list'):
            value = getattr(self, field_name)
            if not value or not isinstance(value, str):
                raise ConfigurationError(f"{field_name} must be a non-empty string")

        if not math.isfinite(self.energy_GeV) or self.energy_GeV <= 0:
            raise ConfigurationError(f"energy_GeV must be positive, got {self.energy_GeV}")

        for field_name in ('theta_step_deg', 'phi_step_deg', 'step_length_mm'):
            value = getattr(self, field_name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{field_name} must be positive, got {value}")

        if not 0.0 <= self.theta_max_deg <= 180.0:
            raise ConfigurationError(
                f"theta_max_deg must lie in [0, 180], got {self.theta_max_deg}"
            )
        if not 0.0 < self.phi_max_deg <= 360.0:
            raise ConfigurationError(
                f"phi_max_deg must lie in (0, 360], got {self.phi_max_deg}"
            )

        if self.straggling_fraction < 0:
            raise ConfigurationError(
                f"straggling_fraction must be non-negative, got {self.straggling_fraction}"
            )

        # Primaries must start outside the detector but inside the world
        detector_radius = self.detector_bounding_radius_m
        world_inner = min(self.world_half_extents_m)
        if not detector_radius < self.launch_radius_m < world_inner:
            raise ConfigurationError(
                f"launch_radius_m must exceed the detector bounding radius "
                f"({detector_radius:.4f} m) and stay below the smallest world "
                f"half-extent ({world_inner:.4f} m), got {self.launch_radius_m}"
            )

        if self.engine not in SUPPORTED_ENGINES:
            raise ConfigurationError(
                f"engine must be one of {SUPPORTED_ENGINES}, got {self.engine}"
            )

        if self.device not in ['cuda', 'cpu']:
            raise ConfigurationError(f"device must be 'cuda' or 'cpu', got {self.device}")

        if self.device == 'cuda' and not torch.cuda.is_available():
            logger.warning("CUDA requested but not available, falling back to CPU")
            self.device = 'cpu'

    @property
    def detector_bounding_radius_m(self) -> float:
        return math.sqrt(sum(h * h for h in self.detector_half_extents_m))

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'ScanConfig':
        """Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            ScanConfig instance

        Raises:
            ConfigurationError: If the file is not valid YAML or holds invalid values
        """
        with open(yaml_path, 'r') as f:
            try:
                config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Cannot parse configuration file {yaml_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Configuration file {yaml_path} must hold a mapping, got {type(config_dict).__name__}"
            )

        try:
            for key in ('world_half_extents_m', 'detector_half_extents_m'):
                if key in config_dict:
                    config_dict[key] = tuple(config_dict[key])
            return cls(**config_dict)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration file {yaml_path}: {e}") from e

    def to_yaml(self, yaml_path: str) -> None:
        """Save configuration to YAML file.

        Args:
            yaml_path: Path to save YAML configuration
        """
        config_dict = asdict(self)
        config_dict['world_half_extents_m'] = list(self.world_half_extents_m)
        config_dict['detector_half_extents_m'] = list(self.detector_half_extents_m)

        Path(yaml_path).parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False)

    @staticmethod
    def get_default_config() -> 'ScanConfig':
        """Get the default LArTPC configuration: 2 m air world, 1 m liquid argon box."""
        return ScanConfig()
