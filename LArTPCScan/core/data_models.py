"""Core data models for the angular scan driver."""

from dataclasses import dataclass, field
from typing import Tuple
import numpy as np

from .units import mm, m, keV, GeV


@dataclass(frozen=True)
class BoxVolume:
    """Axis-aligned rectangular volume.

    Attributes:
        name: Volume name registered with the engine
        half_extents: Half-lengths (x, y, z) in mm
        material: NIST material identifier
        offset: Placement of the box centre in its mother volume, in mm
    """
    name: str
    half_extents: Tuple[float, float, float]
    material: str
    offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def bounding_radius(self) -> float:
        """Radius of the smallest sphere around the box centre enclosing it."""
        return float(np.linalg.norm(self.half_extents))

    @property
    def lower_corner(self) -> np.ndarray:
        return np.asarray(self.offset, dtype=float) - np.asarray(self.half_extents, dtype=float)

    @property
    def upper_corner(self) -> np.ndarray:
        return np.asarray(self.offset, dtype=float) + np.asarray(self.half_extents, dtype=float)

    def contains(self, point) -> bool:
        """Return True if ``point`` lies inside the box or on its surface."""
        p = np.asarray(point, dtype=float)
        return bool(np.all(p >= self.lower_corner) and np.all(p <= self.upper_corner))


@dataclass(frozen=True)
class DetectorGeometry:
    """World volume with a single detector volume placed inside it.

    This is the geometry handle installed into the transport engine. It is
    never mutated after construction.
    """
    world: BoxVolume
    detector: BoxVolume

    @property
    def volumes(self) -> Tuple[BoxVolume, BoxVolume]:
        return (self.world, self.detector)

    def summary(self) -> str:
        lines = ["Detector Geometry Summary:"]
        for volume in self.volumes:
            hx, hy, hz = (h / m for h in volume.half_extents)
            lines.append(
                f"- {volume.name}: half-extents=({hx:g}, {hy:g}, {hz:g}) m, "
                f"material={volume.material}"
            )
        return "\n".join(lines)


def _default_position() -> np.ndarray:
    return np.array([-0.9 * m, 0.0, 0.0])


def _default_direction() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0])


@dataclass
class EmissionParameters:
    """Current configuration of the single-particle emitter.

    The engine holds a live reference to this object and reads it once per
    event when it generates the primary vertex.

    Attributes:
        particle: Particle name resolvable by the engine's particle table
        position: Launch position in mm [3]
        direction: Unit momentum direction [3]
        kinetic_energy: Kinetic energy in MeV
    """
    particle: str = 'mu-'
    position: np.ndarray = field(default_factory=_default_position)
    direction: np.ndarray = field(default_factory=_default_direction)
    kinetic_energy: float = 1.0 * GeV

    def __str__(self) -> str:
        x, y, z = (float(c) / mm for c in self.position)
        u, v, w = (float(c) for c in self.direction)
        return (
            f"{self.particle} E={self.kinetic_energy / GeV:g} GeV "
            f"pos=({x:.1f}, {y:.1f}, {z:.1f}) mm dir=({u:.4f}, {v:.4f}, {w:.4f})"
        )


@dataclass(frozen=True)
class ScanGridPoint:
    """One direction/energy combination of the angular scan."""
    theta_deg: float
    phi_deg: float
    energy_GeV: float
    index: int = 0


@dataclass(frozen=True)
class ScanResult:
    """Deposited energy observed for one grid point.

    Attributes:
        point: Grid point that was simulated
        deposited_energy: Total energy deposited during the event, in MeV
    """
    point: ScanGridPoint
    deposited_energy: float

    @property
    def deposited_energy_keV(self) -> float:
        return self.deposited_energy / keV
