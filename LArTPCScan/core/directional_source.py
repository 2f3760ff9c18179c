"""Directional single-particle source on a launch sphere."""

import math
import numpy as np

from .data_models import EmissionParameters
from .units import deg, GeV


def spherical_direction(theta_deg: float, phi_deg: float) -> np.ndarray:
    """Convert spherical angles (degrees) to a Cartesian unit vector.

    Angles are used as given; values outside [0, 180] x [0, 360) are not
    clamped and simply follow the same convention.
    """
    theta = theta_deg * deg
    phi = phi_deg * deg
    sin_theta = math.sin(theta)
    return np.array([
        sin_theta * math.cos(phi),
        sin_theta * math.sin(phi),
        math.cos(theta),
    ])


class DirectionalSource:
    """Aims the emitter at the origin from a point on a sphere.

    For a direction d the particle starts at ``-d * launch_radius`` and travels
    along d, so it always crosses the origin. Particle species and the one
    primary per event multiplicity are fixed by the EmissionParameters the
    source was built with.

    Attributes:
        emission: Shared emitter state read by the engine
        launch_radius: Radius of the launch sphere in mm
    """

    def __init__(self, emission: EmissionParameters, launch_radius: float):
        if not math.isfinite(launch_radius) or launch_radius <= 0:
            raise ValueError(f"launch_radius must be positive, got {launch_radius}")
        self.emission = emission
        self.launch_radius = float(launch_radius)

    def configure(self, theta_deg: float, phi_deg: float, energy_GeV: float) -> None:
        """Point the emitter along (theta, phi) with the given kinetic energy.

        Args:
            theta_deg: Polar angle in degrees
            phi_deg: Azimuthal angle in degrees
            energy_GeV: Kinetic energy in GeV
        """
        if not (math.isfinite(theta_deg) and math.isfinite(phi_deg)):
            raise ValueError(f"Angles must be finite, got theta={theta_deg}, phi={phi_deg}")
        if not math.isfinite(energy_GeV) or energy_GeV <= 0:
            raise ValueError(f"energy_GeV must be positive, got {energy_GeV}")

        direction = spherical_direction(theta_deg, phi_deg)
        self.emission.direction = direction
        self.emission.position = -direction * self.launch_radius
        self.emission.kinetic_energy = energy_GeV * GeV
