"""Reference transport engine with continuous energy loss along straight tracks.

The primary is followed in a straight line from its vertex to the world
boundary. Each material segment is cut into fixed-length steps and every step
deposits the mean collisional loss of the material, scaled by the square of
the primary charge, with Gaussian straggling. Neutral primaries deposit
nothing. Secondaries, scattering and showering are not modelled.
"""

import math
import sys
from typing import Dict, List, Optional, TextIO, Tuple
import numpy as np
import torch

from .base import EngineFailure, TransportEngine
from .materials import MaterialProperties, ParticleProperties, get_material, get_particle
from ..core.units import EPSILON, cm, mm
from ..utils.logging import get_logger


logger = get_logger()

# Commands the reference engine accepts but has no renderer or verbosity for
ACCEPTED_PREFIXES = ('/vis/', '/control/', '/tracking/', '/run/verbose', '/event/verbose')


def ray_box_intersection(
    origin: np.ndarray,
    direction: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray
) -> Optional[Tuple[float, float]]:
    """Slab-method intersection of a ray with an axis-aligned box.

    Args:
        origin: Ray origin [3]
        direction: Unit ray direction [3]
        lower: Lower box corner [3]
        upper: Upper box corner [3]

    Returns:
        (t_near, t_far) distances along the ray, or None if the ray misses
        the box or the box lies entirely behind the origin. t_near is negative
        when the origin is inside the box.
    """
    t_near, t_far = -math.inf, math.inf
    for axis in range(3):
        if abs(direction[axis]) < EPSILON:
            if origin[axis] < lower[axis] or origin[axis] > upper[axis]:
                return None
            continue
        t1 = (lower[axis] - origin[axis]) / direction[axis]
        t2 = (upper[axis] - origin[axis]) / direction[axis]
        t_near = max(t_near, min(t1, t2))
        t_far = min(t_far, max(t1, t2))
    if t_near > t_far or t_far < 0:
        return None
    return float(t_near), float(t_far)


class ReferenceTransportEngine(TransportEngine):
    """Lightweight engine implementing the full transport engine contract.

    Attributes:
        step_length: Maximum step length in mm
        straggling_fraction: Relative standard deviation of per-step losses
        device: Torch device used for step sampling
        generator: Torch random generator (seedable for reproducible scans)
        command_history: All UI commands received, in order
        events_processed: Number of events simulated so far
    """

    def __init__(
        self,
        step_length: float = 10.0 * mm,
        straggling_fraction: float = 0.1,
        seed: Optional[int] = None,
        device: str = 'cpu'
    ):
        super().__init__()
        if step_length <= 0:
            raise ValueError(f"step_length must be positive, got {step_length}")
        self.step_length = step_length
        self.straggling_fraction = straggling_fraction
        self.device = device
        self.generator = torch.Generator(device=device)
        if seed is not None:
            self.generator.manual_seed(seed)
        self.command_history: List[str] = []
        self.events_processed = 0
        self._materials: Dict[str, MaterialProperties] = {}
        self.particle: Optional[ParticleProperties] = None

    def find_material(self, name: str) -> MaterialProperties:
        return get_material(name)

    def find_particle(self, name: str):
        return get_particle(name)

    def initialize(self) -> None:
        if self.initialized:
            raise EngineFailure("Engine is already initialized")
        self._check_ready()

        for volume in self.geometry.volumes:
            self._materials[volume.name] = get_material(volume.material)
        self.particle = get_particle(self.emitter.particle)

        self.initialized = True
        logger.info(
            f"ReferenceTransportEngine initialized: physics={self.physics_list.name}, "
            f"step={self.step_length / mm:g} mm, straggling={self.straggling_fraction:g}, "
            f"device={self.device}"
        )
        logger.info(
            f"Primary {self.particle.name}: PDG {self.particle.pdg_code}, "
            f"mass={self.particle.mass:g} MeV, charge={self.particle.charge:+d}"
        )
        logger.debug(self.geometry.summary())

    def simulate_event(self, count: int = 1) -> None:
        self._check_initialized()
        if count < 0:
            raise EngineFailure(f"Event count must be non-negative, got {count}")
        for _ in range(count):
            self._simulate_one()

    def _simulate_one(self) -> None:
        emission = self.emitter
        origin = np.asarray(emission.position, dtype=float)
        direction = np.asarray(emission.direction, dtype=float)

        norm = float(np.linalg.norm(direction))
        if not math.isfinite(norm) or norm < EPSILON:
            raise EngineFailure(f"Invalid primary direction: {direction}")
        direction = direction / norm

        if not self.geometry.world.contains(origin):
            raise EngineFailure(
                f"Primary vertex {origin.tolist()} mm lies outside the world volume"
            )

        segments = self._track_segments(origin, direction)

        self.begin_of_event()
        remaining = float(emission.kinetic_energy)
        for volume_name, length in segments:
            if remaining <= 0:
                break
            remaining = self._step_through(self._materials[volume_name], length, remaining)
        self.end_of_event()

        self.events_processed += 1

    def _track_segments(
        self,
        origin: np.ndarray,
        direction: np.ndarray
    ) -> List[Tuple[str, float]]:
        """Split the straight track into (volume name, length) segments."""
        world = self.geometry.world
        detector = self.geometry.detector

        world_hit = ray_box_intersection(origin, direction, world.lower_corner, world.upper_corner)
        world_exit = world_hit[1] if world_hit is not None else 0.0

        detector_hit = ray_box_intersection(
            origin, direction, detector.lower_corner, detector.upper_corner
        )
        if detector_hit is None:
            return [(world.name, world_exit)] if world_exit > 0 else []

        t_in = max(detector_hit[0], 0.0)
        t_out = min(detector_hit[1], world_exit)
        segments = [
            (world.name, t_in),
            (detector.name, t_out - t_in),
            (world.name, world_exit - t_out),
        ]
        return [(name, length) for name, length in segments if length > 0]

    def _step_through(self, material: MaterialProperties, length: float, remaining: float) -> float:
        """Step across one segment, reporting each deposit. Returns the energy left."""
        n_steps = max(int(math.ceil(length / self.step_length)), 1)
        steps = torch.full((n_steps,), self.step_length, dtype=torch.float64, device=self.device)
        steps[-1] = length - self.step_length * (n_steps - 1)

        # Collisional loss scales with the square of the primary charge
        losses = steps / cm * material.linear_dedx * self.particle.charge ** 2
        if self.straggling_fraction > 0:
            noise = torch.randn(
                n_steps, generator=self.generator, dtype=torch.float64, device=self.device
            )
            losses = losses * (1.0 + self.straggling_fraction * noise)
        losses = torch.clamp(losses, min=0.0)

        for loss in losses.cpu().tolist():
            deposit = min(loss, remaining)
            remaining -= deposit
            self.stepping_callback(deposit)
            if remaining <= 0:
                break
        return remaining

    def apply_command(self, command: str) -> bool:
        command = command.strip()
        if not command:
            return True
        self.command_history.append(command)
        tokens = command.split()
        head = tokens[0]

        if head == '/run/beamOn':
            try:
                count = int(tokens[1]) if len(tokens) > 1 else 1
            except ValueError:
                logger.warning(f"Bad parameter for command: {command}")
                return False
            if count < 0:
                logger.warning(f"Event count must be non-negative: {command}")
                return False
            self.simulate_event(count)
            return True

        if head == '/random/setSeeds':
            try:
                seed = int(tokens[1])
            except (IndexError, ValueError):
                logger.warning(f"Bad parameter for command: {command}")
                return False
            self.generator.manual_seed(seed)
            return True

        if head.startswith(ACCEPTED_PREFIXES):
            logger.debug(f"Accepted command without effect: {command}")
            return True

        logger.warning(f"Command not found: {command}")
        return False

    def start_session(self, stream: Optional[TextIO] = None) -> None:
        """Read commands line by line until 'exit', 'quit' or end of input."""
        stream = stream or sys.stdin
        logger.info("Interactive session started, type 'exit' to leave")
        for line in stream:
            command = line.strip()
            if not command or command.startswith('#'):
                continue
            if command in {'exit', 'quit'}:
                break
            self.apply_command(command)
        logger.info("Interactive session ended")
