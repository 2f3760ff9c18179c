"""Transport engine contract and backends."""

from .base import EngineFailure, PhysicsListHandle, TransportEngine
from .materials import MATERIALS, PARTICLES, MaterialProperties, ParticleProperties
from .reference_engine import ReferenceTransportEngine, ray_box_intersection
from ..core.units import mm


def create_engine(config, interactive: bool = False) -> TransportEngine:
    """Instantiate the engine backend selected by ``config.engine``.

    Args:
        config: ScanConfig
        interactive: Whether the engine should prepare an interactive session

    Returns:
        Uninitialized transport engine
    """
    if config.engine == 'geant4':
        # geant4_pybind is an optional dependency
        from .geant4_engine import Geant4TransportEngine
        return Geant4TransportEngine(interactive=interactive, seed=config.random_seed)

    return ReferenceTransportEngine(
        step_length=config.step_length_mm * mm,
        straggling_fraction=config.straggling_fraction,
        seed=config.random_seed,
        device=config.device,
    )


__all__ = [
    'EngineFailure',
    'PhysicsListHandle',
    'TransportEngine',
    'MATERIALS',
    'PARTICLES',
    'MaterialProperties',
    'ParticleProperties',
    'ReferenceTransportEngine',
    'ray_box_intersection',
    'create_engine'
]
