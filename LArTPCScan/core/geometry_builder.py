"""Geometry builder for the world/detector box pair."""

from typing import Callable, Optional, Sequence

from .data_models import BoxVolume, DetectorGeometry
from .units import m
from ..utils.logging import get_logger
from ..utils.validation import ConfigurationError, GeometryError, validate_extents


logger = get_logger()

WORLD_VOLUME_NAME = 'World'
DETECTOR_VOLUME_NAME = 'LArBox'


def build_geometry(
    world_half_extents: Sequence[float],
    world_material: str,
    detector_half_extents: Sequence[float],
    detector_material: str,
    resolve_material: Optional[Callable[[str], object]] = None
) -> DetectorGeometry:
    """Build a detector box centred inside a world box.

    Args:
        world_half_extents: World half-lengths (x, y, z) in mm
        world_material: Material identifier of the world
        detector_half_extents: Detector half-lengths (x, y, z) in mm
        detector_material: Material identifier of the detector
        resolve_material: Optional lookup into the engine's material
            database; must raise ConfigurationError for unknown names

    Returns:
        Immutable geometry handle to register with the engine

    Raises:
        GeometryError: If extents are not positive or the detector does not
            fit strictly inside the world on every axis
        ConfigurationError: If a material identifier cannot be resolved
    """
    world = validate_extents(WORLD_VOLUME_NAME, world_half_extents)
    detector = validate_extents(DETECTOR_VOLUME_NAME, detector_half_extents)

    for axis, w, d in zip('xyz', world, detector):
        if d >= w:
            raise GeometryError(
                f"Detector half-extent along {axis} ({d:g} mm) must be smaller "
                f"than the world half-extent ({w:g} mm)"
            )

    if resolve_material is not None:
        for material in (world_material, detector_material):
            if resolve_material(material) is None:
                raise ConfigurationError(f"Unknown material: {material}")

    geometry = DetectorGeometry(
        world=BoxVolume(WORLD_VOLUME_NAME, world, world_material),
        detector=BoxVolume(DETECTOR_VOLUME_NAME, detector, detector_material),
    )
    logger.debug(geometry.summary())
    return geometry


def geometry_from_config(config, resolve_material=None) -> DetectorGeometry:
    """Build the geometry described by a ScanConfig (extents given in metres)."""
    return build_geometry(
        [h * m for h in config.world_half_extents_m],
        config.world_material,
        [h * m for h in config.detector_half_extents_m],
        config.detector_material,
        resolve_material=resolve_material,
    )
