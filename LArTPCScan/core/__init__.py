"""Core simulation components.

The scan driver depends on the engine package and is imported from
``core.scan_driver``.
"""

from .data_models import (
    BoxVolume,
    DetectorGeometry,
    EmissionParameters,
    ScanGridPoint,
    ScanResult
)
from .geometry_builder import build_geometry, geometry_from_config
from .directional_source import DirectionalSource, spherical_direction
from .deposition import DepositionAccumulator
from .event_hooks import EventLifecycleHooks, EventState

__all__ = [
    'BoxVolume',
    'DetectorGeometry',
    'EmissionParameters',
    'ScanGridPoint',
    'ScanResult',
    'build_geometry',
    'geometry_from_config',
    'DirectionalSource',
    'spherical_direction',
    'DepositionAccumulator',
    'EventLifecycleHooks',
    'EventState'
]
