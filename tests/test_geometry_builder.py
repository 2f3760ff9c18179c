from __future__ import annotations

import pytest

from LArTPCScan.core import build_geometry, geometry_from_config
from LArTPCScan.core.units import m
from LArTPCScan.engine import ReferenceTransportEngine
from LArTPCScan.utils.validation import ConfigurationError, GeometryError


WORLD = (2000.0, 2000.0, 2000.0)
DETECTOR = (1000.0, 1000.0, 1000.0)


class TestBuildGeometry:
    """World/detector box construction."""

    def test_builds_centred_boxes(self):
        geometry = build_geometry(WORLD, 'G4_AIR', DETECTOR, 'G4_lAr')
        assert geometry.world.name == 'World'
        assert geometry.detector.name == 'LArBox'
        assert geometry.world.material == 'G4_AIR'
        assert geometry.detector.material == 'G4_lAr'
        assert geometry.detector.offset == (0.0, 0.0, 0.0)
        assert geometry.detector.half_extents == DETECTOR

    def test_geometry_is_immutable(self):
        geometry = build_geometry(WORLD, 'G4_AIR', DETECTOR, 'G4_lAr')
        with pytest.raises(AttributeError):
            geometry.detector = geometry.world

    @pytest.mark.parametrize("axis", [0, 1, 2])
    @pytest.mark.parametrize("extent", [2000.0, 2500.0])
    def test_detector_not_inside_world_fails(self, axis, extent):
        detector = list(DETECTOR)
        detector[axis] = extent
        with pytest.raises(ConfigurationError):
            build_geometry(WORLD, 'G4_AIR', detector, 'G4_lAr')

    def test_geometry_error_is_configuration_error(self):
        with pytest.raises(GeometryError):
            build_geometry(WORLD, 'G4_AIR', (2000.0, 1.0, 1.0), 'G4_lAr')
        assert issubclass(GeometryError, ConfigurationError)

    @pytest.mark.parametrize("extents", [(0.0, 1.0, 1.0), (-1.0, 1.0, 1.0), (1.0, 1.0), ("one", 1.0, 1.0), 5.0])
    def test_invalid_extents_fail(self, extents):
        with pytest.raises(GeometryError):
            build_geometry(WORLD, 'G4_AIR', extents, 'G4_lAr')

    def test_unknown_material_fails(self):
        engine = ReferenceTransportEngine()
        with pytest.raises(ConfigurationError, match="G4_Unobtainium"):
            build_geometry(WORLD, 'G4_AIR', DETECTOR, 'G4_Unobtainium',
                           resolve_material=engine.find_material)

    def test_resolver_returning_none_fails(self):
        with pytest.raises(ConfigurationError):
            build_geometry(WORLD, 'G4_AIR', DETECTOR, 'G4_lAr', resolve_material=lambda name: None)

    def test_from_config_converts_metres(self, config):
        geometry = geometry_from_config(config)
        assert geometry.world.half_extents == (2.0 * m, 2.0 * m, 2.0 * m)
        assert geometry.detector.half_extents == (1.0 * m, 1.0 * m, 1.0 * m)

    def test_contains(self):
        geometry = build_geometry(WORLD, 'G4_AIR', DETECTOR, 'G4_lAr')
        assert geometry.detector.contains((0.0, 0.0, 1000.0))
        assert not geometry.detector.contains((0.0, 0.0, 1000.1))
