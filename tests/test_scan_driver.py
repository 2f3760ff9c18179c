from __future__ import annotations

import re

import numpy as np
import pytest

from LArTPCScan import ScanDriver
from LArTPCScan.core import ScanGridPoint, ScanResult, spherical_direction
from LArTPCScan.core.scan_driver import response_map, scan_angles, scan_grid
from LArTPCScan.core.units import GeV, keV, m
from LArTPCScan.engine import EngineFailure, ReferenceTransportEngine
from LArTPCScan.utils.validation import ConfigurationError, GeometryError


SCAN_LINE = re.compile(
    r"theta=(?P<theta>\S+) phi=(?P<phi>\S+) energy=(?P<energy>\S+) GeV edep=(?P<edep>\S+) keV"
)


def scan_lines(caplog):
    matches = (SCAN_LINE.search(record.getMessage()) for record in caplog.records)
    return [match for match in matches if match]


class TestGridHelpers:
    """Angle ranges and grid traversal order."""

    def test_theta_range_is_inclusive(self):
        assert scan_angles(30.0, 180.0, inclusive=True) == [0.0, 30.0, 60.0, 90.0, 120.0, 150.0, 180.0]

    def test_phi_range_is_exclusive(self):
        phi = scan_angles(30.0, 360.0, inclusive=False)
        assert len(phi) == 12
        assert phi[-1] == 330.0

    def test_non_dividing_step(self):
        assert scan_angles(40.0, 180.0, inclusive=True) == [0.0, 40.0, 80.0, 120.0, 160.0]
        assert scan_angles(100.0, 360.0, inclusive=False) == [0.0, 100.0, 200.0, 300.0]

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            scan_angles(0.0, 180.0, inclusive=True)

    def test_grid_order_theta_outer(self):
        points = list(scan_grid([0.0, 90.0], [0.0, 120.0, 240.0], 2.0))
        assert [(p.theta_deg, p.phi_deg) for p in points] == [
            (0.0, 0.0), (0.0, 120.0), (0.0, 240.0),
            (90.0, 0.0), (90.0, 120.0), (90.0, 240.0),
        ]
        assert [p.index for p in points] == list(range(6))
        assert all(p.energy_GeV == 2.0 for p in points)

    def test_response_map(self):
        results = [
            ScanResult(ScanGridPoint(0.0, 0.0, 1.0), 2.0 * keV),
            ScanResult(ScanGridPoint(90.0, 180.0, 1.0), 5.0 * keV),
        ]
        grid = response_map(results, [0.0, 90.0], [0.0, 180.0])
        assert grid.shape == (2, 2)
        assert grid[0, 0] == pytest.approx(2.0)
        assert grid[1, 1] == pytest.approx(5.0)
        assert np.isnan(grid[0, 1])


class TestScanDriverWithRecordingEngine:
    """Orchestration checked against an engine double."""

    def test_setup_registers_everything(self, config, recording_engine):
        driver = ScanDriver(config, engine=recording_engine)
        driver.setup()
        assert recording_engine.initialized
        assert recording_engine.geometry is driver.geometry
        assert recording_engine.physics_list.name == 'FTFP_BERT'
        assert recording_engine.emitter is driver.emission
        assert recording_engine.calls == ['initialize']

        driver.setup()
        assert recording_engine.calls == ['initialize']

    def test_full_grid(self, config, recording_engine, scan_log):
        driver = ScanDriver(config, engine=recording_engine)
        results = driver.run_grid()

        assert len(results) == 84
        assert recording_engine.calls.count(('simulate_event', 1)) == 84
        expected = [(t, p) for t in range(0, 181, 30) for p in range(0, 360, 30)]
        for (theta, phi), (position, direction, energy) in zip(expected, recording_engine.primaries):
            np.testing.assert_allclose(direction, spherical_direction(theta, phi), atol=1e-12)
            np.testing.assert_allclose(position, -direction * 1.9 * m, atol=1e-9)
            assert energy == pytest.approx(1.0 * GeV)
        assert [(r.point.theta_deg, r.point.phi_deg) for r in results] == \
            [(float(t), float(p)) for t, p in expected]
        assert len(scan_lines(scan_log)) == 84

    def test_deposit_is_sum_of_steps(self, config, make_recording_engine):
        engine = make_recording_engine(deposits=(5.0, 3.0, -1.0, 0.0))
        result = ScanDriver(config, engine=engine).run_point(45.0, 90.0, 2.0)
        assert result.deposited_energy == pytest.approx(8.0)
        assert result.point == ScanGridPoint(45.0, 90.0, 2.0, 0)

    def test_events_are_independent(self, config, recording_engine):
        results = ScanDriver(config, engine=recording_engine).run_scan([0.0], [0.0, 90.0], 1.0)
        assert results[0].deposited_energy == results[1].deposited_energy == pytest.approx(3.5)

    def test_engine_failure_stops_scan(self, config, make_recording_engine):
        engine = make_recording_engine(fail_at=2)
        driver = ScanDriver(config, engine=engine)
        with pytest.raises(EngineFailure, match="simulated abort"):
            driver.run_grid()
        assert len(driver.results) == 2
        assert len(engine.primaries) == 2

    def test_missing_end_of_event_is_reported(self, config, make_recording_engine):
        engine = make_recording_engine(fire_end=False)
        driver = ScanDriver(config, engine=engine)
        with pytest.raises(EngineFailure, match="exactly one"):
            driver.run_point(0.0, 0.0, 1.0)

    def test_geometry_error_prevents_events(self, config, recording_engine):
        config.detector_half_extents_m = (2.0, 1.0, 1.0)
        driver = ScanDriver(config, engine=recording_engine)
        with pytest.raises(GeometryError):
            driver.run()
        assert recording_engine.calls == []
        assert recording_engine.primaries == []

    def test_unknown_material_prevents_events(self, config, recording_engine):
        config.detector_material = 'G4_Unobtainium'
        driver = ScanDriver(config, engine=recording_engine)
        with pytest.raises(ConfigurationError):
            driver.run()
        assert recording_engine.primaries == []

    def test_run_with_visualization_and_session(self, config, recording_engine):
        config.visualization = True
        driver = ScanDriver(config, engine=recording_engine, interactive=True)
        results = driver.run()
        assert len(results) == 84
        assert recording_engine.commands[0] == '/vis/open TSGQT'
        assert '/vis/viewer/set/viewpointThetaPhi 90 0' in recording_engine.commands
        assert recording_engine.sessions == 1

    def test_batch_run_has_no_session(self, config, recording_engine):
        ScanDriver(config, engine=recording_engine).run()
        assert recording_engine.sessions == 0
        assert recording_engine.commands == []


class TestScanDriverWithReferenceEngine:
    """End-to-end runs through the reference backend."""

    def test_single_point(self, config, scan_log):
        driver = ScanDriver(config)
        assert isinstance(driver.engine, ReferenceTransportEngine)
        result = driver.run_point(90.0, 0.0, 25.0)

        lines = scan_lines(scan_log)
        assert len(lines) == 1
        line = lines[0]
        assert (line['theta'], line['phi'], line['energy']) == ('90', '0', '25')
        assert float(line['edep']) >= 0
        assert float(line['edep']) == pytest.approx(result.deposited_energy_keV, abs=1e-3)

    def test_through_detector_deposits_more_than_world_alone(self, config):
        driver = ScanDriver(config)
        result = driver.run_point(0.0, 0.0, 1.0)
        # Two metres of liquid argon at minimum ionisation
        assert 300.0 < result.deposited_energy < 600.0

    def test_seeded_scans_are_reproducible(self):
        from LArTPCScan.utils.config import ScanConfig

        energies = []
        for _ in range(2):
            config = ScanConfig(random_seed=99, visualization=False, theta_step_deg=90.0, phi_step_deg=180.0)
            energies.append([r.deposited_energy for r in ScanDriver(config).run_grid()])
        assert len(energies[0]) == 6
        assert energies[0] == energies[1]

    def test_launch_radius_outside_world_rejected(self, config):
        config.world_half_extents_m = (1.5, 1.5, 1.5)
        config.detector_half_extents_m = (0.5, 0.5, 0.5)
        driver = ScanDriver(config)
        with pytest.raises(ConfigurationError, match="Launch radius"):
            driver.setup()
