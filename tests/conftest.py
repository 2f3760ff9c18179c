from __future__ import annotations

import logging

import numpy as np
import pytest

from LArTPCScan.engine import EngineFailure, MATERIALS, PARTICLES, TransportEngine
from LArTPCScan.utils.config import ScanConfig


class RecordingEngine(TransportEngine):
    """Engine double that records every call and fires fixed step deposits."""

    def __init__(self, deposits=(1.0, 0.0, 2.5), fail_at=None, fire_end=True):
        super().__init__()
        self.deposits = deposits
        self.fail_at = fail_at
        self.fire_end = fire_end
        self.calls = []
        self.primaries = []
        self.commands = []
        self.sessions = 0

    def find_material(self, name):
        return MATERIALS.get(name)

    def find_particle(self, name):
        return PARTICLES.get(name)

    def initialize(self):
        self._check_ready()
        self.calls.append('initialize')
        self.initialized = True

    def simulate_event(self, count=1):
        self._check_initialized()
        self.calls.append(('simulate_event', count))
        for _ in range(count):
            if self.fail_at is not None and len(self.primaries) == self.fail_at:
                raise EngineFailure("simulated abort")
            self.primaries.append((
                np.array(self.emitter.position, dtype=float),
                np.array(self.emitter.direction, dtype=float),
                float(self.emitter.kinetic_energy),
            ))
            self.begin_of_event()
            for deposit in self.deposits:
                self.stepping_callback(deposit)
            if self.fire_end:
                self.end_of_event()

    def apply_command(self, command):
        self.commands.append(command)
        return not command.startswith('/bad/')

    def start_session(self):
        self.sessions += 1


@pytest.fixture
def recording_engine():
    return RecordingEngine()


@pytest.fixture
def make_recording_engine():
    return RecordingEngine


@pytest.fixture
def config():
    return ScanConfig(random_seed=1234, visualization=False)


@pytest.fixture
def scan_log(caplog):
    caplog.set_level(logging.INFO, logger='lartpc_scan')
    return caplog
