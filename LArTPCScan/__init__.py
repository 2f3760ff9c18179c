"""
Angular Scan Driver for a Liquid Argon TPC Detector Simulation

Fires one primary per direction over a fixed (theta, phi) grid into a liquid
argon box and records the energy deposited in each event.
"""

__version__ = "0.1.0"

from .core.scan_driver import ScanDriver
from .utils.config import ScanConfig

__all__ = ['ScanDriver', 'ScanConfig']
