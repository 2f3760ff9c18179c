"""
Basic usage example for the LArTPC angular response scan.

This example demonstrates how to:
1. Configure the scan and save/load the configuration as YAML
2. Run a single fixed-direction event
3. Run a coarse angular scan and print the response map
"""

import numpy as np

from LArTPCScan import ScanDriver
from LArTPCScan.core.scan_driver import response_map
from LArTPCScan.utils import ScanConfig, setup_logger


def example_configuration():
    """Example of configuration management."""
    print("\n=== Example 1: Configuration ===\n")

    config = ScanConfig(
        particle='mu-',
        energy_GeV=25.0,
        theta_step_deg=45.0,
        phi_step_deg=90.0,
        random_seed=2024,
        visualization=False,
    )

    print("Configuration created:")
    print(f"  Particle: {config.particle}")
    print(f"  Energy: {config.energy_GeV} GeV")
    print(f"  Detector: {config.detector_half_extents_m} m half-extents of {config.detector_material}")
    print(f"  Launch radius: {config.launch_radius_m} m")
    print(f"  Engine: {config.engine} on {config.device}")

    config_path = './scan_data/config.yaml'
    config.to_yaml(config_path)
    print(f"\nConfiguration saved to: {config_path}")

    loaded_config = ScanConfig.from_yaml(config_path)
    print("Configuration loaded from YAML")

    return loaded_config


def example_single_direction(config):
    """Example of one event along a fixed direction."""
    print("\n=== Example 2: Fixed direction ===\n")

    driver = ScanDriver(config)
    result = driver.run_point(theta_deg=90.0, phi_deg=0.0, energy_GeV=config.energy_GeV)

    print(f"Primary: {driver.emission}")
    print(f"Deposited energy: {result.deposited_energy_keV:.1f} keV")

    return result


def example_angular_scan(config):
    """Example of a coarse angular scan."""
    print("\n=== Example 3: Angular scan ===\n")

    driver = ScanDriver(config)
    theta_values, phi_values = driver.grid_angles()
    results = driver.run_scan(theta_values, phi_values, config.energy_GeV)

    grid = response_map(results, theta_values, phi_values)
    print(f"Response map [keV], theta rows {theta_values}, phi columns {phi_values}:")
    with np.printoptions(precision=1, suppress=True):
        print(grid)

    return grid


if __name__ == '__main__':
    print("LArTPC Angular Response Scan - Basic Usage Examples")
    print("=" * 60)

    setup_logger(level=20)  # INFO level

    config = example_configuration()
    example_single_direction(config)
    example_angular_scan(config)

    print("\n" + "=" * 60)
    print("Examples completed successfully!")
