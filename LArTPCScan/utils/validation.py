"""Error taxonomy and validation helpers for scan configuration."""

import math
from pathlib import Path
from typing import Sequence, Tuple, TYPE_CHECKING

from .logging import get_logger

if TYPE_CHECKING:
    from .config import ScanConfig


logger = get_logger()


class ValidationError(Exception):
    """Base exception for validation errors."""
    pass


class ConfigurationError(ValidationError):
    """Raised when the scan cannot be set up from its configuration.

    Covers invalid parameters as well as material or particle identifiers
    the transport engine cannot resolve. Always fatal at startup.
    """
    pass


class GeometryError(ConfigurationError):
    """Raised when volume extents are invalid or do not nest."""
    pass


class SequencingError(AssertionError):
    """Raised when event lifecycle calls arrive out of order.

    This is a wiring bug between the engine callbacks and the accumulator,
    so it derives from AssertionError and is never handled at runtime.
    """
    pass


def validate_extents(name: str, extents: Sequence[float]) -> Tuple[float, float, float]:
    """Check that a set of half-extents holds three positive finite lengths.

    Args:
        name: Volume name used in error messages
        extents: Half-extents (x, y, z)

    Returns:
        Half-extents as a tuple of floats

    Raises:
        GeometryError: If the extents are malformed
    """
    try:
        values = tuple(float(v) for v in extents)
    except (TypeError, ValueError) as e:
        raise GeometryError(f"{name} half-extents must be numbers, got {extents!r}") from e
    if len(values) != 3:
        raise GeometryError(f"{name} needs 3 half-extents, got {len(values)}")
    for axis, value in zip('xyz', values):
        if not math.isfinite(value) or value <= 0:
            raise GeometryError(
                f"{name} half-extent along {axis} must be positive, got {value}"
            )
    return values


def validate_config(config: 'ScanConfig') -> None:
    """Run runtime checks that go beyond ScanConfig.__post_init__.

    Args:
        config: Scan configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    try:
        if config.engine == 'geant4':
            try:
                import geant4_pybind  # noqa: F401
            except ImportError:
                raise ConfigurationError(
                    "Geant4 engine requested but geant4_pybind is not installed. "
                    "Install the 'geant4' extra or set engine='reference'."
                )

        if config.log_file:
            log_dir = Path(config.log_file).parent
            if log_dir.exists() and not log_dir.is_dir():
                raise ConfigurationError(f"Log directory is not a directory: {log_dir}")

        logger.debug("Configuration validation passed")

    except Exception as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(f"Configuration validation failed: {str(e)}")
