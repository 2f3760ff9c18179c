"""Command line entry point.

The program takes no flags. Passing any argument runs the scan in batch
mode; running it without arguments opens an interactive session once the
scan has finished. A YAML configuration can be supplied through the
``LARTPC_SCAN_CONFIG`` environment variable.
"""

import os
import sys
from typing import List, Optional

from .core.scan_driver import ScanDriver
from .engine import EngineFailure
from .utils.config import ScanConfig
from .utils.logging import setup_logger
from .utils.validation import ConfigurationError


CONFIG_ENV_VAR = 'LARTPC_SCAN_CONFIG'


def load_config() -> ScanConfig:
    config_path = os.environ.get(CONFIG_ENV_VAR)
    if config_path:
        if not os.path.isfile(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        return ScanConfig.from_yaml(config_path)
    return ScanConfig.get_default_config()


def main(argv: Optional[List[str]] = None) -> int:
    """Run the angular scan.

    Args:
        argv: Command line arguments without the program name

    Returns:
        Process exit code
    """
    if argv is None:
        argv = sys.argv[1:]
    interactive = len(argv) == 0
    logger = setup_logger()

    try:
        config = load_config()
        driver = ScanDriver(config, interactive=interactive)
        driver.run()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except EngineFailure as e:
        logger.error(f"Transport engine failure: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Simulation interrupted by user")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
