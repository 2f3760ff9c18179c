"""Viewer set-up commands sent to the engine before scanning."""

from typing import List

from ..utils.logging import get_logger


logger = get_logger()


class VisualizationSetup:
    """Builds and applies the scene commands used for the detector viewer.

    Attributes:
        driver: Graphics system to open (e.g. 'TSGQT', 'OGL')
        viewpoint_theta_deg: Initial viewer polar angle
        viewpoint_phi_deg: Initial viewer azimuthal angle
    """

    def __init__(self, driver: str = 'TSGQT', viewpoint_theta_deg: float = 90.0, viewpoint_phi_deg: float = 0.0):
        self.driver = driver
        self.viewpoint_theta_deg = viewpoint_theta_deg
        self.viewpoint_phi_deg = viewpoint_phi_deg

    @classmethod
    def from_config(cls, config) -> 'VisualizationSetup':
        return cls(
            driver=config.vis_driver,
            viewpoint_theta_deg=config.viewpoint_theta_deg,
            viewpoint_phi_deg=config.viewpoint_phi_deg,
        )

    def commands(self) -> List[str]:
        return [
            f"/vis/open {self.driver}",
            f"/vis/viewer/set/viewpointThetaPhi {self.viewpoint_theta_deg:g} {self.viewpoint_phi_deg:g}",
            "/vis/drawVolume",
            "/vis/scene/add/trajectories smooth",
            "/vis/scene/add/hits",
        ]

    def apply(self, engine) -> int:
        """Send every command to the engine. Rejected commands are only logged.

        Returns:
            Number of commands the engine accepted
        """
        accepted = 0
        for command in self.commands():
            if engine.apply_command(command):
                accepted += 1
            else:
                logger.warning(f"Visualization command failed: {command}")
        logger.debug(f"Visualization set up: {accepted}/{len(self.commands())} commands accepted")
        return accepted
