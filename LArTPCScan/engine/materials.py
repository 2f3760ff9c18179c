"""Material and particle tables of the reference engine.

Mean energy loss values are minimum-ionisation dE/dx from the PDG
atomic and nuclear properties tables.
"""

from dataclasses import dataclass
from typing import Dict

from ..utils.validation import ConfigurationError


@dataclass(frozen=True)
class MaterialProperties:
    """Bulk properties used for continuous energy loss.

    Attributes:
        name: NIST material identifier
        density: Density in g/cm³
        mean_dedx: Mean minimum-ionisation energy loss in MeV cm²/g
    """
    name: str
    density: float
    mean_dedx: float

    @property
    def linear_dedx(self) -> float:
        """Energy loss per unit length in MeV/cm."""
        return self.density * self.mean_dedx


@dataclass(frozen=True)
class ParticleProperties:
    name: str
    pdg_code: int
    mass: float  # MeV
    charge: int


MATERIALS: Dict[str, MaterialProperties] = {
    'G4_Galactic': MaterialProperties('G4_Galactic', 1e-25, 0.0),
    'G4_AIR': MaterialProperties('G4_AIR', 1.20479e-3, 1.815),
    'G4_lAr': MaterialProperties('G4_lAr', 1.396, 1.508),
    'G4_WATER': MaterialProperties('G4_WATER', 1.0, 1.992),
    'G4_Si': MaterialProperties('G4_Si', 2.33, 1.664),
    'G4_Fe': MaterialProperties('G4_Fe', 7.874, 1.451),
    'G4_Pb': MaterialProperties('G4_Pb', 11.35, 1.122),
    'G4_PLASTIC_SC_VINYLTOLUENE': MaterialProperties('G4_PLASTIC_SC_VINYLTOLUENE', 1.032, 1.956),
}


PARTICLES: Dict[str, ParticleProperties] = {
    'mu-': ParticleProperties('mu-', 13, 105.6583755, -1),
    'mu+': ParticleProperties('mu+', -13, 105.6583755, 1),
    'e-': ParticleProperties('e-', 11, 0.51099895, -1),
    'e+': ParticleProperties('e+', -11, 0.51099895, 1),
    'proton': ParticleProperties('proton', 2212, 938.27208816, 1),
    'pi+': ParticleProperties('pi+', 211, 139.57039, 1),
    'pi-': ParticleProperties('pi-', -211, 139.57039, -1),
    'alpha': ParticleProperties('alpha', 1000020040, 3727.3794066, 2),
    'gamma': ParticleProperties('gamma', 22, 0.0, 0),
}


def get_material(name: str) -> MaterialProperties:
    try:
        return MATERIALS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown material: {name}. Available materials: {sorted(MATERIALS)}"
        ) from None


def get_particle(name: str) -> ParticleProperties:
    try:
        return PARTICLES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown particle: {name}. Available particles: {sorted(PARTICLES)}"
        ) from None
