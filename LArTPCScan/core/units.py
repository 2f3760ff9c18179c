"""Internal unit system.

Values follow the Geant4 convention (mm, MeV, rad) so emission parameters and
geometry extents can be handed to either engine backend without conversion.
"""

import math

# Lengths
mm = 1.0
cm = 10.0 * mm
m = 1000.0 * mm

# Energies
MeV = 1.0
keV = 1.0e-3 * MeV
GeV = 1.0e3 * MeV

# Angles
rad = 1.0
deg = math.pi / 180.0 * rad

# Numerical constants
EPSILON = 1e-12  # Direction components below this are treated as zero
