# Unit system: micrometers, picoseconds, milli-electronvolts, elementary charge.
C0 = 299.792458  # speed of light in um/ps
HBAR = 0.6582119514  # meV ps
MU0 = 2.0133545e-4  # meV ps^2 / (e^2 um)
EPS0 = 1.0 / (MU0 * C0**2)  # e^2 / (meV um)

PS_TO_FS = 1.0e3
FS_TO_PS = 1.0 / PS_TO_FS
MEV_TO_RAD_PER_PS = 1.0 / HBAR  # angular frequency of a 1 meV transition
