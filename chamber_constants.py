# chamber_constants.py

# Wire geometry (longitudinal position, nominal transverse offset), mm
N_WIRES = 4
WIRE_POSITIONS = (41.0, 51.0, 61.0, 71.0)
WIRE_OFFSETS = (0.75, -0.75, 0.75, -0.75)

# Reference points (x, y, z) locating a chamber in the setup, mm
N_CHAMBER_POINTS = 3

# Maximum drift radius used by the systematic correction, mm
NEAR_SIDE_MAX_RADIUS = 6.2  # point on the same side as the wire offset
FAR_SIDE_MAX_RADIUS = 3.6   # point on the opposite side

# Least-squares denominator below this is treated as degenerate
DEGENERACY_EPS = 1e-60

# Calibration defaults (TDC counts, mm/count)
DEFAULT_TIME_OFFSET = 0
DEFAULT_DRIFT_SPEED = 0.0
