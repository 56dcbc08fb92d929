# track.py
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from chamber_constants import WIRE_POSITIONS, WIRE_OFFSETS

TrackTimes = Tuple[int, int, int, int]


@dataclass(frozen=True)
class Line:
    """Straight line y = k*x + b in the chamber frame."""
    k: float
    b: float

    def __call__(self, x):
        return self.k * x + self.b

    @property
    def angle(self) -> float:
        return math.atan(self.k)


@dataclass
class TrackDescription:
    """
    Straight track fitted through the four wires of a chamber.

    Attributes:
        line      : fitted line
        points    : (4, 2) array of (x, y) points used for the fit, wire order
        deviation : sum of squared residuals of the fit
        times     : raw TDC times that produced the points
    """
    line: Line
    points: np.ndarray
    deviation: float
    times: TrackTimes = (0, 0, 0, 0)


# Candidates carry the same data; only corrected ones leave the reconstruction.
TrackCandidate = TrackDescription


# ----------------------------------------------------------
# Simulation helpers
# ----------------------------------------------------------

def create_random_track(max_slope: float = 0.05, rng=None) -> Line:
    """
    Draw a straight track crossing the chamber.

    The intercept is chosen so the track passes within the drift cells of
    all four wires (|y - offset| below the cell half width at every wire).
    """
    rng = np.random.default_rng() if rng is None else rng
    k = rng.uniform(-max_slope, max_slope)
    x_mid = 0.5 * (WIRE_POSITIONS[0] + WIRE_POSITIONS[-1])
    y_mid = rng.uniform(-3.0, 3.0)
    return Line(k, y_mid - k * x_mid)


def drift_distances(line: Line) -> np.ndarray:
    """Unsigned distances from each wire to the track, measured along y."""
    xs = np.asarray(WIRE_POSITIONS, float)
    ys = np.asarray(WIRE_OFFSETS, float)
    return np.abs(line(xs) - ys)
