# ---------------------------------------------------------------------
# chamber_filter.py
# Straight-track reconstruction in a four-wire drift chamber
# ---------------------------------------------------------------------

from __future__ import annotations
import csv
import logging
import math
from collections import defaultdict
from itertools import product
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from chamber_constants import (
    N_WIRES, DEGENERACY_EPS,
    NEAR_SIDE_MAX_RADIUS, FAR_SIDE_MAX_RADIUS,
)
from track import Line, TrackCandidate, TrackDescription
from wire import WIRES, ChamberDescription, Wire, WireCalibration

logger = logging.getLogger(__name__)

# =====================================================================
#                         Types & Errors
# =====================================================================

# ChamberTimes: four raw TDC time sequences, one per wire
ChamberTimes = Sequence[Sequence[int]]
Calibration = Union[ChamberDescription, Sequence[WireCalibration]]
EventKey = Tuple[int, int]  # (event_id, chamber_id)


class DistanceCandidate(NamedTuple):
    time: int
    distance: float


class ReconstructionError(RuntimeError):
    """Base class for events that yield no track."""


class NoEligibleHits(ReconstructionError):
    """No wire carries a unique hit, or some wire carries none."""


class NoCandidate(ReconstructionError):
    """Every hit combination was unfittable or had an ambiguous side."""


# =====================================================================
#                         Distance conversion
# =====================================================================

def convert_time(calibration: WireCalibration, raw_time: int) -> Optional[float]:
    """
    Drift distance for one raw time, or None if the time is at or before
    the wire's time-zero offset.
    """
    if raw_time <= calibration.offset:
        return None
    return (raw_time - calibration.offset) * calibration.speed


def get_distances(event_times: ChamberTimes,
                  calibration: Calibration) -> List[List[DistanceCandidate]]:
    """
    Convert every raw time of an event into drift distances, wire by wire.

    Dropped times leave no entry, so each DistanceCandidate keeps the raw
    time it came from.
    """
    parameters = _wire_parameters(calibration)
    if len(event_times) != N_WIRES:
        raise ValueError(f"expected {N_WIRES} wire time lists, got {len(event_times)}")

    distances: List[List[DistanceCandidate]] = []
    for params, times in zip(parameters, event_times):
        wire_distances = []
        for t in times:
            d = convert_time(params, t)
            if d is not None:
                wire_distances.append(DistanceCandidate(t, d))
        distances.append(wire_distances)
    return distances


def _wire_parameters(calibration: Calibration) -> List[WireCalibration]:
    if isinstance(calibration, ChamberDescription):
        return calibration.parameters
    parameters = list(calibration)
    if len(parameters) != N_WIRES:
        raise ValueError(f"expected {N_WIRES} wire calibrations, got {len(parameters)}")
    return parameters


# =====================================================================
#                         Hit selection
# =====================================================================

def get_depth(distances: Sequence[Sequence[DistanceCandidate]]) -> int:
    """Smallest number of candidates on any wire."""
    return min(len(d) for d in distances)


def is_eligible(distances: Sequence[Sequence[DistanceCandidate]]) -> bool:
    # at least one wire must anchor the track with a single hit
    return get_depth(distances) == 1


def gen_combinations(distances: Sequence[Sequence[DistanceCandidate]]) -> Iterator[Tuple[int, ...]]:
    """
    Index tuples over the full cross product of per-wire candidates,
    last wire varying fastest.
    """
    return product(*(range(len(d)) for d in distances))


# =====================================================================
#                         Sign resolution
# =====================================================================

def sign_variants(distances: Sequence[float],
                  wires: Sequence[Wire] = WIRES) -> Iterator[Tuple[int, np.ndarray]]:
    """
    Yield (mask, points) for every left/right assignment of the distances.

    Bit j of mask set means the distance on wire j is taken negative.
    Points are (wire position, wire offset +/- distance).
    """
    xs = np.array([w.position for w in wires], float)
    offsets = np.array([w.offset for w in wires], float)
    d = np.asarray(distances, float)
    n_variants = 2 ** len(d)

    for mask in range(n_variants):
        signs = np.array([-1.0 if mask & (1 << j) else 1.0 for j in range(len(d))])
        yield mask, np.column_stack([xs, offsets + signs * d])


def create_track_candidate(distances: Sequence[float],
                           wires: Sequence[Wire] = WIRES) -> Optional[TrackCandidate]:
    """
    Best-fitting sign assignment for one distance combination.

    All variants are fitted; on equal deviation the first one wins.
    Returns None if no variant is fittable.
    """
    best: Optional[TrackCandidate] = None
    for _, points in sign_variants(distances, wires):
        fit = least_squares(points)
        if fit is None:
            continue
        line, dev = fit
        if best is None or dev < best.deviation:
            best = TrackCandidate(line, points, dev)
    return best


# =====================================================================
#                         Line fit
# =====================================================================

def least_squares(points) -> Optional[Tuple[Line, float]]:
    """
    Ordinary least-squares line through (x, y) points.

    Returns (line, deviation) where deviation is the sum of squared
    residuals, or None if fewer than two points are given or the points
    have no spread in x.
    """
    pts = np.asarray(points, float)
    n = len(pts)
    if n < 2:
        return None

    x, y = pts[:, 0], pts[:, 1]
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    denom = n * sum_xx - sum_x * sum_x
    if not abs(denom) > DEGENERACY_EPS:
        return None

    k = (n * sum_xy - sum_x * sum_y) / denom
    b = (sum_y - k * sum_x) / n
    dev = float(((k * x + b - y) ** 2).sum())
    return Line(float(k), float(b)), dev


# =====================================================================
#                         Systematic correction
# =====================================================================

def clamp_radius(y: float, wire_offset: float) -> Optional[float]:
    """
    Drift radius used for the angle correction of a point.

    The signed y while |y| stays within the limit, the (positive) limit
    beyond it: NEAR_SIDE_MAX_RADIUS when the point lies on the same side
    of the centerline as the wire, FAR_SIDE_MAX_RADIUS otherwise. None if
    the side cannot be told (point or wire on the centerline).
    """
    side = np.sign(y) * np.sign(wire_offset)
    if side == 0:
        return None
    limit = NEAR_SIDE_MAX_RADIUS if side > 0 else FAR_SIDE_MAX_RADIUS
    return limit if abs(y) > limit else y


def get_system_error(r: float, angle: float) -> float:
    return r * (1 / math.cos(angle) - 1)


def system_error(candidate: TrackCandidate,
                 wires: Sequence[Wire] = WIRES) -> Optional[TrackDescription]:
    """
    Apply the incidence-angle correction to every point and refit.

    The slope of the incoming fit is used for all four points. Returns a
    new track, or None if a point has an ambiguous side or the refit is
    unfittable.
    """
    points = candidate.points.copy()
    angle = candidate.line.angle

    for i, wire in enumerate(wires):
        y = points[i, 1]
        r = clamp_radius(y, wire.offset)
        if r is None:
            return None
        points[i, 1] = y + np.sign(y) * get_system_error(r, angle)

    fit = least_squares(points)
    if fit is None:
        return None
    line, dev = fit
    return TrackDescription(line, points, dev, candidate.times)


# =====================================================================
#                         Reconstruction
# =====================================================================

def reconstruct(event_times: ChamberTimes,
                calibration: Calibration,
                wires: Sequence[Wire] = WIRES) -> TrackDescription:
    """
    Reconstruct the track of one chamber event.

    Parameters
    ----------
    event_times : sequence of 4 sequences of int
        Raw TDC times per wire, in wire order.
    calibration : ChamberDescription or sequence of 4 WireCalibration
        Time-zero offset and drift speed per wire.
    wires : sequence of 4 Wire, optional
        Wire geometry, defaults to the chamber wires.

    Returns
    -------
    TrackDescription
        Corrected track with the smallest deviation over all hit
        combinations, carrying the raw times it was built from.

    Raises
    ------
    NoEligibleHits
        Some wire has no valid hit, or every wire has several.
    NoCandidate
        No combination gave a fittable, correctable track.
    """
    distances = get_distances(event_times, calibration)
    if not is_eligible(distances):
        raise NoEligibleHits(
            f"cannot create track: per-wire hit counts {[len(d) for d in distances]}"
        )

    best: Optional[TrackDescription] = None
    n_combinations = 0
    for indices in gen_combinations(distances):
        n_combinations += 1
        chosen = [distances[w][i] for w, i in enumerate(indices)]

        candidate = create_track_candidate([c.distance for c in chosen], wires)
        if candidate is None:
            logger.debug("combination %s: no fittable sign variant", indices)
            continue

        track = system_error(candidate, wires)
        if track is None:
            logger.debug("combination %s: correction rejected", indices)
            continue

        if best is None or track.deviation < best.deviation:
            track.times = tuple(c.time for c in chosen)
            best = track

    if best is None:
        raise NoCandidate(f"cannot create track from {n_combinations} hit combinations")
    return best


# =====================================================================
#                         Event loader
# =====================================================================

class ChamberTrackFilter:
    """
    Loads raw drift-chamber hits (EventID, ChamberID, Wire, time) from CSV.

    Provides:
      - events            : (event_id, chamber_id) -> four raw time lists
      - reconstruct_event : track for one loaded event
    """

    def __init__(self, csv_path: str = "chamber_hits.csv",
                 chamber_config: Optional[Dict[int, ChamberDescription]] = None) -> None:
        self.csv_path = csv_path
        self.chamber_config = chamber_config if chamber_config is not None else {}
        self.events: Dict[EventKey, List[List[int]]] = {}
        self._load_csv(csv_path)

    def _load_csv(self, path: str) -> None:
        buckets = defaultdict(lambda: [[] for _ in range(N_WIRES)])
        with open(path, newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                ev   = int(row["EventID"])
                cham = int(row["ChamberID"])
                wire = int(row["Wire"])
                t    = int(row["time"])
                if not 0 <= wire < N_WIRES:
                    raise ValueError(f"{path}: event {ev}: wire index {wire} out of range")
                buckets[(ev, cham)][wire].append(t)
        self.events = dict(buckets)
        logger.debug("loaded %d chamber events from %s", len(self.events), path)

    def calibration_for(self, chamber_id: int) -> ChamberDescription:
        try:
            return self.chamber_config[chamber_id]
        except KeyError:
            raise KeyError(f"no calibration for chamber {chamber_id}") from None

    def reconstruct_event(self, key: EventKey) -> TrackDescription:
        _, chamber_id = key
        return reconstruct(self.events[key], self.calibration_for(chamber_id))
