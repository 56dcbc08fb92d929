# wire.py
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from chamber_constants import (
    N_WIRES, N_CHAMBER_POINTS, WIRE_POSITIONS, WIRE_OFFSETS,
    DEFAULT_TIME_OFFSET, DEFAULT_DRIFT_SPEED,
)

Point3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Wire:
    """
    One sense wire of the drift chamber.

    Attributes:
        position (float): longitudinal coordinate of the wire plane
        offset (float): nominal transverse offset of the wire
    """
    position: float
    offset: float

    def detect_time(self, distance: float, calibration: "WireCalibration") -> Optional[int]:
        """
        Convert a drift distance back into a raw TDC time for this wire.

        Used by the simulation to produce raw events. Returns None when the
        calibration has no drift speed.
        """
        if calibration.speed <= 0:
            return None
        return calibration.offset + int(round(abs(distance) / calibration.speed))


WIRES: Tuple[Wire, ...] = tuple(
    Wire(position, offset) for position, offset in zip(WIRE_POSITIONS, WIRE_OFFSETS)
)


@dataclass
class WireCalibration:
    """
    Per-wire calibration: time-zero offset (TDC counts) and drift speed.
    """
    offset: int = DEFAULT_TIME_OFFSET
    speed: float = DEFAULT_DRIFT_SPEED

    def __post_init__(self):
        if isinstance(self.offset, bool) or int(self.offset) != self.offset or self.offset < 0:
            raise ValueError(f"time offset must be a non-negative integer, got {self.offset!r}")
        self.offset = int(self.offset)
        self.speed = float(self.speed)
        if self.speed < 0:
            raise ValueError(f"drift speed must be non-negative, got {self.speed!r}")


@dataclass
class ChamberDescription:
    """
    Calibration of one drift chamber together with its position in the setup.

    Attributes:
        parameters : one WireCalibration per wire, in wire order
        plane      : detector plane the chamber belongs to
        group      : chamber group inside the plane
        points     : three reference points (x, y, z) placing the chamber
                     in the setup frame
    """
    parameters: List[WireCalibration] = field(
        default_factory=lambda: [WireCalibration() for _ in range(N_WIRES)]
    )
    plane: int = 0
    group: int = 0
    points: Tuple[Point3, ...] = ((0.0, 0.0, 0.0),) * N_CHAMBER_POINTS

    def __post_init__(self):
        if len(self.parameters) != N_WIRES:
            raise ValueError(
                f"chamber needs {N_WIRES} wire calibrations, got {len(self.parameters)}"
            )
        self.parameters = list(self.parameters)

        points = tuple(tuple(float(c) for c in p) for p in self.points)
        if len(points) != N_CHAMBER_POINTS or any(len(p) != 3 for p in points):
            raise ValueError(
                f"chamber needs {N_CHAMBER_POINTS} (x, y, z) points, got {self.points!r}"
            )
        self.points = points


def uniform_chamber(offset: int = DEFAULT_TIME_OFFSET, speed: float = DEFAULT_DRIFT_SPEED,
                    plane: int = 0, group: int = 0) -> ChamberDescription:
    """Chamber with the same calibration on every wire."""
    return ChamberDescription(
        [WireCalibration(offset, speed) for _ in range(N_WIRES)], plane, group
    )
