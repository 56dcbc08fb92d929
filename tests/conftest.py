import matplotlib
matplotlib.use("Agg")

import pytest

from track import Line
from wire import WIRES, uniform_chamber


@pytest.fixture
def unit_chamber():
    # offset 0, one mm per count
    return uniform_chamber(offset=0, speed=1.0)


@pytest.fixture
def calibrated_chamber():
    return uniform_chamber(offset=20, speed=0.05, plane=1, group=2)


@pytest.fixture
def true_line():
    return Line(0.03, -1.5)


@pytest.fixture
def true_times(true_line, calibrated_chamber):
    """Raw time per wire for `true_line` in `calibrated_chamber`."""
    times = []
    for wire, params in zip(WIRES, calibrated_chamber.parameters):
        d = abs(true_line(wire.position) - wire.offset)
        times.append(wire.detect_time(d, params))
    return times


@pytest.fixture
def hits_csv(tmp_path, true_times):
    """Two chamber events: one clean, one with an empty wire."""
    path = tmp_path / "chamber_hits.csv"
    rows = ["EventID,ChamberID,Wire,time"]
    for wire, t in enumerate(true_times):
        rows.append(f"0,1,{wire},{t}")
    rows.append("0,1,2,400")
    for wire, t in enumerate(true_times[:3]):
        rows.append(f"1,1,{wire},{t}")
    path.write_text("\n".join(rows) + "\n")
    return str(path)
