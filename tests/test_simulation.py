import numpy as np
import pytest

from chamber_filter import reconstruct
from track import Line, create_random_track, drift_distances
from wire import WIRES, Wire, WireCalibration, uniform_chamber


def test_detect_time_inverts_distance_conversion():
    wire = Wire(41.0, 0.75)
    assert wire.detect_time(1.0, WireCalibration(20, 0.05)) == 40
    assert wire.detect_time(-1.0, WireCalibration(20, 0.05)) == 40
    assert wire.detect_time(1.0, WireCalibration(20, 0.0)) is None


def test_drift_distances_of_known_line():
    d = drift_distances(Line(0.0, 0.25))
    np.testing.assert_allclose(d, [0.5, 1.0, 0.5, 1.0])


def test_random_tracks_stay_in_chamber():
    rng = np.random.default_rng(7)
    for _ in range(50):
        line = create_random_track(rng=rng)
        assert abs(line.k) <= 0.05
        assert np.all(drift_distances(line) < 6.2)


def test_random_tracks_are_reconstructed():
    rng = np.random.default_rng(11)
    chamber = uniform_chamber(offset=100, speed=0.001)

    for _ in range(10):
        line = create_random_track(rng=rng)
        times = [
            [wire.detect_time(d, params)]
            for wire, d, params in zip(WIRES, drift_distances(line), chamber.parameters)
        ]

        track = reconstruct(times, chamber)

        assert track.line.k == pytest.approx(line.k, abs=1e-2)
        np.testing.assert_allclose(track.points[:, 1], line(track.points[:, 0]), atol=0.05)
