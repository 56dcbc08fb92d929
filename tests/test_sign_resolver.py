import numpy as np
import pytest

from chamber_filter import create_track_candidate, least_squares, sign_variants
from wire import WIRES, Wire


def test_sixteen_variants_in_mask_order():
    variants = list(sign_variants([1.0, 2.0, 3.0, 4.0]))

    assert [mask for mask, _ in variants] == list(range(16))

    _, plus = variants[0]
    np.testing.assert_allclose(plus[:, 0], [41, 51, 61, 71])
    np.testing.assert_allclose(plus[:, 1], [1.75, 1.25, 3.75, 3.25])

    # bits 0 and 2 flip wires 0 and 2
    _, flipped = variants[0b0101]
    np.testing.assert_allclose(flipped[:, 1], [-0.25, 1.25, -2.25, 3.25])


def test_best_variant_recovers_the_track():
    k, b = 0.02, -1.0
    ys = np.array([k * w.position + b for w in WIRES])
    distances = np.abs(ys - np.array([w.offset for w in WIRES]))

    candidate = create_track_candidate(distances)

    np.testing.assert_allclose(candidate.points[:, 1], ys, atol=1e-12)
    assert candidate.line.k == pytest.approx(k, abs=1e-12)
    assert candidate.line.b == pytest.approx(b, abs=1e-9)
    assert candidate.deviation == pytest.approx(0.0, abs=1e-20)


def test_best_variant_is_minimum_over_all_variants():
    distances = [2.0, 0.4, 1.3, 3.1]
    devs = [least_squares(points)[1] for _, points in sign_variants(distances)]

    candidate = create_track_candidate(distances)

    assert candidate.deviation == min(devs)


def test_first_variant_wins_ties():
    flat_wires = [Wire(w.position, 0.0) for w in WIRES]

    # all-plus (mask 0) and all-minus (mask 15) both fit with zero deviation
    candidate = create_track_candidate([10.0] * 4, flat_wires)

    np.testing.assert_array_equal(candidate.points[:, 1], [10.0] * 4)
    assert candidate.deviation == 0.0


def test_no_fittable_variant_gives_none():
    stacked = [Wire(50.0, w.offset) for w in WIRES]
    assert create_track_candidate([1.0, 1.0, 1.0, 1.0], stacked) is None
