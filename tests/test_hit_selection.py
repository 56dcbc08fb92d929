import pytest

from chamber_filter import (
    DistanceCandidate, NoEligibleHits, gen_combinations, get_depth, is_eligible, reconstruct,
)
from wire import uniform_chamber


def make_distances(counts):
    return [
        [DistanceCandidate(10 + i, 1.0 + i) for i in range(n)]
        for n in counts
    ]


@pytest.mark.parametrize("counts, eligible, n_combinations", [
    ((0, 1, 1, 1), False, 0),
    ((1, 1, 1, 1), True, 1),
    ((2, 2, 2, 2), False, 16),
    ((1, 2, 1, 1), True, 2),
    ((1, 3, 2, 3), True, 18),
])
def test_eligibility_and_combination_count(counts, eligible, n_combinations):
    distances = make_distances(counts)
    assert is_eligible(distances) is eligible
    assert get_depth(distances) == min(counts)
    assert len(list(gen_combinations(distances))) == n_combinations


def test_combinations_cover_full_product_last_wire_fastest():
    combos = list(gen_combinations(make_distances((1, 2, 1, 2))))
    assert combos == [(0, 0, 0, 0), (0, 0, 0, 1), (0, 1, 0, 0), (0, 1, 0, 1)]


def test_all_wires_empty_is_rejected(unit_chamber):
    with pytest.raises(NoEligibleHits):
        reconstruct([[], [], [], []], unit_chamber)


def test_one_empty_wire_is_rejected(unit_chamber):
    with pytest.raises(NoEligibleHits):
        reconstruct([[10], [], [10], [10]], unit_chamber)


def test_no_anchor_wire_is_rejected(unit_chamber):
    # every wire has two valid hits: there is no unambiguous wire
    with pytest.raises(NoEligibleHits):
        reconstruct([[10, 12], [10, 12], [10, 12], [10, 12]], unit_chamber)


def test_wire_emptied_by_time_filter_is_rejected():
    chamber = uniform_chamber(offset=50, speed=0.1)
    with pytest.raises(NoEligibleHits):
        reconstruct([[60], [70], [50, 20], [80]], chamber)
