from types import MappingProxyType

import pytest

from decomp_fcf.fcf.evaluate import (
    CutStatistics,
    active_cuts,
    average_water_value,
    cut_statistics,
    evaluate,
    only_active,
    water_value,
    water_values,
)
from decomp_fcf.fcf.types import BendersCut, FCFData


def _cut(cut_id, rhs, coefficients, deactivation=0):
    return BendersCut(
        id=cut_id,
        rhs=rhs,
        coefficients=MappingProxyType(dict(coefficients)),
        deactivation_iteration=deactivation,
    )


def _fcf(*cuts, reservoir_ids=(1, 2)):
    return FCFData(cuts=tuple(cuts), reservoir_ids=tuple(reservoir_ids), n_cuts=len(cuts))


@pytest.fixture
def two_cuts():
    return _fcf(
        _cut(1, 100.0, {1: 2.0, 2: 3.0}),
        _cut(2, 50.0, {1: 5.0, 2: 1.0}),
    )


def test_evaluate_picks_maximum(two_cuts):
    # cut 1: 100 + 20 + 60 = 180 ; cut 2: 50 + 50 + 20 = 120
    assert evaluate(two_cuts, {1: 10.0, 2: 20.0}) == (pytest.approx(180.0), 1)
    # cut 1: 100 + 60 + 15 = 175 ; cut 2: 50 + 150 + 5 = 205
    assert evaluate(two_cuts, {1: 30.0, 2: 5.0}) == (pytest.approx(205.0), 2)


def test_evaluate_missing_state_counts_as_zero():
    fcf = _fcf(_cut(1, 100.0, {1: 2.0, 2: 3.0}))
    assert evaluate(fcf, {1: 10.0}) == (pytest.approx(120.0), 1)


def test_evaluate_ignores_unknown_state_entries():
    fcf = _fcf(_cut(1, 100.0, {1: 2.0}))
    assert evaluate(fcf, {1: 1.0, 999: 1e9}) == (pytest.approx(102.0), 1)


def test_evaluate_empty_model():
    assert evaluate(FCFData(), {1: 10.0}) == (0.0, None)


def test_evaluate_negative_envelope():
    # both cuts negative: the max must not be clamped at zero
    fcf = _fcf(_cut(1, -100.0, {}), _cut(2, -50.0, {}))
    assert evaluate(fcf, {}) == (-50.0, 2)


def test_nan_cut_never_wins():
    fcf = _fcf(_cut(1, float("nan"), {}), _cut(2, 5.0, {}))
    assert evaluate(fcf, {}) == (5.0, 2)
    assert evaluate(_fcf(_cut(1, float("nan"), {})), {}) == (0.0, None)


def test_evaluate_all_zero_cut():
    fcf = _fcf(_cut(1, 0.0, {}), reservoir_ids=())
    assert evaluate(fcf, {1: 100.0}) == (0.0, 1)


@pytest.mark.parametrize("state", [{}, {1: 10.0, 2: 20.0}, {1: -7.5, 2: 1e6}])
def test_ties_go_to_earliest_cut(state):
    fcf = _fcf(
        _cut(1, 10.0, {1: -1.0}),
        _cut(2, 42.0, {1: 3.0, 2: 1.0}),
        _cut(3, 42.0, {1: 3.0, 2: 1.0}),
        _cut(4, 42.0, {1: 3.0, 2: 1.0}),
    )
    value, active = evaluate(fcf, state)
    assert value > fcf.cuts[0].value_at(state)
    assert active == 2


def test_identical_cuts_lower_id_wins():
    fcf = _fcf(_cut(5, 1.0, {1: 1.0}), _cut(6, 1.0, {1: 1.0}))
    for v in (-3.0, 0.0, 8.0):
        assert evaluate(fcf, {1: v})[1] == 5


def test_many_cuts():
    fcf = _fcf(*[_cut(k, k * 100.0, {1: float(k), 2: -k * 0.5}) for k in range(1, 101)])
    # k*100 + 10k - 10k
    assert evaluate(fcf, {1: 10.0, 2: 20.0}) == (pytest.approx(10000.0), 100)


def test_water_value_follows_active_cut(two_cuts):
    assert water_value(two_cuts, {1: 10.0, 2: 20.0}, 1) == 2.0
    assert water_value(two_cuts, {1: 10.0, 2: 20.0}, 2) == 3.0
    assert water_value(two_cuts, {1: 30.0, 2: 5.0}, 1) == 5.0
    assert water_value(two_cuts, {1: 30.0, 2: 5.0}, 2) == 1.0


def test_water_value_switches_with_storage():
    fcf = _fcf(_cut(1, 1000.0, {1: -10.0}), _cut(2, 500.0, {1: -2.0}), reservoir_ids=(1,))
    assert water_value(fcf, {1: 0.0}, 1) == -10.0
    assert water_value(fcf, {1: 80.0}, 1) == -2.0


def test_water_value_unknown_reservoir_is_zero(two_cuts):
    assert water_value(two_cuts, {1: 10.0}, 999) == 0.0


def test_water_value_empty_model():
    assert water_value(FCFData(), {1: 10.0}, 1) == 0.0


def test_water_values_cover_every_reservoir():
    fcf = _fcf(
        _cut(1, 100.0, {1: 2.0}),
        _cut(2, 50.0, {1: 5.0, 2: 1.0}),
        reservoir_ids=(1, 2, 3),
    )
    assert water_values(fcf, {1: 10.0, 2: 20.0}) == {1: 2.0, 2: 0.0, 3: 0.0}
    assert water_values(fcf, {1: 30.0, 2: 5.0}) == {1: 5.0, 2: 1.0, 3: 0.0}


def test_water_values_empty_model():
    assert water_values(FCFData(reservoir_ids=(4, 5)), {}) == {4: 0.0, 5: 0.0}
    assert water_values(FCFData(), {}) == {}


def test_active_filter_keeps_ids():
    fcf = _fcf(
        _cut(1, 900.0, {1: -1.0}, deactivation=4),
        _cut(2, 100.0, {1: -1.0}),
        _cut(3, 50.0, {1: 1.0}),
    )
    assert [c.id for c in active_cuts(fcf)] == [2, 3]
    active = only_active(fcf)
    assert active.n_cuts == 2
    assert [c.id for c in active.cuts] == [2, 3]
    assert fcf.n_cuts == 3
    # deactivated cut 1 dominates the full model but not the filtered one
    assert evaluate(fcf, {1: 0.0}) == (900.0, 1)
    assert evaluate(active, {1: 0.0}) == (100.0, 2)
    assert water_value(active, {1: 0.0}, 1) == -1.0


def test_average_water_value():
    fcf = _fcf(_cut(1, 0.0, {1: -10.0}), _cut(2, 0.0, {1: -20.0, 2: 4.0}))
    assert average_water_value(fcf, 1) == pytest.approx(-15.0)
    assert average_water_value(fcf, 2) == pytest.approx(2.0)
    assert average_water_value(fcf, 77) == 0.0
    assert average_water_value(FCFData(), 1) == 0.0


def test_cut_statistics():
    fcf = _fcf(
        _cut(1, 100.0, {1: 1.0}, deactivation=2),
        _cut(2, 300.0, {1: 1.0}),
    )
    stats = cut_statistics(fcf)
    assert stats.total_cuts == 2
    assert stats.active_cuts == 1
    assert stats.inactive_cuts == 1
    assert stats.avg_rhs == pytest.approx(200.0)
    assert stats.min_rhs == 100.0
    assert stats.max_rhs == 300.0
    assert stats.num_coefficients == 2
    assert cut_statistics(FCFData()) == CutStatistics()
