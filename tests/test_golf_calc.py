from datetime import date

import pytest

from golf_handicap.golf_calc import (
    compute_handicap_history,
    compute_handicap_index,
    differential,
    months_before,
    round_half_up,
    rounds_to_use,
)

from .conftest import make_round


TODAY = date(2026, 10, 19)


def rounds_with_diffs(diffs, day=TODAY):
    # rating 72 y slope 113 -> diferencial = golpes - 72
    return [make_round(72 + d, day=day) for d in diffs]


# ------------------------------- differential -------------------------------

def test_differential_formula():
    r = make_round(85, rating=72.5, slope=130)
    assert differential(r) == pytest.approx(12.5 * 113 / 130)
    assert round_half_up(differential(r), 1) == 10.9


def test_differential_is_not_rounded():
    r = make_round(80, rating=72.0, slope=120)
    assert differential(r) == pytest.approx(7.5333333)


def test_differential_zero_slope():
    with pytest.raises(ValueError):
        differential(make_round(85, slope=0))


# -------------------------------- step table --------------------------------

@pytest.mark.parametrize(
    "total, expected",
    [
        (0, 0), (2, 0), (3, 1), (5, 1), (6, 2), (8, 2), (9, 3), (11, 3),
        (12, 4), (14, 4), (15, 5), (17, 5), (18, 6), (19, 7), (20, 8), (40, 8),
    ],
)
def test_rounds_to_use(total, expected):
    assert rounds_to_use(total) == expected


# ------------------------------ handicap index ------------------------------

@pytest.mark.parametrize("n", [0, 1, 2])
def test_index_needs_three_rounds(n):
    assert compute_handicap_index(rounds_with_diffs([10.0] * n)) == 0


def test_index_three_rounds_uses_best():
    assert compute_handicap_index(rounds_with_diffs([15, 10, 20])) == 9.6


def test_index_twenty_rounds_uses_eight():
    # media de 1..8 = 4.5 -> 4.32
    assert compute_handicap_index(rounds_with_diffs(range(20, 0, -1))) == 4.3


def test_index_nineteen_rounds_uses_seven():
    # media de 1..7 = 4 -> 3.84
    assert compute_handicap_index(rounds_with_diffs(range(1, 20))) == 3.8


def test_index_eighteen_rounds_uses_six():
    # media de 1..6 = 3.5 -> 3.36
    assert compute_handicap_index(rounds_with_diffs(range(1, 19))) == 3.4


def test_index_end_to_end():
    rounds = [make_round(s, rating=72.0, slope=120) for s in (90, 88, 85, 92, 80)]
    assert compute_handicap_index(rounds) == 7.2


def test_index_is_deterministic_and_pure():
    rounds = rounds_with_diffs([12, 3, 25, 8, 17, 6, 9])
    before = [r.score for r in rounds]

    first = compute_handicap_index(rounds)
    assert compute_handicap_index(rounds) == first
    assert compute_handicap_index(list(reversed(rounds))) == first
    assert [r.score for r in rounds] == before


def test_index_can_be_negative():
    # jugadores por debajo del rating
    assert compute_handicap_index(rounds_with_diffs([-2, 5, 6])) == -1.9


# --------------------------------- rounding ---------------------------------

def test_round_half_up():
    assert round_half_up(0.25) == 0.3
    assert round_half_up(-0.25) == -0.3
    assert round_half_up(7.232) == 7.2
    # 0.15 en binario es 0.1499999...
    assert round_half_up(0.15) == 0.1
    assert round_half_up(2.375, 2) == 2.38


# ------------------------------- month window -------------------------------

@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2026, 10, 19), date(2026, 4, 19)),
        (date(2026, 1, 15), date(2025, 7, 15)),
        (date(2026, 8, 31), date(2026, 2, 28)),
        (date(2026, 3, 31), date(2025, 9, 30)),
        (date(2028, 8, 31), date(2028, 2, 29)),
    ],
)
def test_months_before(day, expected):
    assert months_before(day, 6) == expected


# ---------------------------------- history ---------------------------------

def test_history_needs_three_rounds():
    assert compute_handicap_history(rounds_with_diffs([5, 6]), today=TODAY) == []


def test_history_prefix_points():
    rounds = [
        make_round(90, day=date(2026, 9, 1)),
        make_round(80, day=date(2026, 7, 1)),
        make_round(85, day=date(2026, 8, 1)),
        make_round(77, day=date(2026, 10, 1)),
    ]
    history = compute_handicap_history(rounds, today=TODAY)

    assert [p.date for p in history] == [date(2026, 9, 1), date(2026, 10, 1)]
    assert [p.rounds for p in history] == [3, 4]
    # 3 vueltas: mejor diferencial 8 -> 7.68 ; 4 vueltas: 5 -> 4.8
    assert [p.handicap for p in history] == [7.7, 4.8]


def test_history_skips_rounds_before_cutoff():
    old = [make_round(80 + i, day=date(2025, 1, 10 + i)) for i in range(3)]
    recent = [
        make_round(82, day=date(2026, 4, 19)),   # justo en el corte
        make_round(79, day=date(2026, 6, 2)),
    ]
    history = compute_handicap_history(old + recent, today=TODAY)

    assert [p.date for p in history] == [date(2026, 4, 19), date(2026, 6, 2)]
    assert [p.rounds for p in history] == [4, 5]


def test_history_all_rounds_too_old():
    old = rounds_with_diffs([10, 11, 12, 13], day=date(2024, 5, 1))
    assert compute_handicap_history(old, today=TODAY) == []


def test_history_is_ordered_and_does_not_mutate_input():
    days = [date(2026, 10, d) for d in (9, 2, 15, 5, 1, 12, 7)]
    rounds = [make_round(80 + i, day=d) for i, d in enumerate(days)]
    before = [r.date for r in rounds]

    history = compute_handicap_history(rounds, today=TODAY)

    assert [r.date for r in rounds] == before
    assert len(history) == 5
    assert all(a.date <= b.date for a, b in zip(history, history[1:]))
    assert all(a.rounds < b.rounds for a, b in zip(history, history[1:]))
    assert history[-1].handicap == compute_handicap_index(rounds)
