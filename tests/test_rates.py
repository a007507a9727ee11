from datetime import date, timedelta

import pytest

from breakeven.errors import InvalidInputError
from breakeven.services.rates import (
    RateSchedule,
    list_rates,
    rate_for_date,
    set_rate,
    validate_rate_cents,
)

START = date(2025, 3, 1)


def test_schedule_picks_latest_record_not_after_day():
    schedule = RateSchedule(
        1500,
        [(START + timedelta(days=4), 3000), (START, 2000)],  # unsorted on purpose
    )

    assert schedule.rate_for(START - timedelta(days=1)) == 1500
    assert schedule.rate_for(START) == 2000
    assert schedule.rate_for(START + timedelta(days=3)) == 2000
    assert schedule.rate_for(START + timedelta(days=4)) == 3000
    assert schedule.rate_for(START + timedelta(days=400)) == 3000
    assert len(schedule) == 2


def test_new_budget_has_one_rate_at_start(session, make_budget):
    budget = make_budget(start=START, rate=2000)

    rates = list_rates(session, budget.id)
    assert [(r.effective_from, r.base_daily_cents) for r in rates] == [(START, 2000)]
    assert rate_for_date(session, budget, START) == 2000


def test_rate_before_any_record_falls_back_to_base(session, make_budget):
    budget = make_budget(start=START, rate=2000)

    assert rate_for_date(session, budget, START - timedelta(days=3)) == 2000


def test_later_rate_change_keeps_history(session, make_budget):
    budget = make_budget(start=START, rate=2000)

    anchor = set_rate(session, budget, 3000, START + timedelta(days=5))
    session.commit()

    assert anchor == START + timedelta(days=5)
    assert rate_for_date(session, budget, START + timedelta(days=4)) == 2000
    assert rate_for_date(session, budget, START + timedelta(days=5)) == 3000
    assert budget.base_daily_cents == 3000


def test_same_effective_date_overwrites(session, make_budget):
    budget = make_budget(start=START)
    day = START + timedelta(days=5)

    set_rate(session, budget, 3000, day)
    set_rate(session, budget, 3500, day)
    session.commit()

    assert len(list_rates(session, budget.id)) == 2
    assert rate_for_date(session, budget, day) == 3500


def test_rate_change_at_start_rewrites_all_history(session, make_budget):
    budget = make_budget(start=START, rate=2000)
    set_rate(session, budget, 3000, START + timedelta(days=5))
    set_rate(session, budget, 4000, START + timedelta(days=9))

    anchor = set_rate(session, budget, 2500)  # no effective_from -> start_date
    session.commit()

    assert anchor == START
    rates = list_rates(session, budget.id)
    assert [(r.effective_from, r.base_daily_cents) for r in rates] == [(START, 2500)]
    assert rate_for_date(session, budget, START + timedelta(days=30)) == 2500


def test_effective_date_before_start_is_clamped(session, make_budget):
    budget = make_budget(start=START)

    anchor = set_rate(session, budget, 2200, START - timedelta(days=10))
    session.commit()

    assert anchor == START
    assert [r.effective_from for r in list_rates(session, budget.id)] == [START]


@pytest.mark.parametrize("bad", [0, -5, True, "2000", 12.5, None])
def test_rate_must_be_positive_integer(bad):
    with pytest.raises(InvalidInputError):
        validate_rate_cents(bad)


def test_invalid_rate_changes_nothing(session, make_budget):
    budget = make_budget(start=START, rate=2000)

    with pytest.raises(InvalidInputError):
        set_rate(session, budget, 0, START + timedelta(days=2))

    assert budget.base_daily_cents == 2000
    assert len(list_rates(session, budget.id)) == 1
