from datetime import date, datetime, timezone

import pytest

import breakeven.dates as dates
from breakeven.errors import InvalidInputError


def test_parse_iso_date_ok():
    assert dates.parse_iso_date("2025-01-15") == date(2025, 1, 15)
    assert dates.parse_iso_date(" 2024-02-29 ") == date(2024, 2, 29)


@pytest.mark.parametrize(
    "raw", ["", "2025/01/15", "20250115", "2025-1-5", "2025-13-01", "2025-02-30", "yesterday"]
)
def test_parse_iso_date_rejects(raw):
    with pytest.raises(InvalidInputError):
        dates.parse_iso_date(raw)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        dates.parse_iso_date("nope")


def test_local_date_reads_naive_as_utc():
    instant = datetime(2025, 1, 10, 2, 0)  # what SQLite returns

    assert dates.local_date(instant, "UTC") == date(2025, 1, 10)
    assert dates.local_date(instant, "America/Toronto") == date(2025, 1, 9)
    assert dates.local_date(instant, "Asia/Tokyo") == date(2025, 1, 10)


def test_today_depends_on_timezone(monkeypatch):
    monkeypatch.setattr(
        dates, "now_utc", lambda: datetime(2025, 3, 1, 3, 0, tzinfo=timezone.utc)
    )

    assert dates.today_in_timezone("UTC") == date(2025, 3, 1)
    assert dates.today_in_timezone("America/Toronto") == date(2025, 2, 28)
    assert dates.today_in_timezone("Pacific/Kiritimati") == date(2025, 3, 1)


def test_validate_timezone():
    assert dates.validate_timezone(" Europe/Paris ") == "Europe/Paris"
    for bad in ("", None, "Not/AZone"):
        with pytest.raises(InvalidInputError):
            dates.validate_timezone(bad)


def test_iter_days_is_inclusive():
    days = list(dates.iter_days(date(2025, 2, 27), date(2025, 3, 2)))

    assert days == [date(2025, 2, 27), date(2025, 2, 28), date(2025, 3, 1), date(2025, 3, 2)]
    assert list(dates.iter_days(date(2025, 3, 2), date(2025, 3, 1))) == []


def test_month_and_year_steps_clamp_to_month_end():
    assert dates.add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert dates.add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert dates.add_months(date(2025, 12, 15), 1) == date(2026, 1, 15)
    assert dates.add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
    assert dates.is_first_of_month(date(2025, 3, 1))
    assert not dates.is_first_of_month(date(2025, 3, 2))
