from datetime import date, timedelta

import pytest
from dateutil.relativedelta import relativedelta

from isda_bootstrap.conventions import BusinessDayConvention, HolidayCalendar, StubType
from isda_bootstrap.exceptions import InvalidArgumentError, InvalidScheduleError
from isda_bootstrap.schedule import generate_schedule, generate_unadjusted_dates

QUARTERLY = relativedelta(months=3)


def test_front_short_stub_is_first_period():
    dates = generate_unadjusted_dates(date(2013, 3, 20), date(2014, 6, 1), QUARTERLY, StubType.FRONT_SHORT)
    assert dates == [
        date(2013, 3, 20),
        date(2013, 6, 1),
        date(2013, 9, 1),
        date(2013, 12, 1),
        date(2014, 3, 1),
        date(2014, 6, 1),
    ]


def test_front_long_stub_merges_first_two_periods():
    dates = generate_unadjusted_dates(date(2013, 3, 20), date(2014, 6, 1), QUARTERLY, StubType.FRONT_LONG)
    assert dates == [
        date(2013, 3, 20),
        date(2013, 9, 1),
        date(2013, 12, 1),
        date(2014, 3, 1),
        date(2014, 6, 1),
    ]


def test_back_stubs_roll_forward_from_start():
    short = generate_unadjusted_dates(date(2013, 3, 20), date(2014, 6, 1), QUARTERLY, StubType.BACK_SHORT)
    long = generate_unadjusted_dates(date(2013, 3, 20), date(2014, 6, 1), QUARTERLY, StubType.BACK_LONG)
    assert short[-2:] == [date(2014, 3, 20), date(2014, 6, 1)]
    assert long[-2:] == [date(2013, 12, 20), date(2014, 6, 1)]
    assert len(short) == len(long) + 1


@pytest.mark.parametrize(
    "stub", [StubType.FRONT_SHORT, StubType.FRONT_LONG, StubType.BACK_SHORT, StubType.BACK_LONG]
)
def test_exact_roll_has_no_stub(stub):
    dates = generate_unadjusted_dates(date(2013, 3, 20), date(2014, 3, 20), QUARTERLY, stub)
    assert dates == [
        date(2013, 3, 20),
        date(2013, 6, 20),
        date(2013, 9, 20),
        date(2013, 12, 20),
        date(2014, 3, 20),
    ]


@pytest.mark.parametrize(
    "stub, stub_index, shorter",
    [
        (StubType.FRONT_SHORT, 0, True),
        (StubType.FRONT_LONG, 0, False),
        (StubType.BACK_SHORT, -1, True),
        (StubType.BACK_LONG, -1, False),
    ],
)
def test_stub_period_length(stub, stub_index, shorter):
    dates = generate_unadjusted_dates(date(2013, 3, 20), date(2014, 6, 1), QUARTERLY, stub)
    lengths = [(end - start).days for start, end in zip(dates, dates[1:])]
    stub_length = lengths.pop(stub_index)
    if shorter:
        assert stub_length < min(lengths)
    else:
        assert stub_length > max(lengths)


def test_rolls_from_anchor_without_drift():
    dates = generate_unadjusted_dates(date(2013, 1, 15), date(2013, 8, 31), relativedelta(months=1), StubType.FRONT_SHORT)
    # month-end clamping in February must not carry into later months
    assert date(2013, 2, 28) in dates
    assert date(2013, 3, 31) in dates
    assert date(2013, 4, 30) in dates


def test_periods_are_contiguous():
    schedule = generate_schedule(date(2013, 3, 20), date(2018, 6, 20), QUARTERLY, StubType.FRONT_SHORT)
    for current, following in zip(schedule, list(schedule)[1:]):
        assert current.accrual_end == following.accrual_start
        assert current.accrual_start < current.accrual_end
    assert schedule[0].accrual_start == date(2013, 3, 20)


def test_following_adjustment_and_unadjusted_final_end():
    # 2014-09-20 and 2014-12-20 fall on Saturdays
    schedule = generate_schedule(date(2014, 6, 20), date(2014, 12, 20), QUARTERLY, StubType.FRONT_SHORT)
    assert [p.as_triplet() for p in schedule] == [
        (date(2014, 6, 20), date(2014, 9, 22), date(2014, 9, 22)),
        (date(2014, 9, 22), date(2014, 12, 21), date(2014, 12, 22)),
    ]


def test_preceding_adjustment_without_day_begin_protection():
    schedule = generate_schedule(
        date(2014, 6, 20),
        date(2014, 12, 20),
        QUARTERLY,
        StubType.FRONT_SHORT,
        BusinessDayConvention.PRECEDING,
        protect_from_day_start=False,
    )
    assert schedule.payment_dates == [date(2014, 9, 19), date(2014, 12, 19)]
    assert schedule.accrual_end_dates[-1] == date(2014, 12, 20)


def test_first_date_is_never_adjusted():
    start = date(2014, 9, 20)  # Saturday
    schedule = generate_schedule(start, date(2015, 3, 20), QUARTERLY, StubType.FRONT_SHORT)
    assert schedule[0].accrual_start == start


def test_holiday_calendar_is_respected():
    calendar = HolidayCalendar.from_dates([date(2013, 9, 20)])
    schedule = generate_schedule(
        date(2013, 6, 20), date(2013, 12, 20), QUARTERLY, StubType.FRONT_SHORT, calendar=calendar
    )
    assert schedule.payment_dates[0] == date(2013, 9, 23)


def test_degenerate_schedule_has_single_period():
    d = date(2013, 6, 20)
    schedule = generate_schedule(d, d, QUARTERLY, StubType.FRONT_SHORT, protect_from_day_start=True)
    assert len(schedule) == 1
    assert schedule[0].accrual_start == d
    assert schedule[0].payment_date == d
    assert schedule[0].accrual_end == d + timedelta(days=1)


def test_degenerate_schedule_requires_day_begin_protection():
    d = date(2013, 6, 20)
    with pytest.raises(InvalidScheduleError):
        generate_schedule(d, d, QUARTERLY, StubType.FRONT_SHORT, protect_from_day_start=False)


def test_none_stub_is_rejected():
    with pytest.raises(InvalidScheduleError):
        generate_schedule(date(2013, 3, 20), date(2014, 3, 20), QUARTERLY, StubType.NONE)
    with pytest.raises(InvalidArgumentError):
        generate_unadjusted_dates(date(2013, 3, 20), date(2014, 3, 20), QUARTERLY, StubType.NONE)


def test_invalid_inputs():
    with pytest.raises(InvalidScheduleError):
        generate_schedule(date(2014, 3, 20), date(2013, 3, 20), QUARTERLY, StubType.FRONT_SHORT)
    with pytest.raises(InvalidArgumentError):
        generate_schedule(None, date(2013, 3, 20), QUARTERLY, StubType.FRONT_SHORT)
    with pytest.raises(InvalidArgumentError):
        generate_schedule(date(2013, 3, 20), date(2014, 3, 20), QUARTERLY, None)
    with pytest.raises(InvalidArgumentError):
        generate_unadjusted_dates(date(2013, 3, 20), date(2014, 3, 20), relativedelta(months=-3), StubType.BACK_SHORT)


def test_accrual_start_lookup():
    schedule = generate_schedule(date(2014, 6, 20), date(2014, 12, 20), QUARTERLY, StubType.FRONT_SHORT)
    assert schedule.accrual_start_index(date(2014, 9, 22)) == 1
    assert schedule.accrual_start_index(date(2014, 7, 1)) == -2
    assert schedule.period_containing(date(2014, 7, 1)) is schedule[0]
    assert schedule.period_containing(date(2015, 1, 1)) is None
