"""Delivery date resolution tests on plain rule objects."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from bakery.services.delivery_dates import (
    ClosureRule,
    OneOffRule,
    ProductRule,
    ScheduleRule,
    cutoff_instant,
    default_schedule,
    representative_product_id,
    resolve_delivery_dates,
)

BOISE = ZoneInfo("America/Boise")

# Week of 2026-06-01 (Monday). Tuesday is the 2nd, Thursday the 4th.
TUESDAY = date(2026, 6, 2)
THURSDAY = date(2026, 6, 4)
NEXT_THURSDAY = date(2026, 6, 11)

THURSDAY_SCHEDULE = ScheduleRule(
    id=1,
    name="Thursday delivery",
    day_of_week=4,
    cutoff_day=2,
    cutoff_time=time(23, 59),
    lead_time_days=2,
    time_window="9:00 AM - 1:00 PM",
)


def _at(day: date, hour: int, minute: int, second: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=BOISE)


def _dates(options) -> list[date]:
    return [option.date for option in options]


def _resolve(schedules=(THURSDAY_SCHEDULE,), one_offs=(), closures=(), now=None, horizon_weeks=4, product_rule=None):
    return resolve_delivery_dates(
        list(schedules),
        list(one_offs),
        list(closures),
        now or _at(TUESDAY, 12, 0),
        BOISE,
        horizon_weeks,
        product_rule=product_rule,
    )


def test_cutoff_instant_uses_most_recent_cutoff_day() -> None:
    assert cutoff_instant(THURSDAY, 2, time(23, 59), BOISE) == _at(TUESDAY, 23, 59)
    # Cutoff on the delivery weekday itself falls on the same date.
    assert cutoff_instant(THURSDAY, 4, time(8, 0), BOISE) == _at(THURSDAY, 8, 0)
    # Saturday cutoff for a Thursday delivery is the previous Saturday.
    assert cutoff_instant(THURSDAY, 6, time(17, 0), BOISE) == _at(date(2026, 5, 30), 17, 0)


def test_cutoff_exactly_at_deadline_is_excluded() -> None:
    options = _resolve(now=_at(TUESDAY, 23, 59))
    assert THURSDAY not in _dates(options)
    assert _dates(options)[0] == NEXT_THURSDAY


def test_cutoff_one_second_before_is_included() -> None:
    options = _resolve(now=_at(TUESDAY, 23, 58, 59))
    assert _dates(options)[0] == THURSDAY
    assert options[0].cutoff == _at(TUESDAY, 23, 59)


def test_cutoff_one_second_after_is_excluded() -> None:
    options = _resolve(now=_at(TUESDAY, 23, 59, 1))
    assert THURSDAY not in _dates(options)


def test_tuesday_night_offers_this_thursday() -> None:
    options = _resolve(now=_at(TUESDAY, 23, 58))
    assert _dates(options) == [THURSDAY, NEXT_THURSDAY, date(2026, 6, 18), date(2026, 6, 25)]
    assert options[0].time_window == "9:00 AM - 1:00 PM"
    assert options[0].source == "schedule"
    assert options[0].schedule_id == 1


def test_wednesday_just_after_midnight_moves_to_next_thursday() -> None:
    options = _resolve(now=_at(date(2026, 6, 3), 0, 1))
    assert _dates(options)[0] == NEXT_THURSDAY
    assert THURSDAY not in _dates(options)


def test_closure_on_only_valid_thursday_skips_to_next_cycle() -> None:
    closures = [ClosureRule(THURSDAY, affects_delivery=True, affects_pickup=False)]
    options = _resolve(now=_at(TUESDAY, 23, 58), closures=closures)
    assert _dates(options)[0] == NEXT_THURSDAY
    assert all(option.date != THURSDAY for option in options)


def test_pickup_only_closure_leaves_delivery_alone() -> None:
    closures = [ClosureRule(THURSDAY, affects_delivery=False, affects_pickup=True)]
    options = _resolve(now=_at(TUESDAY, 10, 0), closures=closures)
    assert _dates(options)[0] == THURSDAY


def test_lead_time_is_checked_independently_of_cutoff() -> None:
    schedule = ScheduleRule(
        id=1,
        name="Thursday",
        day_of_week=4,
        cutoff_day=3,
        cutoff_time=time(20, 0),
        lead_time_days=2,
    )
    # Before Wednesday's cutoff, but Thursday is only one day away.
    options = _resolve(schedules=[schedule], now=_at(date(2026, 6, 3), 9, 0))
    assert THURSDAY not in _dates(options)
    assert _dates(options)[0] == NEXT_THURSDAY


def test_closure_beats_one_off_on_same_date() -> None:
    special = date(2026, 6, 6)
    one_off = OneOffRule(id=1, date=special, type="delivery", reason="Holiday market")
    closures = [ClosureRule(special)]
    options = _resolve(one_offs=[one_off], closures=closures, now=_at(date(2026, 6, 1), 9, 0))
    assert special not in _dates(options)


def test_one_off_without_overrides_uses_default_schedule() -> None:
    special = date(2026, 6, 13)  # Saturday
    one_off = OneOffRule(id=7, date=special, type="delivery", default_schedule_id=1)
    options = _resolve(one_offs=[one_off], now=_at(TUESDAY, 12, 0))

    option = next(option for option in options if option.date == special)
    assert option.source == "one_off"
    assert option.one_off_id == 7
    assert option.time_window == THURSDAY_SCHEDULE.time_window
    # Tuesday 23:59 cutoff inherited from the schedule: June 9 for June 13.
    assert option.cutoff == _at(date(2026, 6, 9), 23, 59)


def test_one_off_inherits_cutoff_that_has_already_passed() -> None:
    special = date(2026, 6, 6)
    one_off = OneOffRule(id=7, date=special, type="delivery", default_schedule_id=1)
    # Inherited cutoff is Tuesday June 2 23:59; it is now Wednesday.
    options = _resolve(one_offs=[one_off], now=_at(date(2026, 6, 3), 9, 0))
    assert special not in _dates(options)


def test_one_off_with_all_overrides_ignores_default_schedule() -> None:
    special = date(2026, 6, 6)
    one_off = OneOffRule(
        id=3,
        date=special,
        type="delivery",
        time_window_start=time(14, 0),
        time_window_end=time(16, 0),
        cutoff_day=5,
        cutoff_time=time(12, 0),
        lead_time_days=0,
        default_schedule_id=1,
    )
    options = _resolve(one_offs=[one_off], now=_at(date(2026, 6, 3), 9, 0))

    option = next(option for option in options if option.date == special)
    assert option.time_window == "14:00 - 16:00"
    assert option.cutoff == _at(date(2026, 6, 5), 12, 0)


def test_one_off_falls_back_to_first_schedule_by_weekday() -> None:
    saturday = ScheduleRule(id=1, name="Saturday", day_of_week=6, cutoff_day=4, cutoff_time=time(12, 0), time_window="Sat")
    monday = ScheduleRule(id=2, name="Monday", day_of_week=1, cutoff_day=6, cutoff_time=time(12, 0), time_window="Mon")
    assert default_schedule([saturday, monday]) == monday

    special = date(2026, 6, 17)
    one_off = OneOffRule(id=1, date=special, type="delivery")
    options = _resolve(schedules=[saturday, monday], one_offs=[one_off], now=_at(TUESDAY, 9, 0))
    option = next(option for option in options if option.date == special)
    assert option.time_window == "Mon"
    assert option.schedule_id == 2


def test_one_off_without_any_cutoff_closes_at_start_of_day() -> None:
    special = date(2026, 6, 3)
    one_off = OneOffRule(id=1, date=special, type="delivery", lead_time_days=0)
    options = _resolve(schedules=[], one_offs=[one_off], now=_at(TUESDAY, 23, 0))
    assert _dates(options) == [special]
    assert options[0].cutoff == _at(special, 0, 0)

    assert _resolve(schedules=[], one_offs=[one_off], now=_at(special, 0, 0)) == []


def test_schedule_wins_over_one_off_on_same_date() -> None:
    one_off = OneOffRule(id=9, date=NEXT_THURSDAY, type="delivery", time_window_start=time(8, 0), time_window_end=time(9, 0))
    options = _resolve(one_offs=[one_off])
    matches = [option for option in options if option.date == NEXT_THURSDAY]
    assert len(matches) == 1
    assert matches[0].source == "schedule"


def test_lower_schedule_id_wins_duplicate_dates_and_output_is_sorted() -> None:
    first = ScheduleRule(id=1, name="Morning", day_of_week=4, cutoff_day=2, cutoff_time=time(23, 59), time_window="AM")
    second = ScheduleRule(id=2, name="Evening", day_of_week=4, cutoff_day=2, cutoff_time=time(23, 59), time_window="PM")
    saturday = ScheduleRule(id=3, name="Saturday", day_of_week=6, cutoff_day=4, cutoff_time=time(12, 0))
    options = _resolve(schedules=[second, saturday, first])

    resolved = _dates(options)
    assert resolved == sorted(resolved)
    assert len(resolved) == len(set(resolved))
    assert next(option for option in options if option.date == THURSDAY).schedule_id == 1


def test_one_offs_of_other_type_inactive_or_outside_horizon_are_ignored() -> None:
    one_offs = [
        OneOffRule(id=1, date=date(2026, 6, 6), type="pickup", lead_time_days=0),
        OneOffRule(id=2, date=date(2026, 6, 7), type="delivery", lead_time_days=0, is_active=False),
        OneOffRule(id=3, date=date(2026, 5, 30), type="delivery", lead_time_days=0),
        OneOffRule(id=4, date=TUESDAY + timedelta(weeks=4), type="delivery", lead_time_days=0),
    ]
    options = _resolve(schedules=[], one_offs=one_offs)
    assert options == []


def test_horizon_limits_weekly_dates() -> None:
    options = _resolve(now=_at(TUESDAY, 12, 0), horizon_weeks=1)
    assert _dates(options) == [THURSDAY]


def test_now_is_converted_to_business_timezone() -> None:
    # 05:30 UTC on Wednesday is still Tuesday 23:30 in Boise (UTC-6 in June).
    utc_now = datetime(2026, 6, 3, 5, 30, tzinfo=timezone.utc)
    options = _resolve(now=utc_now)
    assert _dates(options)[0] == THURSDAY


def test_cutoff_follows_wall_clock_across_dst_change() -> None:
    # DST starts on 2026-03-08; a Tuesday 23:59 cutoff stays 23:59 local time.
    before = cutoff_instant(date(2026, 3, 5), 2, time(23, 59), BOISE)
    after = cutoff_instant(date(2026, 3, 12), 2, time(23, 59), BOISE)
    assert before.utcoffset() == timedelta(hours=-7)
    assert after.utcoffset() == timedelta(hours=-6)
    assert (before.hour, before.minute) == (after.hour, after.minute) == (23, 59)

    # DST ends on 2026-11-01: 01:00-02:00 happens twice. A 01:30 cutoff is the first (MDT) one.
    monday = ScheduleRule(id=3, name="Monday", day_of_week=1, cutoff_day=0, cutoff_time=time(1, 30), lead_time_days=1)
    cutoff = cutoff_instant(date(2026, 11, 2), 0, time(1, 30), BOISE)
    assert cutoff.astimezone(timezone.utc) == datetime(2026, 11, 1, 7, 30, tzinfo=timezone.utc)

    first_pass = datetime(2026, 11, 1, 7, 15, tzinfo=timezone.utc)
    second_pass = datetime(2026, 11, 1, 8, 15, tzinfo=timezone.utc)
    assert _dates(_resolve(schedules=[monday], now=first_pass, horizon_weeks=1)) == [date(2026, 11, 2)]
    assert _dates(_resolve(schedules=[monday], now=second_pass, horizon_weeks=1)) == []


def test_product_rule_blocks_delivery() -> None:
    assert _resolve(product_rule=ProductRule(allow_delivery=False)) == []


def test_product_rule_filters_allowed_days_and_raises_lead_time() -> None:
    saturday = ScheduleRule(id=2, name="Saturday", day_of_week=6, cutoff_day=4, cutoff_time=time(12, 0))
    only_saturday = ProductRule(allowed_delivery_days=(6,))
    options = _resolve(schedules=[THURSDAY_SCHEDULE, saturday], product_rule=only_saturday)
    assert {option.date.weekday() for option in options} == {5}

    long_lead = ProductRule(minimum_lead_time_days=7)
    options = _resolve(now=_at(TUESDAY, 12, 0), product_rule=long_lead)
    assert _dates(options)[0] == NEXT_THURSDAY


def test_representative_product_is_first_cart_line() -> None:
    assert representative_product_id([{"product_id": 5}, {"product_id": 2}]) == 5
    assert representative_product_id([]) is None
