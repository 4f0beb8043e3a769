from datetime import date, datetime, time, timezone

import pytest

from helpdesk.errors import InvalidTransition
from helpdesk.schemas.common import hours_between, inclusive_days
from helpdesk.schemas.timesheet import LeaveRequest, OvertimeRequest, WorkLogEntry
from helpdesk.store.timesheet import SummaryCache, compute_summary
from helpdesk.store.transitions import REQUEST, SETUP_ITEM, TICKET, check_transition


STAMP = datetime(2025, 4, 1, tzinfo=timezone.utc)


def work_log(day, hours, user_id="u1"):
    return WorkLogEntry(
        id=f"w-{day}-{hours}", user_id=user_id, date=day, start_time=time(9), end_time=time(17),
        hours=hours, created_at=STAMP, updated_at=STAMP,
    )


def overtime(day, hours, status="approved", user_id="u1"):
    return OvertimeRequest(
        id=f"o-{day}", user_id=user_id, user_name="U", date=day, start_time=time(18), end_time=time(20),
        total_hours=hours, status=status, created_at=STAMP, updated_at=STAMP,
    )


def leave(start, end, total_days=None, status="approved", user_id="u1"):
    return LeaveRequest(
        id=f"l-{start}", user_id=user_id, user_name="U", start_date=start, end_date=end,
        total_days=total_days if total_days is not None else inclusive_days(start, end),
        status=status, created_at=STAMP, updated_at=STAMP,
    )


def summarize(start, end, logs=(), ots=(), leaves=(), user_id="u1"):
    return compute_summary(user_id, "week", start, end, logs, ots, leaves)


def test_empty_range_is_zero():
    summary = summarize(date(2025, 4, 7), date(2025, 4, 13))
    assert summary.regular_hours == 0
    assert summary.overtime_hours == 0
    assert summary.leave_count == 0
    assert summary.completion_rate == 0


def test_hours_are_summed_for_user_only():
    logs = [
        work_log(date(2025, 4, 7), 8),
        work_log(date(2025, 4, 8), 7.5),
        work_log(date(2025, 4, 8), 1),
        work_log(date(2025, 4, 8), 8, user_id="u2"),
        work_log(date(2025, 4, 14), 8),
    ]
    summary = summarize(date(2025, 4, 7), date(2025, 4, 13), logs=logs)
    assert summary.regular_hours == 16.5
    # two distinct logged days out of seven
    assert summary.completion_rate == round(2 / 7 * 100, 2)


def test_only_approved_overtime_counts():
    ots = [
        overtime(date(2025, 4, 9), 2),
        overtime(date(2025, 4, 12), 3),
        overtime(date(2025, 4, 13), 4, status="pending"),
        overtime(date(2025, 4, 10), 5, status="rejected"),
    ]
    summary = summarize(date(2025, 4, 7), date(2025, 4, 13), ots=ots)
    assert summary.overtime_hours == 5
    # 2025-04-12 is a Saturday
    assert summary.weekend_overtime_hours == 3


def test_leave_inside_range_uses_stored_days():
    leaves = [leave(date(2025, 5, 5), date(2025, 5, 9), total_days=4.5)]
    summary = summarize(date(2025, 5, 1), date(2025, 5, 31), leaves=leaves)
    assert summary.leave_count == 4.5


def test_leave_straddling_range_counts_overlap():
    leaves = [leave(date(2025, 4, 28), date(2025, 5, 2))]
    summary = summarize(date(2025, 5, 1), date(2025, 5, 31), leaves=leaves)
    assert summary.leave_count == 2


def test_pending_leave_ignored():
    leaves = [leave(date(2025, 5, 5), date(2025, 5, 6), status="pending")]
    assert summarize(date(2025, 5, 1), date(2025, 5, 31), leaves=leaves).leave_count == 0


def test_completion_rate_capped():
    day = date(2025, 4, 7)
    logs = [work_log(day, 8)]
    leaves = [leave(day, day)]
    summary = summarize(day, day, logs=logs, leaves=leaves)
    assert summary.completion_rate == 100.0


def test_inverted_range_has_zero_rate():
    summary = summarize(date(2025, 4, 13), date(2025, 4, 7), logs=[work_log(date(2025, 4, 10), 8)])
    assert summary.completion_rate == 0.0
    assert summary.regular_hours == 0


@pytest.mark.parametrize("logged_days,leave_days", [(0, 0), (3, 0), (7, 0), (4, 3), (7, 7)])
def test_completion_rate_bounds(logged_days, leave_days):
    start = date(2025, 4, 7)
    days = [date(2025, 4, 7 + i) for i in range(7)]
    logs = [work_log(d, 8) for d in days[:logged_days]]
    leaves = [leave(d, d) for d in days[:leave_days]]
    rate = summarize(start, date(2025, 4, 13), logs=logs, leaves=leaves).completion_rate
    assert 0 <= rate <= 100


def test_cache_invalidation_by_overlap():
    cache = SummaryCache()
    week = summarize(date(2025, 4, 7), date(2025, 4, 13))
    month = summarize(date(2025, 5, 1), date(2025, 5, 31))
    cache.put(("u1", "week", week.start_date, week.end_date), week)
    cache.put(("u1", "month", month.start_date, month.end_date), month)
    cache.put(("u2", "week", week.start_date, week.end_date), week)

    assert cache.invalidate("u1", date(2025, 4, 13), date(2025, 4, 13)) == 1
    assert cache.get(("u1", "week", week.start_date, week.end_date)) is None
    assert cache.get(("u1", "month", month.start_date, month.end_date)) == month
    assert len(cache) == 2


def test_hours_between():
    assert hours_between(time(9), time(17, 30)) == 8.5
    assert hours_between(time(22), time(6)) == 8
    assert hours_between(time(9), time(9)) == 24


@pytest.mark.parametrize("table,current,requested,allowed", [
    (TICKET, "pending", "in_progress", True),
    (TICKET, "in_progress", "resolved", True),
    (TICKET, "resolved", "pending", True),
    (TICKET, "approved", "pending", False),
    (TICKET, "pending", "resolved", False),
    (REQUEST, "pending", "rejected", True),
    (REQUEST, "rejected", "approved", False),
    (REQUEST, "approved", "approved", True),
    (SETUP_ITEM, "blocked", "done", True),
    (SETUP_ITEM, "done", "in_progress", False),
])
def test_transition_tables(table, current, requested, allowed):
    error = check_transition("Thing", table, current, requested)
    assert (error is None) is allowed
    if not allowed:
        assert isinstance(error, InvalidTransition)
        assert error.current == current and error.requested == requested
