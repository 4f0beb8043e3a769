"""
Timesheet summary computation and its cache.

Summaries are keyed by (user_id, period, start_date, end_date). Unlike a
plain memo, the cache drops every entry of a user whose range overlaps a
work log, overtime or leave record that was written.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from ..schemas.common import inclusive_days
from ..schemas.timesheet import LeaveRequest, OvertimeRequest, TimesheetSummary, WorkLogEntry


SummaryKey = Tuple[str, str, date, date]


def _within(day: date, start: date, end: date) -> bool:
    return start <= day <= end


def _leave_days(leave: LeaveRequest, start: date, end: date) -> float:
    """Approved leave days falling inside [start, end].

    A leave fully inside the range counts its stored total_days; a leave
    straddling a boundary counts only the overlapping calendar days.
    """
    overlap_start = max(leave.start_date, start)
    overlap_end = min(leave.end_date, end)
    if overlap_start > overlap_end:
        return 0.0
    if leave.start_date >= start and leave.end_date <= end:
        return float(leave.total_days)
    return float(inclusive_days(overlap_start, overlap_end))


def compute_summary(
    user_id: str,
    period: str,
    start_date: date,
    end_date: date,
    work_logs: Iterable[WorkLogEntry],
    overtime_requests: Iterable[OvertimeRequest],
    leave_requests: Iterable[LeaveRequest],
) -> TimesheetSummary:
    logs = [w for w in work_logs if w.user_id == user_id and _within(w.date, start_date, end_date)]
    regular_hours = sum(w.hours for w in logs)
    logged_days = {w.date for w in logs}

    overtime = [
        o for o in overtime_requests
        if o.user_id == user_id and o.status == "approved" and _within(o.date, start_date, end_date)
    ]
    overtime_hours = sum(o.total_hours for o in overtime)
    # Saturday=5, Sunday=6
    weekend_hours = sum(o.total_hours for o in overtime if o.date.weekday() >= 5)

    leave_days = sum(
        _leave_days(lv, start_date, end_date)
        for lv in leave_requests
        if lv.user_id == user_id and lv.status == "approved"
    )

    days_in_period = inclusive_days(start_date, end_date)
    if days_in_period == 0:
        completion_rate = 0.0
    else:
        completion_rate = min(100.0, round((len(logged_days) + leave_days) / days_in_period * 100, 2))

    return TimesheetSummary(
        user_id=user_id,
        period=period,
        start_date=start_date,
        end_date=end_date,
        regular_hours=round(regular_hours, 2),
        overtime_hours=round(overtime_hours, 2),
        weekend_overtime_hours=round(weekend_hours, 2),
        leave_count=leave_days,
        completion_rate=completion_rate,
    )


class SummaryCache:
    def __init__(self):
        self._entries: Dict[SummaryKey, TimesheetSummary] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: SummaryKey) -> Optional[TimesheetSummary]:
        summary = self._entries.get(key)
        if summary is None:
            self.misses += 1
        else:
            self.hits += 1
        return summary

    def put(self, key: SummaryKey, summary: TimesheetSummary) -> None:
        self._entries[key] = summary

    def invalidate(self, user_id: str, start: date, end: date) -> int:
        stale: List[SummaryKey] = [
            key for key in self._entries
            if key[0] == user_id and key[2] <= end and start <= key[3]
        ]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def values(self) -> Tuple[TimesheetSummary, ...]:
        return tuple(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
