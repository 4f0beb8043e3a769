import datetime as dt
from typing import Literal, Optional

from pydantic import Field, model_validator

from .common import CamelModel, Entity, hours_between, inclusive_days


RequestStatus = Literal["pending", "approved", "rejected"]
LeaveType = Literal["annual", "sick", "other", "paid", "unpaid", "wfh"]


class OvertimeRequest(Entity):
    id: str
    user_id: str
    user_name: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    total_hours: float
    reason: str = ""
    status: RequestStatus = "pending"
    approver_id: Optional[str] = None
    approver_name: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class OvertimeRequestCreate(CamelModel):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    total_hours: Optional[float] = Field(default=None, ge=0)
    reason: str = ""

    @model_validator(mode="after")
    def _fill_total_hours(self):
        if self.total_hours is None:
            self.total_hours = hours_between(self.start_time, self.end_time)
        return self


class WorkLogEntry(Entity):
    id: str
    user_id: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    hours: float
    description: str = ""
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    task_id: Optional[str] = None
    task_name: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class WorkLogCreate(CamelModel):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    description: str = ""
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    task_id: Optional[str] = None
    task_name: Optional[str] = None


class LeaveRequest(Entity):
    id: str
    user_id: str
    user_name: str
    type: LeaveType = "annual"
    start_date: dt.date
    end_date: dt.date
    total_days: float
    reason: Optional[str] = None
    status: RequestStatus = "pending"
    approver_note: Optional[str] = None
    approver_id: Optional[str] = None
    approver_name: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class LeaveRequestCreate(CamelModel):
    type: LeaveType = "annual"
    start_date: dt.date
    end_date: dt.date
    total_days: Optional[float] = Field(default=None, ge=0)
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        if self.total_days is None:
            self.total_days = float(inclusive_days(self.start_date, self.end_date))
        return self


class TimesheetSummary(Entity):
    user_id: str
    # 'week' or 'month'
    period: str
    start_date: dt.date
    end_date: dt.date
    regular_hours: float
    overtime_hours: float
    weekend_overtime_hours: float
    leave_count: float
    completion_rate: float
