"""
Overtime, leave, work-log, review and timesheet endpoints.
"""
from datetime import date
from typing import Any, Dict, List, Union

from ..schemas.common import to_wire_payload
from ..schemas.reviews import OutsourceReview, ReviewCreate
from ..schemas.timesheet import (
    LeaveRequest,
    LeaveRequestCreate,
    OvertimeRequest,
    OvertimeRequestCreate,
    TimesheetSummary,
    WorkLogCreate,
    WorkLogEntry,
)
from .api_client import ApiClient


# ====== Overtime Requests ======
def get_overtime_requests(client: ApiClient) -> List[OvertimeRequest]:
    return [OvertimeRequest.model_validate(r) for r in client.get("/ot-requests")]


def create_overtime_request(client: ApiClient, data: Union[OvertimeRequestCreate, Dict[str, Any]]) -> OvertimeRequest:
    return OvertimeRequest.model_validate(client.post("/ot-requests", to_wire_payload(data)))


def update_overtime_request(client: ApiClient, request_id: str, updates: Dict[str, Any]) -> OvertimeRequest:
    return OvertimeRequest.model_validate(client.put(f"/ot-requests/{request_id}", to_wire_payload(updates)))


def delete_overtime_request(client: ApiClient, request_id: str) -> None:
    client.delete(f"/ot-requests/{request_id}")


# ====== Leave Requests ======
def get_leave_requests(client: ApiClient) -> List[LeaveRequest]:
    return [LeaveRequest.model_validate(r) for r in client.get("/leave-requests")]


def create_leave_request(client: ApiClient, data: Union[LeaveRequestCreate, Dict[str, Any]]) -> LeaveRequest:
    return LeaveRequest.model_validate(client.post("/leave-requests", to_wire_payload(data)))


def update_leave_request(client: ApiClient, request_id: str, updates: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest.model_validate(client.put(f"/leave-requests/{request_id}", to_wire_payload(updates)))


def delete_leave_request(client: ApiClient, request_id: str) -> None:
    client.delete(f"/leave-requests/{request_id}")


# ====== Work Logs ======
def get_work_logs(client: ApiClient) -> List[WorkLogEntry]:
    return [WorkLogEntry.model_validate(r) for r in client.get("/work-logs")]


def create_work_log(client: ApiClient, data: Union[WorkLogCreate, Dict[str, Any]]) -> WorkLogEntry:
    return WorkLogEntry.model_validate(client.post("/work-logs", to_wire_payload(data)))


def update_work_log(client: ApiClient, log_id: str, updates: Dict[str, Any]) -> WorkLogEntry:
    return WorkLogEntry.model_validate(client.put(f"/work-logs/{log_id}", to_wire_payload(updates)))


def delete_work_log(client: ApiClient, log_id: str) -> None:
    client.delete(f"/work-logs/{log_id}")


def get_timesheet_summary(client: ApiClient, user_id: str, period: str, start_date: date, end_date: date) -> TimesheetSummary:
    params = {
        "userId": user_id,
        "period": period,
        "startDate": start_date.isoformat(),
        "endDate": end_date.isoformat(),
    }
    return TimesheetSummary.model_validate(client.get("/timesheets/summary", params=params))


# ====== Reviews ======
def get_reviews(client: ApiClient) -> List[OutsourceReview]:
    return [OutsourceReview.model_validate(r) for r in client.get("/reviews")]


def get_review(client: ApiClient, review_id: str) -> OutsourceReview:
    return OutsourceReview.model_validate(client.get(f"/reviews/{review_id}"))


def create_review(client: ApiClient, data: Union[ReviewCreate, Dict[str, Any]]) -> OutsourceReview:
    return OutsourceReview.model_validate(client.post("/reviews", to_wire_payload(data)))


def update_review(client: ApiClient, review_id: str, updates: Dict[str, Any]) -> OutsourceReview:
    return OutsourceReview.model_validate(client.put(f"/reviews/{review_id}", to_wire_payload(updates)))


def delete_review(client: ApiClient, review_id: str) -> None:
    client.delete(f"/reviews/{review_id}")
