"""
Overtime, leave and work-log endpoints plus the timesheet summary.
Listing is scoped to the caller unless the caller can approve requests.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..auth.security import get_current_user, get_store
from ..schemas.timesheet import LeaveRequestCreate, OvertimeRequestCreate, WorkLogCreate
from ..schemas.users import User
from ..store.app_store import AppStore
from ..store.transitions import APPROVER_ROLES
from .results import unwrap


router = APIRouter(tags=["timesheets"])


def _visible(rows, user: User, user_id: Optional[str]):
    if user.role not in APPROVER_ROLES:
        user_id = user.id
    if user_id:
        rows = [r for r in rows if r.user_id == user_id]
    return [r.to_wire() for r in rows]


def _check_owner(store: AppStore, collection: str, record_id: str, user: User):
    """Only the owner or an approver may change a request or log; missing ids fall through to 404."""
    record = store.find(collection, record_id)
    if record is not None and record.user_id != user.id and user.role not in APPROVER_ROLES:
        raise HTTPException(status_code=403, detail="Forbidden")


# ====== Overtime Requests ======
@router.get("/ot-requests")
def list_overtime_requests(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return _visible(store.overtime_requests, user, user_id)


@router.post("/ot-requests")
def create_overtime_request(
    payload: OvertimeRequestCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.create_overtime_request(payload), "Overtime request")


@router.put("/ot-requests/{request_id}")
def update_overtime_request(
    request_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    _check_owner(store, "overtime_requests", request_id, user)
    with store.acting_as(user):
        return unwrap(store.update_overtime_request(request_id, updates), "Overtime request")


@router.delete("/ot-requests/{request_id}")
def delete_overtime_request(request_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    _check_owner(store, "overtime_requests", request_id, user)
    with store.acting_as(user):
        unwrap(store.delete_overtime_request(request_id), "Overtime request")
    return {"status": "ok"}


# ====== Leave Requests ======
@router.get("/leave-requests")
def list_leave_requests(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return _visible(store.leave_requests, user, user_id)


@router.post("/leave-requests")
def create_leave_request(
    payload: LeaveRequestCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.create_leave_request(payload), "Leave request")


@router.put("/leave-requests/{request_id}")
def update_leave_request(
    request_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    _check_owner(store, "leave_requests", request_id, user)
    with store.acting_as(user):
        return unwrap(store.update_leave_request(request_id, updates), "Leave request")


@router.delete("/leave-requests/{request_id}")
def delete_leave_request(request_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    _check_owner(store, "leave_requests", request_id, user)
    with store.acting_as(user):
        unwrap(store.delete_leave_request(request_id), "Leave request")
    return {"status": "ok"}


# ====== Work Logs ======
@router.get("/work-logs")
def list_work_logs(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return _visible(store.work_logs, user, user_id)


@router.post("/work-logs")
def create_work_log(payload: WorkLogCreate, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        return unwrap(store.create_work_log(payload), "Work log")


@router.put("/work-logs/{log_id}")
def update_work_log(
    log_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    _check_owner(store, "work_logs", log_id, user)
    with store.acting_as(user):
        return unwrap(store.update_work_log(log_id, updates), "Work log")


@router.delete("/work-logs/{log_id}")
def delete_work_log(log_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    _check_owner(store, "work_logs", log_id, user)
    with store.acting_as(user):
        unwrap(store.delete_work_log(log_id), "Work log")
    return {"status": "ok"}


# ====== Summary ======
@router.get("/timesheets/summary")
def timesheet_summary(
    user_id: str = Query(..., alias="userId"),
    period: str = "week",
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    if user_id != user.id and user.role not in APPROVER_ROLES:
        raise HTTPException(status_code=403, detail="Forbidden")
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="endDate must not be before startDate")
    return store.get_timesheet_summary(user_id, period, start_date, end_date).to_wire()
