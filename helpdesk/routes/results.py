from typing import Any

from fastapi import HTTPException

from ..errors import InvalidTransition, PermissionDenied, SelfDeleteRejected, ValidationRejected
from ..store.results import OperationResult, Rejected


def rejection_status(error: ValidationRejected) -> int:
    if isinstance(error, PermissionDenied):
        return 403
    if isinstance(error, InvalidTransition):
        return 409
    if isinstance(error, SelfDeleteRejected):
        return 400
    return 422


def unwrap(result: OperationResult, label: str) -> Any:
    """Wire form of an applied record; 404 on a silent no-op, 4xx on a rejection."""
    if isinstance(result, Rejected):
        raise HTTPException(status_code=rejection_status(result.error), detail=result.reason)
    if result.record is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return result.record.to_wire()


def found(record: Any, label: str) -> Any:
    if record is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return record.to_wire()
