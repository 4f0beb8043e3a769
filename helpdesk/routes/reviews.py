from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ..auth.security import get_current_user, get_store, require_roles
from ..schemas.reviews import ReviewCreate
from ..schemas.users import User
from ..store.app_store import AppStore
from ..store.transitions import APPROVER_ROLES
from .results import found, unwrap


router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("")
def list_reviews(
    reviewee_id: Optional[str] = Query(None, alias="revieweeId"),
    store: AppStore = Depends(get_store),
    _=Depends(get_current_user),
):
    rows = store.reviews
    if reviewee_id:
        rows = [r for r in rows if r.reviewee_id == reviewee_id]
    return [dict(r.to_wire(), averageScore=r.average_score) for r in rows]


@router.get("/{review_id}")
def get_review(review_id: str, store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    return found(store.find("reviews", review_id), "Review")


@router.post("")
def create_review(
    payload: ReviewCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*APPROVER_ROLES)),
):
    with store.acting_as(user):
        return unwrap(store.create_review(payload), "Review")


@router.put("/{review_id}")
def update_review(
    review_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*APPROVER_ROLES)),
):
    with store.acting_as(user):
        return unwrap(store.update_review(review_id, updates), "Review")


@router.delete("/{review_id}")
def delete_review(
    review_id: str,
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*APPROVER_ROLES)),
):
    with store.acting_as(user):
        unwrap(store.delete_review(review_id), "Review")
    return {"status": "ok"}
