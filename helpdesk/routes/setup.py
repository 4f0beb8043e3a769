from typing import Optional

from fastapi import APIRouter, Body, Depends
from pydantic import Field

from ..auth.security import get_current_user, get_store
from ..schemas.common import CamelModel
from ..schemas.setup import EnvironmentSetupCreate, SetupItemCreate
from ..schemas.users import User
from ..store.app_store import AppStore
from .results import found, unwrap


router = APIRouter(prefix="/setup-requests", tags=["environment-setup"])


class VerifyRequest(CamelModel):
    notes: Optional[str] = Field(default=None, max_length=2000)


@router.get("")
def list_setups(status: Optional[str] = None, store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    rows = store.environment_setups
    if status:
        rows = [s for s in rows if s.status == status]
    return [dict(s.to_wire(), progress=s.progress) for s in rows]


@router.get("/{setup_id}")
def get_setup(setup_id: str, store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    return found(store.find("environment_setups", setup_id), "Environment setup")


@router.post("")
def create_setup(
    payload: EnvironmentSetupCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.create_environment_setup(payload), "Environment setup")


@router.put("/{setup_id}")
def update_setup(
    setup_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.update_environment_setup(setup_id, updates), "Environment setup")


@router.delete("/{setup_id}")
def delete_setup(setup_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        unwrap(store.delete_environment_setup(setup_id), "Environment setup")
    return {"status": "ok"}


# ----- Checklist items -----
@router.post("/{setup_id}/items")
def add_item(
    setup_id: str,
    payload: SetupItemCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.add_setup_item(setup_id, payload), "Environment setup")


@router.put("/{setup_id}/items/{item_id}")
def update_item(
    setup_id: str,
    item_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.update_setup_item(setup_id, item_id, updates), "Setup item")


@router.delete("/{setup_id}/items/{item_id}")
def delete_item(setup_id: str, item_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        unwrap(store.delete_setup_item(setup_id, item_id), "Setup item")
    return {"status": "ok"}


@router.post("/{setup_id}/complete")
def complete_setup(setup_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    setup = found(store.find("environment_setups", setup_id), "Environment setup")
    with store.acting_as(user):
        result = store.mark_all_setup_items_done(setup_id)
    # an empty checklist has nothing to complete
    if result.ok and result.record is None:
        return setup
    return unwrap(result, "Environment setup")


@router.post("/{setup_id}/verify")
def verify_setup(
    setup_id: str,
    payload: VerifyRequest,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.verify_environment_setup(setup_id, payload.notes), "Environment setup")
