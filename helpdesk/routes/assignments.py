from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ..auth.security import get_current_user, get_store, require_roles
from ..schemas.contracts import AssignmentCreate, ProjectCreate, SquadCreate
from ..schemas.users import User
from ..store.app_store import AppStore
from .results import unwrap


router = APIRouter(tags=["assignments"])

PLANNERS = ("admin", "supervisor")


# ----- Assignments -----
@router.get("/assignments")
def list_assignments(
    staff_id: Optional[str] = Query(None, alias="staffId"),
    squad_id: Optional[str] = Query(None, alias="squadId"),
    project_id: Optional[str] = Query(None, alias="projectId"),
    store: AppStore = Depends(get_store),
    _=Depends(get_current_user),
):
    rows = store.assignments
    if staff_id:
        rows = [a for a in rows if a.staff_id == staff_id]
    if squad_id:
        rows = [a for a in rows if a.squad_id == squad_id]
    if project_id:
        rows = [a for a in rows if a.project_id == project_id]
    return [a.to_wire() for a in rows]


@router.post("/assignments")
def create_assignment(
    payload: AssignmentCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*PLANNERS)),
):
    with store.acting_as(user):
        return unwrap(store.create_assignment(payload), "Assignment")


@router.put("/assignments/{assignment_id}")
def update_assignment(
    assignment_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*PLANNERS)),
):
    with store.acting_as(user):
        return unwrap(store.update_assignment(assignment_id, updates), "Assignment")


@router.delete("/assignments/{assignment_id}")
def delete_assignment(
    assignment_id: str,
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*PLANNERS)),
):
    with store.acting_as(user):
        unwrap(store.delete_assignment(assignment_id), "Assignment")
    return {"status": "ok"}


# ----- Squads -----
@router.get("/squads")
def list_squads(store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    return [s.to_wire() for s in store.squads]


@router.post("/squads")
def create_squad(payload: SquadCreate, store: AppStore = Depends(get_store), user: User = Depends(require_roles(*PLANNERS))):
    with store.acting_as(user):
        return unwrap(store.create_squad(payload), "Squad")


@router.put("/squads/{squad_id}")
def update_squad(
    squad_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*PLANNERS)),
):
    with store.acting_as(user):
        return unwrap(store.update_squad(squad_id, updates), "Squad")


@router.delete("/squads/{squad_id}")
def delete_squad(squad_id: str, store: AppStore = Depends(get_store), user: User = Depends(require_roles(*PLANNERS))):
    with store.acting_as(user):
        unwrap(store.delete_squad(squad_id), "Squad")
    return {"status": "ok"}


# ----- Projects -----
@router.get("/projects")
def list_projects(store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    return [p.to_wire() for p in store.projects]


@router.post("/projects")
def create_project(
    payload: ProjectCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*PLANNERS)),
):
    with store.acting_as(user):
        return unwrap(store.create_project(payload), "Project")


@router.put("/projects/{project_id}")
def update_project(
    project_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*PLANNERS)),
):
    with store.acting_as(user):
        return unwrap(store.update_project(project_id, updates), "Project")


@router.delete("/projects/{project_id}")
def delete_project(project_id: str, store: AppStore = Depends(get_store), user: User = Depends(require_roles(*PLANNERS))):
    with store.acting_as(user):
        unwrap(store.delete_project(project_id), "Project")
    return {"status": "ok"}
