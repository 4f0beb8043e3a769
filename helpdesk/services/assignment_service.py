from typing import Any, Dict, List, Union

from ..schemas.common import to_wire_payload
from ..schemas.contracts import (
    Assignment,
    AssignmentCreate,
    Project,
    ProjectCreate,
    Squad,
    SquadCreate,
)
from .api_client import ApiClient


def get_assignments(client: ApiClient) -> List[Assignment]:
    return [Assignment.model_validate(a) for a in client.get("/assignments")]


def create_assignment(client: ApiClient, data: Union[AssignmentCreate, Dict[str, Any]]) -> Assignment:
    return Assignment.model_validate(client.post("/assignments", to_wire_payload(data)))


def update_assignment(client: ApiClient, assignment_id: str, updates: Dict[str, Any]) -> Assignment:
    return Assignment.model_validate(client.put(f"/assignments/{assignment_id}", to_wire_payload(updates)))


def delete_assignment(client: ApiClient, assignment_id: str) -> None:
    client.delete(f"/assignments/{assignment_id}")


def get_squads(client: ApiClient) -> List[Squad]:
    return [Squad.model_validate(s) for s in client.get("/squads")]


def create_squad(client: ApiClient, data: Union[SquadCreate, Dict[str, Any]]) -> Squad:
    return Squad.model_validate(client.post("/squads", to_wire_payload(data)))


def update_squad(client: ApiClient, squad_id: str, updates: Dict[str, Any]) -> Squad:
    return Squad.model_validate(client.put(f"/squads/{squad_id}", to_wire_payload(updates)))


def delete_squad(client: ApiClient, squad_id: str) -> None:
    client.delete(f"/squads/{squad_id}")


def get_projects(client: ApiClient) -> List[Project]:
    return [Project.model_validate(p) for p in client.get("/projects")]


def create_project(client: ApiClient, data: Union[ProjectCreate, Dict[str, Any]]) -> Project:
    return Project.model_validate(client.post("/projects", to_wire_payload(data)))


def update_project(client: ApiClient, project_id: str, updates: Dict[str, Any]) -> Project:
    return Project.model_validate(client.put(f"/projects/{project_id}", to_wire_payload(updates)))


def delete_project(client: ApiClient, project_id: str) -> None:
    client.delete(f"/projects/{project_id}")
