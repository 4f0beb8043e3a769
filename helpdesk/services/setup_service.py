from typing import Any, Dict, List, Optional, Union

from ..schemas.common import to_wire_payload
from ..schemas.setup import EnvironmentSetup, EnvironmentSetupCreate, SetupItem, SetupItemCreate
from .api_client import ApiClient


def get_environment_setups(client: ApiClient) -> List[EnvironmentSetup]:
    return [EnvironmentSetup.model_validate(s) for s in client.get("/setup-requests")]


def get_environment_setup(client: ApiClient, setup_id: str) -> EnvironmentSetup:
    return EnvironmentSetup.model_validate(client.get(f"/setup-requests/{setup_id}"))


def create_environment_setup(client: ApiClient, data: Union[EnvironmentSetupCreate, Dict[str, Any]]) -> EnvironmentSetup:
    return EnvironmentSetup.model_validate(client.post("/setup-requests", to_wire_payload(data)))


def update_environment_setup(client: ApiClient, setup_id: str, updates: Dict[str, Any]) -> EnvironmentSetup:
    return EnvironmentSetup.model_validate(client.put(f"/setup-requests/{setup_id}", to_wire_payload(updates)))


def delete_environment_setup(client: ApiClient, setup_id: str) -> None:
    client.delete(f"/setup-requests/{setup_id}")


def create_setup_item(client: ApiClient, setup_id: str, data: Union[SetupItemCreate, Dict[str, Any]]) -> SetupItem:
    return SetupItem.model_validate(client.post(f"/setup-requests/{setup_id}/items", to_wire_payload(data)))


def update_setup_item(client: ApiClient, setup_id: str, item_id: str, updates: Dict[str, Any]) -> SetupItem:
    return SetupItem.model_validate(client.put(f"/setup-requests/{setup_id}/items/{item_id}", to_wire_payload(updates)))


def delete_setup_item(client: ApiClient, setup_id: str, item_id: str) -> None:
    client.delete(f"/setup-requests/{setup_id}/items/{item_id}")


def complete_environment_setup(client: ApiClient, setup_id: str) -> EnvironmentSetup:
    return EnvironmentSetup.model_validate(client.post(f"/setup-requests/{setup_id}/complete", {}))


def verify_environment_setup(client: ApiClient, setup_id: str, notes: Optional[str] = None) -> EnvironmentSetup:
    return EnvironmentSetup.model_validate(client.post(f"/setup-requests/{setup_id}/verify", {"notes": notes}))
