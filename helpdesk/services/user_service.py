from typing import Any, Dict, List, Union

from ..schemas.common import to_wire_payload
from ..schemas.tickets import NotificationMessage
from ..schemas.users import User, UserCreate
from .api_client import ApiClient


def get_users(client: ApiClient) -> List[User]:
    return [User.model_validate(u) for u in client.get("/users")]


def create_user(client: ApiClient, data: Union[UserCreate, Dict[str, Any]]) -> User:
    return User.model_validate(client.post("/users", to_wire_payload(data)))


def update_user(client: ApiClient, user_id: str, updates: Dict[str, Any]) -> User:
    return User.model_validate(client.put(f"/users/{user_id}", to_wire_payload(updates)))


def delete_user(client: ApiClient, user_id: str) -> None:
    client.delete(f"/users/{user_id}")


def get_notifications(client: ApiClient) -> List[NotificationMessage]:
    return [NotificationMessage.model_validate(n) for n in client.get("/notifications")]


def mark_notification_as_read(client: ApiClient, notification_id: str) -> None:
    client.post(f"/notifications/{notification_id}/read", {})


def mark_all_notifications_as_read(client: ApiClient) -> None:
    client.post("/notifications/mark-all-read", {})
