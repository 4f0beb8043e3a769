"""
Where the store gets its collections from.

FixtureDataSource serves the static seed data and accepts any non-empty
credentials. RemoteDataSource goes through the HTTP gateway.
"""
from typing import Optional, Protocol

import structlog

from ..errors import ValidationRejected
from ..fixtures.mock_data import build_snapshot, current_user
from ..schemas.users import User
from ..services import (
    assignment_service,
    auth_service,
    contract_service,
    hr_service,
    setup_service,
    ticket_service,
    user_service,
)
from .snapshot import Snapshot


log = structlog.get_logger(__name__)


class DataSource(Protocol):
    def authenticate(self, email: str, password: str) -> User:
        ...

    def load(self, principal: Optional[User]) -> Snapshot:
        ...

    def sign_out(self) -> None:
        ...


def _require_credentials(email: str, password: str) -> None:
    if not (email or "").strip() or not password:
        raise ValidationRejected("Email and password are required")


class FixtureDataSource:
    def authenticate(self, email: str, password: str) -> User:
        _require_credentials(email, password)
        return current_user()

    def load(self, principal: Optional[User]) -> Snapshot:
        return build_snapshot()

    def sign_out(self) -> None:
        return None


class RemoteDataSource:
    """Loads every collection from the JSON API behind an ApiClient."""

    def __init__(self, client):
        self.client = client

    def authenticate(self, email: str, password: str) -> User:
        _require_credentials(email, password)
        return auth_service.login(self.client, email, password)

    def load(self, principal: Optional[User]) -> Snapshot:
        client = self.client
        snapshot = Snapshot(
            users=user_service.get_users(client),
            tickets=ticket_service.get_tickets(client),
            notifications=user_service.get_notifications(client) if principal else [],
            overtime_requests=hr_service.get_overtime_requests(client),
            work_logs=hr_service.get_work_logs(client),
            leave_requests=hr_service.get_leave_requests(client),
            reviews=hr_service.get_reviews(client),
            environment_setups=setup_service.get_environment_setups(client),
            contracts=contract_service.get_contracts(client),
            squads=assignment_service.get_squads(client),
            projects=assignment_service.get_projects(client),
            assignments=assignment_service.get_assignments(client),
        )
        log.info("remote_snapshot_loaded", users=len(snapshot.users), tickets=len(snapshot.tickets))
        return snapshot

    def sign_out(self) -> None:
        auth_service.logout(self.client)
