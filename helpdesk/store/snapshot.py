from dataclasses import dataclass, field, fields
from typing import List

from ..schemas.contracts import Assignment, Contract, Project, Squad
from ..schemas.reviews import OutsourceReview
from ..schemas.setup import EnvironmentSetup
from ..schemas.tickets import NotificationMessage, Ticket
from ..schemas.timesheet import LeaveRequest, OvertimeRequest, WorkLogEntry
from ..schemas.users import User


@dataclass
class Snapshot:
    """Every collection the store owns, as loaded at bootstrap."""

    users: List[User] = field(default_factory=list)
    tickets: List[Ticket] = field(default_factory=list)
    notifications: List[NotificationMessage] = field(default_factory=list)
    overtime_requests: List[OvertimeRequest] = field(default_factory=list)
    work_logs: List[WorkLogEntry] = field(default_factory=list)
    leave_requests: List[LeaveRequest] = field(default_factory=list)
    reviews: List[OutsourceReview] = field(default_factory=list)
    environment_setups: List[EnvironmentSetup] = field(default_factory=list)
    contracts: List[Contract] = field(default_factory=list)
    squads: List[Squad] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)


COLLECTIONS = tuple(f.name for f in fields(Snapshot))
