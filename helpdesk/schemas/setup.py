from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field

from .common import CamelModel, Entity
from .tickets import TicketStatus


DeviceType = Literal["laptop", "pc", "vm", "byod"]
SetupLocation = Literal["onsite", "remote"]
SetupItemStatus = Literal["pending", "in_progress", "done", "blocked"]
SetupItemCategory = Literal["device", "mdm", "os", "software", "account"]


class SetupItem(Entity):
    id: str
    title: str
    description: Optional[str] = None
    category: SetupItemCategory
    status: SetupItemStatus = "pending"
    notes: Optional[str] = None
    ticket_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SetupItemCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: SetupItemCategory
    status: SetupItemStatus = "pending"
    notes: Optional[str] = None
    ticket_id: Optional[str] = None


class EnvironmentSetup(Entity):
    id: str
    employee_id: str
    employee_name: str
    device_type: DeviceType
    setup_location: SetupLocation
    request_date: date
    responsible_id: Optional[str] = None
    responsible_name: Optional[str] = None
    status: TicketStatus = "pending"
    notes: Optional[str] = None
    items: List[SetupItem] = Field(default_factory=list)
    completion_date: Optional[datetime] = None
    verified_by_id: Optional[str] = None
    verified_by_name: Optional[str] = None
    verification_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def progress(self) -> int:
        if not self.items:
            return 0
        done = sum(1 for item in self.items if item.status == "done")
        return round(done / len(self.items) * 100)


class EnvironmentSetupCreate(CamelModel):
    employee_id: str
    employee_name: str
    device_type: DeviceType
    setup_location: SetupLocation
    request_date: Optional[date] = None
    responsible_id: Optional[str] = None
    responsible_name: Optional[str] = None
    notes: Optional[str] = None
    items: List[SetupItemCreate] = Field(default_factory=list)
