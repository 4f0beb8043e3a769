from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field

from .common import CamelModel, Entity


ContractType = Literal["main", "nda", "compliance", "other", "outsource", "service", "project", "maintenance"]
ContractStatus = Literal["active", "expired", "pending", "terminated", "draft"]
DocumentType = Literal["pdf", "docx", "image", "other"]
SquadRole = Literal["developer", "designer", "qa", "manager", "consultant", "other", "tester", "analyst", "devops"]


class Document(Entity):
    id: str
    contract_id: str
    name: str
    type: DocumentType = "other"
    url: Optional[str] = None
    file_id: Optional[str] = None
    size: int = 0
    uploaded_at: datetime
    uploaded_by: str
    uploaded_by_name: str


class DocumentCreate(CamelModel):
    name: str = Field(min_length=1)
    type: DocumentType = "other"
    url: Optional[str] = None
    file_id: Optional[str] = None
    size: int = Field(default=0, ge=0)


class Contract(Entity):
    id: str
    contract_number: Optional[str] = None
    contract_type: ContractType
    staff_name: str
    staff_id: str
    company: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    effective_date: Optional[date] = None
    # presentation-layer warning only, never flips status
    expiry_date: Optional[date] = None
    signed_by: Optional[str] = None
    signed_by_id: Optional[str] = None
    status: ContractStatus = "pending"
    notes: Optional[str] = None
    value: Optional[float] = None
    currency: Optional[str] = None
    payment_terms: Optional[str] = None
    documents: List[Document] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ContractCreate(CamelModel):
    contract_number: Optional[str] = None
    contract_type: ContractType
    staff_name: str
    staff_id: str
    company: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None
    signed_by: Optional[str] = None
    signed_by_id: Optional[str] = None
    status: ContractStatus = "pending"
    notes: Optional[str] = None
    value: Optional[float] = None
    currency: Optional[str] = None
    payment_terms: Optional[str] = None


class Squad(Entity):
    id: str
    name: str
    description: Optional[str] = None
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None
    created_at: datetime


class SquadCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None


class Project(Entity):
    id: str
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Literal["active", "completed", "on-hold", "upcoming"] = "upcoming"
    squad_id: Optional[str] = None
    squad_name: Optional[str] = None
    created_at: datetime


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Literal["active", "completed", "on-hold", "upcoming"] = "upcoming"
    squad_id: Optional[str] = None
    squad_name: Optional[str] = None


AssignmentStatus = Literal["active", "upcoming", "completed", "planned"]


class Assignment(Entity):
    id: str
    staff_id: str
    staff_name: str
    role: SquadRole
    squad_id: Optional[str] = None
    squad_name: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    # set by the caller, never derived from the dates
    status: AssignmentStatus
    utilization: Optional[int] = Field(default=None, ge=0, le=100)
    created_at: datetime
    updated_at: datetime


class AssignmentCreate(CamelModel):
    staff_id: str
    staff_name: str
    role: SquadRole
    squad_id: Optional[str] = None
    squad_name: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    status: AssignmentStatus
    utilization: Optional[int] = Field(default=None, ge=0, le=100)
