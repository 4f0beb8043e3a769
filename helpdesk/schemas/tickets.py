from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from .common import CamelModel, Entity
from .users import User


TicketStatus = Literal["pending", "in_progress", "resolved", "rejected", "approved"]
TicketCategory = Literal["tech_setup", "dev_issues", "mentoring", "hr_matters"]
TicketPriority = Literal["low", "medium", "high", "urgent"]


class Comment(Entity):
    id: str
    ticket_id: str
    user_id: str
    # author snapshot taken when the comment was written
    user_name: str
    user_avatar: Optional[str] = None
    content: str
    created_at: datetime


class Attachment(Entity):
    id: str
    ticket_id: str
    file_name: str
    file_size: int
    file_type: str
    url: Optional[str] = None
    file_id: Optional[str] = None
    uploaded_at: datetime
    uploaded_by: str


class Ticket(Entity):
    id: str
    title: str
    description: str = ""
    status: TicketStatus = "pending"
    priority: TicketPriority = "medium"
    category: TicketCategory
    requester: User
    assigned_to: Optional[User] = None
    approvers: List[User] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TicketCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = ""
    priority: TicketPriority = "medium"
    category: TicketCategory
    assigned_to: Optional[User] = None
    approvers: List[User] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class CommentCreate(CamelModel):
    content: str = Field(min_length=1)


class AttachmentCreate(CamelModel):
    file_name: str
    file_size: int = Field(ge=0)
    file_type: str
    url: Optional[str] = None
    file_id: Optional[str] = None


class NotificationMessage(Entity):
    id: str
    user_id: str
    title: Optional[str] = None
    message: str
    type: Literal["ticket", "request", "announcement"] = "ticket"
    link: Optional[str] = None
    is_read: bool = False
    created_at: datetime
    ticket_id: Optional[str] = None
