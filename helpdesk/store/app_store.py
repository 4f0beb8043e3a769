"""
In-process state container for the helpdesk console.

Holds every entity collection plus the current principal and funnels all
mutation through the operations below. Each mutation returns a tagged
result: ``Applied(record)`` when it ran (``record`` is None for a silent
no-op on a missing id or missing principal) or ``Rejected(error)`` when it
would break one of the explicit rules:

- deleting your own account
- an illegal status transition
- an overtime/leave decision by a non-approver
- closing or editing an environment setup against its checklist
- input that fails schema validation

Readers get tuples, never the internal lists.
"""
import threading
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import pytz
import structlog
from pydantic import BaseModel, ValidationError

from ..config import settings
from ..errors import GatewayError, InvalidTransition, PermissionDenied, SelfDeleteRejected, ValidationRejected
from ..schemas.common import Entity, hours_between
from ..schemas.contracts import (
    Assignment,
    AssignmentCreate,
    Contract,
    ContractCreate,
    Document,
    DocumentCreate,
    Project,
    ProjectCreate,
    Squad,
    SquadCreate,
)
from ..schemas.reviews import OutsourceReview, ReviewCreate
from ..schemas.setup import EnvironmentSetup, EnvironmentSetupCreate, SetupItem, SetupItemCreate
from ..schemas.tickets import (
    Attachment,
    AttachmentCreate,
    Comment,
    CommentCreate,
    NotificationMessage,
    Ticket,
    TicketCreate,
)
from ..schemas.timesheet import (
    LeaveRequest,
    LeaveRequestCreate,
    OvertimeRequest,
    OvertimeRequestCreate,
    TimesheetSummary,
    WorkLogCreate,
    WorkLogEntry,
)
from ..schemas.users import User, UserCreate
from .data_sources import DataSource
from .ids import IdFactory
from .notifier import DESTRUCTIVE, NotificationSink, Toast, log_toast
from .results import Applied, OperationResult, Rejected
from .snapshot import Snapshot
from .timesheet import SummaryCache, compute_summary
from .transitions import APPROVER_ROLES, REQUEST, SETUP_ITEM, TICKET, VERIFIER_ROLES, check_transition


log = structlog.get_logger(__name__)

Listener = Callable[["AppStore"], None]
Updates = Union[Dict[str, Any], BaseModel]

# Stamped by the store, never taken from the caller
STORE_OWNED = frozenset({"id", "created_at", "updated_at"})
CLOSED_SETUP_STATES = frozenset({"resolved", "approved"})


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    where = ".".join(str(part) for part in error.get("loc", ()))
    return f"{where}: {error['msg']}" if where else error["msg"]


def _coerce(schema, data):
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    return schema.model_validate(data)


def _changes(model, updates: Optional[Updates], protected: Iterable[str]) -> Dict[str, Any]:
    """Normalize a partial update to attribute names, dropping protected and unknown keys."""
    if isinstance(updates, BaseModel):
        updates = updates.model_dump(exclude_unset=True)
    names: Dict[str, str] = {}
    for name, info in model.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    blocked = set(protected)
    changes = {}
    for key, value in (updates or {}).items():
        name = names.get(key)
        if name is None or name in blocked:
            continue
        changes[name] = value
    return changes


def _merge(current: Entity, changes: Dict[str, Any]) -> Entity:
    data = current.model_dump()
    data.update(changes)
    return type(current).model_validate(data)


def _index(items: List[Entity], record_id: str) -> Optional[int]:
    for i, item in enumerate(items):
        if item.id == record_id:
            return i
    return None


def _settle_setup(
    previous: Optional[EnvironmentSetup], candidate: EnvironmentSetup, now: datetime
) -> Union[EnvironmentSetup, ValidationRejected]:
    """Apply the checklist completion rule to a setup about to be stored.

    A non-empty checklist with every item done is resolved (an approved setup
    stays approved) and gets a completion date once. A setup cannot be
    resolved or approved while any item is unfinished.
    """
    items = [
        item.model_copy(update={"completed_at": now}) if item.status == "done" and item.completed_at is None else item
        for item in candidate.items
    ]
    all_done = bool(items) and all(item.status == "done" for item in items)
    if all_done:
        status = "approved" if candidate.status == "approved" else "resolved"
        completion = candidate.completion_date or (previous.completion_date if previous else None) or now
    elif candidate.status in CLOSED_SETUP_STATES:
        return ValidationRejected("The setup checklist still has unfinished items")
    else:
        status, completion = candidate.status, candidate.completion_date
    return candidate.model_copy(update={"items": items, "status": status, "completion_date": completion})


def _view(name: str):
    def getter(self: "AppStore") -> tuple:
        with self._lock:
            return tuple(getattr(self._data, name))

    getter.__name__ = name
    getter.__doc__ = f"Read-only view of the {name.replace('_', ' ')} collection."
    return property(getter)


class AppStore:
    def __init__(
        self,
        data_source: DataSource,
        notifier: Optional[NotificationSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._source = data_source
        self._notify = notifier or log_toast
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._ids = IdFactory(self._clock)
        self._lock = threading.RLock()
        self._data = Snapshot()
        self._principal: Optional[User] = None
        self._summaries = SummaryCache()
        self._listeners: List[Listener] = []

    users = _view("users")
    tickets = _view("tickets")
    notifications = _view("notifications")
    overtime_requests = _view("overtime_requests")
    work_logs = _view("work_logs")
    leave_requests = _view("leave_requests")
    reviews = _view("reviews")
    environment_setups = _view("environment_setups")
    contracts = _view("contracts")
    squads = _view("squads")
    projects = _view("projects")
    assignments = _view("assignments")

    @property
    def current_user(self) -> Optional[User]:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    @property
    def timesheet_summaries(self) -> tuple:
        with self._lock:
            return self._summaries.values()

    @property
    def summary_cache(self) -> SummaryCache:
        return self._summaries

    def find(self, collection: str, record_id: str) -> Optional[Entity]:
        with self._lock:
            items = getattr(self._data, collection)
            index = _index(items, record_id)
            return None if index is None else items[index]

    # ----- lifecycle -----
    def login(self, email: str, password: str) -> OperationResult:
        with self._lock:
            try:
                principal = self._source.authenticate(email, password)
            except ValidationRejected as exc:
                return self._reject("Login", exc)
            except GatewayError as exc:
                self._toast(Toast("Login failed", exc.message, DESTRUCTIVE))
                raise
            self._load(self._source.load(principal))
            self._principal = principal
            log.info("store_login", user_id=principal.id)
            self._toast(Toast("Signed in", f"Welcome back, {principal.name}"))
            self._emit()
            return Applied(principal)

    def bootstrap(self) -> None:
        """Load every collection without a principal (server side)."""
        with self._lock:
            self._load(self._source.load(None))
            log.info("store_bootstrapped", **{name: len(getattr(self._data, name)) for name in ("users", "tickets")})
            self._emit()

    def logout(self) -> None:
        with self._lock:
            if self._principal is None:
                return
            user_id = self._principal.id
            try:
                self._source.sign_out()
            finally:
                self._principal = None
                log.info("store_logout", user_id=user_id)
                self._emit()

    @contextmanager
    def acting_as(self, user: Optional[User]):
        """Run a block with ``user`` as the principal, holding the write lock."""
        with self._lock:
            previous = self._principal
            self._principal = user
            try:
                yield self
            finally:
                self._principal = previous

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----- plumbing -----
    def _load(self, snapshot: Snapshot) -> None:
        self._data = snapshot
        self._summaries.clear()

    def _now(self) -> datetime:
        return self._clock()

    def _today(self) -> date:
        return self._now().astimezone(pytz.timezone(settings.tz_default)).date()

    def _toast(self, toast: Toast) -> None:
        self._notify(toast)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _applied(self, label: str, verb: str, record: Any) -> Applied:
        self._toast(Toast(f"{label} {verb}"))
        self._emit()
        return Applied(record)

    def _reject(self, label: str, error: ValidationRejected) -> Rejected:
        log.warning("store_rejected", entity=label, reason=error.message, error=type(error).__name__)
        self._toast(Toast(f"{label} not saved", error.message, DESTRUCTIVE))
        return Rejected(error)

    def _touch_timesheets(self, *records: Optional[Entity]) -> None:
        for record in records:
            if isinstance(record, (WorkLogEntry, OvertimeRequest)):
                dropped = self._summaries.invalidate(record.user_id, record.date, record.date)
            elif isinstance(record, LeaveRequest):
                dropped = self._summaries.invalidate(record.user_id, record.start_date, record.end_date)
            else:
                continue
            if dropped:
                log.debug("timesheet_cache_invalidated", user_id=record.user_id, entries=dropped)

    def _create(self, collection: str, label: str, record: Entity) -> Applied:
        getattr(self._data, collection).insert(0, record)
        self._touch_timesheets(record)
        return self._applied(label, "created", record)

    def _update(
        self,
        collection: str,
        label: str,
        record_id: str,
        updates: Optional[Updates],
        protected: Iterable[str] = (),
        guard: Optional[Callable[[Any, Any], Any]] = None,
    ) -> OperationResult:
        with self._lock:
            items = getattr(self._data, collection)
            index = _index(items, record_id)
            if index is None:
                return Applied(None)
            current = items[index]
            model = type(current)
            changes = _changes(model, updates, STORE_OWNED | set(protected))
            if "updated_at" in model.model_fields:
                changes["updated_at"] = self._now()
            try:
                candidate = _merge(current, changes)
            except ValidationError as exc:
                return self._reject(label, ValidationRejected(_describe(exc)))
            if guard is not None:
                outcome = guard(current, candidate)
                if isinstance(outcome, ValidationRejected):
                    return self._reject(label, outcome)
                candidate = outcome
            items[index] = candidate
            self._touch_timesheets(current, candidate)
            return self._applied(label, "updated", candidate)

    def _delete(
        self,
        collection: str,
        label: str,
        record_id: str,
        guard: Optional[Callable[[Any], Optional[ValidationRejected]]] = None,
    ) -> OperationResult:
        with self._lock:
            if guard is not None:
                error = guard(record_id)
                if error is not None:
                    return self._reject(label, error)
            items = getattr(self._data, collection)
            index = _index(items, record_id)
            if index is None:
                return Applied(None)
            removed = items.pop(index)
            self._touch_timesheets(removed)
            return self._applied(label, "deleted", removed)

    def _notify_users(self, user_ids: Iterable[str], title: str, message: str, ticket_id: Optional[str] = None) -> None:
        now = self._now()
        for user_id in user_ids:
            self._data.notifications.insert(0, NotificationMessage(
                id=self._ids.new("notif"),
                user_id=user_id,
                title=title,
                message=message,
                type="ticket" if ticket_id else "request",
                link=f"/tickets/{ticket_id}" if ticket_id else None,
                ticket_id=ticket_id,
                created_at=now,
            ))

    def _decision_guard(self, entity: str):
        """Request status flow plus the approver check; stamps the approver on a decision."""
        def guard(current, candidate):
            error = check_transition(entity, REQUEST, current.status, candidate.status)
            if error is not None:
                return error
            if candidate.status == current.status:
                return candidate
            principal = self._principal
            if principal is None or principal.role not in APPROVER_ROLES:
                return PermissionDenied(f"Only an approver can approve or reject a {entity.lower()}")
            return candidate.model_copy(update={"approver_id": principal.id, "approver_name": principal.name})

        return guard

    # ====== Users ======
    def create_user(self, data: Union[UserCreate, Dict[str, Any]]) -> OperationResult:
        try:
            payload = _coerce(UserCreate, data)
        except ValidationError as exc:
            return self._reject("User", ValidationRejected(_describe(exc)))
        with self._lock:
            email = str(payload.email).lower()
            if any(str(u.email).lower() == email for u in self._data.users):
                return self._reject("User", ValidationRejected(f"A user with email {payload.email} already exists"))
            user = User(id=self._ids.new("user"), created_at=self._now(), **payload.model_dump())
            return self._create("users", "User", user)

    def update_user(self, user_id: str, updates: Updates) -> OperationResult:
        def guard(current, candidate):
            email = str(candidate.email).lower()
            if any(u.id != current.id and str(u.email).lower() == email for u in self._data.users):
                return ValidationRejected(f"A user with email {candidate.email} already exists")
            return candidate

        return self._update("users", "User", user_id, updates, guard=guard)

    def delete_user(self, user_id: str) -> OperationResult:
        def guard(record_id: str) -> Optional[ValidationRejected]:
            if self._principal is not None and self._principal.id == record_id:
                return SelfDeleteRejected()
            return None

        return self._delete("users", "User", user_id, guard)

    # ====== Tickets ======
    def create_ticket(self, data: Union[TicketCreate, Dict[str, Any]]) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = _coerce(TicketCreate, data)
            except ValidationError as exc:
                return self._reject("Ticket", ValidationRejected(_describe(exc)))
            now = self._now()
            ticket = Ticket(
                id=self._ids.new("ticket"),
                status="pending",
                requester=principal,
                created_at=now,
                updated_at=now,
                **payload.model_dump(),
            )
            if ticket.assigned_to is not None and ticket.assigned_to.id != principal.id:
                self._notify_users(
                    [ticket.assigned_to.id], "New ticket assigned",
                    f"You were assigned '{ticket.title}'", ticket.id,
                )
            return self._create("tickets", "Ticket", ticket)

    def update_ticket(self, ticket_id: str, updates: Updates) -> OperationResult:
        def guard(current: Ticket, candidate: Ticket):
            return check_transition("Ticket", TICKET, current.status, candidate.status) or candidate

        return self._update(
            "tickets", "Ticket", ticket_id, updates,
            protected=("requester", "comments", "attachments"),
            guard=guard,
        )

    def delete_ticket(self, ticket_id: str) -> OperationResult:
        return self._delete("tickets", "Ticket", ticket_id)

    def _watchers(self, ticket: Ticket, actor: User) -> List[str]:
        ids = [ticket.requester.id]
        if ticket.assigned_to is not None:
            ids.append(ticket.assigned_to.id)
        return [user_id for user_id in dict.fromkeys(ids) if user_id != actor.id]

    def add_comment(self, ticket_id: str, content: str) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = CommentCreate(content=content)
            except ValidationError as exc:
                return self._reject("Comment", ValidationRejected(_describe(exc)))
            index = _index(self._data.tickets, ticket_id)
            if index is None:
                return Applied(None)
            ticket = self._data.tickets[index]
            now = self._now()
            comment = Comment(
                id=self._ids.new("comment"),
                ticket_id=ticket_id,
                user_id=principal.id,
                user_name=principal.name,
                user_avatar=principal.avatar,
                content=payload.content,
                created_at=now,
            )
            self._data.tickets[index] = ticket.model_copy(
                update={"comments": [*ticket.comments, comment], "updated_at": now}
            )
            self._notify_users(
                self._watchers(ticket, principal), "New comment",
                f"{principal.name} commented on '{ticket.title}'", ticket_id,
            )
            return self._applied("Comment", "added", comment)

    def add_attachment(self, ticket_id: str, meta: Union[AttachmentCreate, Dict[str, Any]]) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = _coerce(AttachmentCreate, meta)
            except ValidationError as exc:
                return self._reject("Attachment", ValidationRejected(_describe(exc)))
            index = _index(self._data.tickets, ticket_id)
            if index is None:
                return Applied(None)
            ticket = self._data.tickets[index]
            now = self._now()
            attachment = Attachment(
                id=self._ids.new("attachment"),
                ticket_id=ticket_id,
                uploaded_at=now,
                uploaded_by=principal.id,
                **payload.model_dump(),
            )
            self._data.tickets[index] = ticket.model_copy(
                update={"attachments": [*ticket.attachments, attachment], "updated_at": now}
            )
            self._notify_users(
                self._watchers(ticket, principal), "New attachment",
                f"{principal.name} attached {attachment.file_name} to '{ticket.title}'", ticket_id,
            )
            return self._applied("Attachment", "added", attachment)

    # ====== Notifications ======
    @property
    def principal_notifications(self) -> tuple:
        with self._lock:
            if self._principal is None:
                return ()
            return tuple(n for n in self._data.notifications if n.user_id == self._principal.id)

    @property
    def unread_notifications_count(self) -> int:
        return sum(1 for n in self.principal_notifications if not n.is_read)

    def mark_notification_as_read(self, notification_id: str) -> OperationResult:
        with self._lock:
            principal = self._principal
            index = _index(self._data.notifications, notification_id)
            if principal is None or index is None:
                return Applied(None)
            notification = self._data.notifications[index]
            if notification.user_id != principal.id:
                return Applied(None)
            if notification.is_read:
                return Applied(notification)
            notification = notification.model_copy(update={"is_read": True})
            self._data.notifications[index] = notification
            self._emit()
            return Applied(notification)

    def mark_all_notifications_as_read(self) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            changed = []
            for i, notification in enumerate(self._data.notifications):
                if notification.user_id == principal.id and not notification.is_read:
                    notification = notification.model_copy(update={"is_read": True})
                    self._data.notifications[i] = notification
                    changed.append(notification)
            if changed:
                self._emit()
            return Applied(tuple(changed) or None)

    # ====== Overtime Requests ======
    def create_overtime_request(self, data: Union[OvertimeRequestCreate, Dict[str, Any]]) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = _coerce(OvertimeRequestCreate, data)
            except ValidationError as exc:
                return self._reject("Overtime request", ValidationRejected(_describe(exc)))
            now = self._now()
            request = OvertimeRequest(
                id=self._ids.new("ot"),
                user_id=principal.id,
                user_name=principal.name,
                status="pending",
                created_at=now,
                updated_at=now,
                **payload.model_dump(),
            )
            return self._create("overtime_requests", "Overtime request", request)

    def update_overtime_request(self, request_id: str, updates: Updates) -> OperationResult:
        return self._update(
            "overtime_requests", "Overtime request", request_id, updates,
            protected=("user_id", "user_name", "approver_id", "approver_name"),
            guard=self._decision_guard("Overtime request"),
        )

    def delete_overtime_request(self, request_id: str) -> OperationResult:
        return self._delete("overtime_requests", "Overtime request", request_id)

    # ====== Work Logs ======
    def create_work_log(self, data: Union[WorkLogCreate, Dict[str, Any]]) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = _coerce(WorkLogCreate, data)
            except ValidationError as exc:
                return self._reject("Work log", ValidationRejected(_describe(exc)))
            now = self._now()
            entry = WorkLogEntry(
                id=self._ids.new("worklog"),
                user_id=principal.id,
                hours=hours_between(payload.start_time, payload.end_time),
                created_at=now,
                updated_at=now,
                **payload.model_dump(),
            )
            return self._create("work_logs", "Work log", entry)

    def update_work_log(self, log_id: str, updates: Updates) -> OperationResult:
        # hours are fixed when the entry is logged
        return self._update("work_logs", "Work log", log_id, updates, protected=("user_id", "hours"))

    def delete_work_log(self, log_id: str) -> OperationResult:
        return self._delete("work_logs", "Work log", log_id)

    # ====== Leave Requests ======
    def create_leave_request(self, data: Union[LeaveRequestCreate, Dict[str, Any]]) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = _coerce(LeaveRequestCreate, data)
            except ValidationError as exc:
                return self._reject("Leave request", ValidationRejected(_describe(exc)))
            now = self._now()
            request = LeaveRequest(
                id=self._ids.new("leave"),
                user_id=principal.id,
                user_name=principal.name,
                status="pending",
                created_at=now,
                updated_at=now,
                **payload.model_dump(),
            )
            return self._create("leave_requests", "Leave request", request)

    def update_leave_request(self, request_id: str, updates: Updates) -> OperationResult:
        decide = self._decision_guard("Leave request")

        def guard(current: LeaveRequest, candidate: LeaveRequest):
            if candidate.end_date < candidate.start_date:
                return ValidationRejected("endDate must not be before startDate")
            return decide(current, candidate)

        return self._update(
            "leave_requests", "Leave request", request_id, updates,
            protected=("user_id", "user_name", "approver_id", "approver_name"),
            guard=guard,
        )

    def delete_leave_request(self, request_id: str) -> OperationResult:
        return self._delete("leave_requests", "Leave request", request_id)

    # ====== Timesheet ======
    def get_timesheet_summary(
        self,
        user_id: str,
        period: str,
        start_date: Union[str, date],
        end_date: Union[str, date],
    ) -> TimesheetSummary:
        if isinstance(start_date, str):
            start_date = date.fromisoformat(start_date)
        if isinstance(end_date, str):
            end_date = date.fromisoformat(end_date)
        key = (user_id, period, start_date, end_date)
        with self._lock:
            cached = self._summaries.get(key)
            if cached is not None:
                return cached
            summary = compute_summary(
                user_id, period, start_date, end_date,
                self._data.work_logs, self._data.overtime_requests, self._data.leave_requests,
            )
            self._summaries.put(key, summary)
            return summary

    # ====== Reviews ======
    def create_review(self, data: Union[ReviewCreate, Dict[str, Any]]) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = _coerce(ReviewCreate, data)
            except ValidationError as exc:
                return self._reject("Review", ValidationRejected(_describe(exc)))
            now = self._now()
            fields = payload.model_dump()
            fields["review_date"] = fields["review_date"] or self._today()
            review = OutsourceReview(
                id=self._ids.new("review"),
                reviewer_id=principal.id,
                reviewer_name=principal.name,
                created_at=now,
                updated_at=now,
                **fields,
            )
            return self._create("reviews", "Review", review)

    def update_review(self, review_id: str, updates: Updates) -> OperationResult:
        return self._update("reviews", "Review", review_id, updates, protected=("reviewer_id", "reviewer_name"))

    def delete_review(self, review_id: str) -> OperationResult:
        return self._delete("reviews", "Review", review_id)

    # ====== Environment Setups ======
    def _new_item(self, data: SetupItemCreate, now: datetime) -> SetupItem:
        return SetupItem(
            id=self._ids.new("item"),
            completed_at=now if data.status == "done" else None,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )

    def _store_setup(self, index: int, candidate: EnvironmentSetup) -> Union[EnvironmentSetup, ValidationRejected]:
        current = self._data.environment_setups[index]
        settled = _settle_setup(current, candidate, self._now())
        if isinstance(settled, ValidationRejected):
            return settled
        self._data.environment_setups[index] = settled
        if settled.status != current.status:
            log.info("setup_status_changed", setup_id=settled.id, status=settled.status, previous=current.status)
        return settled

    def create_environment_setup(self, data: Union[EnvironmentSetupCreate, Dict[str, Any]]) -> OperationResult:
        try:
            payload = _coerce(EnvironmentSetupCreate, data)
        except ValidationError as exc:
            return self._reject("Environment setup", ValidationRejected(_describe(exc)))
        with self._lock:
            now = self._now()
            fields = payload.model_dump(exclude={"items"})
            fields["request_date"] = fields["request_date"] or self._today()
            setup = EnvironmentSetup(
                id=self._ids.new("setup"),
                status="pending",
                items=[self._new_item(item, now) for item in payload.items],
                created_at=now,
                updated_at=now,
                **fields,
            )
            settled = _settle_setup(None, setup, now)
            if isinstance(settled, ValidationRejected):
                return self._reject("Environment setup", settled)
            return self._create("environment_setups", "Environment setup", settled)

    def update_environment_setup(self, setup_id: str, setup: Updates) -> OperationResult:
        """Replace a setup wholesale (or patch it); the checklist rule decides the final status."""
        def guard(current: EnvironmentSetup, candidate: EnvironmentSetup):
            if candidate.status == "approved" and current.status != "approved":
                return InvalidTransition("Environment setup", current.status, "approved")
            before = {item.id: item for item in current.items}
            for item in candidate.items:
                if item.id in before:
                    error = check_transition("Setup item", SETUP_ITEM, before[item.id].status, item.status)
                    if error is not None:
                        return error
            return _settle_setup(current, candidate, self._now())

        return self._update(
            "environment_setups", "Environment setup", setup_id, setup,
            protected=("completion_date", "verified_by_id", "verified_by_name", "verification_notes"),
            guard=guard,
        )

    def delete_environment_setup(self, setup_id: str) -> OperationResult:
        return self._delete("environment_setups", "Environment setup", setup_id)

    def add_setup_item(self, setup_id: str, data: Union[SetupItemCreate, Dict[str, Any]]) -> OperationResult:
        try:
            payload = _coerce(SetupItemCreate, data)
        except ValidationError as exc:
            return self._reject("Setup item", ValidationRejected(_describe(exc)))
        with self._lock:
            index = _index(self._data.environment_setups, setup_id)
            if index is None:
                return Applied(None)
            setup = self._data.environment_setups[index]
            now = self._now()
            item = self._new_item(payload, now)
            stored = self._store_setup(index, setup.model_copy(update={"items": [*setup.items, item], "updated_at": now}))
            if isinstance(stored, ValidationRejected):
                return self._reject("Setup item", stored)
            return self._applied("Setup item", "added", stored.items[-1])

    def update_setup_item(self, setup_id: str, item_id: str, updates: Updates) -> OperationResult:
        with self._lock:
            index = _index(self._data.environment_setups, setup_id)
            if index is None:
                return Applied(None)
            setup = self._data.environment_setups[index]
            position = _index(setup.items, item_id)
            if position is None:
                return Applied(None)
            current = setup.items[position]
            now = self._now()
            changes = _changes(SetupItem, updates, STORE_OWNED | {"completed_at"})
            changes["updated_at"] = now
            try:
                item = _merge(current, changes)
            except ValidationError as exc:
                return self._reject("Setup item", ValidationRejected(_describe(exc)))
            error = check_transition("Setup item", SETUP_ITEM, current.status, item.status)
            if error is not None:
                return self._reject("Setup item", error)
            items = list(setup.items)
            items[position] = item
            stored = self._store_setup(index, setup.model_copy(update={"items": items, "updated_at": now}))
            if isinstance(stored, ValidationRejected):
                return self._reject("Setup item", stored)
            return self._applied("Setup item", "updated", stored.items[position])

    def delete_setup_item(self, setup_id: str, item_id: str) -> OperationResult:
        with self._lock:
            index = _index(self._data.environment_setups, setup_id)
            if index is None:
                return Applied(None)
            setup = self._data.environment_setups[index]
            position = _index(setup.items, item_id)
            if position is None:
                return Applied(None)
            items = list(setup.items)
            removed = items.pop(position)
            stored = self._store_setup(index, setup.model_copy(update={"items": items, "updated_at": self._now()}))
            if isinstance(stored, ValidationRejected):
                return self._reject("Setup item", stored)
            return self._applied("Setup item", "deleted", removed)

    def mark_all_setup_items_done(self, setup_id: str) -> OperationResult:
        with self._lock:
            index = _index(self._data.environment_setups, setup_id)
            if index is None:
                return Applied(None)
            setup = self._data.environment_setups[index]
            if not setup.items:
                return Applied(None)
            now = self._now()
            items = [
                item if item.status == "done" else item.model_copy(update={"status": "done", "updated_at": now})
                for item in setup.items
            ]
            stored = self._store_setup(index, setup.model_copy(update={"items": items, "updated_at": now}))
            if isinstance(stored, ValidationRejected):
                return self._reject("Environment setup", stored)
            return self._applied("Environment setup", "completed", stored)

    def verify_environment_setup(self, setup_id: str, notes: Optional[str] = None) -> OperationResult:
        with self._lock:
            index = _index(self._data.environment_setups, setup_id)
            if index is None:
                return Applied(None)
            principal = self._principal
            if principal is None or principal.role not in VERIFIER_ROLES:
                return self._reject("Environment setup", PermissionDenied("Only a supervisor or admin can verify a setup"))
            setup = self._data.environment_setups[index]
            if setup.status not in CLOSED_SETUP_STATES:
                return self._reject("Environment setup", InvalidTransition("Environment setup", setup.status, "approved"))
            verified = setup.model_copy(update={
                "status": "approved",
                "verified_by_id": principal.id,
                "verified_by_name": principal.name,
                "verification_notes": notes,
                "updated_at": self._now(),
            })
            self._data.environment_setups[index] = verified
            return self._applied("Environment setup", "verified", verified)

    # ====== Contracts ======
    def create_contract(self, data: Union[ContractCreate, Dict[str, Any]]) -> OperationResult:
        try:
            payload = _coerce(ContractCreate, data)
        except ValidationError as exc:
            return self._reject("Contract", ValidationRejected(_describe(exc)))
        with self._lock:
            now = self._now()
            contract = Contract(id=self._ids.new("contract"), created_at=now, updated_at=now, **payload.model_dump())
            return self._create("contracts", "Contract", contract)

    def update_contract(self, contract_id: str, updates: Updates) -> OperationResult:
        return self._update("contracts", "Contract", contract_id, updates, protected=("documents",))

    def delete_contract(self, contract_id: str) -> OperationResult:
        return self._delete("contracts", "Contract", contract_id)

    def add_contract_document(self, contract_id: str, meta: Union[DocumentCreate, Dict[str, Any]]) -> OperationResult:
        with self._lock:
            principal = self._principal
            if principal is None:
                return Applied(None)
            try:
                payload = _coerce(DocumentCreate, meta)
            except ValidationError as exc:
                return self._reject("Document", ValidationRejected(_describe(exc)))
            index = _index(self._data.contracts, contract_id)
            if index is None:
                return Applied(None)
            contract = self._data.contracts[index]
            now = self._now()
            document = Document(
                id=self._ids.new("document"),
                contract_id=contract_id,
                uploaded_at=now,
                uploaded_by=principal.id,
                uploaded_by_name=principal.name,
                **payload.model_dump(),
            )
            self._data.contracts[index] = contract.model_copy(
                update={"documents": [*contract.documents, document], "updated_at": now}
            )
            return self._applied("Document", "added", document)

    # ====== Squads, Projects & Assignments ======
    def create_squad(self, data: Union[SquadCreate, Dict[str, Any]]) -> OperationResult:
        try:
            payload = _coerce(SquadCreate, data)
        except ValidationError as exc:
            return self._reject("Squad", ValidationRejected(_describe(exc)))
        with self._lock:
            squad = Squad(id=self._ids.new("squad"), created_at=self._now(), **payload.model_dump())
            return self._create("squads", "Squad", squad)

    def update_squad(self, squad_id: str, updates: Updates) -> OperationResult:
        return self._update("squads", "Squad", squad_id, updates)

    def delete_squad(self, squad_id: str) -> OperationResult:
        return self._delete("squads", "Squad", squad_id)

    def create_project(self, data: Union[ProjectCreate, Dict[str, Any]]) -> OperationResult:
        try:
            payload = _coerce(ProjectCreate, data)
        except ValidationError as exc:
            return self._reject("Project", ValidationRejected(_describe(exc)))
        with self._lock:
            project = Project(id=self._ids.new("project"), created_at=self._now(), **payload.model_dump())
            return self._create("projects", "Project", project)

    def update_project(self, project_id: str, updates: Updates) -> OperationResult:
        return self._update("projects", "Project", project_id, updates)

    def delete_project(self, project_id: str) -> OperationResult:
        return self._delete("projects", "Project", project_id)

    def create_assignment(self, data: Union[AssignmentCreate, Dict[str, Any]]) -> OperationResult:
        try:
            payload = _coerce(AssignmentCreate, data)
        except ValidationError as exc:
            return self._reject("Assignment", ValidationRejected(_describe(exc)))
        with self._lock:
            now = self._now()
            assignment = Assignment(id=self._ids.new("assignment"), created_at=now, updated_at=now, **payload.model_dump())
            return self._create("assignments", "Assignment", assignment)

    def update_assignment(self, assignment_id: str, updates: Updates) -> OperationResult:
        return self._update("assignments", "Assignment", assignment_id, updates)

    def delete_assignment(self, assignment_id: str) -> OperationResult:
        return self._delete("assignments", "Assignment", assignment_id)
