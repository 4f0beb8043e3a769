from datetime import date

import pytest
from pydantic import ValidationError

from helpdesk.errors import InvalidTransition, PermissionDenied, SelfDeleteRejected, ValidationRejected
from helpdesk.store.app_store import AppStore
from helpdesk.store.data_sources import FixtureDataSource
from helpdesk.store.ids import IdFactory
from helpdesk.store.results import Applied, Rejected

ADMIN_EMAIL = "truong.minh.f@example.com"
PASSWORD = "password"


def _as(store, user_id):
    return store.acting_as(store.find("users", user_id))


# ----- session -----
def test_login_loads_collections(clock, toasts):
    store = AppStore(FixtureDataSource(), notifier=toasts.append, clock=clock)
    assert not store.is_authenticated
    assert store.tickets == ()

    result = store.login("anyone@example.com", "x")

    assert result.ok and result.record.id == "user-6"
    assert store.is_authenticated
    assert store.users and store.tickets
    assert toasts[-1].title == "Signed in"


@pytest.mark.parametrize("email,password", [("", "pw"), ("a@example.com", ""), ("   ", "pw")])
def test_login_requires_credentials(clock, toasts, email, password):
    store = AppStore(FixtureDataSource(), notifier=toasts.append, clock=clock)
    result = store.login(email, password)
    assert isinstance(result, Rejected)
    assert not store.is_authenticated
    assert toasts[-1].is_error


def test_logout_clears_principal(store):
    seen = []
    store.subscribe(lambda s: seen.append(s.is_authenticated))
    store.logout()
    assert store.current_user is None
    assert seen == [False]
    # no principal, nothing to stamp
    assert store.create_ticket({"title": "x", "category": "tech_setup"}) == Applied(None)


def test_subscribe_and_unsubscribe(store):
    calls = []
    unsubscribe = store.subscribe(lambda s: calls.append(len(s.squads)))
    store.create_squad({"name": "Mobile"})
    unsubscribe()
    store.create_squad({"name": "Data"})
    assert calls == [3]


# ----- ownership and ordering -----
def test_create_ticket_stamps_requester_and_goes_first(store, toasts):
    result = store.create_ticket({"title": "VPN", "category": "tech_setup"})

    ticket = store.tickets[0]
    assert result.record == ticket
    assert ticket.title == "VPN"
    assert ticket.status == "pending"
    assert ticket.requester.id == store.current_user.id
    assert toasts[-1].title == "Ticket created"


def test_most_recent_first(store, clock):
    first = store.create_overtime_request({"date": "2025-04-13", "startTime": "18:00", "endTime": "20:00"}).record
    clock.advance(minutes=1)
    second = store.create_overtime_request({"date": "2025-04-14", "startTime": "18:00", "endTime": "19:00"}).record
    assert [r.id for r in store.overtime_requests[:2]] == [second.id, first.id]
    assert first.user_id == second.user_id == "user-6"
    assert first.status == "pending"
    assert first.total_hours == 2.0


def test_owner_stamping_on_requests(store):
    leave = store.create_leave_request({"startDate": "2025-05-01", "endDate": "2025-05-03"}).record
    log_entry = store.create_work_log({"date": "2025-04-14", "startTime": "08:00", "endTime": "17:00"}).record
    review = store.create_review({
        "revieweeId": "user-2", "revieweeName": "Trần Thị B",
        "criteria": {"technicalQuality": 5, "professionalAttitude": 5, "communication": 4,
                     "ruleCompliance": 4, "initiative": 5},
    }).record

    assert (leave.user_id, leave.status, leave.total_days) == ("user-6", "pending", 3.0)
    assert (log_entry.user_id, log_entry.hours) == ("user-6", 9.0)
    assert review.reviewer_id == "user-6"
    assert review.review_date == date(2025, 4, 14)
    assert review.average_score == 4.6


def test_work_log_across_midnight(store):
    entry = store.create_work_log({"date": "2025-04-14", "startTime": "22:00", "endTime": "02:00"}).record
    assert entry.hours == 4.0


# ----- missing ids -----
@pytest.mark.parametrize("collection,op", [
    ("tickets", "update_ticket"),
    ("users", "update_user"),
    ("contracts", "update_contract"),
    ("assignments", "update_assignment"),
])
def test_update_missing_id_is_noop(store, toasts, collection, op):
    before = getattr(store, collection)
    result = getattr(store, op)("missing", {"status": "approved"})
    assert result == Applied(None)
    assert not result.changed
    assert getattr(store, collection) == before
    assert toasts == []


@pytest.mark.parametrize("collection,op", [
    ("tickets", "delete_ticket"),
    ("overtime_requests", "delete_overtime_request"),
    ("reviews", "delete_review"),
    ("squads", "delete_squad"),
])
def test_delete_missing_id_is_noop(store, collection, op):
    before = getattr(store, collection)
    assert getattr(store, op)("missing") == Applied(None)
    assert getattr(store, collection) == before


# ----- users -----
def test_self_delete_rejected(store, toasts):
    result = store.delete_user("user-6")
    assert isinstance(result, Rejected)
    assert isinstance(result.error, SelfDeleteRejected)
    assert store.find("users", "user-6") is not None
    assert toasts[-1].is_error
    with pytest.raises(SelfDeleteRejected):
        result.unwrap()


def test_delete_other_user(store):
    result = store.delete_user("user-7")
    assert result.record.id == "user-7"
    assert store.find("users", "user-7") is None


def test_duplicate_email_rejected(store):
    result = store.create_user({"name": "Copy", "email": ADMIN_EMAIL.upper()})
    assert isinstance(result, Rejected)
    assert len(store.users) == 8


def test_email_change_to_taken_address_rejected(store):
    result = store.update_user("user-1", {"email": ADMIN_EMAIL.title()})
    assert isinstance(result, Rejected)
    assert store.find("users", "user-1").email == "nguyen.van.a@example.com"


def test_email_change_keeps_own_address(store):
    result = store.update_user("user-6", {"email": ADMIN_EMAIL.upper(), "phone": "0900"})
    assert result.record.phone == "0900"


# ----- timesheet cache -----
def test_summary_is_cached(store):
    cache = store.summary_cache
    first = store.get_timesheet_summary("user-6", "week", "2025-04-07", "2025-04-13")
    second = store.get_timesheet_summary("user-6", "week", date(2025, 4, 7), date(2025, 4, 13))
    assert first == second
    assert (cache.misses, cache.hits) == (1, 1)
    assert store.timesheet_summaries == (first,)


def test_fixture_summary_values(store):
    summary = store.get_timesheet_summary("user-6", "custom", "2025-04-01", "2025-04-10")
    assert summary.regular_hours == 12.5
    assert summary.leave_count == 1
    assert summary.overtime_hours == 4
    assert summary.weekend_overtime_hours == 4
    assert summary.completion_rate == 30.0


def test_work_log_write_invalidates_summary(store):
    before = store.get_timesheet_summary("user-6", "week", "2025-04-07", "2025-04-13")
    other = store.get_timesheet_summary("user-1", "week", "2025-04-07", "2025-04-13")
    store.create_work_log({"date": "2025-04-10", "startTime": "09:00", "endTime": "17:00"})

    after = store.get_timesheet_summary("user-6", "week", "2025-04-07", "2025-04-13")
    assert after.regular_hours == before.regular_hours + 8
    # another user's entry survives
    assert other in store.timesheet_summaries


def test_write_outside_range_keeps_cache(store):
    store.get_timesheet_summary("user-6", "week", "2025-04-07", "2025-04-13")
    store.create_work_log({"date": "2025-05-10", "startTime": "09:00", "endTime": "17:00"})
    assert len(store.summary_cache) == 1


# ----- setup checklist -----
def test_checklist_completion_resolves_setup(store, clock):
    setup = store.find("environment_setups", "setup-1")
    assert setup.status == "in_progress"

    store.update_setup_item("setup-1", "item-2", {"status": "done"})
    assert store.find("environment_setups", "setup-1").status == "in_progress"
    assert store.find("environment_setups", "setup-1").completion_date is None

    clock.advance(hours=1)
    store.update_setup_item("setup-1", "item-3", {"status": "done"})
    setup = store.find("environment_setups", "setup-1")
    assert setup.status == "resolved"
    assert setup.completion_date == clock.now
    assert setup.progress == 100
    assert all(item.completed_at is not None for item in setup.items)


def test_completion_date_stamped_once(store, clock):
    store.mark_all_setup_items_done("setup-1")
    stamped = store.find("environment_setups", "setup-1").completion_date
    clock.advance(days=1)
    store.update_environment_setup("setup-1", {"notes": "keyboard swapped"})
    assert store.find("environment_setups", "setup-1").completion_date == stamped


def test_cannot_close_unfinished_setup(store):
    result = store.update_environment_setup("setup-1", {"status": "resolved"})
    assert isinstance(result, Rejected)
    assert store.find("environment_setups", "setup-1").status == "in_progress"


def test_adding_item_to_closed_setup_rejected(store):
    store.mark_all_setup_items_done("setup-1")
    result = store.add_setup_item("setup-1", {"title": "VPN profile", "category": "software"})
    assert isinstance(result, Rejected)
    assert len(store.find("environment_setups", "setup-1").items) == 3


def test_done_item_is_terminal(store):
    result = store.update_setup_item("setup-1", "item-1", {"status": "pending"})
    assert isinstance(result.error, InvalidTransition)


def test_new_setup_with_done_items_is_resolved(store):
    result = store.create_environment_setup({
        "employeeId": "user-5", "employeeName": "Hoàng Văn E", "deviceType": "byod", "setupLocation": "remote",
        "items": [{"title": "Laptop", "category": "device", "status": "done"}],
    })
    assert result.record.status == "resolved"
    assert result.record.request_date == date(2025, 4, 14)
    assert result.record.completion_date is not None


def test_completing_empty_checklist_is_noop(store, toasts):
    created = store.create_environment_setup({
        "employeeId": "user-5", "employeeName": "Hoàng Văn E", "deviceType": "byod", "setupLocation": "remote",
    }).record
    toasts.clear()
    assert store.mark_all_setup_items_done(created.id) == Applied(None)
    assert store.find("environment_setups", created.id).status == "pending"
    assert toasts == []


def test_verify_setup(store):
    early = store.verify_environment_setup("setup-1", "too soon")
    assert isinstance(early.error, InvalidTransition)

    store.mark_all_setup_items_done("setup-1")
    verified = store.verify_environment_setup("setup-1", "checked on site").record
    assert verified.status == "approved"
    assert verified.verified_by_id == "user-6"
    assert verified.verification_notes == "checked on site"


def test_verify_requires_supervisor(store):
    store.mark_all_setup_items_done("setup-1")
    with _as(store, "user-2"):
        result = store.verify_environment_setup("setup-1")
    assert isinstance(result.error, PermissionDenied)


# ----- transitions -----
def test_approved_ticket_cannot_reopen(store):
    result = store.update_ticket("ticket-3", {"status": "pending"})
    assert isinstance(result.error, InvalidTransition)
    assert store.find("tickets", "ticket-3").status == "approved"


def test_ticket_lifecycle_with_reopen(store):
    for status in ("in_progress", "resolved", "pending"):
        assert store.update_ticket("ticket-2", {"status": status}).ok
    assert store.find("tickets", "ticket-2").status == "pending"


def test_ticket_update_keeps_protected_fields(store, clock):
    clock.advance(minutes=5)
    ticket = store.update_ticket("ticket-1", {
        "title": "VPN for marketing", "requester": {"id": "user-8"}, "id": "ticket-99", "comments": [],
    }).record
    assert ticket.id == "ticket-1"
    assert ticket.requester.id == "user-1"
    assert len(ticket.comments) == 2
    assert ticket.updated_at == clock.now


def test_overtime_decision_requires_approver(store):
    with _as(store, "user-1"):
        result = store.update_overtime_request("ot-1", {"status": "approved"})
    assert isinstance(result.error, PermissionDenied)
    assert store.find("overtime_requests", "ot-1").status == "pending"


def test_overtime_reject_then_approve_is_refused(store):
    rejected = store.update_overtime_request("ot-1", {"status": "rejected"}).record
    assert rejected.status == "rejected"
    assert rejected.approver_id == "user-6"

    again = store.update_overtime_request("ot-1", {"status": "approved"})
    assert isinstance(again.error, InvalidTransition)
    assert store.find("overtime_requests", "ot-1").status == "rejected"


def test_approved_leave_counts_in_summary(store):
    leave = store.create_leave_request({"type": "annual", "startDate": "2025-05-01", "endDate": "2025-05-03"}).record
    store.update_leave_request(leave.id, {"status": "approved"})
    summary = store.get_timesheet_summary("user-6", "month", "2025-05-01", "2025-05-31")
    assert summary.leave_count == 3


def test_leave_range_checked_on_update(store):
    result = store.update_leave_request("leave-1", {"endDate": "2025-04-01"})
    assert isinstance(result, Rejected)


# ----- validation -----
def test_empty_ticket_title_rejected(store, toasts):
    result = store.create_ticket({"title": "", "category": "tech_setup"})
    assert isinstance(result, Rejected)
    assert isinstance(result.error, ValidationRejected)
    assert toasts[-1].title == "Ticket not saved"


def test_utilization_out_of_range_rejected(store):
    result = store.update_assignment("assignment-1", {"utilization": 150})
    assert isinstance(result, Rejected)
    assert store.find("assignments", "assignment-1").utilization == 80


# ----- notifications -----
def test_unread_count_for_principal(store):
    assert store.unread_notifications_count == 1
    assert {n.id for n in store.principal_notifications} == {"notif-4", "notif-5"}


def test_mark_notifications_read(store, toasts):
    assert store.mark_notification_as_read("notif-4").record.is_read
    assert store.unread_notifications_count == 0
    # someone else's notification is left alone
    assert store.mark_notification_as_read("notif-3") == Applied(None)
    assert store.mark_all_notifications_as_read() == Applied(None)
    assert toasts == []


def test_comment_notifies_watchers(store):
    comment = store.add_comment("ticket-1", "Working on it").record
    assert comment.user_id == "user-6"
    ticket = store.find("tickets", "ticket-1")
    assert ticket.comments[-1] == comment

    recipients = {n.user_id for n in store.notifications if n.ticket_id == "ticket-1" and n.title == "New comment"}
    assert recipients == {"user-1", "user-2"}


def test_comment_on_missing_ticket(store):
    assert store.add_comment("missing", "hello") == Applied(None)


def test_attachment_appended(store):
    attachment = store.add_attachment("ticket-5", {"fileName": "log.txt", "fileSize": 12, "fileType": "text/plain"}).record
    assert attachment.uploaded_by == "user-6"
    assert store.find("tickets", "ticket-5").attachments == [attachment]


# ----- contracts / assignments -----
def test_contract_document_added(store):
    document = store.add_contract_document("contract-2", {"name": "nda.pdf", "type": "pdf", "size": 10}).record
    assert document.uploaded_by_name == "Trương Minh F"
    assert store.find("contracts", "contract-2").documents == [document]


def test_assignment_status_is_caller_set(store):
    assignment = store.create_assignment({
        "staffId": "user-5", "staffName": "Hoàng Văn E", "role": "analyst",
        "startDate": "2020-01-01", "status": "upcoming",
    }).record
    assert assignment.status == "upcoming"
    assert store.assignments[0] == assignment


# ----- snapshots -----
def test_readers_get_tuples(store):
    tickets = store.tickets
    assert isinstance(tickets, tuple)
    store.create_ticket({"title": "Printer", "category": "tech_setup"})
    assert len(tickets) == 5
    assert len(store.tickets) == 6


def test_records_are_frozen(store):
    ticket = store.find("tickets", "ticket-1")
    with pytest.raises(ValidationError):
        ticket.title = "changed"


def test_id_factory_bumps_on_collision(clock):
    ids = IdFactory(clock)
    first, second = ids.new("ticket"), ids.new("ticket")
    assert first != second
    assert int(second.split("-")[1]) == int(first.split("-")[1]) + 1


def test_fixture_login_password_is_not_checked(clock):
    store = AppStore(FixtureDataSource(), notifier=lambda toast: None, clock=clock)
    assert store.login(ADMIN_EMAIL, PASSWORD + "-wrong").ok
