from datetime import date

import httpx
import pytest

from helpdesk.errors import AuthExpired, RequestFailed, TransportError, UploadFailed
from helpdesk.schemas.contracts import DocumentCreate
from helpdesk.services import (
    assignment_service, auth_service, contract_service, hr_service, setup_service, ticket_service, user_service,
)
from helpdesk.services.api_client import ApiClient
from helpdesk.store.app_store import AppStore
from helpdesk.store.data_sources import RemoteDataSource


ADMIN_EMAIL = "truong.minh.f@example.com"
PASSWORD = "password"


class Backend:
    """Scripted responses for an httpx MockTransport; records every request."""

    def __init__(self):
        self.calls = []
        self.handler = lambda request: httpx.Response(200, json={})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.handler(request)


@pytest.fixture
def backend():
    return Backend()


@pytest.fixture
def mocked(backend, credentials, navigations):
    client = ApiClient(
        base_url="http://api.test/api",
        credentials=credentials,
        navigator=navigations.append,
        http_client=httpx.Client(transport=httpx.MockTransport(backend)),
    )
    yield client
    client.close()


# ----- transport -----
def test_bearer_header_attached(mocked, backend, credentials):
    credentials.set_token("abc")
    backend.handler = lambda request: httpx.Response(200, json={"ok": True})
    assert mocked.get("/tickets") == {"ok": True}
    request = backend.calls[-1]
    assert request.headers["Authorization"] == "Bearer abc"
    assert str(request.url) == "http://api.test/api/tickets"


def test_no_header_without_token(mocked, backend):
    mocked.get("/tickets")
    assert "Authorization" not in backend.calls[-1].headers


def test_401_clears_token_and_redirects(mocked, backend, credentials, navigations):
    credentials.set_token("stale")
    backend.handler = lambda request: httpx.Response(401, json={"message": "Invalid token"})
    with pytest.raises(AuthExpired):
        mocked.get("/me")
    assert credentials.get_token() is None
    assert navigations == ["/login"]


def test_error_message_from_body(mocked, backend):
    backend.handler = lambda request: httpx.Response(409, json={"message": "Ticket cannot move"})
    with pytest.raises(RequestFailed) as exc:
        mocked.put("/tickets/t1", {"status": "pending"})
    assert exc.value.status_code == 409
    assert exc.value.message == "Ticket cannot move"


def test_generic_message_without_body(mocked, backend):
    backend.handler = lambda request: httpx.Response(500, text="<html>oops</html>")
    with pytest.raises(RequestFailed) as exc:
        mocked.get("/tickets")
    assert exc.value.message == "Something went wrong"


@pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout])
def test_transport_failures(mocked, backend, error):
    def handler(request):
        raise error("down", request=request)

    backend.handler = handler
    with pytest.raises(TransportError):
        mocked.get("/tickets")


def test_empty_success_body_is_none(mocked, backend):
    backend.handler = lambda request: httpx.Response(204)
    assert mocked.delete("/tickets/t1") is None


def test_upload_binary_never_raises(mocked, backend):
    backend.handler = lambda request: httpx.Response(403)
    assert mocked.upload_binary("http://storage.test/put", b"data") is False

    def handler(request):
        raise httpx.ConnectError("down", request=request)

    backend.handler = handler
    assert mocked.upload_binary("http://storage.test/put", b"data") is False


def test_failed_upload_skips_registration(mocked, backend):
    def handler(request):
        if request.url.host == "storage.test":
            return httpx.Response(500)
        if request.url.path.endswith("/upload-url"):
            return httpx.Response(200, json={"uploadUrl": "http://storage.test/put?sig=1", "fileId": "f1"})
        return httpx.Response(200, json={})

    backend.handler = handler
    with pytest.raises(UploadFailed):
        ticket_service.upload_attachment(mocked, "ticket-1", "trace.log", "text/plain", b"hello")
    assert [r.url.path for r in backend.calls] == ["/api/tickets/attachments/upload-url", "/put"]


def test_summary_params(mocked, backend):
    backend.handler = lambda request: httpx.Response(200, json={
        "userId": "u1", "period": "week", "startDate": "2025-04-07", "endDate": "2025-04-13",
        "regularHours": 8, "overtimeHours": 0, "weekendOvertimeHours": 0, "leaveCount": 0, "completionRate": 14.29,
    })
    summary = hr_service.get_timesheet_summary(mocked, "u1", "week", date(2025, 4, 7), date(2025, 4, 13))
    assert summary.regular_hours == 8
    params = backend.calls[-1].url.params
    assert (params["userId"], params["startDate"], params["endDate"]) == ("u1", "2025-04-07", "2025-04-13")


# ----- against the in-process API -----
def test_login_persists_token(api_client, credentials):
    user = auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    assert user.id == "user-6"
    assert credentials.is_authenticated
    assert auth_service.get_current_user(api_client).email == ADMIN_EMAIL


def test_logout_then_call_redirects(api_client, credentials, navigations):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    auth_service.logout(api_client)
    assert credentials.get_token() is None
    with pytest.raises(AuthExpired):
        auth_service.get_current_user(api_client)
    assert navigations == ["/login"]


def test_attachment_upload_and_download(api_client, client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    attachment = ticket_service.upload_attachment(api_client, "ticket-5", "trace.log", "text/plain", b"hello")

    assert attachment.file_size == 5
    assert attachment.uploaded_by == "user-6"
    ticket = ticket_service.get_ticket(api_client, "ticket-5")
    assert [a.id for a in ticket.attachments] == [attachment.id]

    signed = api_client.get(attachment.url)["downloadUrl"]
    assert client.get(signed).content == b"hello"


def test_register_without_upload_is_refused(api_client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    target = api_client.post("/tickets/attachments/upload-url", {
        "fileName": "ghost.txt", "fileType": "text/plain", "fileSize": 3, "ticketId": "ticket-5",
    })
    with pytest.raises(RequestFailed) as exc:
        api_client.post("/tickets/ticket-5/attachments", {
            "fileId": target["fileId"], "fileName": "ghost.txt", "fileType": "text/plain", "fileSize": 3,
        })
    assert exc.value.status_code == 409


def test_tampered_upload_signature_rejected(api_client, client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    target = api_client.post("/tickets/attachments/upload-url", {
        "fileName": "a.txt", "fileType": "text/plain", "fileSize": 1, "ticketId": "ticket-5",
    })
    url = target["uploadUrl"].split("?token=")[0] + "?token=forged"
    assert client.put(url, content=b"x").status_code == 403


def test_contract_document_upload(api_client, client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    document = contract_service.upload_document(
        api_client, "contract-2", DocumentCreate(name="nda-signed.pdf", type="pdf"), "application/pdf", b"%PDF-1.4",
    )
    assert document.size == 8
    assert document.file_id

    url = contract_service.get_document_download_url(api_client, "contract-2", document.id)
    assert client.get(url).content == b"%PDF-1.4"
    # seeded documents keep their static url
    assert contract_service.get_document_download_url(api_client, "contract-1", "document-1") == "/placeholder.svg"


def test_store_over_remote_source(api_client, credentials, toasts):
    store = AppStore(RemoteDataSource(api_client), notifier=toasts.append)
    assert store.login(ADMIN_EMAIL, PASSWORD).ok

    assert len(store.tickets) == 5
    assert len(store.users) == 8
    assert {n.id for n in store.notifications} == {"notif-4", "notif-5"}
    assert store.find("environment_setups", "setup-1").items[0].id == "item-1"
    assert credentials.is_authenticated

    store.logout()
    assert credentials.get_token() is None
    assert not store.is_authenticated


def test_remote_login_failure_reraises(api_client, toasts, navigations):
    store = AppStore(RemoteDataSource(api_client), notifier=toasts.append)
    with pytest.raises(AuthExpired):
        store.login(ADMIN_EMAIL, "wrong-password")
    assert toasts[-1].title == "Login failed"
    assert not store.is_authenticated
    assert navigations == ["/login"]


# ----- service round trips -----
def test_setup_service_round_trip(api_client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    setup = setup_service.create_environment_setup(api_client, {
        "employee_id": "user-5", "employee_name": "Hoàng Văn E", "device_type": "byod", "setup_location": "remote",
        "items": [{"title": "Laptop", "category": "device"}],
    })
    assert setup.status == "pending"

    item = setup_service.create_setup_item(api_client, setup.id, {"title": "VPN profile", "category": "software"})
    setup_service.delete_setup_item(api_client, setup.id, setup.items[0].id)
    assert setup_service.update_setup_item(api_client, setup.id, item.id, {"status": "in_progress"}).status == "in_progress"
    setup = setup_service.update_environment_setup(api_client, setup.id, {"notes": "ship by Friday"})
    assert [i.id for i in setup_service.get_environment_setup(api_client, setup.id).items] == [item.id]

    assert setup_service.complete_environment_setup(api_client, setup.id).status == "resolved"
    assert setup_service.verify_environment_setup(api_client, setup.id, "ok").status == "approved"
    assert setup.id in {s.id for s in setup_service.get_environment_setups(api_client)}

    setup_service.delete_environment_setup(api_client, setup.id)
    with pytest.raises(RequestFailed) as exc:
        setup_service.get_environment_setup(api_client, setup.id)
    assert exc.value.status_code == 404


def test_contract_service_round_trip(api_client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    contract = contract_service.create_contract(api_client, {
        "contract_type": "service", "staff_name": "Hoàng Văn E", "staff_id": "user-5",
    })
    updated = contract_service.update_contract(api_client, contract.id, {"status": "active", "notes": "renewed"})
    assert (updated.status, updated.notes) == ("active", "renewed")
    assert contract_service.get_contract(api_client, contract.id).status == "active"
    assert contract.id in {c.id for c in contract_service.get_contracts(api_client)}

    contract_service.delete_contract(api_client, contract.id)
    with pytest.raises(RequestFailed):
        contract_service.get_contract(api_client, contract.id)


def test_assignment_service_round_trip(api_client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    squad = assignment_service.create_squad(api_client, {"name": "Mobile"})
    assert assignment_service.update_squad(api_client, squad.id, {"description": "iOS and Android"}).description
    project = assignment_service.create_project(api_client, {"name": "Kiosk", "squad_id": squad.id})
    assert assignment_service.update_project(api_client, project.id, {"status": "active"}).status == "active"

    assignment = assignment_service.create_assignment(api_client, {
        "staff_id": "user-5", "staff_name": "Hoàng Văn E", "role": "developer", "squad_id": squad.id,
        "project_id": project.id, "start_date": "2025-05-01", "status": "planned", "utilization": 50,
    })
    assert assignment_service.update_assignment(api_client, assignment.id, {"utilization": 80}).utilization == 80
    assert assignment.id in {a.id for a in assignment_service.get_assignments(api_client)}

    assignment_service.delete_assignment(api_client, assignment.id)
    assignment_service.delete_project(api_client, project.id)
    assignment_service.delete_squad(api_client, squad.id)
    assert assignment.id not in {a.id for a in assignment_service.get_assignments(api_client)}
    assert project.id not in {p.id for p in assignment_service.get_projects(api_client)}
    assert squad.id not in {s.id for s in assignment_service.get_squads(api_client)}


def test_hr_service_round_trip(api_client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    overtime = hr_service.create_overtime_request(api_client, {
        "date": "2025-04-19", "start_time": "09:00", "end_time": "12:00", "reason": "Migration",
    })
    assert overtime.total_hours == 3
    approved = hr_service.update_overtime_request(api_client, overtime.id, {"status": "approved"})
    assert approved.approver_id == "user-6"

    leave = hr_service.create_leave_request(api_client, {"start_date": "2025-05-05", "end_date": "2025-05-06"})
    assert leave.total_days == 2
    assert hr_service.update_leave_request(api_client, leave.id, {"reason": "Travel"}).reason == "Travel"

    log = hr_service.create_work_log(api_client, {
        "date": "2025-04-14", "start_time": "09:00", "end_time": "17:00", "description": "Rollout",
    })
    assert log.hours == 8
    assert hr_service.update_work_log(api_client, log.id, {"description": "Rollout, day 1"}).hours == 8

    review = hr_service.create_review(api_client, {
        "reviewee_id": "user-3", "reviewee_name": "Lê Văn C",
        "criteria": {"technicalQuality": 4, "professionalAttitude": 4, "communication": 4,
                     "ruleCompliance": 4, "initiative": 4},
    })
    assert hr_service.update_review(api_client, review.id, {"strengths": "Calm under pressure"}).strengths
    assert hr_service.get_review(api_client, review.id).reviewer_id == "user-6"

    hr_service.delete_overtime_request(api_client, overtime.id)
    hr_service.delete_leave_request(api_client, leave.id)
    hr_service.delete_work_log(api_client, log.id)
    hr_service.delete_review(api_client, review.id)
    assert overtime.id not in {r.id for r in hr_service.get_overtime_requests(api_client)}
    assert leave.id not in {r.id for r in hr_service.get_leave_requests(api_client)}
    assert log.id not in {r.id for r in hr_service.get_work_logs(api_client)}
    assert review.id not in {r.id for r in hr_service.get_reviews(api_client)}


def test_user_service_round_trip(api_client):
    auth_service.login(api_client, ADMIN_EMAIL, PASSWORD)
    user = user_service.create_user(api_client, {
        "name": "Ngô Thị K", "email": "ngo.thi.k@example.com", "role": "employee", "password": "s3cret!",
    })
    assert user_service.update_user(api_client, user.id, {"department": "IT"}).department == "IT"
    assert user.id in {u.id for u in user_service.get_users(api_client)}
    user_service.delete_user(api_client, user.id)
    assert user.id not in {u.id for u in user_service.get_users(api_client)}

    unread = [n.id for n in user_service.get_notifications(api_client) if not n.is_read]
    assert unread
    user_service.mark_notification_as_read(api_client, unread[0])
    user_service.mark_all_notifications_as_read(api_client)
    assert all(n.is_read for n in user_service.get_notifications(api_client))
