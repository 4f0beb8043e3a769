"""
Static seed data for demos, the fixture data source and the test suite.
build_snapshot() returns fresh instances on every call.
"""
from typing import Any, Dict, List

from ..schemas.contracts import Assignment, Contract, Project, Squad
from ..schemas.reviews import OutsourceReview
from ..schemas.setup import EnvironmentSetup
from ..schemas.tickets import NotificationMessage, Ticket
from ..schemas.timesheet import LeaveRequest, OvertimeRequest, WorkLogEntry
from ..schemas.users import User
from ..store.snapshot import Snapshot


CURRENT_USER_ID = "user-6"

_USERS: List[Dict[str, Any]] = [
    {"id": "user-1", "name": "Nguyễn Văn A", "email": "nguyen.van.a@example.com", "role": "requester",
     "department": "Marketing", "avatar": "https://i.pravatar.cc/150?img=1", "isActive": True,
     "createdAt": "2025-01-15T08:00:00Z", "lastLogin": "2025-04-12T09:30:00Z"},
    {"id": "user-2", "name": "Trần Thị B", "email": "tran.thi.b@example.com", "role": "agent",
     "department": "IT Support", "avatar": "https://i.pravatar.cc/150?img=2", "isActive": True,
     "createdAt": "2025-01-20T08:00:00Z", "lastLogin": "2025-04-11T14:15:00Z"},
    {"id": "user-3", "name": "Lê Văn C", "email": "le.van.c@example.com", "role": "approver",
     "department": "Engineering", "avatar": "https://i.pravatar.cc/150?img=3", "isActive": True,
     "createdAt": "2025-02-01T08:00:00Z", "lastLogin": "2025-04-10T16:45:00Z"},
    {"id": "user-4", "name": "Phạm Thị D", "email": "pham.thi.d@example.com", "role": "supervisor",
     "department": "HR", "avatar": "https://i.pravatar.cc/150?img=4", "isActive": True,
     "createdAt": "2025-02-10T08:00:00Z", "lastLogin": "2025-04-12T11:20:00Z"},
    {"id": "user-5", "name": "Hoàng Văn E", "email": "hoang.van.e@example.com", "role": "requester",
     "department": "Sales", "avatar": "https://i.pravatar.cc/150?img=5", "isActive": True,
     "createdAt": "2025-02-15T08:00:00Z", "lastLogin": "2025-04-09T10:10:00Z"},
    {"id": "user-6", "name": "Trương Minh F", "email": "truong.minh.f@example.com", "role": "admin",
     "department": "IT Management", "avatar": "https://i.pravatar.cc/150?img=8", "isActive": True,
     "createdAt": "2025-01-05T08:00:00Z", "lastLogin": "2025-04-12T15:30:00Z", "permissions": ["all"]},
    {"id": "user-7", "name": "Đỗ Thị G", "email": "do.thi.g@example.com", "role": "agent",
     "department": "Customer Support", "avatar": "https://i.pravatar.cc/150?img=9", "isActive": False,
     "createdAt": "2025-02-20T08:00:00Z", "lastLogin": "2025-03-15T09:45:00Z"},
    {"id": "user-8", "name": "Võ Thanh H", "email": "vo.thanh.h@example.com", "role": "requester",
     "department": "Finance", "avatar": "https://i.pravatar.cc/150?img=12", "isActive": True,
     "createdAt": "2025-03-01T08:00:00Z", "lastLogin": "2025-04-11T13:50:00Z"},
]


def _users() -> List[User]:
    return [User.model_validate(u) for u in _USERS]


def current_user() -> User:
    return next(u for u in _users() if u.id == CURRENT_USER_ID)


def _tickets(users: Dict[str, User]) -> List[Ticket]:
    comments = {
        "comment-1": {"id": "comment-1", "ticketId": "ticket-1", "userId": "user-2", "userName": "Trần Thị B",
                      "userAvatar": "https://i.pravatar.cc/150?img=2",
                      "content": "Đã tiếp nhận yêu cầu và đang tiến hành xử lý.",
                      "createdAt": "2025-04-11T08:30:00Z"},
        "comment-2": {"id": "comment-2", "ticketId": "ticket-1", "userId": "user-1", "userName": "Nguyễn Văn A",
                      "userAvatar": "https://i.pravatar.cc/150?img=1",
                      "content": "Cảm ơn bạn đã phản hồi. Tôi đang cần gấp quyền truy cập này.",
                      "createdAt": "2025-04-11T09:15:00Z"},
        "comment-3": {"id": "comment-3", "ticketId": "ticket-2", "userId": "user-3", "userName": "Lê Văn C",
                      "userAvatar": "https://i.pravatar.cc/150?img=3",
                      "content": "Bug này đã được ghi nhận trước đó. Đang phối hợp với team Dev để fix.",
                      "createdAt": "2025-04-10T14:20:00Z"},
    }
    attachments = {
        "attachment-1": {"id": "attachment-1", "ticketId": "ticket-2", "fileName": "error_screenshot.png",
                         "fileSize": 1240000, "fileType": "image/png", "url": "/placeholder.svg",
                         "uploadedAt": "2025-04-10T13:45:00Z", "uploadedBy": "user-5"},
        "attachment-2": {"id": "attachment-2", "ticketId": "ticket-3", "fileName": "training_request.pdf",
                         "fileSize": 2560000, "fileType": "application/pdf", "url": "/placeholder.svg",
                         "uploadedAt": "2025-04-09T10:30:00Z", "uploadedBy": "user-1"},
    }
    rows = [
        {"id": "ticket-1", "title": "Cấu hình VPN cho nhân viên mới",
         "description": "Cần setup VPN access cho nhân viên mới vào team Marketing từ ngày 15/04/2025",
         "category": "tech_setup", "status": "in_progress", "priority": "medium",
         "requester": users["user-1"], "assignedTo": users["user-2"], "approvers": [users["user-4"]],
         "tags": ["VPN", "Onboarding"], "createdAt": "2025-04-11T08:00:00Z", "updatedAt": "2025-04-11T09:30:00Z",
         "comments": [comments["comment-1"], comments["comment-2"]]},
        {"id": "ticket-2", "title": "Bug trong module thanh toán",
         "description": "Khi thực hiện thanh toán bằng thẻ Visa, hệ thống báo lỗi 'Invalid transaction'",
         "category": "dev_issues", "status": "pending", "priority": "high",
         "requester": users["user-5"], "assignedTo": users["user-3"],
         "tags": ["Bug", "Payment", "Critical"], "createdAt": "2025-04-10T13:20:00Z",
         "updatedAt": "2025-04-10T14:30:00Z", "comments": [comments["comment-3"]],
         "attachments": [attachments["attachment-1"]]},
        {"id": "ticket-3", "title": "Đề xuất training về React Hooks",
         "description": "Team chúng tôi cần được đào tạo thêm về React Hooks để áp dụng vào dự án mới",
         "category": "mentoring", "status": "approved", "priority": "low",
         "requester": users["user-1"], "assignedTo": users["user-4"], "approvers": [users["user-4"]],
         "tags": ["Training", "React", "Frontend"], "createdAt": "2025-04-09T10:00:00Z",
         "updatedAt": "2025-04-09T15:00:00Z", "attachments": [attachments["attachment-2"]]},
        {"id": "ticket-4", "title": "Yêu cầu xác nhận giờ làm thêm tháng 3/2025",
         "description": "Cần phê duyệt 15 giờ làm thêm trong tháng 3/2025 cho dự án Alpha",
         "category": "hr_matters", "status": "resolved", "priority": "medium",
         "requester": users["user-5"], "assignedTo": users["user-4"], "approvers": [users["user-4"]],
         "tags": ["Overtime", "Approval"], "createdAt": "2025-04-08T09:00:00Z", "updatedAt": "2025-04-08T17:00:00Z"},
        {"id": "ticket-5", "title": "Cấp quyền truy cập GitHub repository",
         "description": "Cần quyền Contributor cho repo 'frontend-main' để thực hiện công việc",
         "category": "dev_issues", "status": "pending", "priority": "medium",
         "requester": users["user-1"], "tags": ["Access Rights", "GitHub"],
         "createdAt": "2025-04-12T10:30:00Z", "updatedAt": "2025-04-12T10:30:00Z"},
    ]
    return [Ticket.model_validate(t) for t in rows]


_NOTIFICATIONS = [
    {"id": "notif-1", "userId": "user-1", "title": "Ticket đã được phản hồi",
     "message": "Trần Thị B đã phản hồi ticket 'Cấu hình VPN cho nhân viên mới'",
     "isRead": False, "createdAt": "2025-04-11T08:35:00Z", "ticketId": "ticket-1"},
    {"id": "notif-2", "userId": "user-1", "title": "Ticket được phê duyệt",
     "message": "Phạm Thị D đã phê duyệt ticket 'Đề xuất training về React Hooks'",
     "isRead": True, "createdAt": "2025-04-09T15:10:00Z", "ticketId": "ticket-3"},
    {"id": "notif-3", "userId": "user-2", "title": "Ticket mới được giao",
     "message": "Bạn được giao xử lý ticket 'Cấu hình VPN cho nhân viên mới'",
     "isRead": False, "createdAt": "2025-04-11T08:10:00Z", "ticketId": "ticket-1"},
    {"id": "notif-4", "userId": "user-6", "title": "Yêu cầu làm thêm giờ mới",
     "message": "Lê Văn C đã gửi yêu cầu làm thêm giờ ngày 2025-04-12",
     "type": "request", "isRead": False, "createdAt": "2025-04-12T18:05:00Z"},
    {"id": "notif-5", "userId": "user-6", "title": "Thông báo bảo trì hệ thống",
     "message": "Hệ thống VPN sẽ bảo trì vào 22:00 ngày 2025-04-15",
     "type": "announcement", "isRead": True, "createdAt": "2025-04-10T07:00:00Z"},
]

_OVERTIME = [
    {"id": "ot-1", "userId": "user-3", "userName": "Lê Văn C", "date": "2025-04-12", "startTime": "18:00",
     "endTime": "21:00", "totalHours": 3, "reason": "Hotfix module thanh toán", "status": "pending",
     "createdAt": "2025-04-12T18:00:00Z", "updatedAt": "2025-04-12T18:00:00Z"},
    {"id": "ot-2", "userId": "user-6", "userName": "Trương Minh F", "date": "2025-04-05", "startTime": "09:00",
     "endTime": "13:00", "totalHours": 4, "reason": "Nâng cấp máy chủ cuối tuần", "status": "approved",
     "approverId": "user-4", "approverName": "Phạm Thị D",
     "createdAt": "2025-04-04T10:00:00Z", "updatedAt": "2025-04-04T16:00:00Z"},
]

_WORK_LOGS = [
    {"id": "worklog-1", "userId": "user-6", "date": "2025-04-07", "startTime": "08:30", "endTime": "17:30",
     "hours": 9, "description": "Review hạ tầng mạng", "projectId": "project-1", "projectName": "Helpdesk Portal",
     "createdAt": "2025-04-07T17:35:00Z", "updatedAt": "2025-04-07T17:35:00Z"},
    {"id": "worklog-2", "userId": "user-6", "date": "2025-04-08", "startTime": "08:30", "endTime": "12:00",
     "hours": 3.5, "description": "Họp kế hoạch quý", "createdAt": "2025-04-08T12:05:00Z",
     "updatedAt": "2025-04-08T12:05:00Z"},
    {"id": "worklog-3", "userId": "user-1", "date": "2025-04-08", "startTime": "09:00", "endTime": "18:00",
     "hours": 9, "description": "Chiến dịch marketing tháng 4", "createdAt": "2025-04-08T18:05:00Z",
     "updatedAt": "2025-04-08T18:05:00Z"},
]

_LEAVES = [
    {"id": "leave-1", "userId": "user-1", "userName": "Nguyễn Văn A", "type": "annual", "startDate": "2025-04-21",
     "endDate": "2025-04-22", "totalDays": 2, "reason": "Việc gia đình", "status": "pending",
     "createdAt": "2025-04-10T08:00:00Z", "updatedAt": "2025-04-10T08:00:00Z"},
    {"id": "leave-2", "userId": "user-6", "userName": "Trương Minh F", "type": "sick", "startDate": "2025-04-09",
     "endDate": "2025-04-09", "totalDays": 1, "status": "approved", "approverId": "user-4",
     "approverName": "Phạm Thị D", "createdAt": "2025-04-09T07:00:00Z", "updatedAt": "2025-04-09T09:00:00Z"},
]

_REVIEWS = [
    {"id": "review-1", "revieweeId": "user-2", "revieweeName": "Trần Thị B", "reviewerId": "user-4",
     "reviewerName": "Phạm Thị D", "projectId": "project-1", "projectName": "Helpdesk Portal",
     "reviewDate": "2025-03-31",
     "criteria": {"technicalQuality": 4, "professionalAttitude": 5, "communication": 4,
                  "ruleCompliance": 5, "initiative": 3},
     "strengths": "Phản hồi nhanh, thái độ tốt", "areasToImprove": "Chủ động đề xuất cải tiến",
     "createdAt": "2025-03-31T10:00:00Z", "updatedAt": "2025-03-31T10:00:00Z"},
]

_SETUPS = [
    {"id": "setup-1", "employeeId": "user-8", "employeeName": "Võ Thanh H", "deviceType": "laptop",
     "setupLocation": "onsite", "requestDate": "2025-04-01", "responsibleId": "user-2",
     "responsibleName": "Trần Thị B", "status": "in_progress",
     "items": [
         {"id": "item-1", "title": "Cấp phát laptop", "category": "device", "status": "done",
          "completedAt": "2025-04-02T09:00:00Z", "createdAt": "2025-04-01T08:00:00Z",
          "updatedAt": "2025-04-02T09:00:00Z"},
         {"id": "item-2", "title": "Đăng ký MDM", "category": "mdm", "status": "in_progress",
          "createdAt": "2025-04-01T08:00:00Z", "updatedAt": "2025-04-02T10:00:00Z"},
         {"id": "item-3", "title": "Tạo tài khoản email", "category": "account", "status": "pending",
          "createdAt": "2025-04-01T08:00:00Z", "updatedAt": "2025-04-01T08:00:00Z"},
     ],
     "createdAt": "2025-04-01T08:00:00Z", "updatedAt": "2025-04-02T10:00:00Z"},
]

_CONTRACTS = [
    {"id": "contract-1", "contractNumber": "HD-2025-001", "contractType": "outsource", "staffName": "Trần Thị B",
     "staffId": "user-2", "company": "ABC Outsourcing", "startDate": "2025-01-20", "endDate": "2025-12-31",
     "expiryDate": "2025-12-31", "status": "active", "value": 240000000, "currency": "VND",
     "documents": [
         {"id": "document-1", "contractId": "contract-1", "name": "Hợp đồng chính.pdf", "type": "pdf",
          "url": "/placeholder.svg", "size": 512000, "uploadedAt": "2025-01-20T09:00:00Z",
          "uploadedBy": "user-4", "uploadedByName": "Phạm Thị D"},
     ],
     "createdAt": "2025-01-20T09:00:00Z", "updatedAt": "2025-01-20T09:00:00Z"},
    {"id": "contract-2", "contractNumber": "NDA-2025-014", "contractType": "nda", "staffName": "Lê Văn C",
     "staffId": "user-3", "startDate": "2025-02-01", "status": "pending",
     "createdAt": "2025-02-01T09:00:00Z", "updatedAt": "2025-02-01T09:00:00Z"},
]

_SQUADS = [
    {"id": "squad-1", "name": "Platform", "description": "Hạ tầng và công cụ nội bộ", "managerId": "user-4",
     "managerName": "Phạm Thị D", "createdAt": "2025-01-10T08:00:00Z"},
    {"id": "squad-2", "name": "Payments", "managerId": "user-3", "managerName": "Lê Văn C",
     "createdAt": "2025-01-12T08:00:00Z"},
]

_PROJECTS = [
    {"id": "project-1", "name": "Helpdesk Portal", "status": "active", "squadId": "squad-1",
     "squadName": "Platform", "startDate": "2025-02-01", "createdAt": "2025-01-15T08:00:00Z"},
    {"id": "project-2", "name": "Checkout Revamp", "status": "upcoming", "squadId": "squad-2",
     "squadName": "Payments", "startDate": "2025-06-01", "createdAt": "2025-03-01T08:00:00Z"},
]

_ASSIGNMENTS = [
    {"id": "assignment-1", "staffId": "user-2", "staffName": "Trần Thị B", "role": "developer",
     "squadId": "squad-1", "squadName": "Platform", "projectId": "project-1", "projectName": "Helpdesk Portal",
     "startDate": "2025-02-01", "status": "active", "utilization": 80,
     "createdAt": "2025-02-01T08:00:00Z", "updatedAt": "2025-02-01T08:00:00Z"},
    {"id": "assignment-2", "staffId": "user-3", "staffName": "Lê Văn C", "role": "qa",
     "squadId": "squad-2", "squadName": "Payments", "projectId": "project-2", "projectName": "Checkout Revamp",
     "startDate": "2025-06-01", "status": "upcoming", "utilization": 50,
     "createdAt": "2025-03-05T08:00:00Z", "updatedAt": "2025-03-05T08:00:00Z"},
]


def build_snapshot() -> Snapshot:
    users = _users()
    by_id = {u.id: u for u in users}
    return Snapshot(
        users=users,
        tickets=_tickets(by_id),
        notifications=[NotificationMessage.model_validate(n) for n in _NOTIFICATIONS],
        overtime_requests=[OvertimeRequest.model_validate(o) for o in _OVERTIME],
        work_logs=[WorkLogEntry.model_validate(w) for w in _WORK_LOGS],
        leave_requests=[LeaveRequest.model_validate(lv) for lv in _LEAVES],
        reviews=[OutsourceReview.model_validate(r) for r in _REVIEWS],
        environment_setups=[EnvironmentSetup.model_validate(s) for s in _SETUPS],
        contracts=[Contract.model_validate(c) for c in _CONTRACTS],
        squads=[Squad.model_validate(s) for s in _SQUADS],
        projects=[Project.model_validate(p) for p in _PROJECTS],
        assignments=[Assignment.model_validate(a) for a in _ASSIGNMENTS],
    )
