from typing import Any, Dict, List, Union

from ..schemas.common import to_wire_payload
from ..schemas.files import UploadUrlRequest, UploadUrlResponse
from ..schemas.tickets import Attachment, Comment, Ticket, TicketCreate
from .api_client import ApiClient
from .uploads import upload_then_register


def get_tickets(client: ApiClient) -> List[Ticket]:
    return [Ticket.model_validate(t) for t in client.get("/tickets")]


def get_ticket(client: ApiClient, ticket_id: str) -> Ticket:
    return Ticket.model_validate(client.get(f"/tickets/{ticket_id}"))


def create_ticket(client: ApiClient, data: Union[TicketCreate, Dict[str, Any]]) -> Ticket:
    return Ticket.model_validate(client.post("/tickets", to_wire_payload(data)))


def update_ticket(client: ApiClient, ticket_id: str, updates: Dict[str, Any]) -> Ticket:
    return Ticket.model_validate(client.put(f"/tickets/{ticket_id}", to_wire_payload(updates)))


def delete_ticket(client: ApiClient, ticket_id: str) -> None:
    client.delete(f"/tickets/{ticket_id}")


def add_comment(client: ApiClient, ticket_id: str, content: str) -> Comment:
    return Comment.model_validate(client.post(f"/tickets/{ticket_id}/comments", {"content": content}))


def get_upload_url(client: ApiClient, file_info: UploadUrlRequest) -> UploadUrlResponse:
    return UploadUrlResponse.model_validate(client.post("/tickets/attachments/upload-url", file_info.to_wire()))


def upload_attachment(client: ApiClient, ticket_id: str, file_name: str, file_type: str, data: bytes) -> Attachment:
    target = UploadUrlRequest(file_name=file_name, file_type=file_type, file_size=len(data), ticket_id=ticket_id)

    def _register(issued: UploadUrlResponse) -> Attachment:
        return Attachment.model_validate(client.post(f"/tickets/{ticket_id}/attachments", {
            "fileId": issued.file_id,
            "fileName": file_name,
            "fileType": file_type,
            "fileSize": len(data),
        }))

    return upload_then_register(client, "/tickets/attachments/upload-url", target, data, _register)
