from typing import Any, Dict, List, Union

from ..schemas.common import to_wire_payload
from ..schemas.contracts import Contract, ContractCreate, Document, DocumentCreate
from ..schemas.files import DownloadUrlResponse, UploadUrlRequest, UploadUrlResponse
from .api_client import ApiClient
from .uploads import upload_then_register


def get_contracts(client: ApiClient) -> List[Contract]:
    return [Contract.model_validate(c) for c in client.get("/contracts")]


def get_contract(client: ApiClient, contract_id: str) -> Contract:
    return Contract.model_validate(client.get(f"/contracts/{contract_id}"))


def create_contract(client: ApiClient, data: Union[ContractCreate, Dict[str, Any]]) -> Contract:
    return Contract.model_validate(client.post("/contracts", to_wire_payload(data)))


def update_contract(client: ApiClient, contract_id: str, updates: Dict[str, Any]) -> Contract:
    return Contract.model_validate(client.put(f"/contracts/{contract_id}", to_wire_payload(updates)))


def delete_contract(client: ApiClient, contract_id: str) -> None:
    client.delete(f"/contracts/{contract_id}")


def get_document_download_url(client: ApiClient, contract_id: str, document_id: str) -> str:
    response = client.get(f"/contracts/{contract_id}/documents/{document_id}/download")
    return DownloadUrlResponse.model_validate(response).download_url


def get_upload_url(client: ApiClient, file_info: UploadUrlRequest) -> UploadUrlResponse:
    return UploadUrlResponse.model_validate(client.post("/contracts/upload", file_info.to_wire()))


def upload_document(
    client: ApiClient,
    contract_id: str,
    document: DocumentCreate,
    file_type: str,
    data: bytes,
) -> Document:
    target = UploadUrlRequest(file_name=document.name, file_type=file_type, file_size=len(data), contract_id=contract_id)

    def _register(issued: UploadUrlResponse) -> Document:
        body = document.model_copy(update={"file_id": issued.file_id, "size": len(data)}).to_wire()
        return Document.model_validate(client.post(f"/contracts/{contract_id}/documents", body))

    return upload_then_register(client, "/contracts/upload", target, data, _register)
