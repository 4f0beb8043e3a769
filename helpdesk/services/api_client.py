"""
Helpdesk API client
Handles bearer authentication and maps HTTP failures onto gateway errors
"""
from typing import Any, Dict, Optional

import httpx
import structlog

from ..config import settings
from ..errors import AuthExpired, RequestFailed, TransportError
from ..store.notifier import Navigator, log_navigation
from .credentials import CredentialStore


log = structlog.get_logger(__name__)

GENERIC_ERROR = "Something went wrong"


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class ApiClient:
    """Client for the helpdesk JSON API.

    Every call carries ``Authorization: Bearer <token>`` when a token is stored.
    A 401 clears the token and redirects to the login path before raising
    ``AuthExpired``; concurrent calls with the same stale token each do so.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        credentials: Optional[CredentialStore] = None,
        navigator: Optional[Navigator] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.credentials = credentials or CredentialStore()
        self._navigate = navigator or log_navigation
        timeout = settings.api_timeout_seconds if timeout is None else timeout
        self._http = http_client or httpx.Client(timeout=timeout)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, body: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(path)
        try:
            response = self._http.request(method, url, headers=self._headers(), json=body, params=params)
        except httpx.TimeoutException as exc:
            log.error("api_request_timeout", method=method, url=url)
            raise TransportError(f"Request timed out: {method} {path}") from exc
        except httpx.TransportError as exc:
            log.error("api_request_transport_error", method=method, url=url, error=str(exc))
            raise TransportError(f"Could not reach the server: {exc}") from exc

        if response.status_code == 401:
            self.credentials.clear_token()
            self._navigate(settings.login_path)
            log.warning("api_session_expired", method=method, url=url)
            raise AuthExpired()

        data = _json_or_none(response)
        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            log.warning("api_request_failed", method=method, url=url, status=response.status_code, message=message)
            raise RequestFailed(response.status_code, message or GENERIC_ERROR, data)
        return data

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, body: Any = None) -> Any:
        return self.request("POST", path, body)

    def put(self, path: str, body: Any = None) -> Any:
        return self.request("PUT", path, body)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def upload_binary(self, presigned_url: str, data: bytes, content_type: str = "application/octet-stream") -> bool:
        """PUT raw bytes to a pre-authorized URL. Never raises."""
        try:
            response = self._http.put(presigned_url, content=data, headers={"Content-Type": content_type})
        except httpx.HTTPError as exc:
            log.error("binary_upload_failed", url=presigned_url, error=str(exc))
            return False
        if not response.is_success:
            log.warning("binary_upload_rejected", url=presigned_url, status=response.status_code)
        return response.is_success

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
