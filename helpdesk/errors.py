"""Error taxonomy shared by the gateway, the store and the API."""

from typing import Optional


class HelpdeskError(Exception):
    """Base exception for every failure raised by this package."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ----- Gateway -----
class GatewayError(HelpdeskError):
    pass


class AuthExpired(GatewayError):
    """401 from the backend; the stored credential has already been cleared."""

    def __init__(self, message: str = "Session expired. Please login again.") -> None:
        super().__init__(message)


class RequestFailed(GatewayError):
    """Non-2xx response other than 401."""

    def __init__(self, status_code: int, message: str, body: Optional[object] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.message}"


class TransportError(GatewayError):
    """Connection failure or timeout; nothing reached the application layer."""
    pass


class UploadFailed(GatewayError):
    pass


# ----- Store -----
class ValidationRejected(HelpdeskError):
    """An operation refused because it would break an explicit invariant."""
    pass


class SelfDeleteRejected(ValidationRejected):
    def __init__(self, message: str = "You cannot delete your own account") -> None:
        super().__init__(message)


class InvalidTransition(ValidationRejected):
    def __init__(self, entity: str, current: str, requested: str) -> None:
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(f"{entity} cannot move from '{current}' to '{requested}'")


class PermissionDenied(ValidationRejected):
    pass
