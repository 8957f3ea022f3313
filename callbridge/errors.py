# callbridge/errors.py
from typing import Optional


class CallBridgeError(Exception):
    """Base for errors surfaced to webhook/admin callers."""

    status_code: int = 500
    reason: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, reason: Optional[str] = None, message: Optional[str] = None):
        self.reason = reason or self.reason
        self.message = message or self.default_message
        super().__init__(f"{self.reason}: {self.message}")

    def to_dict(self) -> dict:
        return {"success": False, "error": self.reason, "message": self.message}


class RequestRejected(CallBridgeError):
    """Validation failure or unresolved tenant. Never retried by us."""

    status_code = 400
    reason = "invalid_payload"
    default_message = "Invalid request"


class Unauthorized(CallBridgeError):
    status_code = 403
    reason = "unauthorized"
    default_message = "Unauthorized"
