from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ApiError(Exception):
    """Raise to return a consistent JSON error response."""

    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self, request_id: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details or {},
                "request_id": request_id,
            }
        }
        return payload


def abort_json(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Convenience wrapper."""
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


class StorefrontError(Exception):
    """Base class of the errors shown to shoppers as messages.

    `domain` is the translation domain the message is looked up in.
    """

    domain = "client"


class ClientError(StorefrontError):
    """Raised by the HTML clients."""

    domain = "client"


class FrontendError(StorefrontError):
    """Raised by the frontend controllers."""

    domain = "controller/frontend"


class ShopError(StorefrontError):
    """Raised when reading shop items (products, services, orders) fails."""

    domain = "mshop"
