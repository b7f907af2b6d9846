"""Error taxonomy surfaced by the console's network-facing components."""

from typing import Any, Dict, Optional


class LeadConsoleError(Exception):
    """Base class for every error raised by leadconsole."""


class TransportError(LeadConsoleError):
    """Network or HTTP failure talking to the lead API."""

    def __init__(self, status_code: Optional[int], detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class NotFoundError(TransportError):
    """The lead vanished between read and write."""


class ValidationRejection(TransportError):
    """The server rejected one or more fields on write."""

    def __init__(self, status_code: Optional[int], detail: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(status_code, detail)
        self.field_errors = field_errors or {}


class InvalidTransition(LeadConsoleError):
    """An inline edit was asked to move between states it cannot connect."""


def detail_from_body(body: Any) -> Optional[str]:
    """Pull the human readable reason out of an error response body."""
    if not isinstance(body, dict):
        return None
    detail = body.get("detail") or body.get("message")
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        messages = []
        for item in detail:
            if isinstance(item, dict) and item.get("msg"):
                field = _field_from_loc(item.get("loc"))
                messages.append(f"{field}: {item['msg']}" if field else str(item["msg"]))
            elif isinstance(item, str):
                messages.append(item)
        return "; ".join(messages) or None
    return None


def field_errors_from_body(body: Any) -> Dict[str, str]:
    if not isinstance(body, dict) or not isinstance(body.get("detail"), list):
        return {}
    errors = {}
    for item in body["detail"]:
        if not isinstance(item, dict):
            continue
        field = _field_from_loc(item.get("loc"))
        if field and field not in errors:
            errors[field] = str(item.get("msg", "invalid"))
    return errors


def _field_from_loc(loc) -> Optional[str]:
    # FastAPI locations look like ["body", "status_id"]
    if not isinstance(loc, (list, tuple)) or not loc:
        return None
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or None
