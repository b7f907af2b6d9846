"""Async client for the lead API.

Wraps ``httpx.AsyncClient``, injects the bearer token when one is configured,
maps HTTP failures onto the leadconsole error taxonomy and normalizes every
list-ish response to ``{"total_count": int, "records": list}``.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from leadconsole.core.errors import (
    NotFoundError,
    TransportError,
    ValidationRejection,
    detail_from_body,
    field_errors_from_body,
)
from leadconsole.core.settings import get_settings

logger = logging.getLogger(__name__)

LEAD_PATH = "/lead/"
LEAD_TIMELINE_PATH = "/lead/{id}/timeline"
LEAD_SOFT_DELETE_PATH = "/lead/soft-delete"
LEAD_RESTORE_PATH = "/lead/restore"
STATUS_LIST_PATH = "/leadstatus/"
SOURCE_LIST_PATH = "/leadsource/"
USER_LIST_PATH = "/user/"
NOTE_PATH = "/leadnote/"
LEAD_NOTES_PATH = "/leadnote/lead/{id}"


def normalize_response(data: Any) -> Dict[str, Any]:
    """Normalize an API payload to ``{"total_count", "records"}``."""
    if isinstance(data, dict) and "records" in data:
        records = data.get("records") or []
        return {"total_count": data.get("total_count") or len(records), "records": records}
    if isinstance(data, list):
        return {"total_count": len(data), "records": data}
    if isinstance(data, dict):
        if "items" in data:
            items = data.get("items") or []
            return {"total_count": data.get("total") or len(items), "records": items}
        return {"total_count": 1, "records": [data]}
    return {"total_count": 0, "records": []}


class LeadsApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        actor_user_id: Optional[int] = None,
    ):
        settings = get_settings()
        self.settings = settings
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = token if token is not None else settings.api_token
        if token:
            headers[settings.auth_header] = f"{settings.auth_scheme} {token}"
        if actor_user_id is not None:
            headers["X-Actor-User-Id"] = str(actor_user_id)
        self._http = httpx.AsyncClient(
            base_url=(base_url or settings.base_url).rstrip("/") + settings.api_prefix,
            headers=headers,
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LeadsApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.RequestError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise TransportError(None, f"Network error: {exc}") from exc

        if response.is_error:
            raise self._error_for(method, path, response)
        if not response.content:
            return normalize_response(None)
        try:
            return normalize_response(response.json())
        except ValueError as exc:
            raise TransportError(response.status_code, "Malformed JSON in response") from exc

    def _error_for(self, method: str, path: str, response: httpx.Response) -> TransportError:
        try:
            body = response.json()
        except ValueError:
            body = None
        detail = detail_from_body(body) or f"HTTP {response.status_code}: {response.reason_phrase}"
        logger.warning("%s %s -> %s %s", method, path, response.status_code, detail)
        if response.status_code == 404:
            return NotFoundError(404, detail)
        if response.status_code in (400, 422):
            return ValidationRejection(response.status_code, detail, field_errors_from_body(body))
        if response.status_code in (401, 403):
            return TransportError(response.status_code, "Unauthorized")
        return TransportError(response.status_code, detail)

    async def get_lead(self, lead_id: int) -> Dict[str, Any]:
        result = await self.request("GET", f"{LEAD_PATH}{lead_id}")
        return _single(result, lead_id)

    async def create_lead(self, body: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.request("POST", LEAD_PATH, json=body)
        return result["records"][0]

    async def update_lead(self, lead_id: int, body: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.request("PUT", f"{LEAD_PATH}{lead_id}", json=body)
        return _single(result, lead_id)

    async def get_activity(self, lead_id: int, offset: int = 0, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        limit = limit if limit is not None else self.settings.timeline_page_size
        result = await self.request(
            "GET", LEAD_TIMELINE_PATH.format(id=lead_id), params={"offset": offset, "limit": limit}
        )
        return result["records"]

    async def list_statuses(self) -> List[Dict[str, Any]]:
        return (await self.request("GET", STATUS_LIST_PATH))["records"]

    async def list_sources(self) -> List[Dict[str, Any]]:
        return (await self.request("GET", SOURCE_LIST_PATH))["records"]

    async def list_users(self) -> List[Dict[str, Any]]:
        return (await self.request("GET", USER_LIST_PATH))["records"]

    async def batch_soft_delete(self, ids: Iterable[int]) -> Dict[str, Any]:
        return await self.request("POST", LEAD_SOFT_DELETE_PATH, json=list(ids))

    async def batch_restore(self, ids: Iterable[int]) -> Dict[str, Any]:
        return await self.request("POST", LEAD_RESTORE_PATH, json=list(ids))

    async def list_notes(self, lead_id: int) -> List[Dict[str, Any]]:
        return (await self.request("GET", LEAD_NOTES_PATH.format(id=lead_id)))["records"]

    async def create_note(self, lead_id: int, body: str, user_id: Optional[int] = None, is_pinned: bool = False) -> Dict[str, Any]:
        payload = {"body": body, "is_pinned": is_pinned, "lead_id": int(lead_id), "user_id": user_id}
        result = await self.request("POST", NOTE_PATH, json=payload)
        return result["records"][0] if result["records"] else {}


def _single(result: Dict[str, Any], lead_id: int) -> Dict[str, Any]:
    if not result["records"]:
        raise NotFoundError(404, f"Lead {lead_id} not found")
    return result["records"][0]
