"""Fetch-patch-PUT for the full-representation lead update endpoint."""

import logging
from typing import Any, Callable, Dict, Optional

from leadconsole.schemas.lead import COMPUTED_FIELDS

logger = logging.getLogger(__name__)

Patch = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]


def strip_computed_fields(record: Dict[str, Any]) -> Dict[str, Any]:
    """Drop read-only fields and embedded relationship objects."""
    return {
        key: value
        for key, value in record.items()
        if key not in COMPUTED_FIELDS and not isinstance(value, dict)
    }


def set_fields(**values: Any) -> Patch:
    def patch(body: Dict[str, Any]) -> Dict[str, Any]:
        body.update(values)
        return body

    return patch


async def read_modify_write(client, lead_id: int, patch: Patch) -> Dict[str, Any]:
    """GET the lead, apply ``patch`` to its writable fields, PUT it back.

    ``patch`` may mutate the body in place or return a replacement.
    Returns the server's updated representation.
    """
    current = await client.get_lead(lead_id)
    body = strip_computed_fields(current)
    patched = patch(body)
    if patched is not None:
        body = patched
    logger.debug("PUT lead %s with fields %s", lead_id, sorted(body))
    return await client.update_lead(lead_id, body)
