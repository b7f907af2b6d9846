"""Activity logging for the server of record."""

from typing import Any, Dict, Optional

from leadconsole.core.time import utc_now
from leadconsole.server.models.event import LeadEvent


def event_timestamp() -> str:
    return utc_now().isoformat()


def log_event(
    db,
    lead_id: int,
    ts: Optional[str] = None,
    *,
    kind: Optional[str] = None,
    type: Optional[str] = None,
    channel: Optional[str] = None,
    actor_user_id: Optional[int] = None,
    by: Optional[int] = None,
    from_status_id: Optional[int] = None,
    to_status_id: Optional[int] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> LeadEvent:
    event = LeadEvent(
        lead_id=lead_id,
        ts=ts or event_timestamp(),
        kind=kind,
        type=type,
        channel=channel,
        actor_user_id=actor_user_id,
        by=by,
        from_status_id=from_status_id,
        to_status_id=to_status_id,
        payload=payload,
    )
    db.add(event)
    return event


def log_status_change(db, lead_id: int, old_status_id: int, new_status_id: int, actor_user_id: Optional[int], ts: str, reason: Optional[str] = None) -> None:
    """Record one transition the way both upstream producers do."""
    log_event(
        db,
        lead_id,
        ts,
        kind="status",
        by=actor_user_id,
        from_status_id=old_status_id,
        to_status_id=new_status_id,
    )
    payload = {"from_status_id": old_status_id, "to_status_id": new_status_id}
    if reason:
        payload["reason"] = reason
    log_event(db, lead_id, ts, kind="event", type="STATUS_CHANGED", actor_user_id=actor_user_id, payload=payload)
