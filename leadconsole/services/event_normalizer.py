"""Normalization of raw timeline records into canonical entries.

Classification is a first-match rule table over the ``kind``/``type``/``channel``
discriminators. Each category then has one formatter producing an escaped
title and description. Nothing here raises: missing or malformed fields fall
back to placeholders so one bad row cannot blank the whole timeline.
"""

import html
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from leadconsole.core.time import parse_timestamp
from leadconsole.schemas.lookup import LookupDirectory
from leadconsole.schemas.timeline import EventCategory, RawTimelineRecord, TimelineEntry
from leadconsole.services.actor import actor_id_of, resolve_actor

logger = logging.getLogger(__name__)

# (category, kinds, types, channels); first match wins.
CATEGORY_RULES = (
    (EventCategory.LEAD_CREATED, {"LEAD_CREATED"}, {"LEAD_CREATED"}, set()),
    (EventCategory.ASSIGNED, {"ASSIGNED"}, {"ASSIGNED"}, set()),
    (EventCategory.STATUS_CHANGED, {"status", "STATUS_CHANGED"}, {"STATUS_CHANGED"}, set()),
    (EventCategory.FIELD_CHANGED, {"field"}, {"FIELD_CHANGED"}, set()),
    (EventCategory.NOTE_ADDED, {"NOTE_ADDED"}, {"NOTE_ADDED"}, set()),
    (EventCategory.EMAIL_SENT, {"EMAIL_SENT"}, {"EMAIL_SENT"}, {"EMAIL"}),
    (EventCategory.SMS_SENT, {"SMS_SENT"}, {"SMS_SENT"}, {"SMS"}),
    (EventCategory.CALL_LOGGED, {"CALL_LOGGED"}, {"CALL_LOGGED"}, {"PHONE"}),
    (EventCategory.SCORE_UPDATED, {"SCORE_UPDATED"}, {"SCORE_UPDATED"}, set()),
)

CATEGORY_STYLE = {
    EventCategory.LEAD_CREATED: ("bg-success", "fa-star"),
    EventCategory.ASSIGNED: ("bg-primary", "fa-user"),
    EventCategory.STATUS_CHANGED: ("bg-info", "fa-exchange-alt"),
    EventCategory.FIELD_CHANGED: ("bg-warning", "fa-edit"),
    EventCategory.NOTE_ADDED: ("bg-warning", "fa-sticky-note"),
    EventCategory.EMAIL_SENT: ("bg-info", "fa-envelope"),
    EventCategory.SMS_SENT: ("bg-success", "fa-sms"),
    EventCategory.CALL_LOGGED: ("bg-primary", "fa-phone"),
    EventCategory.SCORE_UPDATED: ("bg-warning", "fa-chart-line"),
    EventCategory.GENERIC: ("bg-secondary", "fa-circle"),
}

# Foreign-key fields whose changes carry server-resolved names.
NAMED_FIELD_LABELS = {
    "source_id": "Source",
    "status_id": "Status",
    "assigned_to_user_id": "Assigned To",
}

QUOTE_LIMIT = 100
GENERIC_VALUE_LIMIT = 50
GENERIC_PAYLOAD_KEYS = 3


def escape(value: Any) -> str:
    if value is None or value == "":
        return ""
    return html.escape(str(value), quote=False)


def _discriminator(record: RawTimelineRecord, key: str) -> str:
    value = record.get(key)
    return value if isinstance(value, str) else ""


def classify(record: RawTimelineRecord) -> EventCategory:
    kind = _discriminator(record, "kind")
    type_ = _discriminator(record, "type")
    channel = _discriminator(record, "channel")
    for category, kinds, types, channels in CATEGORY_RULES:
        if kind in kinds or type_ in types or channel in channels:
            return category
    return EventCategory.GENERIC


def _payload(record: RawTimelineRecord) -> Dict[str, Any]:
    payload = record.get("payload")
    return payload if isinstance(payload, dict) else {}


def _first(mapping: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None and value != "":
            return value
    return default


def _quote(text: Any) -> str:
    text = str(text)
    suffix = "..." if len(text) > QUOTE_LIMIT else ""
    return f'<br><em>"{escape(text[:QUOTE_LIMIT])}{suffix}"</em>'


def status_transition_ids(record: RawTimelineRecord) -> Tuple[Any, Any]:
    """Return (from, to) status ids across the historical record shapes."""
    if "from" in record or "to" in record:
        return record.get("from"), record.get("to")
    payload = _payload(record)
    return (
        _first(payload, "from", "old_status_id", "from_status_id"),
        _first(payload, "to", "new_status_id", "to_status_id"),
    )


def _status_label(status_id: Any, fallback_name: Any, directory: LookupDirectory) -> str:
    name = directory.status_name(status_id) if status_id is not None else None
    if name:
        return name
    if fallback_name:
        return str(fallback_name)
    if status_id is not None:
        return f"Status #{status_id}"
    return "Unknown"


def _format_lead_created(record, payload, directory):
    description = "Lead created"
    if payload.get("source"):
        description += f" from {escape(payload['source'])}"
    return "Lead Created", description


def _format_assigned(record, payload, directory):
    user_id = payload.get("user_id")
    assignee = directory.user_name(user_id) if user_id is not None else None
    if not assignee:
        if payload.get("assigned_to"):
            assignee = payload["assigned_to"]
        elif user_id is not None:
            assignee = f"User #{user_id}"
        else:
            assignee = "Unknown"
    return "Lead Assigned", f"Assigned to {escape(assignee)}"


def _format_status_changed(record, payload, directory):
    old_id, new_id = status_transition_ids(record)
    old_status = _status_label(old_id, _first(payload, "old_status", "from_status"), directory)
    new_status = _status_label(new_id, _first(payload, "new_status", "to_status"), directory)
    description = f"Status changed from <strong>{escape(old_status)}</strong> to <strong>{escape(new_status)}</strong>"
    if payload.get("reason"):
        description += f"<br><em>Reason: {escape(payload['reason'])}</em>"
    return "Status Changed", description


def _format_field_changed(record, payload, directory):
    field = _first(payload, "field", "field_name", default="Unknown field")
    old_value = _first(payload, "old", "old_value", default="")
    new_value = _first(payload, "new", "new_value", default="")
    label = NAMED_FIELD_LABELS.get(field)
    if label:
        field = label
        old_value = _first(payload, "old_name", default=old_value)
        new_value = _first(payload, "new_name", default=new_value)
    description = f'<strong>{escape(field)}</strong> changed from "{escape(old_value)}" to "{escape(new_value)}"'
    return "Field Changed", description


def _format_note_added(record, payload, directory):
    description = "Note added"
    text = _first(payload, "note", "body")
    if text:
        description += _quote(text)
    return "Note Added", description


def _format_email_sent(record, payload, directory):
    description = "Email sent"
    if payload.get("subject"):
        description += f"<br><strong>Subject:</strong> {escape(payload['subject'])}"
    return "Email Sent", description


def _format_sms_sent(record, payload, directory):
    description = "SMS sent"
    if payload.get("message"):
        description += _quote(payload["message"])
    return "SMS Sent", description


def _format_call_logged(record, payload, directory):
    description = "Phone call logged"
    if payload.get("duration"):
        description += f"<br><strong>Duration:</strong> {escape(payload['duration'])}"
    if payload.get("outcome"):
        description += f"<br><strong>Outcome:</strong> {escape(payload['outcome'])}"
    return "Call Logged", description


def _format_score_updated(record, payload, directory):
    old_score = _first(payload, "old_score", default=0)
    new_score = _first(payload, "new_score", "score", default=0)
    return "Score Updated", f"Lead score updated from {escape(old_score)} to {escape(new_score)}"


def _format_generic(record, payload, directory):
    title = _discriminator(record, "kind") or _discriminator(record, "type") or "Activity"
    description = escape(payload["description"]) if payload.get("description") else "An activity occurred"
    if payload:
        pairs = "".join(
            f"{escape(key)}: {escape(str(value)[:GENERIC_VALUE_LIMIT])}<br>"
            for key, value in list(payload.items())[:GENERIC_PAYLOAD_KEYS]
        )
        description += f"<br><small>{pairs}</small>"
    return title, description


Formatter = Callable[[RawTimelineRecord, Dict[str, Any], LookupDirectory], Tuple[str, str]]

FORMATTERS: Dict[EventCategory, Formatter] = {
    EventCategory.LEAD_CREATED: _format_lead_created,
    EventCategory.ASSIGNED: _format_assigned,
    EventCategory.STATUS_CHANGED: _format_status_changed,
    EventCategory.FIELD_CHANGED: _format_field_changed,
    EventCategory.NOTE_ADDED: _format_note_added,
    EventCategory.EMAIL_SENT: _format_email_sent,
    EventCategory.SMS_SENT: _format_sms_sent,
    EventCategory.CALL_LOGGED: _format_call_logged,
    EventCategory.SCORE_UPDATED: _format_score_updated,
    EventCategory.GENERIC: _format_generic,
}


def normalize_event(record: RawTimelineRecord, directory: Optional[LookupDirectory] = None) -> TimelineEntry:
    """Turn one raw record into exactly one ``TimelineEntry``."""
    directory = directory or LookupDirectory()
    if not isinstance(record, dict):
        record = {}
    category = classify(record)
    payload = _payload(record)
    try:
        title, description = FORMATTERS[category](record, payload, directory)
    except (TypeError, ValueError, AttributeError, KeyError) as exc:
        logger.warning("Unrenderable %s timeline record %r: %s", category.value, record.get("id"), exc)
        category = EventCategory.GENERIC
        title, description = "Activity", "An activity occurred"
    try:
        actor_label = resolve_actor(actor_id_of(record), directory)
    except (TypeError, ValueError):
        actor_label = "System"
    marker_class, icon = CATEGORY_STYLE[category]
    return TimelineEntry(
        timestamp=parse_timestamp(record.get("ts")),
        category=category,
        title=escape(title) or "Activity",
        description=description,
        actor_label=actor_label,
        marker_class=marker_class,
        icon=icon,
    )
