"""Timeline schemas for lead activity."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

# One server-logged occurrence as received; shape varies by producer.
RawTimelineRecord = Dict[str, Any]


class EventCategory(str, Enum):
    LEAD_CREATED = "LeadCreated"
    ASSIGNED = "Assigned"
    STATUS_CHANGED = "StatusChanged"
    FIELD_CHANGED = "FieldChanged"
    NOTE_ADDED = "NoteAdded"
    EMAIL_SENT = "EmailSent"
    SMS_SENT = "SmsSent"
    CALL_LOGGED = "CallLogged"
    SCORE_UPDATED = "ScoreUpdated"
    GENERIC = "Generic"


class TimelineEntry(BaseModel):
    """Canonical, render-ready timeline row. ``description`` is already HTML-escaped."""

    timestamp: datetime
    category: EventCategory
    title: str
    description: str
    actor_label: str
    marker_class: str = "bg-secondary"
    icon: str = "fa-circle"

    model_config = ConfigDict(frozen=True)
