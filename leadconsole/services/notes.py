"""Notes tab: list a lead's notes newest first with a readable author."""

import logging
from typing import Any, Dict, List, Optional

from leadconsole.core.errors import LeadConsoleError
from leadconsole.core.time import EPOCH, parse_timestamp
from leadconsole.schemas.lookup import LookupDirectory, user_display_name
from leadconsole.schemas.note import NoteEntry

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown User"
PERSON_NAME_KEYS = ("full_name", "first_name", "username", "email")
AUTHOR_NAME_KEYS = ("author_name", "created_by_name", "user_name")


def note_author(note: Dict[str, Any], directory: Optional[LookupDirectory] = None) -> str:
    """Best display name for whoever wrote ``note``."""
    for key in ("user", "author"):
        person = note.get(key)
        if isinstance(person, dict) and any(person.get(name) for name in PERSON_NAME_KEYS):
            return user_display_name(person)
    for key in AUTHOR_NAME_KEYS:
        if note.get(key):
            return str(note[key])
    user_id = note.get("user_id")
    if user_id:
        if directory is not None:
            name = directory.user_name(user_id)
            if name:
                return name
        return f"User #{user_id}"
    return UNKNOWN_AUTHOR


def build_notes(notes: List[Dict[str, Any]], directory: Optional[LookupDirectory] = None) -> List[NoteEntry]:
    """Newest ``created_at`` first; notes without a date sort last."""
    ordered = sorted(
        (note for note in notes if isinstance(note, dict)),
        key=lambda note: parse_timestamp(note.get("created_at")),
        reverse=True,
    )
    entries = []
    for note in ordered:
        created_at = parse_timestamp(note.get("created_at"))
        entries.append(
            NoteEntry(
                id=note.get("id"),
                author=note_author(note, directory),
                body=note.get("body") or "No content",
                created_at=None if created_at == EPOCH else created_at,
                is_pinned=bool(note.get("is_pinned")),
            )
        )
    return entries


async def load_notes(client, lead_id: int) -> List[NoteEntry]:
    """Fetch a lead's notes; authors the server did not embed resolve via the user list."""
    notes = await client.list_notes(lead_id)
    directory = None
    if any(isinstance(note, dict) and note.get("user_id") and not note.get("user") for note in notes):
        try:
            directory = LookupDirectory.from_records(users=await client.list_users())
        except LeadConsoleError as exc:
            logger.warning("Could not load users for note authors: %s", exc)
    return build_notes(notes, directory)
