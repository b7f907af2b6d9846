"""Lookup directory: id to display-name maps for statuses, sources and users."""

from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


def lookup_key(value: Any) -> Optional[int]:
    """Coerce an id as it appears in JSON (int or numeric string) to a map key."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def user_display_name(user: Dict[str, Any]) -> str:
    if user.get("full_name"):
        return user["full_name"]
    if user.get("first_name") and user.get("last_name"):
        return f"{user['first_name']} {user['last_name']}"
    if user.get("first_name"):
        return user["first_name"]
    if user.get("username"):
        return user["username"]
    if user.get("email"):
        return user["email"]
    return f"User #{user.get('id')}"


def status_display_name(status: Dict[str, Any]) -> str:
    return status.get("name") or status.get("slug") or f"Status {status.get('id')}"


def source_display_name(source: Dict[str, Any]) -> str:
    return source.get("name") or source.get("slug") or f"Source {source.get('id')}"


class LookupDirectory(BaseModel):
    """Immutable snapshot of the lookup lists; rebuilt wholesale on every fetch."""

    statuses: Dict[int, str] = Field(default_factory=dict)
    users: Dict[int, str] = Field(default_factory=dict)
    sources: Dict[int, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_records(
        cls,
        statuses: Iterable[Dict[str, Any]] = (),
        users: Iterable[Dict[str, Any]] = (),
        sources: Iterable[Dict[str, Any]] = (),
    ) -> "LookupDirectory":
        return cls(
            statuses=_index(statuses, status_display_name),
            users=_index(users, user_display_name),
            sources=_index(sources, source_display_name),
        )

    def status_name(self, status_id: Any) -> Optional[str]:
        return self.statuses.get(lookup_key(status_id))

    def user_name(self, user_id: Any) -> Optional[str]:
        return self.users.get(lookup_key(user_id))

    def source_name(self, source_id: Any) -> Optional[str]:
        return self.sources.get(lookup_key(source_id))


def _index(records, namer) -> Dict[int, str]:
    mapping = {}
    for record in records or ():
        if not isinstance(record, dict):
            continue
        key = lookup_key(record.get("id"))
        if key is not None:
            mapping[key] = namer(record)
    return mapping
