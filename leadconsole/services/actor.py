"""Actor attribution for timeline rows."""

from typing import Any, Optional

from leadconsole.schemas.lookup import LookupDirectory, lookup_key
from leadconsole.schemas.timeline import RawTimelineRecord

SYSTEM_LABEL = "System"


def actor_id_of(record: RawTimelineRecord) -> Optional[Any]:
    # The status producer attributes via "by"; everything else via actor_user_id.
    if record.get("actor_user_id") is not None:
        return record["actor_user_id"]
    return record.get("by")


def resolve_actor(actor_id: Any, directory: LookupDirectory) -> str:
    if actor_id is None or actor_id == "":
        return SYSTEM_LABEL
    name = directory.user_name(actor_id)
    if name:
        return f"by {name}"
    if isinstance(actor_id, str) and lookup_key(actor_id) is None:
        return f"by {actor_id}"
    return f"by User #{actor_id}"
