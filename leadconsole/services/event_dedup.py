"""Collapse status transitions that two log producers reported twice.

The status producer writes ``{"kind": "status", "from", "to", "by"}`` while the
generic event envelope writes ``{"kind": "event", "type": "STATUS_CHANGED"}``
for the same transition. Both arrive with the same ``ts``.
"""

import logging
from typing import Dict, List

from leadconsole.schemas.lookup import lookup_key
from leadconsole.schemas.timeline import RawTimelineRecord

logger = logging.getLogger(__name__)

STATUS_KIND = "status"
ENVELOPE_KIND = "event"
STATUS_CHANGED_TYPE = "STATUS_CHANGED"
STATUS_CHANGE_KINDS = frozenset({STATUS_KIND, STATUS_CHANGED_TYPE})


def is_status_change(record: RawTimelineRecord) -> bool:
    """Either discriminator marks a transition, whatever the other one says."""
    return record.get("kind") in STATUS_CHANGE_KINDS or record.get("type") == STATUS_CHANGED_TYPE


def has_actor_attribution(record: RawTimelineRecord) -> bool:
    if record.get("kind") != STATUS_KIND:
        return False
    return record.get("by") is not None or record.get("actor_user_id") is not None


def is_envelope_status_change(record: RawTimelineRecord) -> bool:
    return record.get("kind") == ENVELOPE_KIND and record.get("type") == STATUS_CHANGED_TYPE


def _prefer(candidate: RawTimelineRecord, kept: RawTimelineRecord) -> bool:
    """True when ``candidate`` should replace the record already kept."""
    candidate_rich = has_actor_attribution(candidate)
    kept_rich = has_actor_attribution(kept)
    if candidate_rich != kept_rich:
        return candidate_rich
    # Equal richness: higher record id wins, else first seen stays.
    candidate_id = lookup_key(candidate.get("id"))
    kept_id = lookup_key(kept.get("id"))
    if candidate_id is not None and kept_id is not None:
        return candidate_id > kept_id
    return False


def dedupe_status_changes(records: List[RawTimelineRecord]) -> List[RawTimelineRecord]:
    """Keep at most one status change per exact ``ts`` string.

    Other categories pass through untouched and in order.
    """
    result: List[RawTimelineRecord] = []
    kept_at: Dict[str, int] = {}
    for record in records:
        if not isinstance(record, dict) or not is_status_change(record):
            result.append(record)
            continue
        ts = str(record.get("ts"))
        index = kept_at.get(ts)
        if index is None:
            kept_at[ts] = len(result)
            result.append(record)
        elif _prefer(record, result[index]):
            logger.debug("Replacing duplicate status change at %s with attributed record", ts)
            result[index] = record
        else:
            logger.debug("Dropping duplicate status change at %s", ts)
    return result


def drop_envelope_duplicates(records: List[RawTimelineRecord]) -> List[RawTimelineRecord]:
    """Drop envelope status records when an attributed status record exists."""
    richer_exists = any(
        isinstance(record, dict) and record.get("kind") == STATUS_KIND and record.get("by") is not None
        for record in records
    )
    if not richer_exists:
        return list(records)
    return [record for record in records if not (isinstance(record, dict) and is_envelope_status_change(record))]


def collapse_duplicates(records: List[RawTimelineRecord]) -> List[RawTimelineRecord]:
    return dedupe_status_changes(drop_envelope_duplicates(records))
