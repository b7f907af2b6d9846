from leadconsole.schemas.lookup import LookupDirectory
from leadconsole.schemas.timeline import EventCategory
from leadconsole.services.event_dedup import (
    collapse_duplicates,
    dedupe_status_changes,
    drop_envelope_duplicates,
    is_status_change,
)
from leadconsole.services.timeline import build_timeline


def test_keeps_attributed_status_record_over_envelope():
    rich = {"ts": "T1", "kind": "status", "from": 1, "to": 2, "by": 5}
    envelope = {"ts": "T1", "kind": "event", "type": "STATUS_CHANGED"}
    assert dedupe_status_changes([envelope, rich]) == [rich]
    assert dedupe_status_changes([rich, envelope]) == [rich]


def test_scenario_duplicate_transition_renders_once_with_actor():
    records = [
        {"ts": "T1", "kind": "status", "from": 1, "to": 2, "by": 5},
        {"ts": "T1", "kind": "event", "type": "STATUS_CHANGED"},
    ]
    directory = LookupDirectory.from_records(users=[{"id": 5, "first_name": "Eve", "last_name": "Ops"}])
    entries = build_timeline(records, directory)
    assert len(entries) == 1
    assert entries[0].category is EventCategory.STATUS_CHANGED
    assert entries[0].actor_label == "by Eve Ops"


def test_non_status_records_are_never_removed():
    records = [
        {"ts": "T1", "kind": "LEAD_CREATED"},
        {"ts": "T1", "kind": "LEAD_CREATED"},
        {"ts": "T1", "kind": "status", "from": 1, "to": 2},
        {"ts": "T1", "kind": "field", "payload": {"field": "zip"}},
    ]
    result = collapse_duplicates(records)
    assert [r for r in result if not is_status_change(r)] == [records[0], records[1], records[3]]


def test_different_timestamps_are_not_collapsed():
    records = [
        {"ts": "T1", "kind": "status", "from": 1, "to": 2},
        {"ts": "T2", "kind": "status", "from": 2, "to": 3},
    ]
    assert dedupe_status_changes(records) == records


def test_equal_richness_prefers_higher_record_id():
    first = {"id": 10, "ts": "T1", "type": "STATUS_CHANGED"}
    second = {"id": 11, "ts": "T1", "type": "STATUS_CHANGED"}
    assert dedupe_status_changes([first, second]) == [second]
    assert dedupe_status_changes([second, first]) == [second]


def test_equal_richness_without_ids_keeps_first_seen():
    first = {"ts": "T1", "type": "STATUS_CHANGED", "payload": {"to": 2}}
    second = {"ts": "T1", "type": "STATUS_CHANGED", "payload": {"to": 3}}
    assert dedupe_status_changes([first, second]) == [first]


def test_envelope_filter_requires_richer_record():
    envelope = {"ts": "T9", "kind": "event", "type": "STATUS_CHANGED"}
    assert drop_envelope_duplicates([envelope]) == [envelope]
    rich = {"ts": "T1", "kind": "status", "by": 1}
    assert drop_envelope_duplicates([envelope, rich]) == [rich]


def test_collapse_is_idempotent_and_never_grows():
    records = [
        {"id": 1, "ts": "T1", "kind": "event", "type": "STATUS_CHANGED"},
        {"id": 2, "ts": "T1", "kind": "status", "from": 1, "to": 2, "by": 5},
        {"id": 3, "ts": "T2", "type": "STATUS_CHANGED"},
        {"id": 4, "ts": "T2", "kind": "STATUS_CHANGED"},
        {"id": 5, "ts": "T2", "kind": "NOTE_ADDED"},
        {"id": 6, "ts": "T3", "channel": "SMS"},
    ]
    once = collapse_duplicates(records)
    assert len(once) <= len(records)
    assert collapse_duplicates(once) == once


def test_status_type_counts_even_when_kind_names_another_event():
    mislabeled = {"id": 1, "ts": "T1", "kind": "LEAD_CREATED", "type": "STATUS_CHANGED"}
    rich = {"id": 2, "ts": "T1", "kind": "status", "from": 1, "to": 2, "by": 5}
    assert is_status_change(mislabeled)
    assert is_status_change({"kind": "STATUS_CHANGED"})
    assert not is_status_change({"kind": "field", "type": "FIELD_CHANGED"})
    assert dedupe_status_changes([mislabeled, rich]) == [rich]
