"""Bulk-action selection of leads in the list view."""

from typing import Iterable, Tuple

from leadconsole.schemas.batch import BatchJob, BatchOutcome


class LeadSelection:
    def __init__(self, ids: Iterable[int] = ()):
        self._ids = dict.fromkeys(ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, lead_id) -> bool:
        return lead_id in self._ids

    def toggle(self, lead_id: int) -> None:
        if lead_id in self._ids:
            del self._ids[lead_id]
        else:
            self._ids[lead_id] = None

    def select(self, lead_id: int) -> None:
        self._ids[lead_id] = None

    def clear(self) -> None:
        self._ids.clear()

    def snapshot(self) -> Tuple[int, ...]:
        """Ids in selection order, frozen for a batch submission."""
        return tuple(self._ids)

    def settle(self, job: BatchJob) -> bool:
        """Clear after a fully successful job; keep everything on partial failure.

        Returns True when the list should be reloaded.
        """
        if job.outcome is BatchOutcome.SUCCESS:
            self.clear()
            return True
        return False
