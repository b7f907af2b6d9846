"""Batch job progress record."""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field


class BatchOutcome(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"


class BatchJob(BaseModel):
    """Progress of one mutation across a fixed snapshot of lead ids."""

    ids: Tuple[int, ...]
    total: int
    completed_count: int = 0
    failed_count: int = 0
    per_item_error: Dict[int, str] = Field(default_factory=dict)

    @classmethod
    def for_ids(cls, ids) -> "BatchJob":
        snapshot = tuple(ids)
        return cls(ids=snapshot, total=len(snapshot))

    @property
    def is_terminal(self) -> bool:
        return self.completed_count + self.failed_count == self.total

    @property
    def outcome(self) -> BatchOutcome:
        if not self.is_terminal:
            return BatchOutcome.RUNNING
        if self.failed_count:
            return BatchOutcome.PARTIAL_FAILURE
        return BatchOutcome.SUCCESS

    @property
    def failed_ids(self) -> Tuple[int, ...]:
        return tuple(lead_id for lead_id in self.ids if lead_id in self.per_item_error)

    @property
    def message(self) -> str:
        if self.outcome is BatchOutcome.PARTIAL_FAILURE:
            return f"Updated {self.completed_count}; failed {self.failed_count}"
        if self.outcome is BatchOutcome.SUCCESS:
            noun = "lead" if self.completed_count == 1 else "leads"
            return f"Updated {self.completed_count} {noun}"
        return f"Processed {self.completed_count + self.failed_count} of {self.total}"

    def record_success(self, lead_id: int) -> None:
        self.completed_count += 1

    def record_failure(self, lead_id: int, reason: Optional[str]) -> None:
        self.failed_count += 1
        self.per_item_error[lead_id] = reason or "Unknown error"
