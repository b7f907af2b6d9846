"""Timeline reconciliation: fetch, collapse duplicates, normalize, sort."""

import asyncio
import inspect
import logging
from typing import Any, Callable, List, Optional

from leadconsole.core.generation import ViewGeneration
from leadconsole.core.settings import get_settings
from leadconsole.schemas.lookup import LookupDirectory
from leadconsole.schemas.timeline import TimelineEntry
from leadconsole.services.event_dedup import collapse_duplicates
from leadconsole.services.event_normalizer import normalize_event

logger = logging.getLogger(__name__)


def build_timeline(records: List[Any], directory: LookupDirectory) -> List[TimelineEntry]:
    """Pure part of reconciliation; newest first, ties keep fetch order."""
    entries = [normalize_event(record, directory) for record in collapse_duplicates(list(records))]
    return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)


class TimelineReconciler:
    def __init__(self, client, page_size: Optional[int] = None):
        self.client = client
        self.page_size = page_size or get_settings().timeline_page_size
        self.generation = ViewGeneration()
        self.lead_id: Optional[int] = None

    async def fetch_directory(self) -> LookupDirectory:
        statuses, users, sources = await asyncio.gather(
            self.client.list_statuses(),
            self.client.list_users(),
            self.client.list_sources(),
            return_exceptions=True,
        )
        return LookupDirectory.from_records(
            statuses=_records_or_empty("status", statuses),
            users=_records_or_empty("user", users),
            sources=_records_or_empty("source", sources),
        )

    async def reconcile(self, lead_id: int) -> List[TimelineEntry]:
        """Fetch activity and lookups concurrently and return the ordered timeline.

        An activity fetch failure propagates. Lookup failures degrade to an
        empty directory so ids render as placeholders.
        """
        records, directory = await asyncio.gather(
            self.client.get_activity(lead_id, offset=0, limit=self.page_size),
            self.fetch_directory(),
            return_exceptions=True,
        )
        if isinstance(records, BaseException):
            logger.warning("Could not load timeline for lead %s: %s", lead_id, records)
            raise records
        if isinstance(directory, BaseException):
            raise directory
        entries = build_timeline(records, directory)
        logger.debug("Reconciled %d timeline entries for lead %s", len(entries), lead_id)
        return entries

    async def show(
        self,
        lead_id: int,
        render: Callable[[List[TimelineEntry]], Any],
        render_error: Optional[Callable[[Exception], Any]] = None,
    ) -> bool:
        """Reconcile for the current view and hand the result to ``render``.

        Returns False when the view moved on before the fetch completed; the
        result is then discarded instead of written into a stale pane.
        """
        self.lead_id = lead_id
        token = self.generation.begin()
        try:
            entries = await self.reconcile(lead_id)
        except Exception as exc:
            if not self.generation.is_current(token):
                logger.debug("Discarding stale timeline failure for lead %s", lead_id)
                return False
            if render_error is None:
                raise
            await _maybe_await(render_error(exc))
            return False
        if not self.generation.is_current(token):
            logger.debug("Discarding stale timeline for lead %s", lead_id)
            return False
        await _maybe_await(render(entries))
        return True

    def close(self) -> None:
        self.lead_id = None
        self.generation.invalidate()


def _records_or_empty(name: str, result: Any) -> List[Any]:
    if isinstance(result, BaseException):
        logger.warning("Could not load %s lookup list: %s", name, result)
        return []
    return result or []


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value
