"""Per-field inline edit state machine.

Viewing -> Editing on activate; Editing -> Viewing on cancel or a no-op save;
Editing -> Saving -> Viewing on a successful persist; Saving -> Error ->
Editing on failure, with the control reverted to the original value.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Tuple

from leadconsole.core.errors import InvalidTransition
from leadconsole.core.generation import ViewGeneration
from leadconsole.core.settings import get_settings
from leadconsole.services.read_modify_write import read_modify_write, set_fields

logger = logging.getLogger(__name__)

Persist = Callable[[int, str, Any], Awaitable[Optional[Dict[str, Any]]]]


class EditState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"
    ERROR = "error"


class Flash(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


def field_persister(client) -> Persist:
    """Persist one field through fetch-patch-PUT of the whole lead."""

    async def persist(lead_id: int, field_key: str, value: Any) -> Dict[str, Any]:
        return await read_modify_write(client, lead_id, set_fields(**{field_key: value}))

    return persist


class InlineEditSession:
    def __init__(
        self,
        lead_id: int,
        field_key: str,
        initial_value: Any,
        persist: Persist,
        cache: Optional[Dict[int, Dict[str, Any]]] = None,
        on_change: Optional[Callable[["InlineEditSession"], Any]] = None,
    ):
        settings = get_settings()
        self.lead_id = lead_id
        self.field_key = field_key
        self.persist = persist
        self.cache = cache if cache is not None else {}
        self.on_change = on_change
        self.state = EditState.VIEWING
        self.original_value = initial_value
        self.candidate_value = initial_value
        self.displayed_value = initial_value
        self.last_error: Optional[str] = None
        self.flash: Optional[Flash] = None
        self.success_highlight_seconds = settings.success_highlight_seconds
        self.failure_highlight_seconds = settings.failure_highlight_seconds
        self.generation = ViewGeneration()
        self._flash_handle: Optional[asyncio.TimerHandle] = None
        self._listener_tasks: Set[asyncio.Future] = set()

    @property
    def controls_enabled(self) -> bool:
        return self.state is not EditState.SAVING

    def activate(self) -> None:
        if self.state is EditState.SAVING:
            raise InvalidTransition("Cannot edit while a save is in progress")
        if self.state is EditState.EDITING:
            return
        self.original_value = self.displayed_value
        self.candidate_value = self.displayed_value
        self.last_error = None
        self._transition(EditState.EDITING)

    def set_candidate(self, value: Any) -> None:
        if self.state is not EditState.EDITING:
            raise InvalidTransition(f"Cannot change value while {self.state.value}")
        self.candidate_value = value
        self.displayed_value = value

    def cancel(self) -> None:
        if self.state is not EditState.EDITING:
            raise InvalidTransition(f"Cannot cancel while {self.state.value}")
        self._revert()
        self.last_error = None
        self._transition(EditState.VIEWING)

    async def save(self) -> bool:
        """Persist the candidate value. Returns True when a write happened.

        Failures revert the control, leave the session editable and re-raise.
        """
        if self.state is not EditState.EDITING:
            raise InvalidTransition(f"Cannot save while {self.state.value}")
        if self.candidate_value == self.original_value:
            self._transition(EditState.VIEWING)
            return False

        token = self.generation.begin()
        value = self.candidate_value
        self._transition(EditState.SAVING)
        try:
            updated = await self.persist(self.lead_id, self.field_key, value)
        except Exception as exc:
            if not self.generation.is_current(token):
                logger.debug("Discarding stale save failure for lead %s.%s", self.lead_id, self.field_key)
                return False
            logger.warning("Saving %s on lead %s failed: %s", self.field_key, self.lead_id, exc)
            self.last_error = f"Failed to update {self.field_key}: {exc}"
            self._revert()
            self._transition(EditState.ERROR)
            self._show_flash(Flash.FAILURE, self.failure_highlight_seconds)
            self._transition(EditState.EDITING)
            raise

        if not self.generation.is_current(token):
            logger.debug("Discarding stale save for lead %s.%s", self.lead_id, self.field_key)
            return False
        self._patch_cache(value, updated)
        self.original_value = value
        self.candidate_value = value
        self.displayed_value = value
        self.last_error = None
        self._transition(EditState.VIEWING)
        self._show_flash(Flash.SUCCESS, self.success_highlight_seconds)
        return True

    def detach(self) -> None:
        """The row was closed or re-rendered; drop any in-flight completion."""
        self.generation.invalidate()
        self._clear_flash()
        self.state = EditState.VIEWING

    def _revert(self) -> None:
        self.candidate_value = self.original_value
        self.displayed_value = self.original_value

    def _patch_cache(self, value: Any, updated: Optional[Dict[str, Any]]) -> None:
        entry = self.cache.get(self.lead_id)
        if entry is None:
            return
        if isinstance(updated, dict):
            entry.update(updated)
        entry[self.field_key] = value

    def _transition(self, state: EditState) -> None:
        self.state = state
        if self.on_change is not None:
            result = self.on_change(self)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._listener_tasks.add(task)
                task.add_done_callback(self._listener_done)

    def _listener_done(self, task: asyncio.Future) -> None:
        self._listener_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("on_change listener failed for lead %s field %s", self.lead_id, self.field_key, exc_info=task.exception())

    def _show_flash(self, flash: Flash, seconds: float) -> None:
        self._clear_flash()
        self.flash = flash
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._flash_handle = loop.call_later(seconds, self._clear_flash)

    def _clear_flash(self) -> None:
        if self._flash_handle is not None:
            self._flash_handle.cancel()
            self._flash_handle = None
        self.flash = None


class InlineEditor:
    """Hands out inline edit sessions, one live session per (lead, field)."""

    def __init__(self, persist: Persist, cache: Optional[Dict[int, Dict[str, Any]]] = None):
        self.persist = persist
        self.cache = cache if cache is not None else {}
        self._sessions: Dict[Tuple[int, str], InlineEditSession] = {}

    def session(self, lead_id: int, field_key: str, initial_value: Any, on_change=None) -> InlineEditSession:
        key = (lead_id, field_key)
        existing = self._sessions.get(key)
        if existing is not None and existing.state is not EditState.VIEWING:
            return existing
        if existing is not None:
            existing.detach()
        session = InlineEditSession(
            lead_id, field_key, initial_value, self.persist, cache=self.cache, on_change=on_change
        )
        self._sessions[key] = session
        return session

    def close(self, lead_id: int, field_key: str) -> None:
        session = self._sessions.pop((lead_id, field_key), None)
        if session is not None:
            session.detach()

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.detach()
        self._sessions.clear()
