"""Automatic processing of documents on vault events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path

from .vault import document_key, is_markdown

logger = logging.getLogger(__name__)

DocumentAction = Callable[[Path | str], Awaitable[object]]


class AutoTrigger(str, Enum):
    ON_SAVE = "on-save"
    ON_CREATE = "on-create"
    AFTER_MODIFY = "after-modify"


class VaultEvent(str, Enum):
    MODIFY = "modify"
    CREATE = "create"


# Event each trigger listens to, and its quiescence window in seconds
TRIGGER_BINDINGS: dict[AutoTrigger, tuple[VaultEvent, float]] = {
    AutoTrigger.ON_SAVE: (VaultEvent.MODIFY, 5.0),
    AutoTrigger.ON_CREATE: (VaultEvent.CREATE, 0.0),
    AutoTrigger.AFTER_MODIFY: (VaultEvent.MODIFY, 10.0),
}


class AutoExecutionScheduler:
    """Debounces vault events into document processing runs.

    Each document has at most one pending run; a newer event for the same
    document cancels the pending one and restarts the quiescence window.
    Events are ignored while paused and for non-Markdown documents.
    Documents are keyed by canonical path after ``resolve`` (normally the
    vault's), so different spellings of one path share a run.
    """

    def __init__(
        self,
        action: DocumentAction,
        trigger: AutoTrigger | str = AutoTrigger.ON_SAVE,
        paused: bool = False,
        delay: float | None = None,
        resolve: Callable[[Path | str], Path] = Path,
    ):
        self.action = action
        self.trigger = AutoTrigger(trigger)
        self.event, default_delay = TRIGGER_BINDINGS[self.trigger]
        self.delay = default_delay if delay is None else delay
        self.paused = paused
        self.resolve = resolve
        self._pending: dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def handle_event(self, event: VaultEvent | str, document: Path | str) -> bool:
        """Feed a vault event; returns True if a run was scheduled."""
        if VaultEvent(event) is not self.event:
            return False
        if self.paused:
            logger.debug(f"Auto-tagging paused, ignoring {event} for {document}")
            return False
        if not is_markdown(document):
            return False

        key = document_key(self.resolve(document))
        previous = self._pending.pop(key, None)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.get_running_loop().create_task(self._run_later(key, document))
        self._pending[key] = task
        return True

    async def _run_later(self, key: str, document: Path | str) -> None:
        try:
            if self.delay > 0:
                await asyncio.sleep(self.delay)
            if self.paused:
                return
            await self.action(document)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Automatic processing of {document} failed: {e}")
        finally:
            if self._pending.get(key) is asyncio.current_task():
                del self._pending[key]

    def pause(self) -> str:
        self.paused = True
        logger.info("Auto-tagging paused")
        return "Auto-tagging paused"

    def resume(self) -> str:
        self.paused = False
        logger.info("Auto-tagging resumed")
        return "Auto-tagging resumed"

    def toggle(self) -> str:
        return self.resume() if self.paused else self.pause()

    async def close(self) -> None:
        """Cancel every pending run and wait for the cancellations to settle."""
        tasks = list(self._pending.values())
        self._pending.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
