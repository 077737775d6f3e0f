"""
Persistence scheduling - debounced and immediate writes.

Continuous viewport changes (dragging, wheel spam) coalesce into a single
write once the view has been quiet for the debounce window. Committed
actions flush immediately and cancel whatever was pending.

The timer advances through update(dt), called from the game loop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Mapping

if TYPE_CHECKING:
    from engine.graphics.viewport import ViewportState
    from skilltree.interfaces import DurableStore
    from skilltree.state import PersistedSkillRecord


logger = logging.getLogger(__name__)


class PersistenceScheduler:
    """
    Fire-and-forget writes to a DurableStore.

    Usage:
        scheduler = PersistenceScheduler(save_manager, viewport.get_state, store.persisted_records)
        scheduler.request_viewport_write()   # while dragging
        scheduler.update(dt)                 # every frame
        scheduler.flush_viewport()           # on drag release
    """

    def __init__(
        self,
        store: DurableStore,
        viewport_source: Callable[[], ViewportState],
        progression_source: Callable[[], Mapping[str, PersistedSkillRecord]],
        debounce: float = 0.5,
    ):
        self.store = store
        self.viewport_source = viewport_source
        self.progression_source = progression_source
        self.debounce = debounce

        self._pending = False
        self._timer = 0.0

        # Counters for diagnostics
        self.viewport_writes = 0
        self.progression_writes = 0

    @property
    def pending(self) -> bool:
        """True while a debounced viewport write is waiting."""
        return self._pending

    def request_viewport_write(self) -> None:
        """Schedule a viewport write, restarting the quiescence window."""
        self._pending = True
        self._timer = self.debounce

    def cancel(self) -> None:
        self._pending = False
        self._timer = 0.0

    def update(self, dt: float) -> None:
        """Advance the debounce timer; writes once it runs out."""
        if not self._pending:
            return

        self._timer -= dt
        if self._timer <= 0:
            self.flush_viewport()

    def flush_viewport(self) -> None:
        """Write the viewport now, superseding any pending write."""
        self.cancel()
        try:
            self.store.write_viewport(self.viewport_source())
            self.viewport_writes += 1
        except Exception:
            logger.exception("Viewport write failed")

    def flush_progression(self) -> None:
        """Write progression now; a pending viewport write goes out with it."""
        if self._pending:
            self.flush_viewport()

        try:
            self.store.write_progression(self.progression_source())
            self.progression_writes += 1
        except Exception:
            logger.exception("Progression write failed")
