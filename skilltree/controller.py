"""
Skill tree page controller.

Wires the catalog, progression store, purchase engine, viewport and
persistence together and exposes the operations the game calls:

    controller = SkillTreeController.from_data("data", "saves", wallet, upgrades)
    controller.purchase("root")
    controller.zoom_at(640, 360, 1.1)
    snapshot = controller.snapshot()      # once per frame
    controller.update(dt)                 # once per frame
    controller.reset_session()            # back to main menu
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from engine.core.events import EventBus, ProgressionEvent
from engine.graphics.viewport import Viewport, ViewportState
from engine.resources.database import Database
from skilltree.catalog import SkillCatalog, SkillDefinition
from skilltree.config import SkillTreeConfig
from skilltree.effects import StatEngine
from skilltree.graph import ConnectivityGraph
from skilltree.interfaces import CueEmitter, CurrencyWallet, DurableStore, UpgradeStateSink
from skilltree.layout import GridLayout
from skilltree.purchase import PurchaseEngine, PurchaseResult
from skilltree.render import RenderSnapshot, TooltipContent, build_snapshot, tooltip_content
from skilltree.save.manager import SaveManager
from skilltree.save.scheduler import PersistenceScheduler
from skilltree.state import ProgressionStore
from skilltree.visibility import visible_ids, visible_nodes


logger = logging.getLogger(__name__)


class SkillTreeController:
    """
    Interaction and state facade for the skill tree page.

    All mutation happens synchronously inside these calls; snapshot() is a
    read-only pass over the current state.
    """

    def __init__(
        self,
        catalog: SkillCatalog,
        layout: GridLayout,
        wallet: CurrencyWallet,
        sink: UpgradeStateSink,
        durable_store: DurableStore | None = None,
        cues: CueEmitter | None = None,
        event_bus: EventBus | None = None,
        config: SkillTreeConfig | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.config = config or SkillTreeConfig(root_id=catalog.root_id)
        self.event_bus = event_bus
        self.layout = layout
        self._clock = clock

        self.graph = ConnectivityGraph(catalog, self.config.root_id)
        self.progression = ProgressionStore(catalog, self.graph)
        self.viewport = Viewport(
            min_scale=self.config.min_scale,
            max_scale=self.config.max_scale,
            event_bus=event_bus,
        )

        self.scheduler: PersistenceScheduler | None = None
        if durable_store is not None:
            self.scheduler = PersistenceScheduler(
                durable_store,
                self.viewport.get_state,
                self.progression.persisted_records,
                debounce=self.config.save_debounce,
            )

        self.purchases = PurchaseEngine(
            self.progression,
            wallet,
            sink,
            stats=StatEngine(self.progression),
            cues=cues,
            scheduler=self.scheduler,
            event_bus=event_bus,
        )

        # Interaction state
        self._hovered_id: str | None = None
        self._clicked_at: dict[str, float] = {}
        self._radii: dict[str, float] = {}

    @classmethod
    def from_data(
        cls,
        data_path: str | Path,
        save_path: str | Path,
        wallet: CurrencyWallet,
        sink: UpgradeStateSink,
        cues: CueEmitter | None = None,
        event_bus: EventBus | None = None,
        config: SkillTreeConfig | None = None,
    ) -> SkillTreeController:
        """Load catalog and layout from disk, then restore saved progress and camera."""
        config = config or SkillTreeConfig()

        database = Database(data_path)
        database.load_all()

        catalog = SkillCatalog.from_database(database, root_id=config.root_id)
        layout = GridLayout(
            database.layout,
            grid_size=config.grid_size,
            origin_x=config.grid_origin_x,
            origin_y=config.grid_origin_y,
        )
        unplaced = layout.missing(catalog.ids())
        if unplaced:
            logger.warning(f"Skills without layout cells: {unplaced}")

        save_manager = SaveManager(save_path, event_bus=event_bus)
        controller = cls(catalog, layout, wallet, sink, durable_store=save_manager,
                         cues=cues, event_bus=event_bus, config=config)
        controller.restore_progress(save_manager.read_progression())
        controller.center_view(save_manager.read_viewport())
        return controller

    # Progression

    def effective_level(self, skill_id: str) -> int:
        return self.progression.effective_level(skill_id)

    def cost(self, skill_id: str) -> int:
        return self.purchases.cost(skill_id)

    def purchase(self, skill_id: str) -> PurchaseResult:
        """Buy the next level of a skill (rejections leave all state unchanged)."""
        result = self.purchases.purchase(skill_id)
        if result.success:
            self._clicked_at[skill_id] = self._clock()
        return result

    def reset_session(self) -> None:
        """Drop all session progress and bring every stat back in line."""
        self.progression.reset_session()
        self._clicked_at.clear()
        self.purchases.sync_all_stats()
        self._publish(ProgressionEvent.SESSION_RESET)

    def reset_progress(self) -> None:
        """Wipe persisted progress (fresh run) and save it."""
        self.progression.reset_progress()
        self._clicked_at.clear()
        self.purchases.sync_all_stats()
        if self.scheduler:
            self.scheduler.flush_progression()
        self._publish(ProgressionEvent.PROGRESS_RESET)

    def restore_progress(self, records: dict) -> int:
        restored = self.progression.restore(records) if records else 0
        self.purchases.sync_all_stats()
        if restored:
            self._publish(ProgressionEvent.PROGRESS_RESTORED, count=restored)
        return restored

    def set_author_mode(self, enabled: bool) -> None:
        """Toggle the authoring escape hatch (everything unlocked, root owned)."""
        if self.progression.set_author_mode(enabled):
            self.purchases.sync_all_stats()
            self._publish(ProgressionEvent.AUTHOR_MODE_CHANGED, enabled=enabled)

    def visible_nodes(self) -> set[SkillDefinition]:
        return visible_nodes(self.progression, self.graph)

    def visible_ids(self) -> list[str]:
        return visible_ids(self.progression, self.graph)

    # Viewport

    def screen_to_world(self, x: float, y: float) -> tuple[float, float]:
        return self.viewport.screen_to_world(x, y)

    def world_to_screen(self, x: float, y: float) -> tuple[float, float]:
        return self.viewport.world_to_screen(x, y)

    def pan(self, dx: float, dy: float) -> None:
        self.viewport.pan(dx, dy)
        self._request_viewport_write()

    def zoom_at(self, x: float, y: float, factor: float) -> None:
        """Pointer-anchored zoom; rapid calls coalesce into one save."""
        if self.viewport.zoom_at(x, y, factor):
            self._request_viewport_write()

    def zoom_in(self) -> None:
        self.zoom_step(self.config.button_zoom_in)

    def zoom_out(self) -> None:
        self.zoom_step(self.config.button_zoom_out)

    def zoom_step(self, factor: float) -> None:
        # Buttons zoom around the canvas centre and commit at once
        self.viewport.zoom_at(self.config.canvas_width / 2, self.config.canvas_height / 2, factor)
        self._flush_viewport()

    def reset_zoom(self) -> None:
        """Scale 1, centred on the root node."""
        root_x, root_y = self.layout.position_of(self.config.root_id)
        self.viewport.center_on(root_x, root_y, self.config.canvas_width, self.config.canvas_height, scale=1.0)
        self._flush_viewport()

    def center_view(self, saved: ViewportState | None = None) -> None:
        """Restore a saved camera, or centre on the root at the default zoom and save that."""
        if saved is not None:
            self.viewport.apply_state(saved)
            logger.info(f"Restored camera: {saved.offset_x}, {saved.offset_y} @ {self.viewport.scale}")
            return

        root_x, root_y = self.layout.position_of(self.config.root_id)
        self.viewport.center_on(
            root_x, root_y,
            self.config.canvas_width, self.config.canvas_height,
            scale=self.config.default_scale,
        )
        logger.info(f"Centered on root at scale {self.viewport.scale}")
        self._flush_viewport()

    def resize(self, width: float, height: float) -> None:
        self.config.canvas_width = width
        self.config.canvas_height = height

    # Pointer input

    def pointer_down(self, x: float, y: float) -> None:
        self.viewport.begin_drag(x, y)

    def pointer_move(self, x: float, y: float) -> None:
        if self.viewport.is_dragging:
            self._hovered_id = None
            if self.viewport.drag_to(x, y):
                self._request_viewport_write()
        else:
            self._hovered_id = self.hit_test(x, y)

    def pointer_up(self, x: float, y: float) -> PurchaseResult | None:
        """
        End a gesture. A release close to where it started counts as a
        click on the node under the pointer.
        """
        if not self.viewport.end_drag():
            return None

        was_click = self.viewport.drag_travel <= self.config.click_tolerance
        self._flush_viewport()

        if was_click:
            return self.click(x, y)
        return None

    def pointer_leave(self) -> None:
        self._hovered_id = None
        self.viewport.end_drag()

    def wheel(self, x: float, y: float, steps: float) -> None:
        factor = self.config.wheel_zoom_in if steps > 0 else self.config.wheel_zoom_out
        self.zoom_at(x, y, factor)

    def click(self, x: float, y: float) -> PurchaseResult | None:
        """Try to buy the node under a screen point."""
        skill_id = self.hit_test(x, y)
        if skill_id is None:
            return None
        return self.purchase(skill_id)

    def hit_test(self, x: float, y: float) -> str | None:
        """Visible node under a screen point, using radii from the latest snapshot."""
        world_x, world_y = self.viewport.screen_to_world(x, y)

        for skill_id in self.visible_ids():
            node_x, node_y = self.layout.position_of(skill_id)
            radius = self._radii.get(skill_id, self.config.node_radius)
            if (world_x - node_x) ** 2 + (world_y - node_y) ** 2 <= radius * radius:
                return skill_id
        return None

    @property
    def hovered_id(self) -> str | None:
        return self._hovered_id

    def tooltip(self) -> TooltipContent | None:
        if self._hovered_id is None:
            return None
        return tooltip_content(self._hovered_id, self.progression, self.purchases)

    # Frame

    def update(self, dt: float) -> None:
        """Advance timers (debounced saves, click animations)."""
        if self.scheduler:
            self.scheduler.update(dt)

        now = self._clock()
        expired = [
            skill_id for skill_id, clicked in self._clicked_at.items()
            if now - clicked >= self.config.click_animation
        ]
        for skill_id in expired:
            del self._clicked_at[skill_id]

    def snapshot(self) -> RenderSnapshot:
        """Draw state for the current frame."""
        snapshot = build_snapshot(
            self.progression,
            self.graph,
            self.layout,
            self.purchases,
            self.viewport,
            self.config,
            now=self._clock(),
            hovered_id=self._hovered_id,
            clicked_at=self._clicked_at,
        )
        self._radii = snapshot.radii()
        return snapshot

    # Helpers

    def _request_viewport_write(self) -> None:
        if self.scheduler:
            self.scheduler.request_viewport_write()

    def _flush_viewport(self) -> None:
        if self.scheduler:
            self.scheduler.flush_viewport()

    def _publish(self, event_type: ProgressionEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
