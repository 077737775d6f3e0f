"""
Purchasing - skill prices and the purchase protocol.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from engine.core.events import CueKind, EventBus, ProgressionEvent
from skilltree.effects import StatEngine
from skilltree.interfaces import CueEmitter, CurrencyWallet, UpgradeStateSink
from skilltree.state import ProgressionStore

if TYPE_CHECKING:
    from skilltree.save.scheduler import PersistenceScheduler


logger = logging.getLogger(__name__)


class PurchaseStatus(Enum):
    """Outcome of a purchase attempt."""
    PURCHASED = auto()
    UNKNOWN_SKILL = auto()
    LOCKED = auto()
    MAXED = auto()
    INSUFFICIENT_FUNDS = auto()


@dataclass
class PurchaseResult:
    skill_id: str
    status: PurchaseStatus
    cost: int = 0
    level: int = 0
    stats: dict[str, float] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status is PurchaseStatus.PURCHASED


def skill_cost(base_cost: float, cost_multiplier: float, level: int) -> int:
    """Price of the next level: floor(base * multiplier ** level)."""
    return math.floor(base_cost * cost_multiplier ** level)


class PurchaseEngine:
    """
    Validates and applies skill purchases.

    A purchase is a single synchronous attempt:
    1. reject (no state change) if locked, maxed or unaffordable
    2. deduct the cost from the wallet
    3. add a session level (unlocking children on the first level)
    4. recompute every stat the skill feeds and write the totals to the sink
    5. emit the purchase cue and flush persistence
    """

    def __init__(
        self,
        store: ProgressionStore,
        wallet: CurrencyWallet,
        sink: UpgradeStateSink,
        stats: StatEngine | None = None,
        cues: CueEmitter | None = None,
        scheduler: PersistenceScheduler | None = None,
        event_bus: EventBus | None = None,
    ):
        self.store = store
        self.wallet = wallet
        self.sink = sink
        self.stats = stats or StatEngine(store)
        self.cues = cues
        self.scheduler = scheduler
        self.event_bus = event_bus

    def cost(self, skill_id: str) -> int:
        """Price of a skill's next level at its current effective level (0 if unknown)."""
        skill = self.store.catalog.get(skill_id)
        if skill is None:
            return 0
        return skill_cost(skill.base_cost, skill.cost_multiplier, self.store.effective_level(skill_id))

    def can_afford(self, skill_id: str) -> bool:
        return self.wallet.balance() >= self.cost(skill_id)

    def purchase(self, skill_id: str) -> PurchaseResult:
        """Attempt to buy the next level of a skill."""
        skill = self.store.catalog.get(skill_id)
        if skill is None:
            return self._reject(skill_id, PurchaseStatus.UNKNOWN_SKILL)

        level = self.store.effective_level(skill_id)
        if not self.store.effectively_unlocked(skill_id):
            return self._reject(skill_id, PurchaseStatus.LOCKED, level=level)
        if level >= skill.max_level:
            return self._reject(skill_id, PurchaseStatus.MAXED, level=level)

        cost = self.cost(skill_id)
        if self.wallet.balance() < cost or not self.wallet.deduct(cost):
            return self._reject(skill_id, PurchaseStatus.INSUFFICIENT_FUNDS, cost=cost, level=level)

        self.store.apply_purchase(skill_id)
        new_level = self.store.effective_level(skill_id)

        values = self.stats.values_for_skill(skill_id)
        for key, value in values.items():
            self.sink.set_stat(key, value)

        if self.cues:
            self.cues.emit(CueKind.PURCHASE_SUCCEEDED)
        if self.scheduler:
            self.scheduler.flush_progression()
        if self.event_bus:
            self.event_bus.publish(
                ProgressionEvent.SKILL_PURCHASED,
                skill_id=skill_id, level=new_level, cost=cost, stats=values,
            )

        logger.info(f"Purchased {skill_id} for {cost} - effective level {new_level}/{skill.max_level}")
        return PurchaseResult(skill_id, PurchaseStatus.PURCHASED, cost=cost, level=new_level, stats=values)

    def sync_all_stats(self) -> dict[str, float]:
        """Recompute and write every stat (after resets, restores, author mode)."""
        values = self.stats.all_values()
        for key, value in values.items():
            self.sink.set_stat(key, value)
        return values

    def _reject(self, skill_id: str, status: PurchaseStatus, cost: int = 0, level: int = 0) -> PurchaseResult:
        if self.cues:
            self.cues.emit(CueKind.PURCHASE_REJECTED)
        if self.event_bus:
            self.event_bus.publish(ProgressionEvent.PURCHASE_REJECTED, skill_id=skill_id, reason=status)

        logger.debug(f"Purchase of {skill_id} rejected: {status.name}")
        return PurchaseResult(skill_id, status, cost=cost, level=level)
