"""
Collaborators consumed by the skill tree, plus simple in-process defaults.

The engine only talks to these through the Protocols below; the game wires
in its own wallet, stat sink, store and cue emitter as needed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Protocol

from engine.core.events import CueKind, EventBus

if TYPE_CHECKING:
    from engine.graphics.viewport import ViewportState
    from skilltree.state import PersistedSkillRecord


logger = logging.getLogger(__name__)


class CurrencyWallet(Protocol):
    def balance(self) -> float: ...

    def deduct(self, amount: float) -> bool: ...


class UpgradeStateSink(Protocol):
    def set_stat(self, key: str, value: float) -> None: ...


class DurableStore(Protocol):
    def write_viewport(self, state: ViewportState) -> None: ...

    def write_progression(self, records: Mapping[str, PersistedSkillRecord]) -> None: ...


class CueEmitter(Protocol):
    def emit(self, kind: CueKind) -> None: ...


class Wallet:
    """Coin balance with all-or-nothing deduction."""

    def __init__(self, coins: float = 0):
        self._coins = coins

    def balance(self) -> float:
        return self._coins

    def deduct(self, amount: float) -> bool:
        """Remove coins; returns False (and changes nothing) if short."""
        if amount < 0 or amount > self._coins:
            return False
        self._coins -= amount
        return True

    def add(self, amount: float) -> None:
        self._coins += max(0, amount)


# Starting values of every upgrade stat for a fresh run
DEFAULT_STATS: dict[str, float] = {
    # Neutron stats
    "neutronSpeed": 1,
    "neutronLifetime": 1,
    "neutronSize": 1,
    "neutronCountPlayer": 2,
    "neutronCountAtom": 2,
    # Atom stats
    "atomSpeed": 1,
    "atomLifetime": 1,
    "atomSize": 1,
    "atomSpawnRate": 1,
    "atomHealth": 1,
    # Special
    "neutronReflector": 0,
    "pierce": 0,
    "homing": 0,
    "momentum": 0,
    "chainMultiplier": 1,
    # Resource caps
    "maxClicks": 2,
    "maxTime": 10,
}


class UpgradeState:
    """Stat table fed by the skill tree."""

    def __init__(self, defaults: Mapping[str, float] | None = None):
        self._defaults = dict(DEFAULT_STATS if defaults is None else defaults)
        self._stats: dict[str, float] = dict(self._defaults)

    def set_stat(self, key: str, value: float) -> None:
        self._stats[key] = value

    def get_stat(self, key: str, default: float = 0) -> float:
        return self._stats.get(key, default)

    def as_dict(self) -> dict[str, float]:
        return dict(self._stats)

    def reset(self) -> None:
        self._stats = dict(self._defaults)


class EventBusCueEmitter:
    """Forwards cues to the event bus, where audio/animation systems listen."""

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus

    def emit(self, kind: CueKind, **data: Any) -> None:
        self.event_bus.publish(kind, **data)
