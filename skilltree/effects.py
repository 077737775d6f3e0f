"""
Skill effects - how effective skill levels turn into upgrade stats.

Every stat is recomputed from the total of its contributing skills each
time, never patched with a delta, so the value does not depend on purchase
order and stays correct after a session reset.

Usage:
    stats = StatEngine(store)
    for key, value in stats.values_for_skill("neutron_count_2").items():
        sink.set_stat(key, value)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Union

from skilltree.state import ProgressionStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Linear:
    """
    base + sum(level(skill) * delta(skill)).

    Tiers of one family usually share a delta; mixed weights are allowed.
    While `gate` is unpurchased the stat reads `inactive` instead.
    """
    base: float
    deltas: Mapping[str, float]
    gate: str | None = None
    inactive: float = 0

    @property
    def skills(self) -> tuple[str, ...]:
        skills = tuple(self.deltas)
        return skills + (self.gate,) if self.gate else skills

    def compute(self, store: ProgressionStore) -> float:
        if self.gate and store.effective_level(self.gate) <= 0:
            return self.inactive
        return self.base + sum(
            store.effective_level(skill_id) * delta for skill_id, delta in self.deltas.items()
        )


@dataclass(frozen=True)
class Multiplicative:
    """base * factor ** (total levels of the family)."""
    base: float
    factor: float
    family: tuple[str, ...]
    gate: str | None = None
    inactive: float = 0

    @property
    def skills(self) -> tuple[str, ...]:
        return self.family + (self.gate,) if self.gate else self.family

    def compute(self, store: ProgressionStore) -> float:
        if self.gate and store.effective_level(self.gate) <= 0:
            return self.inactive
        return self.base * self.factor ** store.total_levels(self.family)


@dataclass(frozen=True)
class Toggle:
    """`on` once the skill is purchased, `off` before."""
    skill: str
    on: float = 1
    off: float = 0

    @property
    def skills(self) -> tuple[str, ...]:
        return (self.skill,)

    def compute(self, store: ProgressionStore) -> float:
        return self.on if store.effective_level(self.skill) > 0 else self.off


Aggregator = Union[Linear, Multiplicative, Toggle]


class CapstoneOp(Enum):
    ADD = auto()
    MULTIPLY = auto()
    SET = auto()


@dataclass(frozen=True)
class Capstone:
    """A one-level skill that modifies another stat's computed value while owned."""
    skill: str
    stat: str
    op: CapstoneOp
    amount: float

    def apply(self, value: float) -> float:
        if self.op is CapstoneOp.ADD:
            return value + self.amount
        if self.op is CapstoneOp.MULTIPLY:
            return value * self.amount
        return self.amount


def _tiers(prefix: str, count: int, delta: float) -> dict[str, float]:
    return {f"{prefix}_{tier}": delta for tier in range(1, count + 1)}


# Stat key -> aggregation over the skills that feed it
EFFECT_TABLE: dict[str, Aggregator] = {
    # Neutron path
    "neutronCountPlayer": Linear(2, _tiers("neutron_count", 3, 1)),
    "neutronSpeed": Linear(1, _tiers("neutron_speed", 2, 0.1)),
    "neutronLifetime": Linear(1, _tiers("neutron_lifetime", 2, 0.2)),
    "neutronSize": Linear(1, {"neutron_size_1": 0.15}),
    "pierce": Linear(0, {"neutron_pierce": 5}),
    "homing": Linear(0, {"neutron_homing": 1}),
    # Atom path
    "atomSpawnRate": Linear(1, _tiers("atom_spawn_rate", 2, 0.1)),
    "atomSize": Linear(1, {"atom_size_1": 0.15}),
    "atomLifetime": Linear(1, {"atom_lifetime_1": 0.25}),
    "neutronCountAtom": Linear(2, _tiers("atom_neutron_count", 3, 1)),
    # Chain path
    "chainMultiplier": Linear(1, _tiers("chain_multiplier", 3, 0.2)),
    "momentum": Linear(0, {"momentum": 1}),
    "neutronReflector": Linear(0, {"neutron_reflector": 10}),
    # Resource path
    "maxClicks": Linear(2, _tiers("max_clicks", 4, 1)),
    "maxTime": Linear(10, _tiers("max_time", 4, 2)),
    # Critical hits
    "critChance": Linear(5, {"critical_neutron_chance_1": 1}, gate="critical_neutron_unlock"),
    "critDoubleNeutrons": Toggle("critical_neutron_effect_1"),
    # Shockwaves
    "atomShockwave": Toggle("atom_shockwave_unlock"),
    "atomShockwaveForce": Linear(1, {"atom_shockwave_force_1": 0.1}),
    "clickShockwave": Toggle("click_shockwave_unlock"),
    "clickShockwaveRadius": Linear(1, {"click_shockwave_radius_1": 0.1}),
    # Economy
    "baseCoinValue": Linear(0, {"base_coin_value_1": 1, "base_coin_value_2": 2}),
    "skillCostReduction": Linear(0, {"skill_cost_reduction_1": 1}),
    "startingCoins": Linear(0, {"starting_coins_1": 50}),
    "economyMastery": Toggle("ultimate_economy"),
    # Special atoms
    "timeAtomsUnlocked": Toggle("unlock_time_atoms"),
    "timeAtomChance": Linear(0, {"time_atom_chance_1": 0.5}),
    "timeAtomBonus": Linear(0.5, {"time_atom_value_1": 2}),
    "supernovaUnlocked": Toggle("unlock_supernova_atoms"),
    "supernovaChance": Linear(0, {"supernova_atom_chance_1": 0.2}),
    "supernovaNeutrons": Linear(10, {"supernova_atom_neutrons_1": 2}),
    "blackHoleUnlocked": Toggle("unlock_black_hole_atoms"),
    "blackHoleChance": Linear(0, {"black_hole_atom_chance_1": 0.1}),
    "blackHolePullRadius": Linear(1, {"black_hole_pull_radius_1": 0.1}),
    "fissionMastery": Toggle("ultimate_fission"),
}

CAPSTONES: tuple[Capstone, ...] = (
    Capstone("ultimate_neutron", "neutronCountPlayer", CapstoneOp.ADD, 2),
    Capstone("ultimate_neutron", "neutronSpeed", CapstoneOp.MULTIPLY, 1.5),
    Capstone("ultimate_atom", "neutronCountAtom", CapstoneOp.ADD, 2),
    Capstone("ultimate_atom", "atomSpawnRate", CapstoneOp.MULTIPLY, 1.5),
    Capstone("ultimate_chain", "chainMultiplier", CapstoneOp.ADD, 1.0),
    Capstone("ultimate_chain", "momentum", CapstoneOp.SET, 1),
    Capstone("ultimate_resource", "maxClicks", CapstoneOp.ADD, 2),
    Capstone("ultimate_resource", "maxTime", CapstoneOp.ADD, 5),
)


class StatEngine:
    """
    Computes stat values from the progression store.

    A stat's value is its aggregator's result (or its default when no
    aggregator exists) with every owned capstone applied on top, in
    declaration order.
    """

    def __init__(
        self,
        store: ProgressionStore,
        table: Mapping[str, Aggregator] | None = None,
        capstones: tuple[Capstone, ...] | None = None,
        defaults: Mapping[str, float] | None = None,
    ):
        self.store = store
        self.table = dict(EFFECT_TABLE if table is None else table)
        self.capstones = tuple(CAPSTONES if capstones is None else capstones)
        self.defaults = dict(defaults or {})

        self._stats_by_skill: dict[str, list[str]] = {}
        self._capstones_by_stat: dict[str, list[Capstone]] = {}
        self._build_index()

    def _build_index(self) -> None:
        for stat, aggregator in self.table.items():
            for skill_id in aggregator.skills:
                self._index(skill_id, stat)

        for capstone in self.capstones:
            self._index(capstone.skill, capstone.stat)
            self._capstones_by_stat.setdefault(capstone.stat, []).append(capstone)

            skill = self.store.catalog.get(capstone.skill)
            if skill is not None and skill.max_level != 1:
                logger.warning(f"Capstone '{capstone.skill}' has max level {skill.max_level}, expected 1")

        unknown = sorted(skill_id for skill_id in self._stats_by_skill if skill_id not in self.store.catalog)
        if unknown:
            logger.warning(f"Effect table references skills missing from the catalog: {unknown}")

    def _index(self, skill_id: str, stat: str) -> None:
        stats = self._stats_by_skill.setdefault(skill_id, [])
        if stat not in stats:
            stats.append(stat)

    @property
    def stat_keys(self) -> list[str]:
        keys = list(self.table)
        keys.extend(stat for stat in self._capstones_by_stat if stat not in self.table)
        return keys

    def stats_for_skill(self, skill_id: str) -> list[str]:
        """Stat keys a skill contributes to (empty for pure unlock nodes)."""
        return list(self._stats_by_skill.get(skill_id, ()))

    def compute(self, stat: str) -> float:
        aggregator = self.table.get(stat)
        value = aggregator.compute(self.store) if aggregator else self.defaults.get(stat, 0)

        for capstone in self._capstones_by_stat.get(stat, ()):
            if self.store.effective_level(capstone.skill) >= 1:
                value = capstone.apply(value)
        return value

    def values_for_skill(self, skill_id: str) -> dict[str, float]:
        """Recomputed values of every stat a skill feeds."""
        return {stat: self.compute(stat) for stat in self.stats_for_skill(skill_id)}

    def all_values(self) -> dict[str, float]:
        return {stat: self.compute(stat) for stat in self.stat_keys}
