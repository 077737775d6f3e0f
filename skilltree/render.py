"""
Render snapshot - per-frame draw state for the skill tree.

Building a snapshot only reads progression, wallet and viewport state; the
renderer draws whatever the latest snapshot says and hit-testing uses the
radii it recorded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Mapping

from engine.graphics.viewport import Viewport
from skilltree.config import SkillTreeConfig
from skilltree.graph import ConnectivityGraph
from skilltree.layout import GridLayout
from skilltree.purchase import PurchaseEngine
from skilltree.state import ProgressionStore
from skilltree.visibility import visible_ids


class NodeStatus(Enum):
    LOCKED = auto()
    AVAILABLE = auto()
    UNAFFORDABLE = auto()
    PURCHASED = auto()
    MAXED = auto()


class ConnectionStatus(Enum):
    ACTIVE = auto()
    AVAILABLE = auto()
    LOCKED = auto()


@dataclass(frozen=True)
class NodeView:
    """Draw state of one visible skill node (world coordinates)."""
    skill_id: str
    name: str
    icon: str
    x: float
    y: float
    radius: float
    status: NodeStatus
    level: int
    max_level: int
    cost: int
    affordable: bool
    hovered: bool = False

    @property
    def level_label(self) -> str:
        return f"{self.level}/{self.max_level}"


@dataclass(frozen=True)
class ConnectionView:
    """Edge between two visible nodes."""
    parent_id: str
    child_id: str
    start: tuple[float, float]
    end: tuple[float, float]
    status: ConnectionStatus


@dataclass
class RenderSnapshot:
    """Everything the renderer needs for one frame."""
    nodes: list[NodeView] = field(default_factory=list)
    connections: list[ConnectionView] = field(default_factory=list)
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0

    def node(self, skill_id: str) -> NodeView | None:
        for view in self.nodes:
            if view.skill_id == skill_id:
                return view
        return None

    def radii(self) -> dict[str, float]:
        return {view.skill_id: view.radius for view in self.nodes}


@dataclass(frozen=True)
class TooltipContent:
    title: str
    icon: str
    description: str
    level_text: str
    cost_text: str
    insufficient: bool


def node_radius(
    config: SkillTreeConfig,
    now: float,
    affordable: bool = False,
    hovered: bool = False,
    clicked_at: float | None = None,
) -> float:
    """
    Animated node radius.

    Affordable nodes pulse, hovered nodes grow, and a freshly purchased
    node bounces for `click_animation` seconds.
    """
    pulse = 1 + math.sin(now * config.pulse_speed) * config.pulse_amplitude if affordable else 1.0
    hover = config.hover_scale if hovered else 1.0

    click = 1.0
    if clicked_at is not None:
        elapsed = now - clicked_at
        if 0 <= elapsed < config.click_animation:
            progress = elapsed / config.click_animation
            click = 1 + math.sin(progress * math.pi) * config.click_bounce

    return config.node_radius * pulse * hover * click


def node_status(level: int, max_level: int, unlocked: bool, affordable: bool) -> NodeStatus:
    if level >= max_level:
        return NodeStatus.MAXED
    if level > 0:
        return NodeStatus.PURCHASED
    if unlocked:
        return NodeStatus.AVAILABLE if affordable else NodeStatus.UNAFFORDABLE
    return NodeStatus.LOCKED


def build_snapshot(
    store: ProgressionStore,
    graph: ConnectivityGraph,
    layout: GridLayout,
    purchases: PurchaseEngine,
    viewport: Viewport,
    config: SkillTreeConfig,
    now: float,
    hovered_id: str | None = None,
    clicked_at: Mapping[str, float] | None = None,
) -> RenderSnapshot:
    """Derive the draw state of every visible node and edge."""
    clicked_at = clicked_at or {}
    balance = purchases.wallet.balance()
    snapshot = RenderSnapshot(offset_x=viewport.offset_x, offset_y=viewport.offset_y, scale=viewport.scale)

    order = visible_ids(store, graph)
    visible = set(order)

    for skill_id in order:
        skill = graph.catalog.get(skill_id)
        level = store.effective_level(skill_id)
        unlocked = store.effectively_unlocked(skill_id)
        cost = purchases.cost(skill_id)
        affordable = unlocked and level < skill.max_level and balance >= cost
        hovered = skill_id == hovered_id
        x, y = layout.position_of(skill_id)

        snapshot.nodes.append(NodeView(
            skill_id=skill_id,
            name=skill.name,
            icon=skill.icon,
            x=x,
            y=y,
            radius=node_radius(config, now, affordable, hovered, clicked_at.get(skill_id)),
            status=node_status(level, skill.max_level, unlocked, affordable),
            level=level,
            max_level=skill.max_level,
            cost=cost,
            affordable=affordable,
            hovered=hovered,
        ))

    for parent_id in order:
        parent_level = store.effective_level(parent_id)
        for child_id in graph.children_of(parent_id):
            if child_id not in visible:
                continue

            child_unlocked = store.effectively_unlocked(child_id)
            if parent_level > 0 and child_unlocked:
                status = ConnectionStatus.ACTIVE
            elif child_unlocked:
                status = ConnectionStatus.AVAILABLE
            else:
                status = ConnectionStatus.LOCKED

            snapshot.connections.append(ConnectionView(
                parent_id=parent_id,
                child_id=child_id,
                start=layout.position_of(parent_id),
                end=layout.position_of(child_id),
                status=status,
            ))

    return snapshot


def tooltip_content(skill_id: str, store: ProgressionStore, purchases: PurchaseEngine) -> TooltipContent | None:
    """Tooltip text for a skill; session progress is shown as base + session."""
    skill = store.catalog.get(skill_id)
    if skill is None:
        return None

    level = store.effective_level(skill_id)
    session = store.session_level(skill_id)
    if session > 0:
        level_text = f"{store.persisted_level(skill_id)} + {session} = {level}/{skill.max_level}"
    else:
        level_text = f"{level}/{skill.max_level}"

    cost = purchases.cost(skill_id)
    if level >= skill.max_level:
        cost_text = "Maxed"
    elif level > 0:
        cost_text = f"{cost} (Upgrade)"
    else:
        cost_text = f"{cost}"

    return TooltipContent(
        title=skill.name,
        icon=skill.icon,
        description=skill.description,
        level_text=level_text,
        cost_text=cost_text,
        insufficient=level < skill.max_level and purchases.wallet.balance() < cost,
    )


def place_tooltip(
    mouse_x: float,
    mouse_y: float,
    width: float,
    height: float,
    screen_width: float,
    screen_height: float,
    gap: float = 15,
    margin: float = 20,
) -> tuple[float, float]:
    """
    Top-left corner for a tooltip near the pointer.

    Flips to the other side of the pointer when it would cross the right
    or bottom edge, and never goes past the left/top margin.
    """
    left = mouse_x + gap
    top = mouse_y + gap

    if left + width > screen_width - margin:
        left = mouse_x - width - gap
    if top + height > screen_height - margin:
        top = mouse_y - height - gap

    return (max(left, margin), max(top, margin))
