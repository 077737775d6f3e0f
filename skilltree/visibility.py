"""
Visibility - which skill nodes are currently renderable.

A node is visible when some path from the root reaches it through nodes
that are all purchased (effective level > 0). The root is always visible.
"""

from __future__ import annotations

from collections import deque

from skilltree.catalog import SkillDefinition
from skilltree.graph import ConnectivityGraph
from skilltree.state import ProgressionStore


def visible_ids(store: ProgressionStore, graph: ConnectivityGraph) -> list[str]:
    """
    Visible skill ids in BFS order from the root.

    Unpurchased nodes are included when reached but do not reveal their
    children.
    """
    root_id = graph.root_id
    if root_id not in graph.catalog:
        return []

    order = [root_id]
    included = {root_id}
    queue = deque([root_id])

    while queue:
        skill_id = queue.popleft()
        if store.effective_level(skill_id) <= 0:
            continue

        for child_id in graph.children_of(skill_id):
            if child_id in included:
                continue
            included.add(child_id)
            order.append(child_id)
            queue.append(child_id)

    return order


def visible_nodes(store: ProgressionStore, graph: ConnectivityGraph) -> set[SkillDefinition]:
    """Visible skill definitions (see visible_ids)."""
    catalog = graph.catalog
    return {catalog.get(skill_id) for skill_id in visible_ids(store, graph)}
