from __future__ import annotations

from .builder import DependencyGraph


def processing_order(graph: DependencyGraph) -> list[str]:
    """Return LP token ids so that every token follows all its LP dependencies.

    Tokens are sorted by ascending level; equal levels keep the registry
    order. Unresolved (cyclic) tokens are left out.
    """
    resolved = [node for node in graph.nodes.values() if node.is_resolved]
    resolved.sort(key=lambda node: (node.level, node.discovery_index))
    return [node.contract_id for node in resolved]


def group_by_level(graph: DependencyGraph) -> dict[int, list[str]]:
    """Processing order split into one list per level, lowest level first."""
    groups: dict[int, list[str]] = {}
    for contract_id in processing_order(graph):
        groups.setdefault(graph.nodes[contract_id].level, []).append(contract_id)
    return groups
