"""LP token dependency graph.

Each LP token points at its two constituent tokens. A constituent that is
itself a known vault is an LP dependency; anything else is a base token
priced by an oracle. The level of an LP token is the length of the longest
chain of LP dependencies beneath it.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..constants import UNRESOLVED_LEVEL
from ..domain import TokenRef, VaultPair

logger = logging.getLogger(__name__)


@dataclass
class DependencyNode:
    """One LP token in the dependency graph."""

    contract_id: str
    token_a: TokenRef
    token_b: TokenRef
    is_lp_a: bool
    is_lp_b: bool
    dependencies: tuple[str, ...]
    discovery_index: int
    vault: VaultPair
    level: int = 0

    @property
    def is_resolved(self) -> bool:
        return self.level != UNRESOLVED_LEVEL


@dataclass(frozen=True)
class GraphDiagnostic:
    """A vault that was left out of the graph, and why."""

    contract_id: str
    reason: str


@dataclass
class DependencyGraph:
    nodes: dict[str, DependencyNode]
    cycles: list[list[str]] = field(default_factory=list)
    excluded: list[GraphDiagnostic] = field(default_factory=list)

    def is_lp_token(self, contract_id: str) -> bool:
        return contract_id in self.nodes

    @property
    def level_distribution(self) -> dict[int, int]:
        """Number of LP tokens per level, unresolved nodes under -1."""
        counts = Counter(node.level for node in self.nodes.values())
        return dict(sorted(counts.items()))

    @property
    def unresolved(self) -> list[str]:
        return [cid for cid, node in self.nodes.items() if not node.is_resolved]

    @property
    def max_level(self) -> int:
        levels = [node.level for node in self.nodes.values() if node.is_resolved]
        return max(levels, default=UNRESOLVED_LEVEL)


class _VisitState(Enum):
    VISITING = 1
    DONE = 2


def _validate_vault(vault: VaultPair, seen: set[str]) -> str | None:
    if vault.token_a is None or vault.token_b is None:
        missing = "token_a" if vault.token_a is None else "token_b"
        return f"missing {missing}"
    if vault.token_a.contract_id == vault.token_b.contract_id:
        return f"token_a and token_b are the same token ({vault.token_a.contract_id})"
    if vault.contract_id in seen:
        return "duplicate vault contract id"
    return None


def _compute_levels(nodes: dict[str, DependencyNode]) -> list[list[str]]:
    """Assign a level to every node; return the cycles that were found.

    Iterative depth-first traversal. A dependency found in the VISITING
    state closes a cycle: every node on it is marked unresolved, and so is
    every node that depends on an unresolved node.
    """
    state: dict[str, _VisitState] = {}
    levels: dict[str, int] = {}
    cycles: list[list[str]] = []

    for root_id in nodes:
        if root_id in state:
            continue

        state[root_id] = _VisitState.VISITING
        path: list[str] = [root_id]
        stack: list[tuple[str, Iterator[str]]] = [
            (root_id, iter(nodes[root_id].dependencies))
        ]

        while stack:
            node_id, pending = stack[-1]
            dep_id = next(pending, None)

            if dep_id is None:
                stack.pop()
                path.pop()
                state[node_id] = _VisitState.DONE
                if node_id not in levels:
                    dep_levels = [levels[d] for d in nodes[node_id].dependencies]
                    if not dep_levels:
                        levels[node_id] = 0
                    elif UNRESOLVED_LEVEL in dep_levels:
                        levels[node_id] = UNRESOLVED_LEVEL
                    else:
                        levels[node_id] = 1 + max(dep_levels)
                continue

            dep_state = state.get(dep_id)
            if dep_state is None:
                state[dep_id] = _VisitState.VISITING
                path.append(dep_id)
                stack.append((dep_id, iter(nodes[dep_id].dependencies)))
            elif dep_state is _VisitState.VISITING:
                cycle = path[path.index(dep_id) :] + [dep_id]
                cycles.append(cycle)
                logger.warning(
                    "Dependency cycle detected: %s", " -> ".join(cycle)
                )
                for member in cycle:
                    levels[member] = UNRESOLVED_LEVEL

    for node_id, node in nodes.items():
        node.level = levels[node_id]

    return cycles


def build_dependency_graph(vaults: Sequence[VaultPair]) -> DependencyGraph:
    """Build the LP dependency graph for a registry snapshot.

    Args:
        vaults: Pool-type vaults in registry order. The order is kept as
            the discovery order used to break ties between equal levels.

    Returns:
        The graph with levels assigned, the cycles found and the vaults
        excluded as malformed. Never raises for data problems.
    """
    valid: list[VaultPair] = []
    excluded: list[GraphDiagnostic] = []
    seen: set[str] = set()

    for vault in vaults:
        reason = _validate_vault(vault, seen)
        if reason is not None:
            logger.warning("Excluding vault %s: %s", vault.contract_id, reason)
            excluded.append(GraphDiagnostic(vault.contract_id, reason))
            continue
        seen.add(vault.contract_id)
        valid.append(vault)

    lp_ids = {vault.contract_id for vault in valid}

    nodes: dict[str, DependencyNode] = {}
    for index, vault in enumerate(valid):
        token_a, token_b = vault.token_a, vault.token_b
        if token_a is None or token_b is None:
            continue
        is_lp_a = token_a.contract_id in lp_ids
        is_lp_b = token_b.contract_id in lp_ids
        dependencies = tuple(
            token.contract_id
            for token, is_lp in ((token_a, is_lp_a), (token_b, is_lp_b))
            if is_lp
        )
        nodes[vault.contract_id] = DependencyNode(
            contract_id=vault.contract_id,
            token_a=token_a,
            token_b=token_b,
            is_lp_a=is_lp_a,
            is_lp_b=is_lp_b,
            dependencies=dependencies,
            discovery_index=index,
            vault=vault,
        )

    cycles = _compute_levels(nodes)
    graph = DependencyGraph(nodes=nodes, cycles=cycles, excluded=excluded)

    logger.debug(
        "Built dependency graph: %d LP tokens, levels %s, %d cycles, %d excluded",
        len(nodes),
        graph.level_distribution,
        len(cycles),
        len(excluded),
    )
    return graph
