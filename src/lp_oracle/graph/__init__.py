from __future__ import annotations

from .builder import (
    DependencyGraph,
    DependencyNode,
    GraphDiagnostic,
    build_dependency_graph,
)
from .ordering import group_by_level, processing_order

__all__ = [
    "DependencyGraph",
    "DependencyNode",
    "GraphDiagnostic",
    "build_dependency_graph",
    "group_by_level",
    "processing_order",
]
