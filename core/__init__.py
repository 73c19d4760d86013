"""
MESHGRAPH CORE - Central exports for topology functionality.

This module provides access to:
- Topology types (Node, Link, LinkType)
- Graph construction from raw documents (GraphBuilder, build_graph)
- Wire round-tripping (Serializer)
- Chainable queries (NodeCollection)
"""

from core.ontology import LinkType, classify_link_type
from core.collection import NodeCollection
from core.topology import (
    Node,
    Link,
    GraphError,
    MalformedDocument,
    MalformedNode,
    DuplicateNodeError,
    MalformedEdge,
    DanglingEdge,
    UnresolvedReference,
)
from core.graph_builder import GraphBuilder, build_graph
from core.serializer import Serializer

__all__ = [
    # Types
    "LinkType",
    "classify_link_type",
    "Node",
    "Link",
    "NodeCollection",
    # Construction
    "GraphBuilder",
    "build_graph",
    "Serializer",
    # Errors
    "GraphError",
    "MalformedDocument",
    "MalformedNode",
    "DuplicateNodeError",
    "MalformedEdge",
    "DanglingEdge",
    "UnresolvedReference",
]
