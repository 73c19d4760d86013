"""
MESHGRAPH EXPORT - Query Results as Tables and Analysis Graphs

Reductions of a NodeCollection for downstream tooling:
- to_polars_nodes / to_polars_links: one row per node / per link
- to_rustworkx: a PyDiGraph for path and connectivity algorithms

Exports read the graph; they never modify nodes or links.
"""
from typing import Dict, Tuple

import polars as pl
import rustworkx as rx

from core.collection import NodeCollection


NODE_SCHEMA = {
    "id": pl.Utf8,
    "name": pl.Utf8,
    "macs": pl.List(pl.Utf8),
    "lat": pl.Float64,
    "lon": pl.Float64,
    "client": pl.Boolean,
    "online": pl.Boolean,
    "gateway": pl.Boolean,
    "link_count": pl.Int64,
}

LINK_SCHEMA = {
    "source_id": pl.Utf8,
    "target_id": pl.Utf8,
    "type": pl.Utf8,
    "quality": pl.Float64,
}


def to_polars_nodes(nodes: NodeCollection) -> pl.DataFrame:
    """Export nodes to a Polars DataFrame, one row per node in collection order."""
    rows = nodes.to_list()
    return pl.DataFrame(
        {
            "id": [n.id for n in rows],
            "name": [n.name for n in rows],
            "macs": [list(n.macs) for n in rows],
            "lat": [n.geo[0] if n.geo else None for n in rows],
            "lon": [n.geo[1] if n.geo else None for n in rows],
            "client": [n.client for n in rows],
            "online": [n.online for n in rows],
            "gateway": [n.gateway for n in rows],
            "link_count": [len(n.links) for n in rows],
        },
        schema=NODE_SCHEMA,
    )


def to_polars_links(nodes: NodeCollection) -> pl.DataFrame:
    """
    Export the links owned by the collection's nodes.

    Targets outside the collection are still listed; filter on target_id
    to keep only internal links.
    """
    links = [(node, link) for node in nodes for link in node.links]
    return pl.DataFrame(
        {
            "source_id": [node.id for node, _ in links],
            "target_id": [link.target_id for _, link in links],
            "type": [link.type.value for _, link in links],
            "quality": [link.quality for _, link in links],
        },
        schema=LINK_SCHEMA,
    )


def to_rustworkx(nodes: NodeCollection) -> Tuple[rx.PyDiGraph, Dict[str, int]]:
    """
    Build a rustworkx multigraph over the collection.

    Node payloads are the Node objects, edge payloads the Link objects.
    Links whose target is not in the collection are skipped.

    Returns:
        (graph, id -> rustworkx index)
    """
    graph = rx.PyDiGraph(multigraph=True)
    indices = graph.add_nodes_from(nodes.to_list())
    node_map = {node.id: idx for node, idx in zip(nodes, indices)}

    edges = [
        (node_map[node.id], node_map[link.target_id], link)
        for node in nodes
        for link in node.links
        if link.target_id in node_map
    ]
    graph.add_edges_from(edges)
    return graph, node_map
