"""
MESHGRAPH ONTOLOGY - The Vocabulary of the Mesh

This module defines the words a topology snapshot may use:
- LinkType: the three kinds of adjacency between mesh participants
- classify_link_type: mapping of raw edge type strings onto LinkType

Key Principle: unknown edge types are not errors.
Mesh firmware adds new link flavours over time; anything the map does not
recognise is routed traffic between routers, so it is treated as MESH.
"""
from typing import Optional
from enum import Enum


# =============================================================================
# ENUMS (The Vocabulary)
# =============================================================================

class LinkType(str, Enum):
    """Types of links between nodes."""
    CLIENT = "client"    # Leaf device attached to a router (symmetric, no quality)
    VPN = "vpn"          # Tunnel between routers (per-direction quality)
    MESH = "mesh"        # Wireless mesh between routers (per-direction quality)

    @property
    def has_quality(self) -> bool:
        """Client links never carry a quality metric."""
        return self is not LinkType.CLIENT


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify_link_type(value: Optional[str]) -> LinkType:
    """
    Map a raw edge type string onto a LinkType.

    "client" and "vpn" map to themselves; anything else (None, "", or an
    unrecognised string) falls back to MESH.
    """
    if value == LinkType.CLIENT.value:
        return LinkType.CLIENT
    if value == LinkType.VPN.value:
        return LinkType.VPN
    return LinkType.MESH
