"""
MESHGRAPH TOPOLOGY - Nodes, Links and the Errors of Building Them

A topology snapshot is an object graph:

  Node ──owns──> [Link, Link, ...]
                   │
                   └──target──> Node   (non-owning, same graph)

Architecture Notes:
- Nodes compare and hash by IDENTITY. Two nodes with equal attributes are
  still two participants; collections rely on this for index()/in.
- A Node's attributes are frozen once built. Its `links` list is appended
  to by GraphBuilder/Serializer during construction and only read after.
- While the Serializer is reconstructing a graph, Link.target briefly holds
  the target's id string. `is_resolved` tells the two states apart.

Thread Safety:
    Build once, read many. Safe for unsynchronized concurrent reads after
    construction has finished; never read while a graph is being built.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from core.ontology import LinkType
from core.collection import NodeCollection


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class GraphError(Exception):
    """Base exception for topology construction."""
    pass


class MalformedDocument(GraphError):
    """Raised when the document is not {"nodes": [...], "links": [...]}."""
    pass


class MalformedNode(GraphError):
    """Raised when a node record is missing a field or has unparsable macs/geo."""
    def __init__(self, node_ref: Union[int, str, None], reason: str):
        self.node_ref = node_ref
        self.reason = reason
        super().__init__(f"Malformed node {node_ref!r}: {reason}")


class DuplicateNodeError(MalformedNode):
    """Raised when two node records share an id."""
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(node_id, "duplicate node id")


class MalformedEdge(GraphError):
    """Raised when an edge record lacks source/target or has unparsable quality."""
    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Malformed edge #{index}: {reason}")


class DanglingEdge(GraphError):
    """Raised when an edge endpoint is not a valid position in the node array."""
    def __init__(self, index: int, endpoint: str, position: int, node_count: int):
        self.index = index
        self.endpoint = endpoint
        self.position = position
        self.node_count = node_count
        super().__init__(
            f"Edge #{index} {endpoint} {position} is out of range "
            f"for {node_count} nodes"
        )


class UnresolvedReference(GraphError):
    """Raised when a serialized link points at an id with no matching node."""
    def __init__(self, source_id: str, target_id: str):
        self.source_id = source_id
        self.target_id = target_id
        super().__init__(f"Unresolved link target: {source_id} -> {target_id}")


# =============================================================================
# LINK
# =============================================================================

@dataclass(repr=False)
class Link:
    """
    One directed adjacency from the owning Node to `target`.

    quality is the link metric measured in this direction; always None for
    client links, and None for mesh/vpn links whose metric was not reported.
    """
    target: Union["Node", str]
    type: LinkType
    quality: Optional[float] = None

    @property
    def is_resolved(self) -> bool:
        """True once target is a Node rather than a placeholder id."""
        return isinstance(self.target, Node)

    @property
    def target_id(self) -> str:
        """Id of the target, resolved or not."""
        if isinstance(self.target, Node):
            return self.target.id
        return self.target

    def __repr__(self) -> str:
        if isinstance(self.target, Node):
            label = self.target.label
        else:
            label = self.target
        quality = "" if self.quality is None else f" {self.quality}"
        return f"<Link to {label!r} :{self.type.value}{quality}>"


# =============================================================================
# NODE
# =============================================================================

@dataclass(frozen=True, eq=False, repr=False)
class Node:
    """
    One mesh participant (router or client device).

    `id` is conventionally the primary MAC address and is unique in a graph.
    `name` is None when the source did not report one; "" is kept as-is.
    """
    id: str
    name: Optional[str] = None
    macs: List[str] = field(default_factory=list)
    geo: Optional[Tuple[float, float]] = None
    client: bool = False
    online: bool = False
    gateway: bool = False
    links: List[Link] = field(default_factory=list)

    @property
    def is_named(self) -> bool:
        return bool(self.name)

    @property
    def is_located(self) -> bool:
        return self.geo is not None

    @property
    def label(self) -> str:
        """Name if set, id otherwise."""
        return self.name or self.id

    # =========================================================================
    # LINK ACCESSORS
    # =========================================================================

    def links_of(self, link_type: LinkType) -> List[Link]:
        """Outgoing links of one type, in insertion order."""
        return [link for link in self.links if link.type == link_type]

    def neighbors(self) -> NodeCollection:
        """All distinct link targets."""
        return NodeCollection(link.target for link in self.links)

    def clients(self) -> NodeCollection:
        """Targets of client links."""
        return NodeCollection(link.target for link in self.links_of(LinkType.CLIENT))

    def vpns(self) -> NodeCollection:
        """Targets of vpn links."""
        return NodeCollection(link.target for link in self.links_of(LinkType.VPN))

    def meshs(self) -> NodeCollection:
        """Targets of mesh links."""
        return NodeCollection(link.target for link in self.links_of(LinkType.MESH))

    def __repr__(self) -> str:
        flags = "".join(
            tag for tag, on in (("On ", self.online), ("Cl ", self.client), ("Gw ", self.gateway))
            if on
        ).strip()
        name = f"{self.name!r}, " if self.name else ""
        return f"<Node[{name}{self.id!r}] flags: [{flags}] links: {len(self.links)}>"
