"""
MESHGRAPH COLLECTION - The Query Surface

NodeCollection is an ordered, immutable view over Node references. Every
selector returns a NEW collection over the same Node objects, so selectors
chain freely:

    nodes.online().routers().located()
    nodes["gw-north"].meshs().online().names()

Invariants:
- Relative order of the source collection is preserved by every selector.
- A Node appears at most once (first occurrence wins on construction).
- Collections never own nodes and never mutate them.
- Lookups that miss return None; they never raise.
"""
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, List, Optional, Set, Union, overload

from core.ontology import LinkType

if TYPE_CHECKING:
    from core.topology import Node
    from core.schemas import WireNode


class NodeCollection:
    """
    Chainable, read-only selection of nodes from one topology graph.

    Usage:
        nodes = build_graph(document)

        gateways = nodes.online().gateways()
        print(gateways.names())

        node = nodes["aa:bb:cc:dd:ee:ff"]   # by name, then by mac
        if node is not None:
            print(node.clients().length())
    """

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Iterable["Node"] = ()):
        seen: Set[int] = set()
        unique: List["Node"] = []
        for node in nodes:
            if id(node) in seen:
                continue
            seen.add(id(node))
            unique.append(node)
        self._nodes = tuple(unique)

    # =========================================================================
    # SELECTORS
    # =========================================================================

    def where(self, predicate: Callable[["Node"], bool]) -> "NodeCollection":
        """Nodes for which predicate(node) is true, order preserved."""
        return NodeCollection(node for node in self._nodes if predicate(node))

    def named(self) -> "NodeCollection":
        return self.where(lambda node: node.is_named)

    def unnamed(self) -> "NodeCollection":
        return self.where(lambda node: not node.is_named)

    def clients(self) -> "NodeCollection":
        """Leaf devices."""
        return self.where(lambda node: node.client)

    def routers(self) -> "NodeCollection":
        """Everything that is not a client."""
        return self.where(lambda node: not node.client)

    def gateways(self) -> "NodeCollection":
        return self.where(lambda node: node.gateway)

    def online(self) -> "NodeCollection":
        return self.where(lambda node: node.online)

    def offline(self) -> "NodeCollection":
        return self.where(lambda node: not node.online)

    def located(self) -> "NodeCollection":
        """Nodes that have geo coordinates."""
        return self.where(lambda node: node.is_located)

    def mesh_only(self) -> "NodeCollection":
        """Nodes with at least one mesh link and no vpn link."""
        return self.where(
            lambda node: _has_links(node, LinkType.MESH) and not _has_links(node, LinkType.VPN)
        )

    def vpn_only(self) -> "NodeCollection":
        """Nodes with at least one vpn link and no mesh link."""
        return self.where(
            lambda node: _has_links(node, LinkType.VPN) and not _has_links(node, LinkType.MESH)
        )

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def lookup(self, key: str) -> Optional["Node"]:
        """
        Find a node by name, falling back to mac address.

        An exact name match anywhere in the collection wins over a mac
        match. Returns None if neither matches.
        """
        for node in self._nodes:
            if node.name == key:
                return node
        for node in self._nodes:
            if key in node.macs:
                return node
        return None

    @overload
    def __getitem__(self, key: int) -> "Node": ...

    @overload
    def __getitem__(self, key: slice) -> "NodeCollection": ...

    @overload
    def __getitem__(self, key: str) -> Optional["Node"]: ...

    def __getitem__(self, key):
        """
        Index by position, slice, or name/mac.

        Integer indexing follows list semantics (negative indices count from
        the end, IndexError past either end). Slices return a collection.
        String keys go through lookup() and return None on a miss.
        """
        if isinstance(key, str):
            return self.lookup(key)
        if isinstance(key, slice):
            return NodeCollection(self._nodes[key])
        return self._nodes[key]

    def index(self, node: "Node") -> Optional[int]:
        """Position of `node` (by identity), or None if it is not here."""
        for position, candidate in enumerate(self._nodes):
            if candidate is node:
                return position
        return None

    def length(self) -> int:
        return len(self._nodes)

    # =========================================================================
    # DATA REDUCTION
    # =========================================================================

    def to_list(self) -> List["Node"]:
        """Underlying nodes as a fresh list, for ad-hoc filtering and mapping."""
        return list(self._nodes)

    def names(self) -> List[Optional[str]]:
        return [node.name for node in self._nodes]

    def ids(self) -> List[str]:
        return [node.id for node in self._nodes]

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_wire(self) -> List["WireNode"]:
        """Node-centric wire records; see core.serializer."""
        from core.serializer import to_wire
        return to_wire(self._nodes)

    def dumps(self) -> bytes:
        """Wire records as JSON bytes."""
        from core.serializer import dumps
        return dumps(self._nodes)

    @classmethod
    def from_wire(cls, records: Iterable[object]) -> "NodeCollection":
        """Rebuild a graph from wire records; see core.serializer."""
        from core.serializer import from_wire
        return from_wire(records)

    @classmethod
    def from_document(cls, document: Union[bytes, str, dict]) -> "NodeCollection":
        """Build a graph from a raw nodes.json document; see core.graph_builder."""
        from core.graph_builder import build_graph
        return build_graph(document)

    # =========================================================================
    # PROTOCOL
    # =========================================================================

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator["Node"]:
        return iter(self._nodes)

    def __contains__(self, node: object) -> bool:
        return any(candidate is node for candidate in self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeCollection):
            return NotImplemented
        return len(self._nodes) == len(other._nodes) and all(
            a is b for a, b in zip(self._nodes, other._nodes)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"NodeCollection(nodes={len(self._nodes)})"


def _has_links(node: "Node", link_type: LinkType) -> bool:
    return any(link.type == link_type for link in node.links)
