"""
MESHGRAPH SERIALIZER - Round-Tripping the Object Graph

Wire shape (one record per node, links embedded, targets by id):

  [{"id": "a", "name": ..., "macs": [...], "geo": [lat, lon] | null,
    "online": bool, "gateway": bool, "client": bool,
    "links": [{"to": "b", "type": "client", "quality": null}, ...]}, ...]

This is NOT the raw nodes.json shape; only Serializer output is accepted
by from_wire().

Reconstruction is two-phase because records point at each other before all
nodes exist (and mesh links are cyclic: a -> b -> a):

  Phase 1: build every Node; each Link.target holds the target's id string
  Phase 2: swap every placeholder for the Node with that exact id

Recursive resolution would never terminate on a cycle; two passes always do.
"""
import logging
from typing import Any, Dict, Iterable, List, Union

import msgspec

from core.ontology import LinkType
from core.schemas import WireLink, WireNode, decode_json, encode_wire
from core.topology import (
    DuplicateNodeError,
    Link,
    MalformedDocument,
    MalformedNode,
    Node,
    UnresolvedReference,
)
from core.collection import NodeCollection

logger = logging.getLogger(__name__)


class Serializer:
    """
    Converts a topology graph to and from the node-centric wire format.

    Usage:
        serializer = Serializer()
        payload = serializer.dumps(nodes)
        restored = serializer.loads(payload)
        assert restored.ids() == nodes.ids()
    """

    # =========================================================================
    # TO WIRE
    # =========================================================================

    def to_wire(self, nodes: Iterable[Node]) -> List[WireNode]:
        """Flatten nodes into wire records; link targets become ids."""
        return [self._node_to_wire(node) for node in nodes]

    def to_builtins(self, nodes: Iterable[Node]) -> List[Dict[str, Any]]:
        """Wire records as plain dicts/lists, ready for any JSON library."""
        return msgspec.to_builtins(self.to_wire(nodes))

    def dumps(self, nodes: Iterable[Node]) -> bytes:
        """Wire records as JSON bytes."""
        return encode_wire(self.to_wire(nodes))

    @staticmethod
    def _node_to_wire(node: Node) -> WireNode:
        return WireNode(
            id=node.id,
            name=node.name,
            macs=list(node.macs),
            geo=node.geo,
            online=node.online,
            gateway=node.gateway,
            client=node.client,
            links=[
                WireLink(to=link.target_id, type=link.type, quality=link.quality)
                for link in node.links
            ],
        )

    # =========================================================================
    # FROM WIRE
    # =========================================================================

    def from_wire(self, records: Iterable[Union[WireNode, Any]]) -> NodeCollection:
        """
        Rebuild a graph from wire records.

        Args:
            records: WireNode structs or plain mappings in the wire shape

        Returns:
            NodeCollection in record order, every Link resolved

        Raises:
            MalformedNode: If a record does not match the wire shape
            DuplicateNodeError: If two records share an id
            UnresolvedReference: If a link points at an id not in `records`
        """
        nodes: List[Node] = []
        by_id: Dict[str, Node] = {}

        # Phase 1: nodes with placeholder link targets
        for position, record in enumerate(records):
            wire = self._coerce(position, record)
            if wire.id in by_id:
                raise DuplicateNodeError(wire.id)
            node = Node(
                id=wire.id,
                name=wire.name,
                macs=list(wire.macs),
                geo=wire.geo,
                client=wire.client,
                online=wire.online,
                gateway=wire.gateway,
                links=[self._placeholder_link(wire.id, link) for link in wire.links],
            )
            by_id[node.id] = node
            nodes.append(node)

        # Phase 2: placeholders -> Node references
        for node in nodes:
            for link in node.links:
                target = by_id.get(link.target)
                if target is None:
                    raise UnresolvedReference(node.id, link.target)
                link.target = target

        logger.debug(f"Restored {len(nodes)} nodes from wire records")
        return NodeCollection(nodes)

    def loads(self, data: Union[bytes, str]) -> NodeCollection:
        """
        Rebuild a graph from JSON produced by dumps().

        Raises:
            MalformedDocument: If data is not a JSON array
        """
        try:
            records = decode_json(data)
        except msgspec.DecodeError as e:
            raise MalformedDocument(f"Cannot read wire document: {e}") from e
        if not isinstance(records, list):
            raise MalformedDocument(
                f"Wire document must be an array, got {type(records).__name__}"
            )
        return self.from_wire(records)

    @staticmethod
    def _coerce(position: int, record: Any) -> WireNode:
        if isinstance(record, WireNode):
            return record
        try:
            return msgspec.convert(record, WireNode)
        except msgspec.ValidationError as e:
            raise MalformedNode(position, str(e)) from e

    @staticmethod
    def _placeholder_link(node_id: str, link: WireLink) -> Link:
        # Hand-built WireLink structs are not validated on construction
        try:
            link_type = LinkType(link.type)
        except ValueError as e:
            raise MalformedNode(node_id, f"unknown link type {link.type!r}") from e
        if not link_type.has_quality and link.quality is not None:
            raise MalformedNode(node_id, f"client link to {link.to!r} carries a quality")
        return Link(link.to, link_type, link.quality)


# =============================================================================
# MODULE-LEVEL HELPERS
# =============================================================================

_serializer = Serializer()

to_wire = _serializer.to_wire
to_builtins = _serializer.to_builtins
dumps = _serializer.dumps
from_wire = _serializer.from_wire
loads = _serializer.loads
