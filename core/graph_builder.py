"""
MESHGRAPH BUILDER - From nodes.json to a Live Object Graph

The raw document addresses nodes by POSITION, not by id:

  "links": [{"source": 0, "target": 1, "type": "client"}, ...]
                      ^            ^
                      positions into "nodes"

Architecture (Arena + Index):
  1. Decode the document and validate every node record
  2. Build the arena: List[Node] in input order (position -> Node)
  3. Walk the edges ONCE, translating positions into Node references
  4. Hand out a NodeCollection; positions are never looked at again

Edge semantics:
- client: one Link on EACH endpoint, no quality
- vpn / mesh / anything else: quality "q_fwd, q_rev"
    source gets Link(target, q_fwd)
    target gets Link(source, q_rev) ONLY if q_rev was reported

The second rule leaves some physical links visible from one side only.
That is what the data says; the builder does not invent the missing metric.

Failure policy: any malformed record or dangling position aborts the whole
build. There are no partial graphs.
"""
import logging
from collections.abc import Mapping
from typing import Any, List, Set, Union

import msgspec

from core.ontology import LinkType, classify_link_type
from core.schemas import (
    RawDocument,
    RawLink,
    RawNode,
    decode_document,
    parse_geo,
    parse_macs,
    parse_quality,
)
from core.topology import (
    DanglingEdge,
    DuplicateNodeError,
    Link,
    MalformedDocument,
    MalformedEdge,
    MalformedNode,
    Node,
)
from core.collection import NodeCollection

logger = logging.getLogger(__name__)


RawInput = Union[bytes, bytearray, str, Mapping[str, Any]]


class GraphBuilder:
    """
    Builds a fully linked topology graph from a raw ffmap document.

    Usage:
        builder = GraphBuilder()
        nodes = builder.build(raw_bytes)
        nodes.online().gateways().names()

    A builder keeps no state between builds and can be reused.
    """

    def build(self, document: RawInput) -> NodeCollection:
        """
        Build the graph.

        Args:
            document: JSON bytes/str, or an already parsed mapping

        Returns:
            NodeCollection over every node, in document order

        Raises:
            MalformedDocument: If the top level is not {"nodes": [...], "links": [...]}
            MalformedNode: If a node record is incomplete or unparsable
            DuplicateNodeError: If two node records share an id
            MalformedEdge: If an edge record is incomplete or has bad quality
            DanglingEdge: If an edge position is outside the node array
        """
        raw = self._decode(document)

        arena: List[Node] = []
        seen_ids: Set[str] = set()
        for position, record in enumerate(raw.nodes):
            node = self._build_node(position, record)
            if node.id in seen_ids:
                raise DuplicateNodeError(node.id)
            seen_ids.add(node.id)
            arena.append(node)

        for position, record in enumerate(raw.links):
            self._add_edge(arena, position, record)

        link_count = sum(len(node.links) for node in arena)
        logger.debug(
            f"Built {len(arena)} nodes and {link_count} links "
            f"from {len(raw.links)} edge records"
        )
        return NodeCollection(arena)

    # =========================================================================
    # DECODING
    # =========================================================================

    def _decode(self, document: RawInput) -> RawDocument:
        try:
            if isinstance(document, (bytes, bytearray, str)):
                return decode_document(document)
            if isinstance(document, Mapping):
                return msgspec.convert(document, RawDocument)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            raise MalformedDocument(f"Cannot read topology document: {e}") from e
        raise MalformedDocument(
            f"Unsupported document type: {type(document).__name__}"
        )

    def _build_node(self, position: int, record: Any) -> Node:
        try:
            raw = msgspec.convert(record, RawNode)
        except msgspec.ValidationError as e:
            raise MalformedNode(position, str(e)) from e

        try:
            macs = parse_macs(raw.macs)
            geo = parse_geo(raw.geo)
        except ValueError as e:
            raise MalformedNode(raw.id, str(e)) from e

        return Node(
            id=raw.id,
            name=raw.name,
            macs=macs,
            geo=geo,
            client=raw.flags.client,
            online=raw.flags.online,
            gateway=raw.flags.gateway,
        )

    # =========================================================================
    # EDGE RESOLUTION
    # =========================================================================

    def _add_edge(self, arena: List[Node], position: int, record: Any) -> None:
        try:
            raw = msgspec.convert(record, RawLink)
        except msgspec.ValidationError as e:
            raise MalformedEdge(position, str(e)) from e

        source = self._resolve(arena, position, "source", raw.source)
        target = self._resolve(arena, position, "target", raw.target)
        link_type = classify_link_type(raw.type)

        if link_type is LinkType.CLIENT:
            source.links.append(Link(target, link_type))
            target.links.append(Link(source, link_type))
            return

        try:
            quality = parse_quality(raw.quality)
        except ValueError as e:
            raise MalformedEdge(position, f"bad quality {raw.quality!r}: {e}") from e

        source.links.append(Link(target, link_type, quality[0] if quality else None))
        if len(quality) > 1:
            target.links.append(Link(source, link_type, quality[1]))
        else:
            logger.debug(
                f"Edge #{position} {source.id} -> {target.id} has no reverse quality; "
                f"not linking back"
            )

    @staticmethod
    def _resolve(arena: List[Node], position: int, endpoint: str, index: int) -> Node:
        # Bounds are checked explicitly: a negative index must not wrap around
        if not 0 <= index < len(arena):
            raise DanglingEdge(position, endpoint, index, len(arena))
        return arena[index]


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def build_graph(document: RawInput) -> NodeCollection:
    """Build a NodeCollection from a raw ffmap document."""
    return GraphBuilder().build(document)
