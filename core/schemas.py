"""
MESHGRAPH SCHEMAS - The Grammar of the Wire

If ontology.py is the Dictionary (the words a snapshot may use),
schemas.py is the Grammar (how those words are laid out on the wire).

Two document shapes exist and they are NOT interchangeable:

1. RAW (ffmap nodes.json, consumed by GraphBuilder)
   {"nodes": [RawNode...], "links": [RawLink...]}
   Edges address nodes by POSITION in "nodes", not by id.

2. WIRE (produced and consumed by Serializer)
   [WireNode...], each node carrying its own links as {to: <id>, ...}

Design Principles:
1. STRICT TYPING: msgspec.Struct, no silent coercion of bools into ints
2. PERMISSIVE INPUT: macs/geo/quality accept both "a, b" strings and arrays
3. KW_ONLY: Enforce keyword arguments to prevent positional mix-ups
4. EXPLICIT ABSENCE: None for missing name/geo/quality, never ""
"""
import math
import re
from typing import Any, List, Optional, Tuple, Union

import msgspec

from core.ontology import LinkType


# Comma separated lists in ffmap documents use optional whitespace after ","
_LIST_SEPARATOR = re.compile(r",\s*")


# =============================================================================
# RAW INPUT FORMAT (ffmap nodes.json)
# =============================================================================

class RawFlags(msgspec.Struct, kw_only=True):
    """Boolean state of a node as reported by the map backend."""
    client: bool = False
    online: bool = False
    gateway: bool = False


class RawNode(msgspec.Struct, kw_only=True):
    """
    One entry of the raw "nodes" array.

    Unknown keys (firmware, uptime, ...) are ignored.
    """
    id: str
    macs: Union[str, List[str]]
    flags: RawFlags
    name: Optional[str] = None
    geo: Union[str, List[float], None] = None


class RawLink(msgspec.Struct, kw_only=True):
    """
    One entry of the raw "links" array.

    source/target are zero-based positions into the "nodes" array.
    """
    source: int
    target: int
    type: Optional[str] = None
    quality: Union[str, List[float], None] = None


class RawDocument(msgspec.Struct, kw_only=True):
    """
    Top level of a raw document.

    Records stay untyped here so each one can be validated on its own and
    reported with its position.
    """
    nodes: List[Any]
    links: List[Any] = []


# =============================================================================
# WIRE FORMAT (node-centric, denormalized)
# =============================================================================

class WireLink(msgspec.Struct, kw_only=True):
    """A link as serialized inside its owning node: target by id."""
    to: str
    type: LinkType
    quality: Optional[float] = None


class WireNode(msgspec.Struct, kw_only=True):
    """A node with its scalar attributes and its outgoing links."""
    id: str
    name: Optional[str] = None
    macs: List[str] = []
    geo: Optional[Tuple[float, float]] = None
    online: bool = False
    gateway: bool = False
    client: bool = False
    links: List[WireLink] = []


# =============================================================================
# VALUE PARSERS
# =============================================================================

def split_list(value: str) -> List[str]:
    """Split "a, b,c" into ["a", "b", "c"], dropping empty pieces."""
    return [part for part in _LIST_SEPARATOR.split(value.strip()) if part]


def to_finite(part: Any) -> float:
    """
    Convert one piece to a finite float.

    Raises:
        ValueError: If the piece is not a number, or is nan/inf
    """
    number = float(part)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number {part!r}")
    return number


def parse_macs(value: Union[str, List[str]]) -> List[str]:
    """Normalize a macs value (string or list) to a list of strings."""
    if isinstance(value, str):
        return split_list(value)
    return list(value)


def parse_geo(value: Union[str, List[float], None]) -> Optional[Tuple[float, float]]:
    """
    Normalize a geo value to a (latitude, longitude) pair.

    Returns None for null or an empty string.

    Raises:
        ValueError: If the value is not exactly two finite numbers
    """
    if value is None:
        return None
    if isinstance(value, str):
        parts = split_list(value)
        if not parts:
            return None
        coords = [to_finite(part) for part in parts]
    else:
        coords = [to_finite(part) for part in value]

    if len(coords) != 2:
        raise ValueError(f"expected 2 coordinates, got {len(coords)}")
    return (coords[0], coords[1])


def parse_quality(value: Union[str, List[float], None]) -> List[float]:
    """
    Normalize a quality value to a list of floats.

    The first value is measured source -> target, the second target -> source.
    null and "" yield an empty list.

    Raises:
        ValueError: If a piece is not a finite number
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [to_finite(part) for part in split_list(value)]
    return [to_finite(part) for part in value]


# =============================================================================
# SERIALIZATION HELPERS
# =============================================================================

# Pre-compiled encoders/decoders, reused across the application

_wire_encoder = msgspec.json.Encoder()
_document_decoder = msgspec.json.Decoder(type=RawDocument)
_any_decoder = msgspec.json.Decoder()


def encode_wire(nodes: List[WireNode]) -> bytes:
    """Serialize wire records to JSON bytes."""
    return _wire_encoder.encode(nodes)


def decode_document(data: Union[bytes, str]) -> RawDocument:
    """
    Decode raw document JSON into a RawDocument.

    Raises:
        msgspec.DecodeError: On invalid JSON
        msgspec.ValidationError: If "nodes" or "links" are not arrays
    """
    return _document_decoder.decode(data)


def decode_json(data: Union[bytes, str]) -> Any:
    """Decode JSON into builtin Python objects."""
    return _any_decoder.decode(data)
