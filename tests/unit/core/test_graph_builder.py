"""
Unit tests for core/graph_builder.py - GraphBuilder

Tests graph construction from raw nodes.json documents:
- Node attribute parsing (macs, geo, flags, names)
- Position-based edge resolution
- Client link symmetry and one-way mesh/vpn quality
- Error handling for malformed and dangling input
"""
import copy
import logging

import msgspec
import pytest

from core.graph_builder import GraphBuilder, build_graph
from core.ontology import LinkType
from core.topology import (
    DanglingEdge,
    DuplicateNodeError,
    MalformedDocument,
    MalformedEdge,
    MalformedNode,
)


# =============================================================================
# EXAMPLE SCENARIO
# =============================================================================

def test_example_document_links(example_document):
    """
    Validate the three-node example end to end.

    Verifies:
    - a has one client link to b
    - b has a client link to a and a mesh link to c with quality 1.0
    - c has a mesh link to b with quality 2.0
    """
    nodes = build_graph(example_document)
    a, b, c = nodes[0], nodes[1], nodes[2]

    assert [(l.target, l.type, l.quality) for l in a.links] == [
        (b, LinkType.CLIENT, None),
    ]
    assert [(l.target, l.type, l.quality) for l in b.links] == [
        (a, LinkType.CLIENT, None),
        (c, LinkType.MESH, 1.0),
    ]
    assert [(l.target, l.type, l.quality) for l in c.links] == [
        (b, LinkType.MESH, 2.0),
    ]


def test_online_filter_on_offline_graph_is_empty(example_document):
    """All example nodes are offline, so online() is empty."""
    nodes = build_graph(example_document)

    online = nodes.online()

    assert online.length() == 0
    assert len(online) == 0


def test_build_from_bytes_matches_build_from_mapping(sample_document, sample_document_bytes):
    """JSON bytes and a parsed mapping build the same topology."""
    from_bytes = build_graph(sample_document_bytes)
    from_mapping = build_graph(sample_document)

    assert from_bytes.ids() == from_mapping.ids()
    assert [len(n.links) for n in from_bytes] == [len(n.links) for n in from_mapping]


def test_builder_is_reusable(example_document):
    """Two builds from one builder yield independent graphs."""
    builder = GraphBuilder()

    first = builder.build(example_document)
    second = builder.build(example_document)

    assert first.ids() == second.ids()
    assert first[0] is not second[0]
    assert len(first[0].links) == 1


# =============================================================================
# NODE ATTRIBUTES
# =============================================================================

def test_macs_string_is_split(sample_nodes):
    """Comma separated macs become a list, whitespace trimmed."""
    gateway = sample_nodes[0]

    assert gateway.macs == ["02:00:00:00:00:01", "02:00:00:00:00:11"]


def test_macs_list_is_kept(sample_nodes):
    assert sample_nodes[1].macs == ["02:00:00:00:00:02"]


def test_geo_string_and_list_become_float_pairs(sample_nodes):
    """Both geo encodings normalize to (lat, lon) floats."""
    assert sample_nodes[0].geo == (53.86, 10.68)
    assert sample_nodes[1].geo == (53.87, 10.69)
    assert sample_nodes[2].geo is None


def test_empty_geo_string_is_absent(example_document):
    document = copy.deepcopy(example_document)
    document["nodes"][0]["geo"] = ""

    nodes = build_graph(document)

    assert nodes[0].geo is None


def test_flags_are_copied(sample_nodes):
    gateway, _, offline, client, _ = sample_nodes

    assert gateway.online and gateway.gateway and not gateway.client
    assert not offline.online
    assert client.client


def test_missing_name_is_none_and_empty_name_is_kept(sample_nodes):
    """Absent and empty names stay distinguishable."""
    assert sample_nodes[3].name is None
    assert sample_nodes[2].name == ""


def test_missing_flag_defaults_to_false(example_document):
    document = copy.deepcopy(example_document)
    document["nodes"][0]["flags"] = {"online": True}

    node = build_graph(document)[0]

    assert node.online
    assert not node.client
    assert not node.gateway


# =============================================================================
# EDGE SEMANTICS
# =============================================================================

def test_client_links_are_symmetric_without_quality(sample_nodes):
    """
    Validate client edges link both endpoints.

    Verifies:
    - router lists the client, client lists the router
    - neither side has a quality
    """
    router, client = sample_nodes[1], sample_nodes[3]

    assert client in router.clients()
    assert router in client.clients()
    assert all(l.quality is None for l in router.links_of(LinkType.CLIENT))
    assert all(l.quality is None for l in client.links_of(LinkType.CLIENT))


def test_client_edge_ignores_quality_field(example_document):
    """Client edges never parse quality, even if one is present."""
    document = copy.deepcopy(example_document)
    document["links"][0]["quality"] = "TT"

    nodes = build_graph(document)

    assert nodes[0].links[0].quality is None
    assert nodes[1].links[0].quality is None


def test_vpn_quality_list_links_both_ways(sample_nodes):
    gateway, vpn_box = sample_nodes[0], sample_nodes[4]

    forward = gateway.links_of(LinkType.VPN)
    reverse = vpn_box.links_of(LinkType.VPN)

    assert [(l.target, l.quality) for l in forward] == [(vpn_box, 1.0)]
    assert [(l.target, l.quality) for l in reverse] == [(gateway, 1.5)]


def test_single_quality_links_one_way_only(sample_nodes):
    """
    Validate one-way quality leaves the reverse link out.

    Verifies:
    - r2 lists r3 with the reported quality
    - r3 has no link back to r2
    """
    router, lonely = sample_nodes[1], sample_nodes[2]

    assert lonely in router.meshs()
    assert [l.quality for l in router.links_of(LinkType.MESH) if l.target is lonely] == [2.5]
    assert lonely.links == []


def test_null_quality_links_one_way_without_quality(example_document):
    document = copy.deepcopy(example_document)
    document["links"][1]["quality"] = None

    nodes = build_graph(document)

    assert [(l.target, l.quality) for l in nodes[1].links_of(LinkType.MESH)] == [(nodes[2], None)]
    assert nodes[2].links == []


@pytest.mark.parametrize("raw_type", [None, "", "wifi", "MESH", "tunnel"])
def test_unknown_edge_types_are_mesh(example_document, raw_type):
    document = copy.deepcopy(example_document)
    document["links"][1]["type"] = raw_type

    nodes = build_graph(document)

    assert nodes[1].links[1].type is LinkType.MESH


def test_links_keep_insertion_order(sample_nodes):
    gateway = sample_nodes[0]

    assert [l.target.id for l in gateway.links] == ["02:00:00:00:00:02", "02:00:00:00:00:05"]


def test_document_without_links(example_document):
    document = {"nodes": example_document["nodes"]}

    nodes = build_graph(document)

    assert nodes.length() == 3
    assert all(n.links == [] for n in nodes)


# =============================================================================
# ERROR HANDLING
# =============================================================================

def test_missing_node_id_fails(example_document):
    """
    Validate that a node without an id fails the whole build.

    Verifies:
    - MalformedNode is raised
    - the error names the record's position
    """
    document = copy.deepcopy(example_document)
    del document["nodes"][1]["id"]

    with pytest.raises(MalformedNode) as exc_info:
        build_graph(document)

    assert exc_info.value.node_ref == 1


@pytest.mark.parametrize("geo", ["53.8", "a, b", [1.0, 2.0, 3.0], "1, 2, 3"])
def test_unparsable_geo_fails(example_document, geo):
    document = copy.deepcopy(example_document)
    document["nodes"][0]["geo"] = geo

    with pytest.raises(MalformedNode) as exc_info:
        build_graph(document)

    assert exc_info.value.node_ref == "a"


def test_missing_macs_fails(example_document):
    document = copy.deepcopy(example_document)
    del document["nodes"][2]["macs"]

    with pytest.raises(MalformedNode):
        build_graph(document)


def test_duplicate_node_id_fails(example_document):
    document = copy.deepcopy(example_document)
    document["nodes"][2]["id"] = "a"

    with pytest.raises(DuplicateNodeError) as exc_info:
        build_graph(document)

    assert exc_info.value.node_id == "a"
    assert isinstance(exc_info.value, MalformedNode)


@pytest.mark.parametrize("endpoint, position", [("source", 3), ("target", 99), ("target", -1)])
def test_out_of_range_position_fails(example_document, endpoint, position):
    """
    Validate dangling positions abort the build.

    Verifies:
    - positions past the end and negative positions raise DanglingEdge
    - the error carries edge index, endpoint and position
    """
    document = copy.deepcopy(example_document)
    document["links"][1][endpoint] = position

    with pytest.raises(DanglingEdge) as exc_info:
        build_graph(document)

    error = exc_info.value
    assert (error.index, error.endpoint, error.position, error.node_count) == (1, endpoint, position, 3)


def test_boolean_position_is_not_an_index(example_document):
    document = copy.deepcopy(example_document)
    document["links"][0]["source"] = True

    with pytest.raises(MalformedEdge):
        build_graph(document)


def test_unparsable_quality_fails(example_document):
    document = copy.deepcopy(example_document)
    document["links"][1]["quality"] = "good, bad"

    with pytest.raises(MalformedEdge) as exc_info:
        build_graph(document)

    assert exc_info.value.index == 1


@pytest.mark.parametrize("document", [
    b"not json",
    b"[]",
    {"links": []},
    {"nodes": "a,b"},
    42,
])
def test_malformed_document_fails(document):
    with pytest.raises(MalformedDocument):
        build_graph(document)


def test_decode_error_is_chained():
    with pytest.raises(MalformedDocument) as exc_info:
        build_graph(b"{")

    assert isinstance(exc_info.value.__cause__, msgspec.DecodeError)


@pytest.mark.parametrize("geo", ["nan, 10", "10.0, inf", [float("nan"), 1.0], [1.0, float("-inf")]])
def test_non_finite_geo_fails(example_document, geo):
    """
    Validate that nan/inf coordinates are rejected.

    Verifies:
    - MalformedNode is raised instead of storing a value JSON cannot carry
    """
    document = copy.deepcopy(example_document)
    document["nodes"][0]["geo"] = geo

    with pytest.raises(MalformedNode) as exc_info:
        build_graph(document)

    assert exc_info.value.node_ref == "a"


@pytest.mark.parametrize("quality", ["inf, 2.0", "1.0, nan", [float("nan"), 1.0]])
def test_non_finite_quality_fails(example_document, quality):
    document = copy.deepcopy(example_document)
    document["links"][1]["quality"] = quality

    with pytest.raises(MalformedEdge) as exc_info:
        build_graph(document)

    assert exc_info.value.index == 1


# =============================================================================
# LOGGING
# =============================================================================

def test_build_logs_node_and_link_counts(example_document, caplog):
    """The summary counts Links created, not just edge records read."""
    document = copy.deepcopy(example_document)
    document["links"][1]["quality"] = "1.0"

    with caplog.at_level(logging.DEBUG, logger="core.graph_builder"):
        build_graph(document)

    assert "Built 3 nodes and 3 links from 2 edge records" in caplog.text
