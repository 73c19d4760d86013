"""
Pytest configuration and shared fixtures for the meshgraph test suite.
"""
import sys
from pathlib import Path

import msgspec
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def example_document():
    """Three nodes, one client edge and one mesh edge with both qualities."""
    return {
        "nodes": [
            {"id": "a", "name": "A", "macs": "a", "geo": None,
             "flags": {"client": False, "online": False, "gateway": False}},
            {"id": "b", "name": "B", "macs": "b", "geo": None,
             "flags": {"client": False, "online": False, "gateway": False}},
            {"id": "c", "name": "C", "macs": "c", "geo": None,
             "flags": {"client": False, "online": False, "gateway": False}},
        ],
        "links": [
            {"source": 0, "target": 1, "type": "client", "quality": None},
            {"source": 1, "target": 2, "type": "mesh", "quality": "1.0,2.0"},
        ],
    }


@pytest.fixture
def sample_document():
    """
    A small neighbourhood:

        gw  ==mesh==  r2  --mesh(one way)-->  r3
        gw  ==vpn===  r5
        r2  --client--  c1
    """
    return {
        "nodes": [
            {"id": "02:00:00:00:00:01", "name": "Gateway North",
             "macs": "02:00:00:00:00:01, 02:00:00:00:00:11", "geo": "53.86, 10.68",
             "flags": {"client": False, "online": True, "gateway": True}},
            {"id": "02:00:00:00:00:02", "name": "Router Two",
             "macs": ["02:00:00:00:00:02"], "geo": [53.87, 10.69],
             "flags": {"client": False, "online": True, "gateway": False}},
            {"id": "02:00:00:00:00:03", "name": "",
             "macs": "02:00:00:00:00:03", "geo": None,
             "flags": {"client": False, "online": False, "gateway": False}},
            {"id": "aa:00:00:00:00:01",
             "macs": "aa:00:00:00:00:01",
             "flags": {"client": True, "online": True, "gateway": False}},
            {"id": "02:00:00:00:00:05", "name": "Vpn Box",
             "macs": "02:00:00:00:00:05", "geo": None,
             "flags": {"client": False, "online": True, "gateway": False}},
        ],
        "links": [
            {"source": 0, "target": 1, "type": "mesh", "quality": "1.0, 1.2"},
            {"source": 0, "target": 4, "type": "vpn", "quality": [1.0, 1.5]},
            {"source": 1, "target": 2, "quality": "2.5"},
            {"source": 1, "target": 3, "type": "client", "quality": None},
        ],
    }


@pytest.fixture
def sample_document_bytes(sample_document):
    return msgspec.json.encode(sample_document)


@pytest.fixture
def sample_nodes(sample_document):
    """The sample document built into a NodeCollection."""
    from core.graph_builder import build_graph
    return build_graph(sample_document)
