"""
MESHGRAPH DOCUMENT SOURCES - Where nodes.json Comes From

The topology core never performs I/O. It is handed bytes by a source:

    DocumentSource.fetch(locator) -> bytes   (or DocumentFetchError)

Sources:
- FileSource: locator is a filesystem path
- HttpSource: locator is an http(s) URL, fetched with requests
- StaticSource: locator is a key into an in-memory mapping (tests, caches)

load_collection() glues a source to GraphBuilder.
"""
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import requests

from core.collection import NodeCollection
from core.graph_builder import build_graph
from infrastructure.config import MeshConfig, get_config

logger = logging.getLogger(__name__)


class DocumentFetchError(Exception):
    """Raised when a source cannot deliver the document for a locator."""
    def __init__(self, locator: str, reason: str):
        self.locator = locator
        self.reason = reason
        super().__init__(f"Cannot fetch {locator}: {reason}")


class DocumentSource(Protocol):
    """Anything that can turn a locator into raw document bytes."""

    def fetch(self, locator: str) -> bytes:
        ...


# =============================================================================
# SOURCES
# =============================================================================

class FileSource:
    """Reads documents from the local filesystem."""

    def fetch(self, locator: str) -> bytes:
        path = Path(locator).expanduser()
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DocumentFetchError(locator, str(e)) from e
        logger.debug(f"Read {len(data)} bytes from {path}")
        return data


class HttpSource:
    """Fetches documents over HTTP(S)."""

    def __init__(self, timeout: float = 10.0, user_agent: str = "meshgraph"):
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}

    def fetch(self, locator: str) -> bytes:
        try:
            response = requests.get(locator, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DocumentFetchError(locator, str(e)) from e
        logger.info(f"Fetched {len(response.content)} bytes from {locator}")
        return response.content


class StaticSource:
    """Serves documents from memory, keyed by locator."""

    def __init__(self, documents: Optional[Dict[str, Union[bytes, str]]] = None):
        self.documents = dict(documents or {})

    def fetch(self, locator: str) -> bytes:
        if locator not in self.documents:
            raise DocumentFetchError(locator, "no such document")
        content = self.documents[locator]
        return content.encode("utf-8") if isinstance(content, str) else content


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def source_for(locator: str, config: Optional[MeshConfig] = None) -> DocumentSource:
    """HttpSource for http(s) URLs, FileSource for everything else."""
    if locator.startswith(("http://", "https://")):
        config = config or get_config()
        return HttpSource(timeout=config.http_timeout, user_agent=config.user_agent)
    return FileSource()


def load_collection(
    locator: Optional[str] = None,
    source: Optional[DocumentSource] = None,
    config: Optional[MeshConfig] = None,
) -> NodeCollection:
    """
    Fetch a raw nodes.json document and build its topology graph.

    Args:
        locator: URL, path or key; defaults to config.default_source
        source: Source to fetch with; chosen from the locator if omitted
        config: Settings; loaded from meshgraph.toml if omitted

    Raises:
        DocumentFetchError: If the document cannot be fetched
        GraphError: If the document cannot be built into a graph
    """
    if locator is None:
        config = config or get_config()
        locator = config.default_source
    if source is None:
        source = source_for(locator, config)

    nodes = build_graph(source.fetch(locator))
    logger.info(f"Loaded {nodes.length()} nodes from {locator}")
    return nodes
