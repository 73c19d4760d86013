"""
MESHGRAPH INFRASTRUCTURE - System-Level Modules

This package contains infrastructure components:
- config: TOML-backed settings for document sources
- document_source: file, HTTP and in-memory document sources
"""

from infrastructure.config import MeshConfig, get_config, load_toml_config
from infrastructure.document_source import (
    DocumentFetchError,
    DocumentSource,
    FileSource,
    HttpSource,
    StaticSource,
    load_collection,
    source_for,
)

__all__ = [
    "MeshConfig",
    "get_config",
    "load_toml_config",
    "DocumentFetchError",
    "DocumentSource",
    "FileSource",
    "HttpSource",
    "StaticSource",
    "load_collection",
    "source_for",
]
