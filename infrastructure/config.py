"""
MESHGRAPH CONFIG - Settings for Fetching Topology Documents

Configuration is loaded once from config/meshgraph.toml. Only the
[source] section is read by this package:

    [source]
    default = "http://burgtor.ffhl/mesh/nodes.json"
    http_timeout = 10.0
    user_agent = "meshgraph"

Usage:
    from infrastructure.config import get_config

    config = get_config()
    config.default_source
"""
import tomllib
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import msgspec


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "meshgraph.toml"
DEFAULT_NODESRC = "http://burgtor.ffhl/mesh/nodes.json"


class MeshConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings used by document sources."""
    default_source: str = DEFAULT_NODESRC
    http_timeout: float = 10.0
    user_agent: str = "meshgraph"


def load_toml_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from meshgraph.toml.

    Returns:
        Dict with all configuration sections, or {} if the file is
        missing or unreadable
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        warnings.warn(f"Failed to load config from TOML: {e}")
        return {}


def get_config(path: Optional[Path] = None) -> MeshConfig:
    """
    Build a MeshConfig from the [source] section.

    Missing keys fall back to MeshConfig defaults. A section that is not a
    table, or has values of the wrong type, is reported with a warning and
    ignored.
    """
    section = load_toml_config(path).get("source", {})
    if not isinstance(section, dict):
        warnings.warn(
            f"Invalid [source] config, using defaults: expected a table, "
            f"got {type(section).__name__}"
        )
        return MeshConfig()
    values = {
        "default_source": section.get("default"),
        "http_timeout": section.get("http_timeout"),
        "user_agent": section.get("user_agent"),
    }
    try:
        return msgspec.convert(
            {key: value for key, value in values.items() if value is not None},
            MeshConfig,
        )
    except msgspec.ValidationError as e:
        warnings.warn(f"Invalid [source] config, using defaults: {e}")
        return MeshConfig()
