from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, TextIO

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # <3.11

from .config import Config, parse_config
from .exceptions import ConfigParseError
from .ordered_map import from_mapping, load_ordered

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("chore.yml", "chore.yaml", "chore.toml")


# =====================================================================
#   Discovery
# =====================================================================
def find_config(start: str | Path | None = None) -> Path | None:
    """
    Walk up from `start` (the working directory by default) looking for a
    configuration file. Returns None if none is found.
    """
    directory = Path(start).resolve() if start is not None else Path.cwd()
    for candidate_dir in (directory, *directory.parents):
        for filename in CONFIG_FILENAMES:
            candidate = candidate_dir / filename
            if candidate.is_file():
                logger.debug(f"Found configuration file {candidate}")
                return candidate
    logger.debug(f"No configuration file found above {directory}")
    return None


# =====================================================================
#   Decoding
# =====================================================================
def _format_for(path: Path | None, fmt: str | None) -> str:
    if fmt:
        return fmt.lower()
    if path is not None and path.suffix.lower() == ".toml":
        return "toml"
    return "yaml"


def load_document(data: str | bytes, fmt: str = "yaml"):
    """Decode configuration text into ordered pairs (MapSlice)."""
    if fmt == "toml":
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return from_mapping(tomli.loads(data))
        except tomli.TOMLDecodeError as e:
            raise ConfigParseError(f"invalid TOML: {e}") from None
    if fmt in ("yaml", "yml"):
        return load_ordered(data)
    raise ConfigParseError(f"unsupported configuration format '{fmt}'")


# =====================================================================
#   Main loader
# =====================================================================
def load_config(path: str | Path | BinaryIO | TextIO, fmt: str | None = None) -> Config:
    """
    Load and validate a YAML or TOML config file into a Config.
    Relative `dir` values resolve against the config file's directory.

    Args:
        path: File path or an open stream
        fmt: "yaml" or "toml"; inferred from the file suffix when omitted
    """
    config_path: Path | None = None
    if not hasattr(path, "read"):
        config_path = Path(path).resolve()
        with open(config_path, "rb") as f:
            data = f.read()
    else:
        data = path.read()  # type: ignore

    # Resolve base directory for relative paths
    base_dir = config_path.parent if config_path else Path.cwd()

    document = load_document(data, _format_for(config_path, fmt))
    if document is None:
        document = {}

    config = parse_config(document, root=base_dir, source=config_path)
    logger.debug(f"Loaded {len(config.tasks)} tasks from {config_path or '<stream>'}")
    return config
