"""Per-cluster property sources and configuration file loaders."""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

import structlog
import yaml

log = structlog.get_logger()

# Keys look like "<alias>.hbase.<suffix>"; the alias is everything before this marker.
CLUSTER_KEY_MARKER = ".hbase."

CONFIG_PATH_ENV = "HBASE_REGISTRY_CONFIG"
DEFAULT_CONFIG_PATH = "clusters.yaml"


class ClusterConfigResolver(Protocol):
    """Read-only view of per-cluster configuration."""

    def list_cluster_aliases(self) -> list[str]: ...

    def get_property(self, key: str, default: str = "") -> str: ...


class PropertySource:
    """In-memory ``"<alias>.hbase.<suffix>"`` property mapping.

    Aliases are taken from ``aliases`` when given, otherwise derived from the
    key prefixes in first-seen order.
    """

    def __init__(self, properties: Mapping[str, str] | None = None, aliases: Sequence[str] | None = None) -> None:
        self._properties: dict[str, str] = dict(properties or {})
        self._aliases: list[str] | None = list(aliases) if aliases is not None else None
        self._lock = threading.Lock()

    def list_cluster_aliases(self) -> list[str]:
        with self._lock:
            if self._aliases is not None:
                return list(self._aliases)
            aliases: list[str] = []
            for key in self._properties:
                alias, marker, _ = key.partition(CLUSTER_KEY_MARKER)
                if marker and alias and alias not in aliases:
                    aliases.append(alias)
            return aliases

    def get_property(self, key: str, default: str = "") -> str:
        with self._lock:
            value = self._properties.get(key)
        if value is None or not value.strip():
            return default
        return value.strip()

    def set_property(self, key: str, value: str) -> None:
        with self._lock:
            self._properties[key] = value
            if self._aliases is not None:
                alias, marker, _ = key.partition(CLUSTER_KEY_MARKER)
                if marker and alias and alias not in self._aliases:
                    self._aliases.append(alias)

    def __len__(self) -> int:
        with self._lock:
            return len(self._properties)


def _read_config_text(path: Path) -> str:
    if not path.exists():
        msg = (
            f"Cluster configuration file not found: {path}. "
            f"Create it or set {CONFIG_PATH_ENV} to point to your config file."
        )
        raise FileNotFoundError(msg)
    return path.read_text()


_PROPERTIES_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _continues(line: str) -> bool:
    # An odd run of trailing backslashes escapes the line break.
    return (len(line) - len(line.rstrip("\\"))) % 2 == 1


def _unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != "\\" or i + 1 == len(text):
            out.append(char)
            i += 1
            continue
        escaped = text[i + 1]
        if escaped == "u":
            digits = text[i + 2 : i + 6]
            if len(digits) != 4 or any(d not in "0123456789abcdefABCDEF" for d in digits):
                msg = f"Malformed \\uXXXX escape in properties entry: {text!r}"
                raise ValueError(msg)
            out.append(chr(int(digits, 16)))
            i += 6
            continue
        out.append(_PROPERTIES_ESCAPES.get(escaped, escaped))
        i += 2
    return "".join(out)


def _split_entry(line: str) -> tuple[str, str]:
    # The key ends at the first unescaped "=", ":" or whitespace.
    end = 0
    while end < len(line):
        char = line[end]
        if char == "\\":
            end += 2
            continue
        if char in "=:" or char.isspace():
            break
        end += 1
    rest = line[end:].lstrip()
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip()
    return _unescape(line[:end]), _unescape(rest)


def load_properties_file(path: Path) -> PropertySource:
    """Parse a Java-style ``.properties`` file into a PropertySource.

    Follows ``java.util.Properties.load`` for:
      - ``key=value``, ``key: value`` and ``key value`` separators;
      - ``#`` and ``!`` comment lines;
      - line continuation by an odd number of trailing backslashes;
      - ``\\t``, ``\\n``, ``\\r``, ``\\f``, ``\\uXXXX`` and escaped separators
        such as ``\\=`` or ``\\:``;
      - a key with no separator, which maps to an empty value.

    Files are read as text in the platform encoding, not ISO-8859-1. A file that
    ends in the middle of a continuation raises ValueError.
    """
    properties: dict[str, str] = {}
    pending = ""
    for raw_line in _read_config_text(path).splitlines():
        line = raw_line.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        if _continues(line):
            pending += line[:-1]
            continue
        line = pending + line
        pending = ""
        if not line.strip():
            continue
        key, value = _split_entry(line)
        properties[key] = value
    if pending:
        msg = f"Properties file {path} ends with an unterminated line continuation."
        raise ValueError(msg)
    return PropertySource(properties)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if value is None:
        return ""
    return str(value)


def _flatten(prefix: str, node: Any, out: dict[str, str]) -> None:
    if isinstance(node, dict):
        for key, child in node.items():
            _flatten(f"{prefix}.{key}", child, out)
    elif isinstance(node, list):
        out[prefix] = ",".join(_stringify(item) for item in node)
    else:
        out[prefix] = _stringify(node)


def load_yaml_file(path: Path) -> PropertySource:
    """Parse a YAML cluster file into a PropertySource.

    The file must contain a top-level ``clusters`` mapping of alias to a
    (possibly nested) mapping of HBase settings, e.g.::

        clusters:
          cluster1:
            hbase:
              quorum: node1,node2,node3
              zk.client.port: 2181

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If the file content is malformed.
    """
    raw = yaml.safe_load(_read_config_text(path))

    if not isinstance(raw, dict) or "clusters" not in raw:
        msg = f"Cluster config file {path} must contain a top-level 'clusters' key."
        raise ValueError(msg)

    clusters_raw: Any = raw["clusters"]
    if not isinstance(clusters_raw, dict) or len(clusters_raw) == 0:
        msg = f"Cluster config file {path} has an empty or invalid 'clusters' section."
        raise ValueError(msg)

    properties: dict[str, str] = {}
    for alias, entry in clusters_raw.items():
        if not isinstance(entry, dict):
            msg = f"Cluster '{alias}' must be a mapping, got {type(entry).__name__}."
            raise ValueError(msg)
        _flatten(str(alias), entry, properties)

    return PropertySource(properties, aliases=[str(alias) for alias in clusters_raw])


def load_cluster_config(path: str | Path | None = None) -> PropertySource:
    """Load cluster configuration from a YAML or ``.properties`` file.

    The path defaults to the ``HBASE_REGISTRY_CONFIG`` environment variable,
    then to ``clusters.yaml`` in the current working directory.
    """
    config_path = Path(path if path is not None else os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))
    suffix = config_path.suffix.lower()
    if suffix == ".properties":
        source = load_properties_file(config_path)
    elif suffix in (".yaml", ".yml"):
        source = load_yaml_file(config_path)
    else:
        msg = f"Unsupported cluster config format: {config_path}. Use .yaml, .yml or .properties."
        raise ValueError(msg)
    log.info("cluster_config_loaded", path=str(config_path), clusters=source.list_cluster_aliases())
    return source
