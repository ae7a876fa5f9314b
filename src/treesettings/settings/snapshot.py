"""Snapshot documents for the local layer of a settings manager.

A snapshot is a flat list of records, each holding a path, a type tag and a field map:

    {
      "version": 1,
      "records": [
        {"path": "/editor", "type": "app.settings:EditorSettings", "fields": {"tab_width": "4"}}
      ]
    }

The same document can be encoded as msgpack, and read (but not written) as TOML:

    [[record]]
    path = "/editor"
    type = "app.settings:EditorSettings"
    fields = { tab_width = 4 }

Documents with no records describe an empty store.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterable

import msgpack

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # pyright: ignore[reportMissingImports]

from ..errors import CoercionFailure
from ..path.hierarchical_path import HierarchicalPath
from ..path.tree import HierarchicalPathTree
from .mapping import from_field_map, to_field_map, to_text
from .record import SettingsRecord
from .registry import SettingsTypeRegistry

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

FORMAT_JSON = 'json'
FORMAT_MSGPACK = 'msgpack'
FORMAT_TOML = 'toml'

_SUFFIX_FORMATS = {
    '.json': FORMAT_JSON,
    '.msgpack': FORMAT_MSGPACK,
    '.mpk': FORMAT_MSGPACK,
    '.toml': FORMAT_TOML,
}


@dataclass
class SnapshotEntry:
    """One stored setting: where it lives, what type it is, and its fields as text."""

    path: str
    """Canonical text of the hierarchical path"""

    type: str
    """Type tag resolved through a SettingsTypeRegistry"""

    fields: dict[str, str] = field(default_factory=dict)
    """Field name to textual value"""

    @classmethod
    def from_dict(cls, data: Any) -> "SnapshotEntry":
        """Validate and load an entry from a decoded document.

        Raises:
            CoercionFailure: If the entry is not shaped like a snapshot record
        """
        if not isinstance(data, dict):
            raise CoercionFailure(f"Snapshot record must be a mapping, not {type(data).__name__}")

        path = data.get('path')
        type_tag = data.get('type')
        fields = data.get('fields', {})
        if not isinstance(path, str) or not isinstance(type_tag, str):
            raise CoercionFailure(f"Snapshot record needs string 'path' and 'type' entries: {data!r}")
        if not isinstance(fields, dict):
            raise CoercionFailure(f"Snapshot record 'fields' must be a mapping: {data!r}")

        # TOML documents carry native values; normalize everything to text
        return cls(path, type_tag, {str(name): to_text(value) for name, value in fields.items()})


@dataclass
class SettingsSnapshot:
    """Serialized form of the local layer of a SettingsManager."""

    version: int = SNAPSHOT_VERSION
    """Snapshot format version"""

    records: list[SnapshotEntry] = field(default_factory=list)
    """Stored settings, sorted by path and then by the order they were set in"""

    def to_dict(self) -> dict[str, Any]:
        """Convert snapshot to a dictionary for JSON or msgpack serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "SettingsSnapshot":
        """Load snapshot from a decoded document.

        Raises:
            CoercionFailure: If the document is malformed or of an unsupported version
        """
        if not isinstance(data, dict):
            raise CoercionFailure(f"Snapshot document must be a mapping, not {type(data).__name__}")

        version = data.get('version', SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise CoercionFailure(f"Unsupported snapshot version: {version!r}")

        records = data.get('records', [])
        if not isinstance(records, list):
            raise CoercionFailure("Snapshot 'records' must be a list")

        return cls(version, [SnapshotEntry.from_dict(record) for record in records])

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "SettingsSnapshot":
        """Parse a JSON snapshot; blank text is an empty snapshot."""
        if not text.strip():
            return cls()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CoercionFailure(f"Snapshot is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def to_msgpack(self) -> bytes:
        """Serialize to msgpack format.

        Returns:
            Msgpack-encoded bytes containing [version, [[path, type, fields], ...]]
        """
        result = msgpack.dumps(
            [self.version, [[entry.path, entry.type, entry.fields] for entry in self.records]])
        assert isinstance(result, bytes)
        return result

    @classmethod
    def from_msgpack(cls, data: bytes) -> "SettingsSnapshot":
        """Deserialize from msgpack format.

        Raises:
            CoercionFailure: If the bytes are not a msgpack snapshot
        """
        if not data:
            return cls()
        try:
            decoded = msgpack.loads(data)
        except (ValueError, msgpack.UnpackException) as e:
            raise CoercionFailure(f"Snapshot is not valid msgpack: {e}") from e
        if not isinstance(decoded, list) or len(decoded) != 2 or not isinstance(decoded[1], list):
            raise CoercionFailure("Msgpack snapshot must be [version, records]")

        version, records = decoded
        return cls.from_dict({
            'version': version,
            'records': [
                {'path': record[0], 'type': record[1], 'fields': record[2]}
                if isinstance(record, list) and len(record) == 3 else record
                for record in records
            ],
        })

    @classmethod
    def from_toml(cls, text: str) -> "SettingsSnapshot":
        """Parse a TOML snapshot made of ``[[record]]`` tables."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise CoercionFailure(f"Snapshot is not valid TOML: {e}") from e
        return cls.from_dict({
            'version': data.get('version', SNAPSHOT_VERSION),
            'records': data.get('record', []),
        })

    @classmethod
    def read_file(cls, path: Path, format: str | None = None) -> "SettingsSnapshot":
        """Read a snapshot file, choosing the format from the suffix unless given.

        Raises:
            FileNotFoundError: If the file does not exist
            CoercionFailure: If the content is malformed
        """
        path = Path(path)
        format = format or format_for_path(path)
        logger.info(f"Reading {format} snapshot: {path}")

        if format == FORMAT_MSGPACK:
            snapshot = cls.from_msgpack(path.read_bytes())
        elif format == FORMAT_TOML:
            snapshot = cls.from_toml(path.read_text(encoding='utf-8'))
        else:
            snapshot = cls.from_json(path.read_text(encoding='utf-8'))

        logger.info(f"Read {len(snapshot.records)} records from {path}")
        return snapshot

    def write_file(self, path: Path, format: str | None = None, indent: int | None = 2) -> None:
        """Write the snapshot to a file.

        Content goes to a temporary file in the same directory which then replaces the
        target, so an interrupted write never leaves a truncated snapshot behind.

        Raises:
            ValueError: If asked to write TOML, which is a read-only format
        """
        path = Path(path)
        format = format or format_for_path(path)
        if format == FORMAT_TOML:
            raise ValueError("TOML snapshots are read-only; write JSON or msgpack instead")

        if format == FORMAT_MSGPACK:
            content = self.to_msgpack()
        else:
            content = self.to_json(indent).encode('utf-8')

        logger.info(f"Writing {len(self.records)} records as {format} snapshot: {path}")
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=path.parent)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(content)
            os.replace(temp_name, path)
        except BaseException:
            os.unlink(temp_name)
            raise


def format_for_path(path: Path) -> str:
    """Pick a snapshot format from a file suffix, defaulting to JSON."""
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), FORMAT_JSON)


def capture(records: Iterable[SettingsRecord], registry: SettingsTypeRegistry) -> SettingsSnapshot:
    """Build a snapshot from settings records.

    Args:
        records: Records of the layer being saved
        registry: Registry providing type tags

    Returns:
        Snapshot with entries sorted by path. Entries of one path keep the order their
        values were set in, which restore() replays. Derived variants are left out.
    """
    entries = [
        SnapshotEntry(str(record.path), registry.tag_for(cls), to_field_map(value))
        for record in records
        for cls, value in record.explicit_items()
    ]
    # Stable: only paths are reordered
    entries.sort(key=lambda entry: HierarchicalPath(entry.path))
    return SettingsSnapshot(SNAPSHOT_VERSION, entries)


def restore(snapshot: SettingsSnapshot, registry: SettingsTypeRegistry) -> HierarchicalPathTree[SettingsRecord]:
    """Rebuild a tree of settings records from a snapshot.

    The tree is built from scratch so that a failure part-way leaves any existing store
    untouched.

    Raises:
        InvalidPath: If an entry's path is malformed
        CoercionFailure: If a type tag is unknown or fields cannot be converted
    """
    tree: HierarchicalPathTree[SettingsRecord] = HierarchicalPathTree()
    for entry in snapshot.records:
        path = HierarchicalPath(entry.path)
        value = from_field_map(registry.resolve(entry.type), entry.fields)

        record = tree.try_get(path)
        if record is None:
            record = SettingsRecord(path)
            tree.add(path, record)
        record.set(value)
    return tree
