import weakref
from pathlib import Path
from typing import Any, Iterator, TextIO, TypeVar

from ..errors import CoercionFailure, NotFound
from ..path.hierarchical_path import HierarchicalPath, as_path
from ..path.tree import HierarchicalPathTree
from .mapping import from_field_map, to_field_map
from .options import SettingSearchOptions
from .record import SettingsRecord
from .registry import SettingsTypeRegistry, default_registry
from .snapshot import SettingsSnapshot, capture, restore

T = TypeVar('T')

_MISSING = object()


class SettingsManager:
    """Layered, type-aware store of settings addressed by hierarchical paths.

    Each path holds at most one instance per concrete type. Lookups ask for a path and a
    type and may fall back, depending on SettingSearchOptions, to:
    - a different type stored at the same path, mapped through its fields,
    - the nearest ancestor path holding a matching value,
    - the parent manager, which runs the whole resolution again on its own layer.

    The parent manager is held through a weak reference: a child never keeps its parent
    alive and never writes to it.

    Example:
        defaults = SettingsManager()
        defaults.set('/editor', EditorSettings(tab_width=8))

        user = SettingsManager(parent=defaults)
        user.set('/editor/python', EditorSettings(tab_width=4))

        user.get('/editor/python/tests', EditorSettings,
                 SettingSearchOptions.SEARCH_HIERARCHICAL_PARENTS)   # tab_width=4
        user.get('/editor', EditorSettings,
                 SettingSearchOptions.SEARCH_PARENT_SETTINGS)        # tab_width=8
    """

    def __init__(self, parent: 'SettingsManager | None' = None, registry: SettingsTypeRegistry | None = None):
        """Initialize an empty manager.

        Args:
            parent: Manager consulted with SEARCH_PARENT_SETTINGS; not owned by this manager
            registry: Registry providing snapshot type tags; the module default if omitted
        """
        self._tree: HierarchicalPathTree[SettingsRecord] = HierarchicalPathTree()
        self._parent_ref: weakref.ref | None = None
        self.registry = registry if registry is not None else default_registry
        self.parent = parent

    @property
    def parent(self) -> 'SettingsManager | None':
        """Parent manager, or None if none is attached or it has been garbage collected."""
        return self._parent_ref() if self._parent_ref is not None else None

    @parent.setter
    def parent(self, parent: 'SettingsManager | None'):
        if parent is None:
            self._parent_ref = None
            return

        ancestor = parent
        while ancestor is not None:
            if ancestor is self:
                raise ValueError("A settings manager cannot be its own ancestor")
            ancestor = ancestor.parent
        self._parent_ref = weakref.ref(parent)

    @property
    def count(self) -> int:
        """Number of paths in this manager's own layer holding at least one value."""
        return self._tree.count

    def __len__(self) -> int:
        return self.count

    def set(self, path, value: Any) -> None:
        """Store a value at a path under its concrete type.

        Replaces any value of the same type at that path; values of other types stay.

        Args:
            path: HierarchicalPath or path text
            value: Settings object to store
        """
        path = as_path(path)
        record = self._tree.try_get(path)
        if record is None:
            record = SettingsRecord(path)
            self._tree.add(path, record)
        record.set(value)

    def get(self, path, cls: type[T], options=SettingSearchOptions.NONE, default=_MISSING) -> T:
        """Resolve a setting of type ``cls`` for a path.

        Resolution order:
        1. An instance of ``cls`` stored at the path.
        2. With SERIALIZE_DESERIALIZE_MAPPING, another type stored at the path mapped into
           ``cls`` through its fields.
        3. With SEARCH_HIERARCHICAL_PARENTS, steps 1-2 for each ancestor, nearest first.
        4. With SEARCH_PARENT_SETTINGS, the full resolution on the parent manager.
        PARENT_SETTINGS_FIRST swaps steps 3 and 4.

        Args:
            path: HierarchicalPath or path text
            cls: Type of setting to return
            options: SettingSearchOptions flags
            default: Value returned when nothing resolves

        Returns:
            The resolved instance, or ``default``

        Raises:
            NotFound: If nothing resolves and no default was given
            CoercionFailure: If mapping a stored value into ``cls`` fails; this is not
                             treated as a missing value and stops the search
        """
        path = as_path(path)
        try:
            return self._resolve(path, cls, SettingSearchOptions(options), True)
        except NotFound:
            if default is _MISSING:
                raise
            return default

    def get_or_default(self, path, cls: type[T], options=SettingSearchOptions.NONE) -> T:
        """Like get(), but returns a default-constructed ``cls`` when nothing resolves."""
        try:
            return self.get(path, cls, options)
        except NotFound:
            pass

        try:
            return cls()
        except TypeError as e:
            raise CoercionFailure(f"{cls.__qualname__} cannot be constructed without arguments: {e}") from e

    def contains(self, path, cls: type | None = None) -> bool:
        """Check this layer for a value at exactly ``path`` (of type ``cls`` if given)."""
        record = self._tree.try_get(as_path(path))
        if record is None:
            return False
        return cls is None or record.has(cls)

    def remove(self, path, cls: type | None = None) -> bool:
        """Remove one type-variant, or all of them, from a path of this layer.

        Returns:
            True if anything was removed
        """
        path = as_path(path)
        record = self._tree.try_get(path)
        if record is None:
            return False

        if cls is None:
            return self._tree.remove(path)

        removed = record.remove(cls)
        if not len(record):
            self._tree.remove(path)
        return removed

    def records(self) -> Iterator[SettingsRecord]:
        """Yield the records of this layer in path order."""
        return self._tree.values()

    def items(self) -> Iterator[tuple[HierarchicalPath, type, Any]]:
        """Yield (path, type, value) for every stored variant of this layer."""
        for record in self._tree.values():
            for cls, value in record.items():
                yield record.path, cls, value

    def flush(self) -> None:
        """Make pending writes visible.

        Values are stored eagerly, so there is nothing to materialize; this is a hook for
        layers that compute values lazily.
        """

    def snapshot(self) -> SettingsSnapshot:
        """Capture this layer (not the parent chain) as a snapshot."""
        return capture(self._tree.values(), self.registry)

    def restore(self, snapshot: SettingsSnapshot) -> None:
        """Replace this layer with the contents of a snapshot.

        The current layer is kept if any entry fails to load.
        """
        self._tree = restore(snapshot, self.registry)

    def save(self, writer: TextIO, indent: int | None = 2) -> None:
        """Write this layer to a text stream as a JSON snapshot."""
        text = self.snapshot().to_json(indent)
        writer.write(text)

    def load(self, reader: TextIO) -> None:
        """Replace this layer with a JSON snapshot read from a text stream."""
        self.restore(SettingsSnapshot.from_json(reader.read()))

    def save_file(self, path: Path, format: str | None = None) -> None:
        """Write this layer to a JSON or msgpack file, chosen by suffix unless given."""
        self.snapshot().write_file(path, format)

    def load_file(self, path: Path, format: str | None = None) -> None:
        """Replace this layer with a JSON, msgpack or TOML snapshot file."""
        self.restore(SettingsSnapshot.read_file(path, format))

    def _resolve(self, path: HierarchicalPath, cls: type, options: SettingSearchOptions, local: bool):
        try:
            return self._resolve_at(path, cls, options, local)
        except NotFound:
            pass

        stages = [self._resolve_hierarchical, self._resolve_parent_settings]
        if options & SettingSearchOptions.PARENT_SETTINGS_FIRST:
            stages.reverse()

        for stage in stages:
            try:
                return stage(path, cls, options, local)
            except NotFound:
                continue

        raise NotFound(f"No {cls.__qualname__} setting found for {path}")

    def _resolve_at(self, path: HierarchicalPath, cls: type, options: SettingSearchOptions, local: bool):
        record = self._tree.get(path)
        value = record.get(cls, _MISSING)
        if value is not _MISSING:
            return value

        if options & SettingSearchOptions.SERIALIZE_DESERIALIZE_MAPPING:
            source = record.latest_other_than(cls)
            if source is not None:
                value = from_field_map(cls, to_field_map(source))
                # Parent layers are only read from
                if local:
                    record.set_derived(value)
                return value

        raise NotFound(f"No {cls.__qualname__} stored at {path}")

    def _resolve_hierarchical(self, path: HierarchicalPath, cls: type, options: SettingSearchOptions, local: bool):
        if not options & SettingSearchOptions.SEARCH_HIERARCHICAL_PARENTS:
            raise NotFound(f"Hierarchical search not requested for {path}")

        ancestor = path.parent
        while ancestor is not None:
            try:
                return self._resolve_at(ancestor, cls, options, local)
            except NotFound:
                ancestor = ancestor.parent

        raise NotFound(f"No {cls.__qualname__} stored at any ancestor of {path}")

    def _resolve_parent_settings(self, path: HierarchicalPath, cls: type, options: SettingSearchOptions, local: bool):
        parent = self.parent
        if not options & SettingSearchOptions.SEARCH_PARENT_SETTINGS or parent is None:
            raise NotFound(f"No parent settings to search for {path}")
        return parent._resolve(path, cls, options, False)
