from typing import Any, Iterator

from ..path.hierarchical_path import HierarchicalPath


class SettingsRecord:
    """All type-variants of a setting stored at one path.

    A path may hold one instance per concrete type. Setting an instance replaces the
    instance of the same type and leaves instances of other types alone.

    Variants produced by mapping another variant into a new type are marked as derived.
    They are kept so repeated lookups under that type do not map again, and they are
    dropped whenever a value is set explicitly, since they may no longer match their source.

    Attributes:
        path: Address the record is stored under
    """

    def __init__(self, path: HierarchicalPath):
        self.path = path
        # Insertion order tracks recency: the last entry is the most recently set variant
        self._variants: dict[type, Any] = {}
        self._derived: set[type] = set()

    def set(self, value: Any) -> None:
        """Store a value under its own concrete type."""
        for cls in self._derived:
            self._variants.pop(cls, None)
        self._derived.clear()

        cls = type(value)
        self._variants.pop(cls, None)
        self._variants[cls] = value

    def set_derived(self, value: Any) -> None:
        """Cache a value mapped from another variant of this record."""
        cls = type(value)
        if cls in self._variants and cls not in self._derived:
            return
        self._variants[cls] = value
        self._derived.add(cls)

    def get(self, cls: type, default=None):
        """Return the instance stored for exactly ``cls``, or ``default``."""
        return self._variants.get(cls, default)

    def has(self, cls: type) -> bool:
        return cls in self._variants

    def remove(self, cls: type) -> bool:
        """Drop the instance stored for ``cls``; returns whether one was stored."""
        if cls not in self._variants:
            return False
        del self._variants[cls]
        self._derived.discard(cls)
        return True

    def latest_other_than(self, cls: type) -> Any | None:
        """Return the most recently set variant whose type is not ``cls``, preferring explicit values."""
        for candidate in reversed(self._variants):
            if candidate is not cls and candidate not in self._derived:
                return self._variants[candidate]
        for candidate in reversed(self._variants):
            if candidate is not cls:
                return self._variants[candidate]
        return None

    @property
    def types(self) -> list[type]:
        return list(self._variants)

    def items(self) -> Iterator[tuple[type, Any]]:
        return iter(list(self._variants.items()))

    def explicit_items(self) -> Iterator[tuple[type, Any]]:
        """Yield (type, value) for the variants that were set explicitly, oldest first."""
        return iter([(cls, value) for cls, value in self._variants.items() if cls not in self._derived])

    def __len__(self) -> int:
        return len(self._variants)

    def __repr__(self) -> str:
        names = ', '.join(cls.__qualname__ for cls in self._variants)
        return f"SettingsRecord({str(self.path)!r}, [{names}])"
