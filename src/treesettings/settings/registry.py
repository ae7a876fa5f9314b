"""Type tags for settings classes.

Snapshots identify the type of each stored setting by a tag. By default the tag is
``"<module>:<qualname>"`` which can be resolved by importing the module, so most classes
never need to be registered. Registering a class under a custom tag keeps snapshots stable
across renames and module moves.

Example:
    @default_registry.register(tag='window')
    @dataclass
    class WindowSettings:
        width: int = 640
        height: int = 480
"""

import importlib

from ..errors import CoercionFailure


def default_tag(cls: type) -> str:
    """Return the import-resolvable tag of a class."""
    return f"{cls.__module__}:{cls.__qualname__}"


class SettingsTypeRegistry:
    """Bidirectional mapping between settings classes and their snapshot tags."""

    def __init__(self):
        self._types: dict[str, type] = {}
        self._tags: dict[type, str] = {}

    def register(self, cls: type | None = None, *, tag: str | None = None):
        """Register a class, optionally under a custom tag.

        May be used directly (``registry.register(cls)``) or as a decorator with or without
        arguments.

        Args:
            cls: Settings class to register
            tag: Custom tag; defaults to the class's module-qualified name

        Returns:
            The class when called with one, otherwise a decorator

        Raises:
            ValueError: If the tag is already registered to a different class
        """
        def decorator(target: type) -> type:
            target_tag = tag if tag is not None else default_tag(target)
            existing = self._types.get(target_tag)
            if existing is not None and existing is not target:
                raise ValueError(f"Tag {target_tag!r} is already registered to {existing.__qualname__}")
            self._types[target_tag] = target
            self._tags[target] = target_tag
            return target

        if cls is None:
            return decorator
        return decorator(cls)

    def tag_for(self, cls: type) -> str:
        """Return the tag a class is saved under."""
        return self._tags.get(cls) or default_tag(cls)

    def resolve(self, tag: str) -> type:
        """Find the class identified by a tag.

        Registered tags win; otherwise a ``module:qualname`` tag is imported.

        Raises:
            CoercionFailure: If the tag is unknown or cannot be imported
        """
        cls = self._types.get(tag)
        if cls is not None:
            return cls

        module_name, sep, qualname = tag.partition(':')
        if not sep or not module_name or not qualname:
            raise CoercionFailure(f"Unknown settings type tag: {tag!r}")

        try:
            target = importlib.import_module(module_name)
        except ImportError as e:
            raise CoercionFailure(f"Cannot import module for settings type tag {tag!r}: {e}") from e

        for name in qualname.split('.'):
            target = getattr(target, name, None)
            if target is None:
                raise CoercionFailure(f"Cannot find settings type for tag {tag!r}")

        if not isinstance(target, type):
            raise CoercionFailure(f"Settings type tag {tag!r} does not name a class")
        return target


default_registry = SettingsTypeRegistry()
