"""Exception types raised by path, tree, settings and macro operations."""


class TreeSettingsError(Exception):
    """Base class for all errors raised by this package."""


class InvalidPath(TreeSettingsError, ValueError):
    """Raised when path text is malformed or '..' walks above an absolute root."""


class NotFound(TreeSettingsError, KeyError):
    """Raised when an address or one of its segments is absent during a lookup that has no default.

    Derives from KeyError so callers may treat it like a missing mapping key. The message is
    kept readable by overriding __str__ (KeyError would otherwise repr() it).
    """

    def __str__(self):
        return str(self.args[0]) if self.args else ''


class StructuralMismatch(TreeSettingsError, ValueError):
    """Raised when a path is asked for its relation to a path that is not one of its ancestors."""


class FormatError(TreeSettingsError, ValueError):
    """Raised when a macro format specifier is missing, unrecognized or malformed."""


class CoercionFailure(TreeSettingsError, TypeError):
    """Raised when a field mapping cannot be turned into an instance of the requested type."""
