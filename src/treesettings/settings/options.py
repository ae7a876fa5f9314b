from enum import IntFlag


class SettingSearchOptions(IntFlag):
    """Flags controlling how SettingsManager.get() searches when a value is not stored at the exact path."""

    NONE = 0
    """Only the exact path of the local manager is consulted."""

    SEARCH_HIERARCHICAL_PARENTS = 1
    """Walk up the ancestors of the path, nearest first."""

    SEARCH_PARENT_SETTINGS = 2
    """Repeat the whole resolution against the parent manager, if one is attached."""

    PARENT_SETTINGS_FIRST = 4
    """Search the parent manager before the hierarchical ancestors instead of after."""

    SERIALIZE_DESERIALIZE_MAPPING = 8
    """Build the requested type from a different type stored at the same path via a field map."""
