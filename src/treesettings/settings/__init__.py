"""Settings module for layered, typed settings resolution.

This package contains:
- options: SettingSearchOptions flags controlling fallback lookups
- record: SettingsRecord, the type-variants stored at one path
- manager: SettingsManager, the layered store and its resolution algorithm
- mapping: Field map conversion used for cross-type mapping and snapshots
- registry: SettingsTypeRegistry mapping classes to snapshot type tags
- snapshot: SettingsSnapshot documents in JSON, msgpack and TOML form
"""
