"""Tests for settings module.

Test Files and Coverage:
========================

| Test File                  | Test Classes                 | Tested Constructs                          | Tested Functionalities                        |
|----------------------------|------------------------------|--------------------------------------------|-----------------------------------------------|
| test_manager.py            | SettingsManagerTest          | SettingsManager                            | set/get, count, flush, remove                 |
|                            | LayeredResolutionTest        | SettingsManager.get() with options         | Hierarchical, parent settings, ordering       |
|                            | MappingResolutionTest        | SERIALIZE_DESERIALIZE_MAPPING              | Cross-type mapping, derived variants, errors  |
| test_record.py             | SettingsRecordTest           | SettingsRecord                             | Replace/preserve rule, derived variants       |
| test_mapping.py            | FieldMapTest                 | to_field_map(), from_field_map()           | Dataclasses, plain classes, conversions       |
| test_registry.py           | SettingsTypeRegistryTest     | SettingsTypeRegistry                       | Default tags, custom tags, import resolution  |
| test_snapshot.py           | SnapshotTest                 | SettingsSnapshot, save()/load()            | JSON, msgpack, TOML, files, failure isolation |
"""
