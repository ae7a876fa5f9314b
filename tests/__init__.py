"""Tests for treesettings.

Test Files and Coverage:
========================

| Test File                  | Test Classes                 | Tested Constructs                          | Tested Functionalities              |
|----------------------------|------------------------------|--------------------------------------------|-------------------------------------|
| test_config.py             | ToolSettingsTest             | ToolSettings                               | TOML loading, lookup, indent        |
| test_cli.py                | CliTest                      | treesettings_main()                        | inspect, convert, lookup, errors    |
| path/                      | see path/__init__.py         | HierarchicalPath, HierarchicalPathTree     |                                     |
| settings/                  | see settings/__init__.py     | SettingsManager and friends                |                                     |
| text/                      | see text/__init__.py         | MacroExpansion                             |                                     |
"""
