"""Tests for text module.

Test Files and Coverage:
========================

| Test File                  | Test Classes                 | Tested Constructs                          | Tested Functionalities              |
|----------------------------|------------------------------|--------------------------------------------|-------------------------------------|
| test_macro.py              | VariableMacroSegmentTest     | VariableMacroSegment                       | Expansion formats, regex fragments  |
|                            | MacroExpansionTest           | MacroExpansion                             | Template parsing, expand, match     |
"""
