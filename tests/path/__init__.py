"""Tests for path module.

Test Files and Coverage:
========================

| Test File                  | Test Classes                 | Tested Constructs                          | Tested Functionalities                   |
|----------------------------|------------------------------|--------------------------------------------|------------------------------------------|
| test_hierarchical_path.py  | HierarchicalPathTest         | HierarchicalPath                           | Parsing, normalization, escaping         |
|                            | PathRelationTest             | starts_with(), relative_to(), combine()    | Prefix law, structural mismatch          |
| test_tree.py               | HierarchicalPathTreeTest     | HierarchicalPathTree                       | add/get/contains, counts, removal        |
"""
