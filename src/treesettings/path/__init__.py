"""Path module for hierarchical addressing.

This package contains:
- hierarchical_path: HierarchicalPath, the immutable normalized address type
- tree: HierarchicalPathTree, a tree collection keyed by hierarchical paths
"""
