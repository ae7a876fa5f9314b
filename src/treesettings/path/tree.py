"""Tree collection keyed by hierarchical paths.

The tree is broken into levels by path segment. Storing values at ``/a/b`` and ``/a/c``
creates a single node ``a`` under the root with two child nodes ``b`` and ``c``. Each node
may hold one value of its own, independently of whether it has children.

Values are what ``count`` and ``items()`` report, recursively across all nodes. Nodes are
what ``node_count``, ``direct_node_count`` and ``direct_nodes`` report.
"""

from typing import Generic, Iterator, TypeVar

from ..errors import NotFound
from .hierarchical_path import ABSOLUTE_ROOT, HierarchicalPath, as_path

V = TypeVar('V')


class HierarchicalPathTree(Generic[V]):
    """A node of a path-addressed tree; the root node represents the whole tree.

    Paths passed to the methods below are interpreted relative to this node, so an absolute
    path given to the root and the same path spliced below a child address the same value.

    Example:
        >>> tree = HierarchicalPathTree()
        >>> tree.add('/a/b', 1)
        >>> tree.add('/a/c', 2)
        >>> tree.count, tree.direct_node_count, tree.node_count
        (2, 1, 4)
        >>> tree.get('/a/b')
        1
    """

    def __init__(self, path: HierarchicalPath = ABSOLUTE_ROOT):
        self._path = path
        self._nodes: dict[str, HierarchicalPathTree[V]] = {}
        self._value = None
        self._has_value = False

    @property
    def path(self) -> HierarchicalPath:
        """Address of this node, relative to the root of the tree."""
        return self._path

    @property
    def has_value(self) -> bool:
        return self._has_value

    @property
    def value(self) -> V:
        """Value stored at this node.

        Raises:
            NotFound: If no value is stored at this node
        """
        if not self._has_value:
            raise NotFound(f"No value stored at {self._path}")
        return self._value

    @value.setter
    def value(self, value: V):
        self._value = value
        self._has_value = True

    @property
    def count(self) -> int:
        """Number of values stored in this node and all nodes below it."""
        return (1 if self._has_value else 0) + sum(child.count for child in self._nodes.values())

    @property
    def direct_node_count(self) -> int:
        """Number of nodes directly underneath this node."""
        return len(self._nodes)

    @property
    def direct_nodes(self) -> list['HierarchicalPathTree[V]']:
        """Nodes directly underneath this node, ordered by segment name."""
        return [self._nodes[name] for name in sorted(self._nodes)]

    @property
    def node_count(self) -> int:
        """Number of nodes in this subtree, including this node."""
        return 1 + sum(child.node_count for child in self._nodes.values())

    def add(self, path, value: V) -> None:
        """Store a value at a path, creating intermediate nodes as needed.

        Storing at an address that already holds a value replaces it.

        Args:
            path: HierarchicalPath or path text
            value: Value to store
        """
        path = as_path(path)
        node = self
        for segment in path.segments:
            child = node._nodes.get(segment)
            if child is None:
                child = node._create_child(segment)
                node._nodes[segment] = child
            node = child
        node.value = value

    set = add

    def get(self, path) -> V:
        """Retrieve the value stored at a path.

        Raises:
            NotFound: If a segment along the path or the final value is absent
        """
        path = as_path(path)
        node = self._find(path)
        if node is None or not node._has_value:
            raise NotFound(f"Cannot retrieve value at path {path}")
        return node._value

    def try_get(self, path, default=None):
        """Retrieve the value stored at a path, or ``default`` when there is none."""
        node = self._find(as_path(path))
        if node is None or not node._has_value:
            return default
        return node._value

    def get_child(self, path) -> 'HierarchicalPathTree[V]':
        """Retrieve the node at a path, whether or not it holds a value.

        Raises:
            NotFound: If a segment along the path is absent
        """
        path = as_path(path)
        node = self._find(path)
        if node is None:
            raise NotFound(f"Cannot retrieve node at path {path}")
        return node

    def contains(self, path) -> bool:
        """Check whether a value is stored at a path."""
        node = self._find(as_path(path))
        return node is not None and node._has_value

    def __contains__(self, path) -> bool:
        return self.contains(path)

    def __len__(self) -> int:
        return self.count

    def remove(self, path) -> bool:
        """Remove the value stored at a path and prune nodes left empty.

        Args:
            path: HierarchicalPath or path text

        Returns:
            True if a value was removed, False if none was stored there
        """
        path = as_path(path)
        trail: list[HierarchicalPathTree[V]] = [self]
        for segment in path.segments:
            child = trail[-1]._nodes.get(segment)
            if child is None:
                return False
            trail.append(child)

        node = trail[-1]
        if not node._has_value:
            return False
        node._value = None
        node._has_value = False

        # Walk back up removing leaf nodes without values; this node itself is never removed
        for depth in range(len(trail) - 1, 0, -1):
            current = trail[depth]
            if current._has_value or current._nodes:
                break
            del trail[depth - 1]._nodes[path.segments[depth - 1]]

        return True

    def items(self) -> Iterator[tuple[HierarchicalPath, V]]:
        """Yield (path, value) for every stored value, depth-first in segment order."""
        if self._has_value:
            yield self._path, self._value
        for name in sorted(self._nodes):
            yield from self._nodes[name].items()

    def values(self) -> Iterator[V]:
        for _, value in self.items():
            yield value

    def __iter__(self) -> Iterator[V]:
        return self.values()

    def _find(self, path: HierarchicalPath) -> 'HierarchicalPathTree[V] | None':
        node = self
        for segment in path.segments:
            node = node._nodes.get(segment)
            if node is None:
                return None
        return node

    def _create_child(self, segment: str) -> 'HierarchicalPathTree[V]':
        """Create the node for a child segment; subclasses may override to customize nodes."""
        # Segments parsed from escaped text may contain the separator, which append() rejects
        return type(self)(HierarchicalPath.from_segments(self._path.segments + (segment,), self._path.is_absolute))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r}, count={self.count})"
