"""Immutable hierarchical path value type.

A hierarchical path is an ordered sequence of string segments that is either absolute
(``/a/b/c``) or relative (``./a/b/c``). Paths are normalized on construction: ``.``
segments are dropped and ``..`` removes the preceding segment. A relative path keeps any
surplus leading ``..`` segments until it is combined with a base path.

Segments may contain the separator by escaping it with a backslash (``/a\\/b`` is a
single segment ``a/b``). The canonical string form re-escapes such segments so that
parsing the string of a path always yields an equal path.

Typical usage example:

    path = HierarchicalPath('/settings/window/../editor')
    str(path)                              # '/settings/editor'
    path.append('font')                    # HierarchicalPath('/settings/editor/font')
    path.relative_to(HierarchicalPath('/settings'))  # HierarchicalPath('./editor')
"""

from typing import Iterator

from ..errors import InvalidPath, StructuralMismatch

SEPARATOR = '/'
ESCAPE = '\\'
CURRENT = '.'
PARENT = '..'


def _split(text: str) -> list[str]:
    """Split path text on unescaped separators, removing escape characters."""
    segments: list[str] = []
    current: list[str] = []
    escaped = False

    for ch in text:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == ESCAPE:
            escaped = True
        elif ch == SEPARATOR:
            segments.append(''.join(current))
            current = []
        else:
            current.append(ch)

    if escaped:
        raise InvalidPath(f"Path ends with a dangling escape character: {text!r}")

    segments.append(''.join(current))
    return segments


def _normalize(segments, is_absolute: bool, source) -> tuple[str, ...]:
    """Resolve '.' and '..' segments.

    Raises:
        InvalidPath: If '..' would move above the root of an absolute path
    """
    result: list[str] = []

    for segment in segments:
        if segment == '' or segment == CURRENT:
            continue

        if segment == PARENT:
            if result and result[-1] != PARENT:
                result.pop()
            elif is_absolute:
                raise InvalidPath(f"Cannot go above the root of an absolute path: {source!r}")
            else:
                # Relative paths keep surplus '..' until combined with a base
                result.append(PARENT)
            continue

        result.append(segment)

    return tuple(result)


def _escape(segment: str) -> str:
    return segment.replace(ESCAPE, ESCAPE + ESCAPE).replace(SEPARATOR, ESCAPE + SEPARATOR)


class HierarchicalPath:
    """An immutable, normalized hierarchical address.

    Two paths are equal when they have the same absoluteness and the same normalized
    segments (compared case-sensitively). Paths are hashable and can be used as dict keys.

    Args:
        text: Path text such as '/a/b', './a/b' or 'a/b' (the latter two are relative)
        base: Optional base path. A relative ``text`` is resolved against it; an absolute
              ``text`` ignores it.

    Raises:
        InvalidPath: If the text is empty, ends in a dangling escape, or '..' walks above
                     an absolute root
    """

    __slots__ = ('_segments', '_absolute')

    def __init__(self, text: str, base: 'HierarchicalPath | None' = None):
        if not isinstance(text, str):
            raise TypeError(f"Path text must be a string, not {type(text).__name__}")
        if text == '':
            raise InvalidPath("Path text cannot be empty")

        is_absolute = text.startswith(SEPARATOR)
        segments = _split(text)

        if base is not None and not is_absolute:
            self._absolute = base.is_absolute
            self._segments = _normalize(base.segments + tuple(segments), base.is_absolute, text)
        else:
            self._absolute = is_absolute
            self._segments = _normalize(segments, is_absolute, text)

    @classmethod
    def parse(cls, text: str) -> 'HierarchicalPath':
        """Parse path text into a normalized path."""
        return cls(text)

    @classmethod
    def from_segments(cls, segments, is_absolute: bool = True) -> 'HierarchicalPath':
        """Build a path from already-split segments.

        Segments are taken literally (no escape processing) but '.' and '..' are still
        normalized.

        Args:
            segments: Iterable of segment strings
            is_absolute: Whether the resulting path is absolute

        Returns:
            New normalized path
        """
        path = object.__new__(cls)
        segments = tuple(segments)
        for segment in segments:
            if not isinstance(segment, str):
                raise TypeError(f"Path segments must be strings, not {type(segment).__name__}")
        path._absolute = is_absolute
        path._segments = _normalize(segments, is_absolute, segments)
        return path

    @classmethod
    def combine(cls, base: 'HierarchicalPath', relative: 'HierarchicalPath') -> 'HierarchicalPath':
        """Apply a relative path against a base path.

        The result is the same as normalizing the literal concatenation of both paths. An
        absolute ``relative`` argument is returned unchanged.

        Args:
            base: Path to resolve against
            relative: Path to apply on top of ``base``

        Returns:
            Combined path, absolute when ``base`` is absolute

        Raises:
            InvalidPath: If '..' segments of ``relative`` walk above an absolute base's root
        """
        if relative.is_absolute:
            return relative
        return cls.from_segments(base.segments + relative.segments, base.is_absolute)

    @property
    def segments(self) -> tuple[str, ...]:
        """Normalized segments of the path."""
        return self._segments

    @property
    def is_absolute(self) -> bool:
        return self._absolute

    @property
    def is_relative(self) -> bool:
        return not self._absolute

    @property
    def count(self) -> int:
        """Number of segments; zero for either root."""
        return len(self._segments)

    @property
    def first(self) -> str:
        """First segment of the path.

        Raises:
            InvalidPath: If the path has no segments
        """
        if not self._segments:
            raise InvalidPath("Root path has no first segment")
        return self._segments[0]

    @property
    def last(self) -> str:
        """Last segment of the path.

        Raises:
            InvalidPath: If the path has no segments
        """
        if not self._segments:
            raise InvalidPath("Root path has no last segment")
        return self._segments[-1]

    @property
    def parent(self) -> 'HierarchicalPath | None':
        """Path with the last segment removed, or None for a zero-segment path."""
        if not self._segments:
            return None
        return self.from_segments(self._segments[:-1], self._absolute)

    def append(self, segment: str) -> 'HierarchicalPath':
        """Return a new path with one more trailing segment.

        Args:
            segment: Literal segment name

        Returns:
            New path

        Raises:
            InvalidPath: If the segment is empty, contains a separator, or is '.' or '..'
        """
        if not isinstance(segment, str) or segment == '':
            raise InvalidPath(f"Cannot append an empty or non-string segment: {segment!r}")
        if SEPARATOR in segment:
            raise InvalidPath(f"Cannot append a segment containing {SEPARATOR!r}: {segment!r}")
        if segment in (CURRENT, PARENT):
            raise InvalidPath(f"Cannot append the reserved segment {segment!r}")

        path = object.__new__(type(self))
        path._absolute = self._absolute
        path._segments = self._segments + (segment,)
        return path

    def child(self, text: str) -> 'HierarchicalPath':
        """Resolve path text against this path, e.g. ``path.child('sub2/sub3')``."""
        return HierarchicalPath(text, self)

    def splice(self, start: int) -> 'HierarchicalPath':
        """Return the sub-path starting at segment index ``start``.

        Used to descend a tree one level at a time. Splicing from zero returns the path
        itself; any other splice is relative, since it is no longer anchored at the root.

        Args:
            start: Index of the first segment to keep; may equal ``count``

        Returns:
            The sub-path, or a zero-segment path when ``start == count``

        Raises:
            InvalidPath: If ``start`` is negative or greater than ``count``
        """
        if start < 0 or start > len(self._segments):
            raise InvalidPath(f"Cannot splice {self} from index {start}")
        if start == 0:
            return self

        path = object.__new__(type(self))
        path._absolute = False
        path._segments = self._segments[start:]
        return path

    def starts_with(self, other: 'HierarchicalPath') -> bool:
        """Check whether ``other`` is this path or one of its ancestors."""
        if self._absolute != other.is_absolute:
            return False
        count = len(other.segments)
        return count <= len(self._segments) and self._segments[:count] == other.segments

    def relative_to(self, ancestor: 'HierarchicalPath') -> 'HierarchicalPath':
        """Return the relative walk from ``ancestor`` down to this path.

        Args:
            ancestor: A path that this path starts with

        Returns:
            Relative path such that combining it with ``ancestor`` gives this path; the
            relative root ('.') when both paths are equal

        Raises:
            StructuralMismatch: If ``ancestor`` is not a prefix of this path
        """
        if not self.starts_with(ancestor):
            raise StructuralMismatch(f"{ancestor} is not an ancestor of {self}")

        path = object.__new__(type(self))
        path._absolute = False
        path._segments = self._segments[len(ancestor.segments):]
        return path

    def __truediv__(self, other) -> 'HierarchicalPath':
        if isinstance(other, HierarchicalPath):
            return self.combine(self, other)
        if isinstance(other, str):
            return self.child(other)
        return NotImplemented

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __eq__(self, other):
        if not isinstance(other, HierarchicalPath):
            return NotImplemented
        return self._absolute == other._absolute and self._segments == other._segments

    def __hash__(self):
        return hash((self._absolute, self._segments))

    def __lt__(self, other):
        if not isinstance(other, HierarchicalPath):
            return NotImplemented
        return (not self._absolute, self._segments) < (not other._absolute, other._segments)

    def __str__(self) -> str:
        body = SEPARATOR.join(_escape(segment) for segment in self._segments)
        if self._absolute:
            return SEPARATOR + body
        return CURRENT + SEPARATOR + body if body else CURRENT

    def __repr__(self) -> str:
        return f"HierarchicalPath({str(self)!r})"


ABSOLUTE_ROOT = HierarchicalPath(SEPARATOR)
RELATIVE_ROOT = HierarchicalPath(CURRENT)


def as_path(path) -> HierarchicalPath:
    """Accept either a HierarchicalPath or path text."""
    if isinstance(path, HierarchicalPath):
        return path
    if isinstance(path, str):
        return HierarchicalPath(path)
    raise TypeError(f"Expected a HierarchicalPath or str, not {type(path).__name__}")
