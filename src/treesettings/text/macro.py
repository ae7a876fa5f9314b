"""Macro expansion over a field map.

A macro template mixes literal text with ``{field}`` or ``{field:format}`` placeholders.
Expanding a template substitutes values from a context's ``values`` map; matching goes
the other way, turning text produced by the template back into field values.

Supported formats:
- ``D<n>``: integer padded with zeros to ``n`` digits
- ``G``: integer as bare digits
- ``S<n>``, ``S<n>,<m>``, ``S<n>,``, ``S,<m>``: word of fixed or bounded length

Example:
    expansion = MacroExpansion('frame-{index:D4}.{ext:S3}')
    context = MacroExpansionContext({'index': 7, 'ext': 'png'})
    expansion.expand(context)                          # 'frame-0007.png'

    parsed = MacroExpansionContext()
    expansion.match('frame-0042.jpg', parsed)          # True
    parsed.values                                      # {'index': '0042', 'ext': 'jpg'}
"""

import re
from typing import Any

from ..errors import FormatError, NotFound

_STRING_SPECIFIER = re.compile(r'^(\d+|\d+,(?:\d+)?|,\d+)$')


class MacroExpansionContext:
    """Field values read by expansion and written by matching."""

    def __init__(self, values: dict[str, Any] | None = None):
        self.values: dict[str, Any] = dict(values) if values else {}


class LiteralMacroSegment:
    """Fixed text between placeholders."""

    def __init__(self, text: str):
        self.text = text

    def expand(self, context: MacroExpansionContext) -> str:
        return self.text

    def regex(self) -> str:
        return re.escape(self.text)

    def match(self, context: MacroExpansionContext, match: re.Match) -> None:
        pass


class VariableMacroSegment:
    """A ``field`` or ``field:format`` placeholder.

    Args:
        spec: Placeholder body, e.g. 'index' or 'index:D4'
        macro_index: Regex group number this segment captures into when matching
    """

    def __init__(self, spec: str, macro_index: int = 1):
        field, _, format = spec.partition(':')
        self.field = field
        self.format: str | None = format if format.strip() else None
        self.macro_index = macro_index

    def expand(self, context: MacroExpansionContext) -> str:
        """Render the field's value, applying the format to integer values.

        Raises:
            NotFound: If the field has no value in the context
            FormatError: If the format specifier is not recognized
        """
        if self.field not in context.values:
            raise NotFound(f"No value for macro field {self.field!r}")
        value = context.values[self.field]

        if self.format is None:
            return str(value)

        kind, specifier = self.format[0], self.format[1:]
        if kind not in 'DGS':
            raise FormatError(f"Unknown macro format: {self.format!r}")

        try:
            number = int(str(value))
        except ValueError:
            return str(value)

        if kind == 'D' and specifier:
            if not specifier.isdigit():
                raise FormatError(f"Invalid precision in macro format: {self.format!r}")
            digits = str(abs(number)).zfill(int(specifier))
            return '-' + digits if number < 0 else digits
        if kind in 'DG':
            return str(number)
        return str(value)

    def regex(self) -> str:
        """Build the capturing regex fragment matching text produced by the format.

        Raises:
            FormatError: If there is no format or it cannot be turned into a pattern
        """
        if self.format is None:
            raise FormatError(f"Cannot build a pattern for macro field {self.field!r} without a format")

        kind, specifier = self.format[0], self.format[1:]
        if kind == 'D' and specifier.isdigit():
            pattern = r'\d' * int(specifier)
        elif kind == 'G':
            pattern = r'\d+'
        elif kind == 'S':
            if not _STRING_SPECIFIER.match(specifier):
                raise FormatError(f"Cannot parse string specifier {self.format!r}")
            pattern = r'\w{' + specifier + '}'
        else:
            raise FormatError(f"Cannot create a pattern from format: {self.format!r}")

        return f'({pattern})'

    def match(self, context: MacroExpansionContext, match: re.Match) -> None:
        """Store the text captured for this segment into the context."""
        context.values[self.field] = match.group(self.macro_index)


class MacroExpansion:
    """A parsed macro template.

    Placeholders are written as ``{field}`` or ``{field:format}``; ``{{`` and ``}}``
    produce literal braces.

    Raises:
        FormatError: If a placeholder is unterminated or empty
    """

    def __init__(self, template: str):
        self.template = template
        self.segments: list[LiteralMacroSegment | VariableMacroSegment] = []

        literal: list[str] = []
        index = 0
        group = 0
        while index < len(template):
            ch = template[index]
            if ch in '{}' and template[index + 1:index + 2] == ch:
                literal.append(ch)
                index += 2
                continue
            if ch == '}':
                raise FormatError(f"Unmatched '}}' at position {index} in {template!r}")
            if ch != '{':
                literal.append(ch)
                index += 1
                continue

            end = template.find('}', index)
            if end < 0:
                raise FormatError(f"Unterminated placeholder at position {index} in {template!r}")
            spec = template[index + 1:end]
            if not spec.partition(':')[0]:
                raise FormatError(f"Empty field name at position {index} in {template!r}")

            if literal:
                self.segments.append(LiteralMacroSegment(''.join(literal)))
                literal = []
            group += 1
            self.segments.append(VariableMacroSegment(spec, group))
            index = end + 1

        if literal:
            self.segments.append(LiteralMacroSegment(''.join(literal)))

    def expand(self, context: MacroExpansionContext) -> str:
        return ''.join(segment.expand(context) for segment in self.segments)

    def regex(self) -> re.Pattern:
        """Compile a regex matching the whole text the template can produce."""
        return re.compile('^' + ''.join(segment.regex() for segment in self.segments) + '$')

    def match(self, text: str, context: MacroExpansionContext) -> bool:
        """Parse text produced by this template back into the context's values.

        Returns:
            True if the text matched and the values were written, False otherwise
        """
        match = self.regex().match(text)
        if match is None:
            return False
        for segment in self.segments:
            segment.match(context, match)
        return True
