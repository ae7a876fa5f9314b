"""Tests for field map conversion."""
import enum
import unittest
from dataclasses import dataclass

from treesettings import CoercionFailure
from treesettings.settings.mapping import from_field_map, to_field_map, to_text

from ..test_utils import PlainSettings, RequiredSettings, SettingsA1, SettingsA2, SettingsB


class Color(enum.Enum):
    RED = 1
    BLUE = 2


@dataclass
class Styled:
    color: Color = Color.RED
    ratio: float = 1.0
    count: int | None = None


class ClassDefaults:
    """Plain class declaring its fields as class attributes."""
    A = 7
    B = 'seven'
    flags: list = []

    @property
    def label(self) -> str:
        return f"A={self.A}"

    def describe(self) -> str:
        return self.label


class FieldMapTest(unittest.TestCase):
    """Tests for to_field_map() and from_field_map()."""

    def test_dataclass_to_field_map(self):
        self.assertEqual({'A': '1', 'B': 'one'}, to_field_map(SettingsA1(1, 'one')))

    def test_values_rendered_as_text(self):
        fields = to_field_map(SettingsB(width=800, tags=['x', 'y']))
        self.assertEqual('800', fields['width'])
        self.assertEqual('["x", "y"]', fields['tags'])
        # None values are left out so the target default applies
        self.assertNotIn('title', fields)
        self.assertEqual('true', to_text(True))
        self.assertEqual('RED', to_text(Color.RED))

    def test_dataclass_from_field_map(self):
        value = from_field_map(SettingsA2, {'A': '1', 'B': 'one'})
        self.assertEqual(SettingsA2(1, 'one', True), value)

    def test_missing_fields_use_target_defaults(self):
        value = from_field_map(SettingsA2, {'B': 'only b'})
        self.assertEqual(-123, value.A)
        self.assertEqual('only b', value.B)

    def test_unknown_fields_ignored(self):
        value = from_field_map(SettingsA1, {'A': '3', 'Z': 'ignored'})
        self.assertEqual(SettingsA1(3, ''), value)

    def test_annotated_conversions(self):
        value = from_field_map(SettingsB, {'width': '800', 'tags': '["a"]', 'title': 'Main'})
        self.assertEqual(SettingsB(800, 480, ['a'], 'Main'), value)

        styled = from_field_map(Styled, {'color': 'BLUE', 'ratio': '0.5', 'count': '3'})
        self.assertEqual(Styled(Color.BLUE, 0.5, 3), styled)

    def test_bool_conversion(self):
        self.assertFalse(from_field_map(SettingsA2, {'C': 'false'}).C)
        self.assertTrue(from_field_map(SettingsA2, {'C': 'Yes'}).C)
        with self.assertRaises(CoercionFailure):
            from_field_map(SettingsA2, {'C': 'maybe'})

    def test_invalid_number_fails(self):
        with self.assertRaises(CoercionFailure):
            from_field_map(SettingsA1, {'A': 'not a number'})

    def test_invalid_json_fails(self):
        with self.assertRaises(CoercionFailure):
            from_field_map(SettingsB, {'tags': '{"not": "a list"}'})

    def test_missing_required_field_fails(self):
        with self.assertRaises(CoercionFailure):
            from_field_map(RequiredSettings, {'level': '2'})
        self.assertEqual(RequiredSettings('n', 2), from_field_map(RequiredSettings, {'name': 'n', 'level': '2'}))

    def test_plain_class_round_trip(self):
        source = PlainSettings()
        source.A = 9
        source.enabled = True

        fields = to_field_map(source)
        self.assertEqual({'A': '9', 'B': 'plain', 'enabled': 'true'}, fields)

        restored = from_field_map(PlainSettings, fields)
        self.assertEqual(9, restored.A)
        self.assertTrue(restored.enabled)
        self.assertEqual('x', restored._hidden)

    def test_plain_class_from_dataclass_fields(self):
        restored = from_field_map(PlainSettings, to_field_map(SettingsA1(7, 'seven')))
        self.assertEqual(7, restored.A)
        self.assertEqual('seven', restored.B)
        self.assertFalse(restored.enabled)

    def test_class_level_fields(self):
        source = ClassDefaults()
        self.assertEqual({'A': '7', 'B': 'seven', 'flags': '[]'}, to_field_map(source))

        source.A = 8
        restored = from_field_map(ClassDefaults, to_field_map(source))
        self.assertEqual(8, restored.A)
        self.assertEqual('seven', restored.B)

    def test_class_level_fields_feed_dataclasses(self):
        self.assertEqual(SettingsA2(7, 'seven'), from_field_map(SettingsA2, to_field_map(ClassDefaults())))

    def test_properties_are_not_fields(self):
        restored = from_field_map(ClassDefaults, {'label': 'ignored', 'A': '3'})
        self.assertEqual('A=3', restored.label)

    def test_class_without_fields_fails(self):
        with self.assertRaises(CoercionFailure):
            to_field_map(42)

    def test_class_requiring_arguments_fails(self):
        class NeedsArgs:
            def __init__(self, value):
                self.value = value

        with self.assertRaises(CoercionFailure):
            from_field_map(NeedsArgs, {'value': '1'})


if __name__ == '__main__':
    unittest.main()
