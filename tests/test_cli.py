"""Tests for the treesettings command line interface."""
import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from treesettings import SettingsManager, SettingsSnapshot
from treesettings.cli import treesettings_main
from treesettings.settings.registry import default_tag

from .test_utils import SettingsA1, SettingsB

TOML_SNAPSHOT = f'''
[[record]]
path = "/editor"
type = "{default_tag(SettingsB)}"
fields = {{ width = 1024, title = "Editor" }}

[[record]]
path = "/editor/python"
type = "{default_tag(SettingsA1)}"
fields = {{ A = 4, B = "py" }}
'''


class CliTest(unittest.TestCase):
    """Tests for treesettings_main()."""

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmpdir.name)

        self.snapshot_path = self.tmp_path / 'settings.json'
        settings_manager = SettingsManager()
        settings_manager.set('/editor', SettingsB(width=1024, title='Editor'))
        settings_manager.set('/editor/python', SettingsA1(4, 'py'))
        settings_manager.save_file(self.snapshot_path)

    def tearDown(self):
        self._tmpdir.cleanup()

    def _run(self, *argv) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = treesettings_main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_inspect(self):
        code, out, _ = self._run('inspect', str(self.snapshot_path))

        self.assertEqual(0, code)
        lines = out.splitlines()
        self.assertEqual(2, len(lines))
        self.assertEqual(f"/editor\t{default_tag(SettingsB)}\theight=480 tags=[] title=Editor width=1024", lines[0])
        self.assertEqual(f"/editor/python\t{default_tag(SettingsA1)}\tA=4 B=py", lines[1])

    def test_inspect_toml_with_explicit_format(self):
        snapshot_path = self.tmp_path / 'settings.txt'
        snapshot_path.write_text(TOML_SNAPSHOT)

        code, out, _ = self._run('--format', 'toml', 'inspect', str(snapshot_path))

        self.assertEqual(0, code)
        self.assertIn('/editor/python', out)
        self.assertIn('A=4 B=py', out)

    def test_convert(self):
        source = self.tmp_path / 'defaults.toml'
        source.write_text(TOML_SNAPSHOT)
        destination = self.tmp_path / 'defaults.msgpack'

        code, _, _ = self._run('convert', str(source), str(destination))

        self.assertEqual(0, code)
        snapshot = SettingsSnapshot.from_msgpack(destination.read_bytes())
        self.assertEqual(['/editor', '/editor/python'], [entry.path for entry in snapshot.records])

        settings_manager = SettingsManager()
        settings_manager.restore(snapshot)
        self.assertEqual(SettingsA1(4, 'py'), settings_manager.get('/editor/python', SettingsA1))

    def test_convert_uses_configured_indent(self):
        config_path = self.tmp_path / 'treesettings.toml'
        config_path.write_text('[snapshot]\nindent = 0\n')
        destination = self.tmp_path / 'copy.json'

        code, _, _ = self._run('--config', str(config_path), 'convert', str(self.snapshot_path), str(destination))

        self.assertEqual(0, code)
        text = destination.read_text()
        self.assertEqual(2, len(json.loads(text)['records']))
        self.assertTrue(text.startswith('{\n"version"'))

    def test_convert_rejects_invalid_indent(self):
        config_path = self.tmp_path / 'treesettings.toml'
        config_path.write_text('[snapshot]\nindent = "wide"\n')
        destination = self.tmp_path / 'copy.json'

        code, _, err = self._run('--config', str(config_path), 'convert', str(self.snapshot_path), str(destination))

        self.assertEqual(1, code)
        self.assertIn('snapshot.indent', err)
        self.assertFalse(destination.exists())

    def test_convert_to_toml_fails(self):
        code, _, err = self._run('convert', str(self.snapshot_path), str(self.tmp_path / 'out.toml'))

        self.assertEqual(1, code)
        self.assertIn('Error:', err)

    def test_lookup_exact(self):
        code, out, _ = self._run('lookup', str(self.snapshot_path), '/editor/python')

        self.assertEqual(0, code)
        self.assertEqual(f"/editor/python\t{default_tag(SettingsA1)}\tA=4 B=py\n", out)

    def test_lookup_hierarchical(self):
        code, out, err = self._run('lookup', str(self.snapshot_path), '/editor/rust')
        self.assertEqual(1, code)
        self.assertEqual('', out)
        self.assertIn('No record found for /editor/rust', err)

        code, out, _ = self._run('lookup', str(self.snapshot_path), '/editor/rust/tests', '--hierarchical')
        self.assertEqual(0, code)
        self.assertTrue(out.startswith('/editor\t'))

    def test_lookup_type_filter(self):
        code, out, _ = self._run(
            'lookup', str(self.snapshot_path), '/editor/python', '--hierarchical', '--type', default_tag(SettingsB))

        self.assertEqual(0, code)
        self.assertTrue(out.startswith(f"/editor\t{default_tag(SettingsB)}"))

    def test_missing_snapshot_file(self):
        code, _, err = self._run('inspect', str(self.tmp_path / 'missing.json'))

        self.assertEqual(1, code)
        self.assertIn('Error:', err)

    def test_malformed_snapshot(self):
        snapshot_path = self.tmp_path / 'broken.json'
        snapshot_path.write_text('{"version": 9}')

        code, _, err = self._run('inspect', str(snapshot_path))

        self.assertEqual(1, code)
        self.assertIn('Unsupported snapshot version', err)

    def test_command_required(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                treesettings_main([])


if __name__ == '__main__':
    unittest.main()
