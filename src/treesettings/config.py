import os
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # pyright: ignore[reportMissingImports]


# Settings key constants
SETTING_LOGGING_PATH = 'logging.path'
SETTING_LOGGING_LEVEL = 'logging.level'
SETTING_SNAPSHOT_INDENT = 'snapshot.indent'

CONFIG_ENVIRONMENT_VARIABLE = 'TREESETTINGS_CONFIG'


class ToolSettings:
    """Settings for the treesettings command line tool.

    Provides a read-only key-value interface over a TOML file. This class is agnostic to the
    schema of the file; consumers interpret the values they read.

    Example:
        settings = ToolSettings(Path('treesettings.toml'))
        log_path = settings.get(SETTING_LOGGING_PATH)
        indent = settings.snapshot_indent()
    """

    def __init__(self, config_path: Path | None = None):
        """Initialize settings from a TOML file.

        If no path is given, the TREESETTINGS_CONFIG environment variable is consulted. A
        missing path or file yields empty settings, and every get() returns its default.

        Args:
            config_path: Path to the TOML configuration file
        """
        if config_path is None:
            environment_path = os.environ.get(CONFIG_ENVIRONMENT_VARIABLE)
            config_path = Path(environment_path) if environment_path else None

        self._config_path = config_path
        self._settings = {}

        if config_path is not None and config_path.exists():
            with open(config_path, 'rb') as f:
                self._settings = tomllib.load(f)

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def get(self, key: str, default=None):
        """Look up a dotted key such as ``'logging.level'``.

        Returns ``default`` when any table along the key is missing.
        """
        node = self._settings
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def snapshot_indent(self) -> int | None:
        """JSON indentation for written snapshots: 2 unless configured, None for a single line.

        Raises:
            ValueError: If ``snapshot.indent`` is set to something other than a non-negative
                        integer or ``false``
        """
        indent = self.get(SETTING_SNAPSHOT_INDENT, 2)
        if indent is False:
            return None
        if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
            raise ValueError(f"{SETTING_SNAPSHOT_INDENT} must be a non-negative integer or false, not {indent!r}")
        return indent
