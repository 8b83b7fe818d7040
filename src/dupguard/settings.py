from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # pyright: ignore[reportMissingImports]

from .baseline.path import SETTINGS_FILE_NAME
from .errors import FormatError


# Settings key constants
SETTING_BASELINE_PATH = 'baseline.path'
SETTING_GRAPH_COMMAND = 'graph.command'
SETTING_GRAPH_FORMAT = 'graph.format'
SETTING_LOGGING_PATH = 'logging.path'
SETTING_LOGGING_LEVEL = 'logging.level'


class ProjectSettings:
    """Settings manager for the audited project.

    Provides a read-only key-value interface to access settings from dupguard.toml
    at the project root. This class is agnostic to the schema and usage of
    settings - it simply loads the TOML file and provides access to the raw data
    structure. Consumers are responsible for interpreting the values.

    Example:
        settings = ProjectSettings(project_root)
        baseline = settings.get(SETTING_BASELINE_PATH, 'expected-duplicate-deps.txt')
        command = settings.get(SETTING_GRAPH_COMMAND)
    """

    def __init__(self, project_root: Path):
        """Initialize settings from TOML file.

        Loads settings from dupguard.toml if it exists. If the file does not
        exist, an empty settings dictionary is used, and all get() calls will
        return their defaults.

        Args:
            project_root: Path to the project root directory

        Raises:
            FormatError: If dupguard.toml exists but is not valid TOML
        """
        self._project_root = project_root
        self._settings = {}

        settings_file = self.settings_file
        if settings_file.exists():
            with open(settings_file, 'rb') as f:
                try:
                    self._settings = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise FormatError(str(settings_file), None, f"invalid TOML: {e}") from e

    @property
    def project_root(self) -> Path:
        return self._project_root

    @property
    def settings_file(self) -> Path:
        return self._project_root / SETTINGS_FILE_NAME

    def invalid(self, key: str, expected: str, value) -> FormatError:
        """Build the error reporting a setting value of the wrong shape.

        Args:
            key: Setting key path using dot notation
            expected: Description of the accepted values
            value: The value found in the settings file

        Returns:
            FormatError naming the settings file, for the caller to raise
        """
        return FormatError(str(self.settings_file), None, f"{key} must be {expected}, got {value!r}")

    def get(self, key: str, default=None):
        """Get a setting value by key with optional default.

        Supports both simple keys and dot notation for accessing nested keys
        (e.g., 'graph.command' accesses settings['graph']['command']). Returns
        the default value if the key path does not exist or if any intermediate
        value is not a dictionary.

        Args:
            key: Setting key path using dot notation for nested keys
            default: Default value to return if key not found

        Returns:
            Setting value at the specified key path, or default if not found

        Examples:
            >>> settings.get(SETTING_GRAPH_FORMAT, 'auto')
            'lock'
            >>> settings.get('nonexistent.key', 'fallback')
            'fallback'
        """
        keys = key.split('.')
        value = self._settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
