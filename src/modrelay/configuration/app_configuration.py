from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, List
import yaml

from modrelay.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_DATABASE_PATH = "./data/modrelay.db"
DEFAULT_LOCALE = "en-US"
DEFAULT_EMBED_COLOR = 0x5865F2
DEFAULT_DURATION_SUGGESTIONS = ["30m", "1h", "6h", "1d", "3d", "7d", "30d"]


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    dictionary-like access helpers plus typed shortcuts for the settings the
    relay core reads. Uses fcntl file locks for safe concurrent access across
    processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping. Callers must not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        """Return the SQLite database file path, resolved against the working directory."""
        value = self._section("database").get("path") or DEFAULT_DATABASE_PATH
        return Path(str(value)).resolve()

    @property
    def default_locale(self) -> str:
        """Return the locale used when an interaction's locale has no catalog entry."""
        value = self._section("localization").get("default_locale") or DEFAULT_LOCALE
        return str(value)

    @property
    def embed_color(self) -> int:
        """Return the relay embed color as an integer.

        Accepts either an int or a hex string such as ``"#5865F2"``.
        """
        value = self._section("relay").get("embed_color", DEFAULT_EMBED_COLOR)
        if isinstance(value, str):
            try:
                return int(value.lstrip("#"), 16)
            except ValueError:
                logger.warning("[APP CONFIGURATION] Invalid embed_color %r, using default", value)
                return DEFAULT_EMBED_COLOR
        return int(value)

    @property
    def duration_suggestions(self) -> List[str]:
        """Return the duration strings offered by the block command's autocomplete."""
        value = self._section("durations").get("suggestions")
        if not isinstance(value, list) or not value:
            return list(DEFAULT_DURATION_SUGGESTIONS)
        return [str(item) for item in value]


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
