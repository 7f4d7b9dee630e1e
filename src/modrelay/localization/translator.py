"""
YAML-backed string catalogs for user-facing replies.

Each ``locales/<locale>.yml`` file holds a nested mapping; keys are addressed
with dots (``common.errors.no_thread``). Lookups fall back to the default
locale, then to the key itself so a missing string never breaks a reply.
Placeholders use ``str.format`` syntax (``{reason}``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from modrelay.configuration.app_configuration import app_config
from modrelay.util.logger import get_logger

logger = get_logger("translator")

LOCALES_DIR = Path(__file__).parent / "locales"


class Translator:
    """Loads every locale catalog in a directory and resolves dotted keys."""

    def __init__(self, locales_dir: Path, default_locale: str) -> None:
        self.locales_dir = locales_dir
        self.default_locale = default_locale
        self._catalogs: Dict[str, Dict[str, Any]] = {}
        self.reload()

    def reload(self) -> None:
        catalogs: Dict[str, Dict[str, Any]] = {}
        for path in sorted(self.locales_dir.glob("*.yml")):
            try:
                with path.open("r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as exc:
                logger.error("[TRANSLATOR] Failed to load locale file %s: %s", path, exc)
                continue
            if not isinstance(data, dict):
                logger.warning("[TRANSLATOR] Locale file %s is not a mapping, skipping", path)
                continue
            catalogs[path.stem] = data
        self._catalogs = catalogs
        logger.debug("[TRANSLATOR] Loaded locales: %s", ", ".join(catalogs) or "none")

    @property
    def locales(self) -> list[str]:
        return list(self._catalogs)

    def _lookup(self, locale: str, key: str) -> Optional[str]:
        node: Any = self._catalogs.get(locale)
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def _resolve(self, key: str, locale: Optional[str]) -> Optional[str]:
        if locale:
            template = self._lookup(locale, key)
            if template is not None:
                return template
            # "es-ES" falls back to "es" before the default locale
            base = locale.split("-")[0]
            if base != locale:
                template = self._lookup(base, key)
                if template is not None:
                    return template
        return self._lookup(self.default_locale, key)

    def translate(self, key: str, locale: Optional[str] = None, **params: Any) -> str:
        """Return the localized string for ``key`` with ``params`` substituted."""
        template = self._resolve(key, locale)
        if template is None:
            logger.warning("[TRANSLATOR] Missing translation for key %r", key)
            return key
        try:
            return template.format(**params)
        except (KeyError, IndexError) as exc:
            logger.warning("[TRANSLATOR] Missing placeholder %s for key %r", exc, key)
            return template

    def localizations(self, key: str) -> Dict[str, str]:
        """Return ``{locale: string}`` for every non-default locale that defines ``key``.

        Shaped for py-cord's ``name_localizations``/``description_localizations``.
        """
        result: Dict[str, str] = {}
        for locale in self._catalogs:
            if locale == self.default_locale:
                continue
            value = self._lookup(locale, key)
            if value is not None:
                result[locale] = value
        return result


translator = Translator(LOCALES_DIR, app_config.default_locale)


def t(key: str, locale: Optional[str] = None, **params: Any) -> str:
    """Shorthand for ``translator.translate``."""
    return translator.translate(key, locale, **params)
