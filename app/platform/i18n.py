"""
Locale tables for user-facing strings.

Every table is read from ``<LOCALES_DIR>/<code>.json`` once, when the
application starts, and handed to the routes through ``get_translations``.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from fastapi import Request

from app.platform.exceptions import TranslationError
from app.platform.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_LOCALES = ("en", "ru")
REQUIRED_SECTIONS = ("api", "criteria", "issues", "ux", "lighthouse")


class TranslationCatalog:
    def __init__(
        self,
        tables: Mapping[str, Mapping[str, Any]],
        default_lang: str = "ru",
        fallback_lang: str = "en",
    ):
        for code, table in tables.items():
            missing = [section for section in REQUIRED_SECTIONS if section not in table]
            if missing:
                raise TranslationError(
                    f"Locale '{code}' is missing sections: {', '.join(missing)}"
                )
        if default_lang not in tables:
            raise TranslationError(f"Default locale '{default_lang}' is not loaded")
        if fallback_lang not in tables:
            raise TranslationError(f"Fallback locale '{fallback_lang}' is not loaded")

        self._tables: Dict[str, Mapping[str, Any]] = dict(tables)
        self.default_lang = default_lang
        self.fallback_lang = fallback_lang

    @classmethod
    def from_directory(
        cls,
        directory: str,
        locales: Iterable[str] = SUPPORTED_LOCALES,
        default_lang: str = "ru",
        fallback_lang: str = "en",
    ) -> "TranslationCatalog":
        tables = {}
        for code in locales:
            path = Path(directory) / f"{code}.json"
            try:
                with path.open(encoding="utf-8") as fh:
                    tables[code] = json.load(fh)
            except (OSError, json.JSONDecodeError) as e:
                raise TranslationError(f"Could not load locale file {path}: {e}") from e
            logger.info(f"Loaded locale '{code}' from {path}")
        return cls(tables, default_lang=default_lang, fallback_lang=fallback_lang)

    @property
    def locales(self) -> tuple:
        return tuple(self._tables)

    def resolve_lang(self, lang: Optional[str]) -> str:
        """Unknown or missing locales fall back to the default one."""
        if lang and lang in self._tables:
            return lang
        return self.default_lang

    @staticmethod
    def _walk(table: Mapping[str, Any], key: str) -> Optional[Any]:
        node: Any = table
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def lookup(self, lang: str, key: str) -> Optional[Any]:
        """Raw lookup, returns whole sub-tables too."""
        for code in (self.resolve_lang(lang), self.fallback_lang):
            node = self._walk(self._tables[code], key)
            if node is not None:
                return node
        return None

    def get(self, lang: str, key: str, default: Optional[str] = None, **params: Any) -> str:
        value = None
        for code in (self.resolve_lang(lang), self.fallback_lang):
            value = self._walk(self._tables[code], key)
            if isinstance(value, str):
                break
            value = None

        if value is None:
            value = default if default is not None else key

        if params:
            try:
                return value.format(**params)
            except (KeyError, IndexError, ValueError):
                logger.warning(f"Could not format translation '{key}' with {params}")
        return value


def get_translations(request: Request) -> TranslationCatalog:
    return request.app.state.translations
