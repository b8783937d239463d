"""Message tables for result and CLI output, looked up with ``tr(key, **kwargs)``.

The active language comes from, in order: an explicit choice, the
``WORLDRUNES_LANG`` environment variable, the preference saved by
``set_language`` under ``init(config_dir)``, then English.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from worldrunes.i18n import de, en

ENV_VAR = "WORLDRUNES_LANG"
SETTINGS_FILE = "worldrunes_settings.json"

_FALLBACK = "en"
_TABLES: Dict[str, Dict[str, str]] = {"en": en.STRINGS, "de": de.STRINGS}
_LABELS: Dict[str, str] = {"en": "English", "de": "Deutsch"}
_current_lang: str = _FALLBACK
_settings_path: Optional[Path] = None


def _normalize(value: str | None) -> str:
    # "de_DE.UTF-8" / "de-AT" -> "de"
    code = str(value or "").strip().lower().replace("-", "_").split(".")[0].split("_")[0]
    return code if code in _TABLES else ""


def _read_settings() -> Dict[str, Any]:
    if _settings_path is None or not _settings_path.exists():
        return {}
    try:
        data = json.loads(_settings_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def init(config_dir: Path) -> None:
    """Point preference storage at *config_dir* and restore the saved language."""
    global _settings_path, _current_lang
    _settings_path = Path(config_dir) / SETTINGS_FILE
    saved = _normalize(_read_settings().get("language"))
    if saved:
        _current_lang = saved


def resolve_language(explicit: str = "", environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return _normalize(explicit) or _normalize(env.get(ENV_VAR)) or _current_lang


def use_language(lang: str) -> bool:
    """Switch for this process only; returns False for unknown languages."""
    global _current_lang
    code = _normalize(lang)
    if not code:
        return False
    _current_lang = code
    return True


def set_language(lang: str) -> None:
    if use_language(lang) and _settings_path is not None:
        data = _read_settings()
        data["language"] = _current_lang
        _settings_path.parent.mkdir(parents=True, exist_ok=True)
        _settings_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def get_language() -> str:
    return _current_lang


def available_languages() -> Dict[str, str]:
    return dict(_LABELS)


def tr(key: str, **kwargs: Any) -> str:
    text = _TABLES[_current_lang].get(key)
    if text is None:
        text = _TABLES[_FALLBACK].get(key, key)
    if not kwargs:
        return text
    try:
        return text.format(**kwargs)
    except (KeyError, IndexError):
        return text
