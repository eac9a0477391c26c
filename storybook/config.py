from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv


DEFAULT_CATALOG_FILE = Path(__file__).resolve().parent / "data" / "sample_products.json"


def _load_env() -> None:
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path, override=False)


_load_env()


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


def _get_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(key)
    if not value:
        return default
    items = tuple(part.strip() for part in value.split(",") if part.strip())
    return items or default


@dataclass
class Settings:
    catalog_file: str = field(
        default_factory=lambda: _get_env("STORYBOOK_CATALOG_FILE", str(DEFAULT_CATALOG_FILE))
    )
    log_level: str = field(default_factory=lambda: (_get_env("STORYBOOK_LOG_LEVEL", "INFO") or "INFO").upper())
    # Shown in place of {childName} while the buyer has not typed a name yet.
    default_child_name: str = field(
        default_factory=lambda: _get_env("STORYBOOK_DEFAULT_CHILD_NAME", "l'enfant")
    )
    # Pages printed before the story in legacy books (dedication page).
    legacy_front_matter: int = field(default_factory=lambda: _get_int("STORYBOOK_LEGACY_FRONT_MATTER", 1))
    name_variants: Tuple[str, ...] = field(
        default_factory=lambda: _get_list("STORYBOOK_NAME_VARIANTS", ("name", "firstName", "prenom"))
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def refresh_settings() -> Settings:
    global _settings
    _settings = Settings()
    return _settings


__all__ = ["Settings", "get_settings", "refresh_settings", "DEFAULT_CATALOG_FILE"]
