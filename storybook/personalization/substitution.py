"""
Placeholder substitution for admin-authored text templates.

Templates reference buyer data with ``{name}`` or ``{{name}}``:

* well-known top-level fields: ``childName`` (also ``nom_enfant``,
  ``heroName`` and, between double braces, ``name``), ``age``,
  ``gender`` (rendered as its French label), ``dedication``, ``author``;
* ``{tabId.variantId}`` for any variant of any tab;
* a bare variant id, looked up in the first tab that has a value for it.

Placeholders that cannot be resolved are left untouched. Templates are
written ahead of time and may mention variants a book does not have yet,
so a missing value must never break a page.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Optional

from ..config import get_settings
from .schemas import BookConfig

_PLACEHOLDER = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}|\{\s*([^{}]+?)\s*\}")

_CHILD_NAME_KEYS = {"childName", "nom_enfant", "heroName"}
# In the double-brace form only, {{name}} also means the child's name.
_DOUBLE_BRACE_ALIASES = {"name": "childName"}

_GENDER_LABELS = {"girl": "Fille", "boy": "Garçon", "neutral": "Neutre"}


def _optional(value: Optional[object]) -> str:
    return "" if value is None else str(value)


def _gender(config: BookConfig) -> str:
    if not config.gender:
        return ""
    return _GENDER_LABELS.get(config.gender.lower(), config.gender)


_TOP_LEVEL: Dict[str, Callable[[BookConfig], str]] = {
    "age": lambda config: _optional(config.age),
    "gender": _gender,
    "dedication": lambda config: _optional(config.dedication),
    "author": lambda config: _optional(config.author),
}


def lookup(name: str, config: BookConfig, default_child_name: Optional[str] = None) -> Optional[str]:
    """Return the value a placeholder name stands for, or ``None``."""
    if name in _CHILD_NAME_KEYS:
        if config.child_name:
            return config.child_name
        if default_child_name is None:
            default_child_name = get_settings().default_child_name
        return default_child_name
    getter = _TOP_LEVEL.get(name)
    if getter is not None:
        return getter(config)

    characters = config.characters or {}
    if "." in name:
        tab_id, _, variant_id = name.partition(".")
        value = (characters.get(tab_id) or {}).get(variant_id)
        return value or None

    for values in characters.values():
        value = (values or {}).get(name)
        if value:
            return value
    return None


def resolve(template: str, config: BookConfig, default_child_name: Optional[str] = None) -> str:
    """Replace every resolvable placeholder in ``template``."""
    if not template:
        return template or ""

    def _replace(match: "re.Match[str]") -> str:
        if match.group(1):
            name = _DOUBLE_BRACE_ALIASES.get(match.group(1), match.group(1))
        else:
            name = match.group(2)
        value = lookup(name, config, default_child_name)
        return match.group(0) if value is None else value

    return _PLACEHOLDER.sub(_replace, template)
