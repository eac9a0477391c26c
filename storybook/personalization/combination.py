"""
Combination keys and avatar lookup.

Artwork is authored once per combination of options rather than once per
buyer. A combination key is the sorted, underscore-joined list of option
ids selected in the key-bearing variants (option sets, colours, grids) of
a tab, so two buyers who pick the same options share the same key no
matter in which order they clicked.

Avatar mappings may hold two flavours of key:

* scoped, ``"<tabId>:<key>"``, the current format;
* legacy, ``"<key>"``, written before mappings were scoped per tab.

Scoped keys always win. The legacy lookup is a migration path for books
whose mappings have not been re-saved since scoping was introduced.
"""

from __future__ import annotations

import logging
from itertools import product as cartesian_product
from typing import Dict, Iterable, List, Optional

from .schemas import (
    DEFAULT_COMBINATION_KEY,
    AvatarMapping,
    Option,
    Tab,
    contributes_to_key,
)

logger = logging.getLogger(__name__)


def _selected_option_ids(tab: Tab, values: Dict[str, str]) -> List[str]:
    ids = []
    for variant in tab.variants:
        if not contributes_to_key(variant):
            continue
        selected = values.get(variant.id) or ""
        if selected:
            ids.append(selected)
    return ids


def key_from_option_ids(option_ids: Iterable[str]) -> str:
    ids = sorted(i for i in option_ids if i)
    if not ids:
        return DEFAULT_COMBINATION_KEY
    return "_".join(ids)


def combination_key(tab: Tab, selections: Dict[str, str]) -> str:
    """Return the combination key of ``tab`` for the given variant values.

    ``selections`` maps variant id to selected value for this tab only.
    Empty selections are ignored; with nothing selected the reserved
    ``"default"`` key is returned.
    """
    return key_from_option_ids(_selected_option_ids(tab, selections or {}))


def book_combination_key(tabs: Iterable[Tab], selections: Dict[str, Dict[str, str]]) -> str:
    """Key over every character tab at once, used for page backgrounds."""
    ids: List[str] = []
    for tab in tabs:
        if tab.type != "character":
            continue
        ids.extend(_selected_option_ids(tab, (selections or {}).get(tab.id) or {}))
    return key_from_option_ids(ids)


def scoped_key(tab_id: str, key: str) -> str:
    return f"{tab_id}:{key}"


def resolve_avatar(mapping: Optional[AvatarMapping], tab_id: str, key: str) -> Optional[str]:
    """Look up the avatar URL for a tab's combination key.

    Returns ``None`` when neither the scoped nor the legacy key is mapped;
    callers render nothing in that case.
    """
    if not mapping:
        return None
    url = mapping.get(scoped_key(tab_id, key))
    if url:
        return url
    url = mapping.get(key)
    if url:
        logger.debug("Avatar for tab %s resolved through legacy key %s", tab_id, key)
        return url
    return None


def enumerate_combinations(tab: Tab) -> List[Dict[str, object]]:
    """List every option combination of a tab with its key.

    Used by the back-office to author avatar mappings. Variants without
    options are skipped. Each entry has ``parts`` (one dict per variant:
    ``variantId``, ``variantLabel``, ``id``, ``label``) and ``key``.
    """
    variants = [v for v in tab.variants if contributes_to_key(v) and v.options]
    if not variants:
        return []

    combos = []
    for options in cartesian_product(*(v.options for v in variants)):
        parts = [_part(variant, option) for variant, option in zip(variants, options)]
        combos.append({"parts": parts, "key": key_from_option_ids(o.id for o in options)})
    return combos


def _part(variant, option: Option) -> Dict[str, str]:
    return {
        "variantId": variant.id,
        "variantLabel": variant.label,
        "id": option.id,
        "label": option.label,
    }


def missing_avatar_keys(tab: Tab, mapping: Optional[AvatarMapping]) -> List[str]:
    """Combination keys of ``tab`` that have no scoped or legacy avatar."""
    return [
        combo["key"]
        for combo in enumerate_combinations(tab)
        if resolve_avatar(mapping, tab.id, combo["key"]) is None
    ]
