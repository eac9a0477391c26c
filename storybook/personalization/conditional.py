"""
Conditional text imported from InDesign layouts.

A text frame can be split into segments, each optionally tagged with a
condition named ``TXTCOND_<tabId>_<variantId>-<optionId>``. A tagged
segment is kept only when the buyer selected that option. Segments may
also embed variables written ``{TXTVAR_<tabId>_<variantId>}``.

Layout authors prefix character tabs with ``hero-`` (``hero-child``);
the prefix is dropped when matching against wizard selections.
"""

from __future__ import annotations

import logging
import re
from itertools import product as cartesian_product
from typing import Dict, List, NamedTuple, Optional, Sequence

from .schemas import DEFAULT_COMBINATION_KEY, ConditionalSegment, Selections

logger = logging.getLogger(__name__)

_CONDITION = re.compile(r"^TXTCOND_([^_]+)_([^-]+)-(.+)$")
_VARIABLE = re.compile(r"\{TXTVAR_([^_]+)_([^}]+)\}")


class Condition(NamedTuple):
    tab_id: str
    variant_id: str
    option_id: str


def parse_condition(name: str) -> Optional[Condition]:
    match = _CONDITION.match(re.sub(r"^Condition/", "", name))
    if not match:
        return None
    return Condition(match.group(1), match.group(2), match.group(3))


def wizard_tab_id(condition_tab_id: str) -> str:
    if condition_tab_id.startswith("hero-"):
        return condition_tab_id[len("hero-"):]
    return condition_tab_id


def _tab_values(tab_id: str, selections: Selections) -> Dict[str, str]:
    return selections.get(wizard_tab_id(tab_id)) or {}


def _segment_condition(segment: ConditionalSegment) -> Optional[Condition]:
    if segment.parsed_condition is not None:
        parsed = segment.parsed_condition
        return Condition(parsed.character, parsed.variant, parsed.option)
    if segment.condition:
        return parse_condition(segment.condition)
    return None


def is_condition_active(segment: ConditionalSegment, selections: Selections) -> bool:
    if not segment.condition and segment.parsed_condition is None:
        return True
    condition = _segment_condition(segment)
    if condition is None:
        # Unknown formats keep their text.
        logger.warning("Unknown condition format: %s", segment.condition)
        return True
    return _tab_values(condition.tab_id, selections).get(condition.variant_id) == condition.option_id


def resolve_variables(text: str, selections: Selections) -> str:
    def _replace(match: "re.Match[str]") -> str:
        value = _tab_values(match.group(1), selections).get(match.group(2))
        if not value:
            return match.group(0)
        # InDesign exports no whitespace between styled runs around variables.
        return f" {value} "

    return _VARIABLE.sub(_replace, text)


def resolve_conditional_text(segments: Optional[Sequence[ConditionalSegment]], selections: Selections) -> str:
    """Concatenate the segments active for ``selections``."""
    if not segments:
        return ""
    parts = []
    for segment in segments:
        if not is_condition_active(segment, selections):
            continue
        text = segment.text
        if segment.variables:
            text = resolve_variables(text, selections)
        parts.append(text)
    return "".join(parts)


def generate_all_variants(segments: Sequence[ConditionalSegment]) -> Dict[str, str]:
    """Resolve ``segments`` for every combination of the options they test.

    Keys look like ``child_gender-boy|child_hair-red`` (sorted); a frame
    without conditions yields a single ``"default"`` entry.
    """
    options: Dict[str, Dict[str, List[str]]] = {}
    for segment in segments:
        condition = _segment_condition(segment)
        if condition is None:
            continue
        tab_id = wizard_tab_id(condition.tab_id)
        found = options.setdefault(tab_id, {}).setdefault(condition.variant_id, [])
        if condition.option_id not in found:
            found.append(condition.option_id)

    if not options:
        return {DEFAULT_COMBINATION_KEY: resolve_conditional_text(segments, {})}

    axes = [(tab_id, variant_id, opts) for tab_id, variants in options.items() for variant_id, opts in variants.items()]
    variants: Dict[str, str] = {}
    for choice in cartesian_product(*(opts for _, _, opts in axes)):
        selections: Selections = {}
        key_parts = []
        for (tab_id, variant_id, _), option_id in zip(axes, choice):
            selections.setdefault(tab_id, {})[variant_id] = option_id
            key_parts.append(f"{tab_id}_{variant_id}-{option_id}")
        key = "|".join(sorted(key_parts)) or DEFAULT_COMBINATION_KEY
        variants[key] = resolve_conditional_text(segments, selections)
    return variants


def has_conditional_text(segments: Optional[Sequence[ConditionalSegment]]) -> bool:
    return any(s.condition for s in segments or ())


def extract_unique_conditions(segments: Sequence[ConditionalSegment]) -> List[str]:
    return sorted({s.condition for s in segments if s.condition})
