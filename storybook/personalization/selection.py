"""
Buyer selections for one customization session.

The store holds one value per variant of every tab: an option id for
option sets, colours, grids and checkboxes, free text for text inputs.
It is created when a product's wizard loads, optionally seeded from a
configuration saved in the cart, mutated field by field, and finally
validated and turned into a ``BookConfig``.
"""

from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from typing_extensions import Literal

from ..config import get_settings
from ..exceptions import SubmissionValidationError
from .schemas import BookConfig, Selections, Tab, TextVariant, Variant, WizardConfig, contributes_to_key

logger = logging.getLogger(__name__)

FailureKind = Literal["MissingRequiredField", "TooShort", "TooLong"]

MISSING_REQUIRED_FIELD: FailureKind = "MissingRequiredField"
TOO_SHORT: FailureKind = "TooShort"
TOO_LONG: FailureKind = "TooLong"

GENERIC_MESSAGE = "Veuillez remplir tous les champs obligatoires."

# Variant ids copied into ``BookConfig.appearance``.
APPEARANCE_KEYS = (
    "hairColor",
    "eyeColor",
    "skinTone",
    "hairStyle",
    "beard",
    "outfit",
    "activity",
    "glasses",
    "glassesStyle",
    "hearingAid",
    "grayHair",
)


@dataclass(frozen=True)
class FieldFailure:
    tab_id: str
    variant_id: str
    label: str
    kind: FailureKind
    limit: Optional[int] = None

    @property
    def is_length(self) -> bool:
        return self.kind in (TOO_SHORT, TOO_LONG)

    def message(self) -> str:
        label = self.label or self.variant_id
        if self.kind == TOO_SHORT:
            return f"« {label} » doit contenir au moins {self.limit} caractères."
        if self.kind == TOO_LONG:
            return f"« {label} » ne peut pas dépasser {self.limit} caractères."
        return f"« {label} » est obligatoire."


@dataclass
class ValidationReport:
    failures: List[FieldFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failing_ids(self) -> List[str]:
        seen: List[str] = []
        for failure in self.failures:
            if failure.variant_id not in seen:
                seen.append(failure.variant_id)
        return seen

    @property
    def first_error_tab(self) -> Optional[str]:
        return self.failures[0].tab_id if self.failures else None

    def messages(self) -> List[str]:
        """One message per length violation, one generic message for the rest."""
        messages = [f.message() for f in self.failures if f.is_length]
        if any(not f.is_length for f in self.failures):
            messages.append(GENERIC_MESSAGE)
        return messages


def _check_text(tab: Tab, variant: TextVariant, value: Optional[str]) -> Optional[FieldFailure]:
    text = (value or "").strip()
    if not text:
        return FieldFailure(tab.id, variant.id, variant.label, MISSING_REQUIRED_FIELD)
    if variant.min_length is not None and len(text) < variant.min_length:
        return FieldFailure(tab.id, variant.id, variant.label, TOO_SHORT, variant.min_length)
    if variant.max_length is not None and len(text) > variant.max_length:
        return FieldFailure(tab.id, variant.id, variant.label, TOO_LONG, variant.max_length)
    return None


def validate_for_submission(schema: WizardConfig, state: Selections) -> ValidationReport:
    """Check every text variant of ``schema`` against ``state``.

    Text inputs are required and must respect their declared length
    bounds once trimmed. Other variant kinds are never required.
    """
    report = ValidationReport()
    for tab in schema.tabs:
        values = state.get(tab.id) or {}
        for variant in tab.variants:
            if not isinstance(variant, TextVariant):
                continue
            failure = _check_text(tab, variant, values.get(variant.id))
            if failure is not None:
                report.failures.append(failure)
    return report


def default_value(variant: Variant, rng: random.Random) -> str:
    """Initial value of a variant the buyer has not touched yet."""
    if contributes_to_key(variant) and variant.options:
        return rng.choice(variant.options).id
    return ""


def _find_value(tabs: Iterable[Tab], state: Selections, variant_ids: Sequence[str]) -> str:
    for tab in tabs:
        values = state.get(tab.id) or {}
        for variant_id in variant_ids:
            value = (values.get(variant_id) or "").strip()
            if value and isinstance(tab.variant(variant_id), TextVariant):
                return value
    return ""


def to_resolved_configuration(
    schema: WizardConfig,
    state: Selections,
    *,
    age: Optional[int] = None,
    gender: Optional[str] = None,
    theme: Optional[str] = None,
    dedication: Optional[str] = None,
    author: Optional[str] = None,
    name_variants: Optional[Sequence[str]] = None,
) -> BookConfig:
    """Snapshot ``state`` into a persistable ``BookConfig``."""
    if name_variants is None:
        name_variants = get_settings().name_variants
    characters = [t for t in schema.tabs if t.type == "character"]

    appearance: Dict[str, str] = {}
    for tab in characters:
        values = state.get(tab.id) or {}
        for key in APPEARANCE_KEYS:
            if values.get(key) and key not in appearance:
                appearance[key] = values[key]

    return BookConfig(
        child_name=_find_value(characters or schema.tabs, state, name_variants),
        age=age,
        gender=gender,
        theme=theme,
        appearance=appearance,
        dedication=dedication,
        author=author,
        characters=copy.deepcopy(state),
    )


class SelectionStore:
    """Mutable selection state owned by a single customization session."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.selections: Selections = {}
        self.active_tab: Optional[str] = None
        self.errors: Dict[str, FieldFailure] = {}

    def initialize(self, schema: WizardConfig, restored: Optional[Selections] = None) -> Selections:
        """Fill every tab/variant pair, preferring ``restored`` values."""
        restored = restored or {}
        selections: Selections = {tab_id: dict(values or {}) for tab_id, values in restored.items()}
        for tab in schema.tabs:
            values = selections.setdefault(tab.id, {})
            for variant in tab.variants:
                if variant.id not in values:
                    values[variant.id] = default_value(variant, self.rng)

        self.selections = selections
        self.errors = {}
        self.active_tab = schema.tabs[0].id if schema.tabs else None
        logger.debug("Initialized selections for %d tabs (%d restored)", len(schema.tabs), len(restored))
        return self.selections

    def get(self, tab_id: str, variant_id: str) -> str:
        return (self.selections.get(tab_id) or {}).get(variant_id, "")

    def tab_values(self, tab_id: str) -> Dict[str, str]:
        return self.selections.get(tab_id) or {}

    def set(self, tab_id: str, variant_id: str, value: str) -> None:
        self.selections.setdefault(tab_id, {})[variant_id] = value
        self.errors.pop(variant_id, None)

    def switch_tab(self, tab_id: str) -> None:
        self.active_tab = tab_id

    def snapshot(self) -> Selections:
        return copy.deepcopy(self.selections)

    def validate(self, schema: WizardConfig) -> ValidationReport:
        """Validate, record errors and focus the first failing tab."""
        report = validate_for_submission(schema, self.selections)
        self.errors = {f.variant_id: f for f in report.failures}
        if not report.ok:
            self.active_tab = report.first_error_tab
        return report

    def submit(self, schema: WizardConfig, **extra) -> BookConfig:
        """Return the resolved configuration or raise ``SubmissionValidationError``."""
        report = self.validate(schema)
        if not report.ok:
            logger.info("Submission blocked: %s", ", ".join(report.failing_ids))
            raise SubmissionValidationError(report)
        return to_resolved_configuration(schema, self.selections, **extra)

    def clear(self) -> None:
        self.selections = {}
        self.errors = {}
        self.active_tab = None
