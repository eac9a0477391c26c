"""
Configurator session: the wizard's lifecycle around a ``SelectionStore``.

    LOADING -> EDITING(active tab) -> VALIDATING -> COMPLETED
                    ^                      |
                    +---- first error -----+

Editing is re-entered from COMPLETED when the buyer edits a book already
in the cart. A product that cannot be loaded moves the session to FAILED;
only ``cancel()`` leaves that state.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Optional

from ..exceptions import PersonalizationError, SubmissionValidationError, UnknownTab
from .combination import book_combination_key, combination_key, resolve_avatar
from .schemas import BookConfig, BookProduct, Selections, WizardConfig
from .selection import SelectionStore, ValidationReport
from .store import ProductCatalog, get_catalog

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    EDITING = "editing"
    VALIDATING = "validating"
    COMPLETED = "completed"
    FAILED = "failed"


class InvalidTransition(PersonalizationError):
    def __init__(self, action: str, state: SessionState) -> None:
        super().__init__(f"Cannot {action} while {state.value}", error_type="invalid_transition")


class ConfiguratorSession:
    def __init__(self, catalog: Optional[ProductCatalog] = None, rng: Optional[random.Random] = None) -> None:
        self.catalog = catalog or get_catalog()
        self.store = SelectionStore(rng)
        self.state = SessionState.LOADING
        self.product: Optional[BookProduct] = None
        self.schema: Optional[WizardConfig] = None
        self.result: Optional[BookConfig] = None
        self.last_report: Optional[ValidationReport] = None

    @property
    def active_tab(self) -> Optional[str]:
        return self.store.active_tab

    def _require(self, action: str, *states: SessionState) -> None:
        if self.state not in states:
            raise InvalidTransition(action, self.state)

    def load(self, product_id: str, restored: Optional[Selections] = None) -> Selections:
        """Load a product and start editing; a new product discards prior state."""
        self._require("load", SessionState.LOADING, SessionState.EDITING, SessionState.COMPLETED)
        self.state = SessionState.LOADING
        self.store.clear()
        self.result = None
        self.last_report = None
        try:
            self.product = self.catalog.get(product_id)
            self.schema = self.catalog.get_schema(product_id)
        except PersonalizationError:
            self.state = SessionState.FAILED
            logger.warning("Customization of %s failed to load", product_id)
            raise
        selections = self.store.initialize(self.schema, restored)
        self.state = SessionState.EDITING
        return selections

    def select(self, tab_id: str, variant_id: str, value: str) -> None:
        self._require("select", SessionState.EDITING)
        self.store.set(tab_id, variant_id, value)

    def switch_tab(self, tab_id: str) -> None:
        self._require("switch tab", SessionState.EDITING)
        self.store.switch_tab(tab_id)

    def combination_key(self, tab_id: Optional[str] = None) -> str:
        """Key of one tab, or of the whole book when ``tab_id`` is omitted."""
        self._require("compute a key", SessionState.EDITING, SessionState.COMPLETED)
        if tab_id is None:
            return book_combination_key(self.schema.tabs, self.store.selections)
        tab = self.schema.tab(tab_id)
        if tab is None:
            raise UnknownTab(tab_id)
        return combination_key(tab, self.store.tab_values(tab_id))

    def preview_avatar(self, tab_id: str) -> Optional[str]:
        key = self.combination_key(tab_id)
        return resolve_avatar(self.schema.avatar_mappings, tab_id, key)

    def submit(self, **extra) -> BookConfig:
        self._require("submit", SessionState.EDITING)
        self.state = SessionState.VALIDATING
        extra.setdefault("theme", self.product.theme)
        try:
            self.result = self.store.submit(self.schema, **extra)
        except SubmissionValidationError as exc:
            self.last_report = exc.report
            self.state = SessionState.EDITING
            raise
        self.last_report = None
        self.state = SessionState.COMPLETED
        return self.result

    def edit(self, resolved: Optional[BookConfig] = None) -> Selections:
        """Return to editing, seeded with a previously resolved configuration.

        Only a completed session can be edited; ``resolved`` defaults to its
        own result.
        """
        self._require("edit", SessionState.COMPLETED)
        resolved = resolved or self.result
        selections = self.store.initialize(self.schema, resolved.characters)
        self.state = SessionState.EDITING
        return selections

    def cancel(self) -> None:
        self.store.clear()
        self.product = None
        self.schema = None
        self.result = None
        self.last_report = None
        self.state = SessionState.LOADING
