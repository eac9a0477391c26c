"""
Product catalog used by the personalization engine.

Products are read once from a JSON file (a list of ``BookProduct``
objects in the back-office's camelCase format) and kept in memory. The
engine treats them as read-only: a customization session loads a
product's wizard configuration and content, and never writes back.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..config import get_settings
from ..exceptions import MissingProduct, MissingSchema
from .schemas import BookProduct, WizardConfig

logger = logging.getLogger(__name__)


class ProductCatalog:
    """In-memory collection of personalizable books, keyed by id."""

    def __init__(self, products: Optional[Iterable[BookProduct]] = None) -> None:
        self._products: Dict[str, BookProduct] = {}
        for product in products or ():
            self.add(product)

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def add(self, product: BookProduct) -> BookProduct:
        self._products[product.id] = product
        return product

    def list(self) -> List[BookProduct]:
        return list(self._products.values())

    def get(self, product_id: str) -> BookProduct:
        try:
            return self._products[str(product_id)]
        except KeyError:
            raise MissingProduct(str(product_id)) from None

    def get_schema(self, product_id: str) -> WizardConfig:
        """Return the wizard configuration of a product.

        Raises ``MissingProduct`` for an unknown id and ``MissingSchema``
        when the product has nothing to customize.
        """
        product = self.get(product_id)
        if product.wizard_config is None or not product.wizard_config.tabs:
            raise MissingSchema(product.id)
        return product.wizard_config


def load_catalog(path: Union[str, Path]) -> ProductCatalog:
    """Build a catalog from a JSON file.

    A missing file yields an empty catalog. A file that exists but does
    not hold valid products raises, so broken back-office exports are
    noticed at startup.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Catalog file %s not found, starting with an empty catalog", path)
        return ProductCatalog()
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    entries = raw.get("products", []) if isinstance(raw, dict) else raw
    catalog = ProductCatalog(BookProduct.model_validate(entry) for entry in entries)
    logger.info("Loaded %d products from %s", len(catalog), path)
    return catalog


_catalog: Optional[ProductCatalog] = None


def get_catalog() -> ProductCatalog:
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(get_settings().catalog_file)
    return _catalog


def set_catalog(catalog: Optional[ProductCatalog]) -> None:
    """Replace the shared catalog (``None`` reloads it on next access)."""
    global _catalog
    _catalog = catalog
