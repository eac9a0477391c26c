"""
Route definitions for the personalization API.

Endpoints under /api/books:
- GET  /                           : list personalizable books
- GET  /{book_id}                  : one book
- GET  /{book_id}/wizard           : the book's customization schema
- POST /{book_id}/selections       : initial (or restored) selections
- POST /{book_id}/validate         : validate selections, resolve config
- POST /{book_id}/combination-key  : book key, per-tab keys and avatars
- POST /{book_id}/render-pages     : resolved pages for a configuration
"""

from __future__ import annotations

import random
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..exceptions import MissingProduct, MissingSchema
from ..models import (
    BookConfig,
    CombinationKeyResponse,
    FieldError,
    RenderRequest,
    RenderResponse,
    SelectionsRequest,
    SelectionsResponse,
    TabKey,
    ValidateRequest,
    ValidationErrorResponse,
)
from .combination import book_combination_key, combination_key, resolve_avatar
from .pages import resolve_book
from .schemas import BookProduct, Selections, WizardConfig
from .selection import SelectionStore, to_resolved_configuration, validate_for_submission
from .store import ProductCatalog, get_catalog

router = APIRouter(prefix="/api/books", tags=["personalization"])

NOT_FOUND = "Item not found"


def _product(catalog: ProductCatalog, book_id: str) -> BookProduct:
    try:
        return catalog.get(book_id)
    except MissingProduct:
        raise HTTPException(status_code=404, detail=NOT_FOUND)


def _schema(catalog: ProductCatalog, book_id: str) -> WizardConfig:
    try:
        return catalog.get_schema(book_id)
    except (MissingProduct, MissingSchema):
        raise HTTPException(status_code=404, detail=NOT_FOUND)


@router.get("", response_model=List[BookProduct])
def list_books(catalog: ProductCatalog = Depends(get_catalog)) -> List[BookProduct]:
    return catalog.list()


@router.get("/{book_id}", response_model=BookProduct)
def get_book(book_id: str, catalog: ProductCatalog = Depends(get_catalog)) -> BookProduct:
    return _product(catalog, book_id)


@router.get("/{book_id}/wizard", response_model=WizardConfig)
def get_wizard(book_id: str, catalog: ProductCatalog = Depends(get_catalog)) -> WizardConfig:
    return _schema(catalog, book_id)


@router.post("/{book_id}/selections", response_model=SelectionsResponse)
def init_selections(
    book_id: str,
    req: SelectionsRequest,
    catalog: ProductCatalog = Depends(get_catalog),
) -> SelectionsResponse:
    """Initial selections: restored values where given, random options elsewhere.

    ``seed`` makes the random choices reproducible.
    """
    schema = _schema(catalog, book_id)
    rng = random.Random(req.seed) if req.seed is not None else None
    store = SelectionStore(rng)
    selections = store.initialize(schema, req.restored)
    return SelectionsResponse(product_id=book_id, active_tab=store.active_tab, selections=selections)


@router.post("/{book_id}/validate", response_model=BookConfig)
def validate_selections(
    book_id: str,
    req: ValidateRequest,
    catalog: ProductCatalog = Depends(get_catalog),
):
    product = _product(catalog, book_id)
    schema = _schema(catalog, book_id)
    report = validate_for_submission(schema, req.selections)
    if not report.ok:
        body = ValidationErrorResponse(
            first_error_tab=report.first_error_tab,
            errors=[
                FieldError(tab_id=f.tab_id, variant_id=f.variant_id, kind=f.kind, message=f.message())
                for f in report.failures
            ],
            messages=report.messages(),
        )
        return JSONResponse(status_code=422, content=body.model_dump(by_alias=True))
    return to_resolved_configuration(
        schema,
        req.selections,
        age=req.age,
        gender=req.gender,
        theme=product.theme,
        dedication=req.dedication,
        author=req.author,
    )


@router.post("/{book_id}/combination-key", response_model=CombinationKeyResponse)
def get_combination_key(
    book_id: str,
    selections: Selections,
    catalog: ProductCatalog = Depends(get_catalog),
) -> CombinationKeyResponse:
    schema = _schema(catalog, book_id)
    tabs = []
    for tab in schema.tabs:
        key = combination_key(tab, selections.get(tab.id) or {})
        tabs.append(
            TabKey(
                tab_id=tab.id,
                combination_key=key,
                avatar_url=resolve_avatar(schema.avatar_mappings, tab.id, key),
            )
        )
    return CombinationKeyResponse(
        combination_key=book_combination_key(schema.tabs, selections),
        tabs=tabs,
    )


@router.post("/{book_id}/render-pages", response_model=RenderResponse)
def render_pages(
    book_id: str,
    req: RenderRequest,
    catalog: ProductCatalog = Depends(get_catalog),
) -> RenderResponse:
    product = _product(catalog, book_id)
    wizard = product.wizard_config or WizardConfig()
    key = req.combination_key or book_combination_key(wizard.tabs, req.config.characters)
    pages = resolve_book(product, req.config, combination_key=key)
    return RenderResponse(product_id=book_id, combination_key=key, pages=pages)
