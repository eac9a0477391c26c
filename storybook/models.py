# storybook/models.py
from typing import List, Optional

from pydantic import Field

from .personalization.schemas import BookConfig, CamelModel, ResolvedPage, Selections


class SelectionsRequest(CamelModel):
    restored: Optional[Selections] = None
    seed: Optional[int] = None


class SelectionsResponse(CamelModel):
    product_id: str
    active_tab: Optional[str] = None
    selections: Selections


class ValidateRequest(CamelModel):
    selections: Selections
    age: Optional[int] = None
    gender: Optional[str] = None
    dedication: Optional[str] = None
    author: Optional[str] = None


class FieldError(CamelModel):
    variant_id: str
    tab_id: str
    kind: str
    message: str


class ValidationErrorResponse(CamelModel):
    first_error_tab: Optional[str] = None
    errors: List[FieldError] = Field(default_factory=list)
    messages: List[str] = Field(default_factory=list)


class TabKey(CamelModel):
    tab_id: str
    combination_key: str
    avatar_url: Optional[str] = None


class CombinationKeyResponse(CamelModel):
    combination_key: str
    tabs: List[TabKey] = Field(default_factory=list)


class RenderRequest(CamelModel):
    config: BookConfig
    combination_key: Optional[str] = None


class RenderResponse(CamelModel):
    product_id: str
    combination_key: str
    pages: List[ResolvedPage]
