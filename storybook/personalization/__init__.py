"""
Personalization package for the storybook storefront.

This package turns a book's customization schema (tabs of variants of
options) and a buyer's selections into a validated configuration, the
matching avatar and background artwork, and render-ready pages. The
resolver modules are plain functions over pydantic models; ``router``
exposes them over HTTP and is imported by ``storybook.main``.
"""

from .combination import book_combination_key, combination_key, resolve_avatar  # noqa: F401
from .pages import resolve_book, resolve_page  # noqa: F401
from .selection import SelectionStore, validate_for_submission  # noqa: F401
from .session import ConfiguratorSession, SessionState  # noqa: F401
from .substitution import resolve  # noqa: F401
