"""
Page resolution: turns admin content plus a buyer configuration into
render-ready page descriptions.

Each page is made of three layers:

1. a background picked by combination key, the live key winning over the
   reserved ``"default"`` key;
2. positioned texts, with placeholders substituted;
3. positioned stickers, either fixed images or the avatar of a tab.

Books created before the content editor existed have no content config,
only a flat list of generated story pages. Those are served as-is, the
story starting after the front matter pages.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from ..config import get_settings
from .combination import book_combination_key, combination_key as tab_combination_key, resolve_avatar
from .conditional import resolve_conditional_text
from .schemas import (
    ALL_COMBINATIONS_KEY,
    DEFAULT_COMBINATION_KEY,
    AvatarMapping,
    BookConfig,
    BookProduct,
    ContentConfig,
    ImageElement,
    ImageVariant,
    ResolvedPage,
    StickerPlacement,
    StoryPage,
    Tab,
    TextElement,
    TextPlacement,
    WizardConfig,
)
from .substitution import resolve

logger = logging.getLogger(__name__)


def select_background(images: Iterable[ImageVariant], page_index: int, combination_key: str) -> Optional[str]:
    fallback = None
    for image in images:
        if image.page_index != page_index:
            continue
        if image.combination_key == combination_key:
            return image.image_url
        if image.combination_key == DEFAULT_COMBINATION_KEY and fallback is None:
            fallback = image.image_url
    return fallback


def text_content(element: TextElement, config: BookConfig, default_child_name: Optional[str] = None) -> str:
    template = element.content
    if element.conditional_segments:
        template = resolve_conditional_text(element.conditional_segments, config.characters)
    return resolve(template, config, default_child_name)


def sticker_url(
    element: ImageElement,
    tabs: Sequence[Tab],
    config: BookConfig,
    avatar_mapping: Optional[AvatarMapping],
) -> Optional[str]:
    if element.type == "static" or not element.variable_key:
        return element.url
    tab_id = element.variable_key
    tab = next((t for t in tabs if t.id == tab_id), None)
    if tab is None:
        key = DEFAULT_COMBINATION_KEY
    else:
        key = tab_combination_key(tab, (config.characters or {}).get(tab_id) or {})
    return resolve_avatar(avatar_mapping, tab_id, key) or element.url


def _layer(element) -> int:
    return element.position.layer or 0


def shown_for(element, combination_key: str) -> bool:
    key = element.combination_key
    return not key or key in (combination_key, DEFAULT_COMBINATION_KEY, ALL_COMBINATIONS_KEY)


def _on_page(elements, page_index: int, combination_key: str) -> List:
    return sorted(
        (e for e in elements if e.position.page_index == page_index and shown_for(e, combination_key)),
        key=_layer,
    )


def _legacy_page(page_index: int, story_pages: Sequence[StoryPage], front_matter: int) -> ResolvedPage:
    story_index = page_index - front_matter
    if not 1 <= story_index <= len(story_pages):
        return ResolvedPage(page_index=page_index, empty=True, legacy=True)
    page = story_pages[story_index - 1]
    return ResolvedPage(
        page_index=page_index,
        legacy=True,
        background=page.image_url,
        texts=[TextPlacement(id=f"story-{story_index}", text=page.text)],
    )


def resolve_page(
    page_index: int,
    content_config: Optional[ContentConfig],
    config: BookConfig,
    avatar_mapping: Optional[AvatarMapping],
    combination_key: str,
    *,
    tabs: Sequence[Tab] = (),
    story_pages: Sequence[StoryPage] = (),
    front_matter: Optional[int] = None,
    default_child_name: Optional[str] = None,
) -> ResolvedPage:
    """Resolve one page of a book.

    Parameters
    ----------
    page_index : int
        Displayed page number; matched against ``pageNumber`` of the page
        definitions and ``pageIndex`` of every content element.
    content_config : Optional[ContentConfig]
        Admin content of the product. ``None`` switches to the legacy
        story mode.
    config : BookConfig
        Resolved buyer configuration.
    avatar_mapping : Optional[AvatarMapping]
        Combination key to avatar URL, used by variable stickers.
    combination_key : str
        Book-level key used to pick the background.
    tabs : Sequence[Tab]
        Wizard tabs, needed to compute per-tab keys for stickers.
    story_pages : Sequence[StoryPage]
        Legacy story, 1-indexed after the front matter.
    front_matter : Optional[int]
        Pages preceding the story in legacy mode; defaults to settings.

    Returns
    -------
    ResolvedPage
        Background, ordered texts and ordered stickers. Elements authored
        for another combination key are left out. Pages without a
        definition are returned with ``empty=True``.
    """
    if content_config is None:
        if front_matter is None:
            front_matter = get_settings().legacy_front_matter
        return _legacy_page(page_index, story_pages, front_matter)

    if not any(p.page_number == page_index for p in content_config.pages):
        return ResolvedPage(page_index=page_index, empty=True, combination_key=combination_key)

    background = select_background(content_config.images, page_index, combination_key)
    if background is None:
        logger.debug("No background for page %s (key %s)", page_index, combination_key)

    texts = _on_page(content_config.texts, page_index, combination_key)
    placements = [
        TextPlacement(
            id=t.id,
            text=text_content(t, config, default_child_name),
            zone_id=t.position.zone_id,
            layer=_layer(t),
            x=t.position.x,
            y=t.position.y,
            width=t.position.width,
            rotation=t.position.rotation,
            style=dict(t.style),
        )
        for t in texts
    ]

    stickers = []
    for element in _on_page(content_config.image_elements, page_index, combination_key):
        url = sticker_url(element, tabs, config, avatar_mapping)
        if not url:
            continue
        stickers.append(
            StickerPlacement(
                id=element.id,
                url=url,
                layer=_layer(element),
                x=element.position.x,
                y=element.position.y,
                width=element.position.width,
                height=element.position.height,
                rotation=element.position.rotation,
            )
        )

    return ResolvedPage(
        page_index=page_index,
        background=background,
        combination_key=combination_key,
        texts=placements,
        stickers=stickers,
    )


def resolve_book(
    product: BookProduct,
    config: BookConfig,
    combination_key: Optional[str] = None,
    front_matter: Optional[int] = None,
) -> List[ResolvedPage]:
    """Resolve every page of ``product`` in display order."""
    wizard = product.wizard_config or WizardConfig()
    if combination_key is None:
        combination_key = book_combination_key(wizard.tabs, config.characters)
    if front_matter is None:
        front_matter = get_settings().legacy_front_matter

    content = product.content_config
    if content is None:
        numbers = range(front_matter + 1, front_matter + len(product.story_pages) + 1)
    else:
        numbers = sorted({p.page_number for p in content.pages})

    return [
        resolve_page(
            number,
            content,
            config,
            wizard.avatar_mappings,
            combination_key,
            tabs=wizard.tabs,
            story_pages=product.story_pages,
            front_matter=front_matter,
        )
        for number in numbers
    ]
