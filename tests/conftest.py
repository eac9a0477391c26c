import random

import pytest

from storybook.config import refresh_settings
from storybook.personalization.schemas import BookProduct
from storybook.personalization.store import ProductCatalog, set_catalog


ENV_KEYS = (
    "STORYBOOK_CATALOG_FILE",
    "STORYBOOK_LOG_LEVEL",
    "STORYBOOK_DEFAULT_CHILD_NAME",
    "STORYBOOK_LEGACY_FRONT_MATTER",
    "STORYBOOK_NAME_VARIANTS",
)


CHILD_TAB = {
    "id": "child",
    "label": "Enfant",
    "type": "character",
    "variants": [
        {"id": "name", "label": "Prénom", "type": "text", "minLength": 2, "maxLength": 12},
        {
            "id": "hairColor",
            "label": "Cheveux",
            "type": "options",
            "options": [{"id": "blonde", "label": "Blond"}, {"id": "brown", "label": "Brun"}],
        },
    ],
}

PET_TAB = {
    "id": "pet",
    "label": "Animal",
    "type": "element",
    "variants": [
        {
            "id": "animal",
            "label": "Animal",
            "options": [{"id": "cat", "label": "Chat"}, {"id": "dog", "label": "Chien"}],
        },
        {"id": "petName", "label": "Nom de l'animal", "type": "text"},
    ],
}

ADVENTURE = {
    "id": "aventure",
    "name": "La grande aventure",
    "price": 29.9,
    "theme": "Aventure",
    "wizardConfig": {
        "tabs": [CHILD_TAB, PET_TAB],
        "avatarMappings": {
            "child:brown": "/avatars/child-brown.png",
            "brown": "/avatars/legacy-brown.png",
            "blonde": "/avatars/legacy-blonde.png",
            "pet:cat": "/avatars/cat.png",
        },
    },
    "contentConfig": {
        "pages": [
            {"id": "p1", "pageNumber": 1, "label": "Page 1"},
            {"id": "p2", "pageNumber": 2, "label": "Page 2"},
        ],
        "images": [
            {"id": "bg1", "pageIndex": 1, "combinationKey": "default", "imageUrl": "/bg/p1-default.jpg"},
            {"id": "bg1b", "pageIndex": 1, "combinationKey": "brown", "imageUrl": "/bg/p1-brown.jpg"},
            {"id": "bg2b", "pageIndex": 2, "combinationKey": "brown", "imageUrl": "/bg/p2-brown.jpg"},
        ],
        "texts": [
            {
                "id": "greeting",
                "type": "variable",
                "content": "Bonjour {child.name}",
                "position": {"pageIndex": 1, "zoneId": "body", "layer": 2},
            },
            {
                "id": "title",
                "type": "fixed",
                "content": "Chapitre 1",
                "position": {"pageIndex": 1, "zoneId": "header", "layer": 1},
            },
            {
                "id": "hair",
                "type": "variable",
                "conditionalSegments": [
                    {"text": "Tes cheveux bruns", "condition": "TXTCOND_hero-child_hairColor-brown"},
                    {"text": "Tes cheveux blonds", "condition": "TXTCOND_hero-child_hairColor-blonde"},
                    {"text": " brillent, {childName}."},
                ],
                "position": {"pageIndex": 2},
            },
        ],
        "imageElements": [
            {
                "id": "hero",
                "type": "variable",
                "variableKey": "child",
                "position": {"pageIndex": 1, "layer": 3},
            },
            {
                "id": "sun",
                "type": "static",
                "url": "/stickers/sun.png",
                "position": {"pageIndex": 1, "layer": 0},
            },
            {
                "id": "pet",
                "type": "variable",
                "variableKey": "pet",
                "position": {"pageIndex": 2},
            },
        ],
    },
}

LEGACY = {
    "id": "legacy",
    "name": "Une histoire",
    "wizardConfig": {"tabs": [CHILD_TAB]},
    "storyPages": [
        {"text": "Il était une fois.", "imageUrl": "/legacy/1.jpg"},
        {"text": "Fin.", "imageUrl": "/legacy/2.jpg"},
    ],
}

GIFT_CARD = {"id": "gift", "name": "Carte cadeau", "price": 20}


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield refresh_settings()
    set_catalog(None)
    refresh_settings()


@pytest.fixture()
def product():
    return BookProduct.model_validate(ADVENTURE)


@pytest.fixture()
def legacy_product():
    return BookProduct.model_validate(LEGACY)


@pytest.fixture()
def schema(product):
    return product.wizard_config


@pytest.fixture()
def child_tab(schema):
    return schema.tab("child")


@pytest.fixture()
def catalog(product, legacy_product):
    return ProductCatalog([product, legacy_product, BookProduct.model_validate(GIFT_CARD)])


@pytest.fixture()
def rng():
    return random.Random(7)
