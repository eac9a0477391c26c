import random

import pytest

from storybook.exceptions import SubmissionValidationError
from storybook.personalization.schemas import WizardConfig
from storybook.personalization.selection import (
    GENERIC_MESSAGE,
    MISSING_REQUIRED_FIELD,
    TOO_LONG,
    TOO_SHORT,
    SelectionStore,
    default_value,
    to_resolved_configuration,
    validate_for_submission,
)


def _name_schema(**limits):
    variant = {"id": "name", "label": "Prénom", "type": "text"}
    variant.update(limits)
    return WizardConfig.model_validate({"tabs": [{"id": "child", "variants": [variant]}]})


def test_too_short_is_the_only_failure():
    report = validate_for_submission(_name_schema(minLength=3), {"child": {"name": "ab"}})
    assert [f.kind for f in report.failures] == [TOO_SHORT]
    assert report.failures[0].limit == 3


def test_too_long():
    report = validate_for_submission(_name_schema(maxLength=4), {"child": {"name": "Maximilien"}})
    assert [f.kind for f in report.failures] == [TOO_LONG]


def test_empty_value_is_only_missing():
    report = validate_for_submission(_name_schema(minLength=3), {"child": {"name": "   "}})
    assert [f.kind for f in report.failures] == [MISSING_REQUIRED_FIELD]
    assert report.messages() == [GENERIC_MESSAGE]


def test_length_uses_trimmed_value():
    report = validate_for_submission(_name_schema(minLength=3), {"child": {"name": "  Li  "}})
    assert [f.kind for f in report.failures] == [TOO_SHORT]


def test_valid_text_passes():
    report = validate_for_submission(_name_schema(minLength=2, maxLength=10), {"child": {"name": "Léa"}})
    assert report.ok
    assert report.first_error_tab is None


def test_non_text_variants_are_never_required(schema):
    state = {"child": {"name": "Léa", "hairColor": ""}, "pet": {"animal": "", "petName": "Rex"}}
    assert validate_for_submission(schema, state).ok


def test_report_points_at_first_failing_tab(schema):
    state = {"child": {"name": "Léa"}, "pet": {"petName": ""}}
    report = validate_for_submission(schema, state)
    assert report.failing_ids == ["petName"]
    assert report.first_error_tab == "pet"


def test_messages_per_length_failure(schema):
    state = {"child": {"name": "L"}, "pet": {"petName": ""}}
    messages = validate_for_submission(schema, state).messages()
    assert messages[0] == "« Prénom » doit contenir au moins 2 caractères."
    assert messages[-1] == GENERIC_MESSAGE


def test_default_value(child_tab):
    rng = random.Random(1)
    name, hair = child_tab.variants
    assert default_value(name, rng) == ""
    assert default_value(hair, rng) in {"blonde", "brown"}


def test_initialize_fills_every_variant(schema, rng):
    store = SelectionStore(rng)
    selections = store.initialize(schema)
    assert set(selections) == {"child", "pet"}
    assert selections["child"]["name"] == ""
    assert selections["child"]["hairColor"] in {"blonde", "brown"}
    assert selections["pet"]["animal"] in {"cat", "dog"}
    assert store.active_tab == "child"


def test_initialize_is_reproducible_with_seeded_rng(schema):
    first = SelectionStore(random.Random(3)).initialize(schema)
    second = SelectionStore(random.Random(3)).initialize(schema)
    assert first == second


def test_restored_values_are_kept(schema, rng):
    restored = {"child": {"name": "Léa", "hairColor": "brown"}, "old": {"x": "y"}}
    selections = SelectionStore(rng).initialize(schema, restored)
    assert selections["child"] == {"name": "Léa", "hairColor": "brown"}
    assert selections["old"] == {"x": "y"}
    assert selections["pet"]["animal"] in {"cat", "dog"}
    assert restored["child"] == {"name": "Léa", "hairColor": "brown"}


def test_set_clears_field_error(schema, rng):
    store = SelectionStore(rng)
    store.initialize(schema)
    report = store.validate(schema)
    assert not report.ok
    assert "name" in store.errors
    store.set("child", "name", "Léa")
    assert "name" not in store.errors
    assert store.get("child", "name") == "Léa"


def test_validate_focuses_first_failing_tab(schema, rng):
    store = SelectionStore(rng)
    store.initialize(schema, {"child": {"name": "Léa"}})
    store.switch_tab("child")
    store.validate(schema)
    assert store.active_tab == "pet"


def test_submit_raises_with_report(schema, rng):
    store = SelectionStore(rng)
    store.initialize(schema)
    with pytest.raises(SubmissionValidationError) as excinfo:
        store.submit(schema)
    assert excinfo.value.error_type == "validation"
    assert excinfo.value.report.failing_ids == ["name", "petName"]


def test_submit_returns_resolved_configuration(schema, rng):
    store = SelectionStore(rng)
    store.initialize(schema, {"child": {"name": "Léa", "hairColor": "brown"}, "pet": {"petName": "Rex"}})
    config = store.submit(schema, age=5, dedication="Pour Léa")
    assert config.child_name == "Léa"
    assert config.age == 5
    assert config.appearance == {"hairColor": "brown"}
    assert config.characters["child"]["hairColor"] == "brown"

    store.set("child", "hairColor", "blonde")
    assert config.characters["child"]["hairColor"] == "brown"


def test_child_name_prefers_character_tabs(schema):
    state = {"pet": {"name": "Rex"}, "child": {"name": "Léa"}}
    assert to_resolved_configuration(schema, state).child_name == "Léa"


def test_snapshot_and_clear(schema, rng):
    store = SelectionStore(rng)
    store.initialize(schema)
    snapshot = store.snapshot()
    store.set("child", "name", "Tom")
    assert snapshot["child"]["name"] == ""
    store.clear()
    assert store.selections == {}
    assert store.active_tab is None
