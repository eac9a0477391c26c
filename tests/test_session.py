import pytest

from storybook.exceptions import MissingProduct, MissingSchema, SubmissionValidationError, UnknownTab
from storybook.personalization.session import ConfiguratorSession, InvalidTransition, SessionState


@pytest.fixture()
def session(catalog, rng):
    return ConfiguratorSession(catalog, rng)


def test_load_starts_editing_on_first_tab(session):
    selections = session.load("aventure")
    assert session.state is SessionState.EDITING
    assert session.active_tab == "child"
    assert set(selections) == {"child", "pet"}


def test_load_unknown_product_fails(session):
    with pytest.raises(MissingProduct):
        session.load("nope")
    assert session.state is SessionState.FAILED


def test_load_product_without_schema_fails(session):
    with pytest.raises(MissingSchema):
        session.load("gift")
    assert session.state is SessionState.FAILED


def test_failed_submit_returns_to_editing_on_error_tab(session):
    session.load("aventure", {"child": {"name": "Léa"}})
    with pytest.raises(SubmissionValidationError):
        session.submit()
    assert session.state is SessionState.EDITING
    assert session.active_tab == "pet"
    assert session.last_report.failing_ids == ["petName"]


def test_successful_submit_completes(session):
    session.load("aventure")
    session.select("child", "name", "Léa")
    session.select("child", "hairColor", "brown")
    session.select("pet", "petName", "Rex")
    config = session.submit(age=6)

    assert session.state is SessionState.COMPLETED
    assert config.child_name == "Léa"
    assert config.theme == "Aventure"
    assert config.age == 6
    assert session.combination_key() == "brown"


def test_select_is_rejected_outside_editing(session):
    with pytest.raises(InvalidTransition):
        session.select("child", "name", "Léa")


def test_combination_keys_and_avatar_preview(session):
    session.load("aventure", {"child": {"hairColor": "brown"}, "pet": {"animal": "cat"}})
    assert session.combination_key("child") == "brown"
    assert session.combination_key("pet") == "cat"
    assert session.preview_avatar("child") == "/avatars/child-brown.png"
    with pytest.raises(UnknownTab):
        session.combination_key("ghost")
    with pytest.raises(UnknownTab):
        session.preview_avatar("ghost")


def test_edit_restores_completed_configuration(session):
    session.load("aventure", {"child": {"name": "Léa", "hairColor": "blonde"}, "pet": {"petName": "Rex"}})
    config = session.submit()

    selections = session.edit()
    assert session.state is SessionState.EDITING
    assert selections["child"] == {"name": "Léa", "hairColor": "blonde"}
    assert config.characters["child"]["hairColor"] == "blonde"


def test_switch_tab_and_cancel(session):
    session.load("aventure")
    session.switch_tab("pet")
    assert session.active_tab == "pet"
    session.cancel()
    assert session.state is SessionState.LOADING
    assert session.store.selections == {}
    assert session.product is None


def test_preview_requires_a_loaded_product(session):
    with pytest.raises(InvalidTransition):
        session.preview_avatar("child")

    with pytest.raises(MissingProduct):
        session.load("nope")
    with pytest.raises(InvalidTransition):
        session.preview_avatar("child")


def test_failed_session_only_leaves_through_cancel(session):
    with pytest.raises(MissingSchema):
        session.load("gift")
    with pytest.raises(InvalidTransition):
        session.load("aventure")

    session.cancel()
    session.load("aventure")
    assert session.state is SessionState.EDITING


def test_edit_keeps_in_progress_input(session):
    session.load("aventure")
    session.select("child", "name", "Léa")
    with pytest.raises(InvalidTransition):
        session.edit()
    assert session.state is SessionState.EDITING
    assert session.store.get("child", "name") == "Léa"
