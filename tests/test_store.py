#!/usr/bin/env python3
"""
Tests for the in-memory term store and the project model helpers.
"""

import pytest

from locport.errors import InvalidValue, MalformedKey, ProjectNotFound
from locport.models import Locale, ProjectRole, same_locale
from locport.reconcile import CreateTerm, UpsertTranslation
from locport.store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def project(store):
    return store.create_project("Website", owner="alice")


def test_create_project(store, project):
    assert store.get_project(project.id).name == "Website"
    assert project.collaborators == {"alice": ProjectRole.ADMIN}


def test_unknown_project(store):
    with pytest.raises(ProjectNotFound):
        store.get_terms("missing")


def test_add_term_and_translation(store, project):
    term = store.add_term(project.id, "greeting")
    store.set_translation(project.id, term.id, "fr_FR", "Bonjour")

    assert [t.key for t in store.get_terms(project.id)] == ["greeting"]
    assert store.get_translations(project.id, "fr-fr") == {term.id: "Bonjour"}
    assert store.get_translations(project.id, "de") == {}


def test_add_term_rejects_bad_keys(store, project):
    store.add_term(project.id, "greeting")

    with pytest.raises(ValueError):
        store.add_term(project.id, "greeting")
    with pytest.raises(MalformedKey):
        store.add_term(project.id, "  ")


def test_set_translation_rejects_long_values(store, project):
    term = store.add_term(project.id, "a")
    with pytest.raises(InvalidValue):
        store.set_translation(project.id, term.id, "fr", "x" * 8193)


def test_add_locale(store, project):
    locale = store.add_locale(project.id, "pt-BR")

    assert locale == Locale(code="pt-BR", language="pt", region="BR")
    with pytest.raises(ValueError):
        store.add_locale(project.id, "pt_br")


def test_apply_import_batch(store, project):
    ops = [
        CreateTerm(term_id="t1", key="greeting"),
        UpsertTranslation(term_id="t1", value="Bonjour"),
    ]

    counts = store.apply_import_batch(project.id, "fr", ops)

    assert counts == {'terms_created': 1, 'translations_written': 1}
    assert store.get_translations(project.id, "fr") == {"t1": "Bonjour"}
    assert "fr" in store.get_project(project.id).locales


def test_apply_import_batch_is_all_or_nothing(store, project):
    ops = [
        CreateTerm(term_id="t1", key="greeting"),
        UpsertTranslation(term_id="t1", value="Bonjour"),
        UpsertTranslation(term_id="missing", value="?"),
    ]

    with pytest.raises(ValueError):
        store.apply_import_batch(project.id, "fr", ops)

    assert store.get_terms(project.id) == []
    assert store.get_translations(project.id, "fr") == {}
    assert store.get_project(project.id).locales == {}


def test_readers_keep_their_snapshot(store, project):
    before = store.get_project(project.id)

    store.apply_import_batch(project.id, "fr", [CreateTerm(term_id="t1", key="a")])

    assert before.terms == []
    assert len(store.get_project(project.id).terms) == 1


def test_locale_from_code():
    assert Locale.from_code("pt_br").to_dict() == {"code": "pt_br", "language": "pt", "region": "BR"}
    assert Locale.from_code("fr").region == ""

    for bad in ["f", "x" * 17, "12", "fr--FR", "fr FR"]:
        with pytest.raises(ValueError):
            Locale.from_code(bad)


def test_same_locale():
    assert same_locale("pt_BR", "pt-br")
    assert not same_locale("pt", "pt-BR")


def test_lock_for_unknown_project_is_not_created(store):
    with pytest.raises(ProjectNotFound):
        with store.project_lock("missing"):
            pass
    assert "missing" not in store._locks


@pytest.mark.parametrize("code, language, region", [
    ("zh-Hant-TW", "zh", "TW"),
    ("zh-Hant", "zh", ""),
    ("es-419", "es", "419"),
    ("sr_Latn_RS", "sr", "RS"),
])
def test_locale_region_skips_script_subtags(code, language, region):
    locale = Locale.from_code(code)
    assert (locale.language, locale.region) == (language, region)
