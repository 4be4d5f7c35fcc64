#!/usr/bin/env python3
"""
End-to-end tests for the import/export service against the in-memory
store.
"""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from locport.codecs import CodecRegistry, ExportFormat
from locport.config import POLICY_CREATE_ONLY, POLICY_UPSERT, Settings
from locport.errors import (
    FormatParseError,
    InvalidRequest,
    KeyConflict,
    LocaleMismatch,
    ProjectNotFound,
)
from locport.service import ImportExportService
from locport.store import InMemoryStore

FRENCH_XLIFF = b'''<?xml version="1.0" encoding="UTF-8"?>
<xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" version="1.2">
  <file original="app" source-language="en" target-language="fr" datatype="plaintext">
    <body>
      <trans-unit id="greeting"><source>Hello</source><target>Bonjour</target></trans-unit>
    </body>
  </file>
</xliff>
'''


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service(store):
    return ImportExportService(store)


@pytest.fixture
def project_id(store):
    return store.create_project("Website").id


def test_import_then_export(service, project_id):
    result = service.import_file(
        project_id, "fr", "jsonnested",
        b'{"home": {"title": "Accueil", "body": "Bienvenue"}}',
    )

    assert result.ok
    assert (result.terms_added, result.terms_skipped, result.translations_upserted) == (2, 0, 2)

    content = service.export_file(project_id, "fr", "jsonflat")
    assert json.loads(content) == {"home.title": "Accueil", "home.body": "Bienvenue"}


def test_nested_key_conflict_is_reported(service, project_id):
    service.import_file(project_id, "fr", "jsonnested", b'{"a": "1"}')

    result = service.import_file(project_id, "fr", "jsonnested", b'{"a": {"b": "2"}}')

    assert result.ok
    assert result.terms_added == 0
    assert result.terms_skipped == 1
    assert isinstance(result.issues[0], KeyConflict)
    assert [t.key for t in service.store.get_terms(project_id)] == ["a"]


def test_locale_mismatch_commits_nothing(service, store, project_id):
    result = service.import_file(project_id, "de", "xliff12", FRENCH_XLIFF)

    assert result.status == "error"
    assert isinstance(result.error, LocaleMismatch)
    assert store.get_terms(project_id) == []
    assert result.to_dict()["error"]["type"] == "locale_mismatch"


def test_parse_error_commits_nothing(service, store, project_id):
    result = service.import_file(project_id, "fr", "jsonflat", b'{"a": "1",\n "b": }')

    assert result.status == "error"
    assert isinstance(result.error, FormatParseError)
    assert result.error.line == 2
    assert store.get_terms(project_id) == []


def test_import_is_idempotent(service, store, project_id):
    data = b'greeting=Bonjour\nfarewell=Au revoir\n'

    first = service.import_file(project_id, "fr", "properties", data, policy=POLICY_UPSERT)
    terms_after_first = [t.key for t in store.get_terms(project_id)]
    second = service.import_file(project_id, "fr", "properties", data, policy=POLICY_UPSERT)

    assert first.terms_added == 2
    assert second.terms_added == 0
    assert second.translations_upserted == 2
    assert [t.key for t in store.get_terms(project_id)] == terms_after_first
    assert service.export_file(project_id, "fr", "properties") == data


def test_create_only_keeps_existing_translations(service, store, project_id):
    service.import_file(project_id, "fr", "csv", b"greeting,Bonjour\n")

    result = service.import_file(
        project_id, "fr", "csv", b"greeting,Salut\nfarewell,Au revoir\n",
        policy=POLICY_CREATE_ONLY,
    )

    assert (result.terms_added, result.terms_skipped, result.translations_upserted) == (1, 1, 1)
    assert json.loads(service.export_file(project_id, "fr", "jsonflat")) == {
        "greeting": "Bonjour",
        "farewell": "Au revoir",
    }


def test_default_policy_comes_from_settings(store, project_id):
    service = ImportExportService(store, Settings(default_policy=POLICY_CREATE_ONLY))
    service.import_file(project_id, "fr", "csv", b"a,1\n")

    result = service.import_file(project_id, "fr", "csv", b"a,2\n")

    assert result.translations_upserted == 0
    assert result.terms_skipped == 1


def test_translations_are_per_locale(service, project_id):
    service.import_file(project_id, "fr", "jsonflat", b'{"a": "un"}')
    service.import_file(project_id, "de", "jsonflat", b'{"a": "eins"}')

    assert json.loads(service.export_file(project_id, "fr", "jsonflat")) == {"a": "un"}
    assert json.loads(service.export_file(project_id, "de", "jsonflat")) == {"a": "eins"}
    assert json.loads(service.export_file(project_id, "es", "jsonflat")) == {"a": ""}


@pytest.mark.parametrize("fmt", [f.value for f in ExportFormat])
def test_empty_project_exports_parseable_file(service, project_id, fmt):
    content = service.export_file(project_id, "fr", fmt)
    assert CodecRegistry.get(fmt).decode(content, "fr") == []


@pytest.mark.parametrize("fmt", [f.value for f in ExportFormat])
def test_export_round_trips_through_every_format(service, store, project_id, fmt):
    service.import_file(
        project_id, "fr", "yamlnested",
        "home:\n  title: Accueil\n  body: \"Ligne 1\\nLigne 2\"\nunicode: Ünïcödé\n".encode('utf-8'),
    )
    content = service.export_file(project_id, "fr", fmt)

    other = store.create_project("Copy").id
    result = service.import_file(other, "fr", fmt, content)

    assert result.ok
    assert result.terms_added == 3
    assert service.export_file(other, "fr", fmt) == content


def test_export_is_deterministic(service, project_id):
    service.import_file(project_id, "fr", "csv", b"b,2\na,1\n")
    assert service.export_file(project_id, "fr", "po") == service.export_file(project_id, "fr", "po")


def test_export_result_metadata(service, project_id):
    result = service.export(project_id, "pt-BR", "jsonnested")

    assert result.filename == "pt-BR.json"
    assert result.media_type == "application/json; charset=utf-8"
    assert result.issues == []


def test_nested_export_leaves_out_conflicting_terms(service, project_id):
    service.import_file(project_id, "fr", "jsonflat", b'{"a": "1", "a.b": "2"}')

    result = service.export(project_id, "fr", "jsonnested")

    assert json.loads(result.content) == {"a": "1"}
    assert [i.key for i in result.issues] == ["a.b"]


def test_import_result_to_dict(service, project_id):
    result = service.import_file(project_id, "fr", "csv", b"a,1\n  ,2\n")

    data = result.to_dict()

    assert data["status"] == "ok"
    assert data["terms"] == {"added": 1, "skipped": 1}
    assert data["translations"] == {"upserted": 1}
    assert data["issues"][0]["type"] == "malformed_key"
    assert "error" not in data


@pytest.mark.parametrize("locale, fmt, policy", [
    ("x", "csv", None),
    ("a" * 17, "csv", None),
    ("fr", "docx", None),
    ("fr", "csv", "merge"),
    ("", "", None),
])
def test_invalid_requests(service, project_id, locale, fmt, policy):
    with pytest.raises(InvalidRequest):
        service.import_file(project_id, locale, fmt, b"", policy=policy)


def test_invalid_export_request(service, project_id):
    with pytest.raises(InvalidRequest) as exc_info:
        service.export_file(project_id, "x", "docx")
    assert len(exc_info.value.errors) == 2


def test_unknown_project(service):
    with pytest.raises(ProjectNotFound):
        service.import_file("missing", "fr", "csv", b"a,1\n")
    with pytest.raises(ProjectNotFound):
        service.export_file("missing", "fr", "csv")


def test_concurrent_imports_do_not_duplicate_terms(service, store, project_id):
    payloads = [f'{{"shared": "s{i}", "key{i}": "v{i}"}}'.encode('utf-8') for i in range(16)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(
            lambda data: service.import_file(project_id, "fr", "jsonflat", data),
            payloads,
        ))

    keys = [t.key for t in store.get_terms(project_id)]
    assert len(keys) == len(set(keys)) == 17
    assert sum(r.terms_added for r in results) == 17
