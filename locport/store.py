#!/usr/bin/env python3
"""
Term/translation store.

TermStore is the narrow interface the engine needs from persistence.
InMemoryStore implements it for tests and embedding: each project is an
immutable snapshot that import batches replace in one assignment, so a
reader never sees half of a batch.
"""

import dataclasses
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from .config import DEFAULT_SETTINGS, Settings
from .errors import InvalidValue, ProjectNotFound
from .keypath import validate_term_key
from .models import Locale, Project, ProjectRole, Term, Translation, normalize_locale, utc_now
from .reconcile import CreateTerm, ImportOp, UpsertTranslation


class TermStore(ABC):
    """Persistence operations used by the import/export service."""

    @abstractmethod
    def get_terms(self, project_id: str) -> list[Term]:
        """Terms of a project in insertion order."""
        pass

    @abstractmethod
    def get_translations(self, project_id: str, locale: str) -> dict[str, str]:
        """Map of term_id -> value for one locale."""
        pass

    @abstractmethod
    def apply_import_batch(self, project_id: str, locale: str, ops: list[ImportOp]) -> dict[str, int]:
        """
        Apply import operations atomically.

        Either every operation is stored or none is.

        Returns:
            Counts of created terms and written translations
        """
        pass

    @abstractmethod
    def project_lock(self, project_id: str):
        """Context manager serializing imports into one project."""
        pass


class InMemoryStore(TermStore):
    """Dictionary-backed store."""

    def __init__(self, settings: Settings = DEFAULT_SETTINGS):
        self.settings = settings
        self._projects: dict[str, Project] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # Project management used by callers and tests

    def create_project(self, name: str, description: str = "", owner: Optional[str] = None) -> Project:
        project = Project(name=name, description=description)
        if owner:
            project.collaborators[owner] = ProjectRole.ADMIN
        self._projects[project.id] = project
        return project

    def get_project(self, project_id: str) -> Project:
        try:
            return self._projects[project_id]
        except KeyError:
            raise ProjectNotFound(project_id) from None

    def add_locale(self, project_id: str, code: str) -> Locale:
        with self.project_lock(project_id):
            project = self.get_project(project_id)
            locale = Locale.from_code(code)
            key = normalize_locale(code)
            if key in project.locales:
                raise ValueError(f"Locale already exists in project: {code}")
            locales = dict(project.locales)
            locales[key] = locale
            self._projects[project_id] = dataclasses.replace(project, locales=locales)
            return locale

    def add_term(self, project_id: str, key: str) -> Term:
        validate_term_key(key, self.settings.max_key_length)
        with self.project_lock(project_id):
            project = self.get_project(project_id)
            if any(term.key == key for term in project.terms):
                raise ValueError(f"Term already exists in project: {key}")
            term = Term(key=key, project_id=project_id)
            self._projects[project_id] = dataclasses.replace(project, terms=project.terms + [term])
            return term

    def set_translation(self, project_id: str, term_id: str, locale: str, value: str) -> Translation:
        if len(value) > self.settings.max_value_length:
            raise InvalidValue(term_id, f"value is longer than {self.settings.max_value_length} characters")
        with self.project_lock(project_id):
            project = self.get_project(project_id)
            if not any(term.id == term_id for term in project.terms):
                raise ValueError(f"Unknown term: {term_id}")
            translation = Translation(term_id=term_id, locale=normalize_locale(locale), value=value)
            translations = dict(project.translations)
            translations[(term_id, translation.locale)] = translation
            self._projects[project_id] = dataclasses.replace(project, translations=translations)
            return translation

    # TermStore

    def get_terms(self, project_id: str) -> list[Term]:
        return list(self.get_project(project_id).terms)

    def get_translations(self, project_id: str, locale: str) -> dict[str, str]:
        locale_key = normalize_locale(locale)
        return {
            term_id: translation.value
            for (term_id, code), translation in self.get_project(project_id).translations.items()
            if code == locale_key
        }

    def apply_import_batch(self, project_id: str, locale: str, ops: list[ImportOp]) -> dict[str, int]:
        project = self.get_project(project_id)
        locale_key = normalize_locale(locale)
        now = utc_now()

        terms = list(project.terms)
        term_ids = {term.id for term in terms}
        keys = {term.key for term in terms}
        translations = dict(project.translations)
        locales = dict(project.locales)
        counts = {'terms_created': 0, 'translations_written': 0}

        for op in ops:
            if isinstance(op, CreateTerm):
                if op.key in keys or op.term_id in term_ids:
                    raise ValueError(f"Term already exists in project: {op.key}")
                terms.append(Term(key=op.key, project_id=project_id, id=op.term_id, created=now, modified=now))
                keys.add(op.key)
                term_ids.add(op.term_id)
                counts['terms_created'] += 1
            elif isinstance(op, UpsertTranslation):
                if op.term_id not in term_ids:
                    raise ValueError(f"Unknown term: {op.term_id}")
                translations[(op.term_id, locale_key)] = Translation(
                    term_id=op.term_id, locale=locale_key, value=op.value, modified=now,
                )
                counts['translations_written'] += 1
            else:
                raise TypeError(f"Unknown import operation: {op!r}")

        if ops and locale_key not in locales:
            locales[locale_key] = Locale.from_code(locale)

        self._projects[project_id] = dataclasses.replace(
            project, terms=terms, translations=translations, locales=locales,
        )
        return counts

    @contextmanager
    def project_lock(self, project_id: str) -> Iterator[None]:
        self.get_project(project_id)
        with self._locks_guard:
            lock = self._locks.setdefault(project_id, threading.Lock())
        with lock:
            yield
