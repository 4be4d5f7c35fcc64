#!/usr/bin/env python3
"""
Project data model: projects, locales, terms, translations and the
transient Record used between codecs and the engines.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ProjectRole(str, Enum):
    """Collaborator role within a project."""
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


LOCALE_PATTERN = re.compile(r'^([A-Za-z]{2,8})(?:[-_]([A-Za-z0-9]{1,8}))*$')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def normalize_locale(code: str) -> str:
    """Canonical comparison form: lower case, '-' as separator."""
    return code.strip().replace('_', '-').lower()


def same_locale(a: str, b: str) -> bool:
    return normalize_locale(a) == normalize_locale(b)


@dataclass(frozen=True)
class Locale:
    """
    A locale tag such as "fr" or "pt-BR".

    Attributes:
        code: Tag as given by the caller (2-16 chars)
        language: Language subtag ("pt")
        region: Region subtag ("BR"), empty when absent
    """
    code: str
    language: str
    region: str = ""

    @classmethod
    def from_code(cls, code: str) -> "Locale":
        """Parse a locale tag, raising ValueError for invalid tags."""
        if not 2 <= len(code) <= 16:
            raise ValueError(f"Locale code must be 2-16 characters: {code!r}")
        if not LOCALE_PATTERN.match(code):
            raise ValueError(f"Invalid locale code: {code!r}")
        parts = code.replace('_', '-').split('-')
        # Script subtags (4 letters) and variants are not regions
        region = next(
            (p for p in parts[1:] if (len(p) == 2 and p.isalpha()) or (len(p) == 3 and p.isdigit())),
            "",
        )
        return cls(code=code, language=parts[0].lower(), region=region.upper())

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "language": self.language, "region": self.region}


@dataclass
class Term:
    """A translation key owned by a project."""
    key: str
    project_id: str
    id: str = field(default_factory=new_id)
    created: datetime = field(default_factory=utc_now)
    modified: datetime = field(default_factory=utc_now)


@dataclass
class Translation:
    """Value of a term in one locale."""
    term_id: str
    locale: str
    value: str
    modified: datetime = field(default_factory=utc_now)


@dataclass
class Project:
    """
    A localization project.

    Locales are keyed by code, terms are kept in insertion order, and
    translations are keyed by (term_id, normalized locale code).
    """
    name: str
    description: str = ""
    id: str = field(default_factory=new_id)
    locales: dict[str, Locale] = field(default_factory=dict)
    terms: list[Term] = field(default_factory=list)
    translations: dict[tuple[str, str], Translation] = field(default_factory=dict)
    collaborators: dict[str, ProjectRole] = field(default_factory=dict)


@dataclass
class Record:
    """
    A decoded (key, value) pair, alive only during one import or export.

    Attributes:
        key: Term key path as a string
        value: Translation text
        metadata: Format-specific extras (comments, context, plural forms).
            Dropped by formats that cannot represent them.
    """
    key: str
    value: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.key = str(self.key)

    @property
    def comment(self) -> Optional[str]:
        return self.metadata.get('comment')
