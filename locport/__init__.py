"""
locport - import/export engine for localization projects

Converts a project's terms and translations to and from nine file formats:
CSV, XLIFF 1.2, flat/nested JSON, flat/nested YAML, Java .properties,
gettext PO and Apple .strings.

Quick start:
    store = InMemoryStore()
    project = store.create_project("Website")
    service = ImportExportService(store)
    service.import_file(project.id, "fr", "jsonnested", b'{"home": {"title": "Accueil"}}')
    service.export_file(project.id, "fr", "po")
"""

__version__ = "1.0.0"

from .codecs import Codec, CodecRegistry, ExportFormat
from .config import POLICY_CREATE_ONLY, POLICY_UPSERT, Settings
from .errors import (
    FormatParseError,
    InvalidRequest,
    InvalidValue,
    KeyConflict,
    LocaleMismatch,
    LocportError,
    MalformedKey,
    ProjectNotFound,
)
from .export import assemble
from .models import Locale, Project, ProjectRole, Record, Term, Translation
from .reconcile import ImportPlan, ImportSummary, reconcile
from .service import ExportResult, ImportExportService, ImportResult
from .store import InMemoryStore, TermStore

__all__ = [
    "Codec",
    "CodecRegistry",
    "ExportFormat",
    "Settings",
    "POLICY_CREATE_ONLY",
    "POLICY_UPSERT",
    "LocportError",
    "FormatParseError",
    "LocaleMismatch",
    "KeyConflict",
    "MalformedKey",
    "InvalidValue",
    "InvalidRequest",
    "ProjectNotFound",
    "assemble",
    "reconcile",
    "ImportPlan",
    "ImportSummary",
    "Locale",
    "Project",
    "ProjectRole",
    "Record",
    "Term",
    "Translation",
    "ImportExportService",
    "ImportResult",
    "ExportResult",
    "InMemoryStore",
    "TermStore",
]
