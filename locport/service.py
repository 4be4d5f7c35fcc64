#!/usr/bin/env python3
"""
Import/export service.

The entry points the API layer calls:

    service = ImportExportService(store)
    result = service.import_file(project_id, "fr", "po", data, policy="upsert")
    result.to_dict()
    # {"status": "ok", "terms": {"added": 3, "skipped": 0},
    #  "translations": {"upserted": 3}, "issues": []}

    content = service.export_file(project_id, "fr", "jsonnested")

Access control is the caller's responsibility.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .codecs import Codec, CodecRegistry
from .config import DEFAULT_SETTINGS, Settings
from .errors import FormatParseError, InvalidRequest, LocaleMismatch, LocportError, RecordError
from .export import assemble
from .reconcile import ImportSummary, reconcile
from .store import TermStore
from .validation import validate_export_request, validate_import_request

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of one import call."""
    status: str = "ok"
    summary: ImportSummary = field(default_factory=ImportSummary)
    error: Optional[LocportError] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def terms_added(self) -> int:
        return self.summary.terms_added

    @property
    def terms_skipped(self) -> int:
        return self.summary.terms_skipped

    @property
    def translations_upserted(self) -> int:
        return self.summary.translations_upserted

    @property
    def issues(self) -> list[RecordError]:
        return self.summary.issues

    def to_dict(self) -> dict[str, Any]:
        data = {"status": self.status}
        data.update(self.summary.to_dict())
        data["issues"] = [issue.to_dict() for issue in self.summary.issues]
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data


@dataclass
class ExportResult:
    """Exported file plus what the HTTP layer needs to serve it."""
    content: bytes
    media_type: str
    filename: str
    issues: list[RecordError] = field(default_factory=list)


class ImportExportService:
    """Runs imports and exports against a TermStore."""

    def __init__(self, store: TermStore, settings: Settings = DEFAULT_SETTINGS):
        self.store = store
        self.settings = settings

    def _codec(self, format_name: str) -> Codec:
        return CodecRegistry.get(format_name, self.settings)

    def import_file(
        self,
        project_id: str,
        locale: str,
        format_name: str,
        data: bytes,
        policy: Optional[str] = None,
    ) -> ImportResult:
        """
        Import a file into one locale of a project.

        Args:
            project_id: Target project
            locale: Locale code (2-16 chars)
            format_name: Format id (csv, xliff12, jsonflat, ...)
            data: File content
            policy: "create-only" or "upsert" (default from settings)

        Returns:
            ImportResult; decode failures come back with status "error" and
            nothing stored

        Raises:
            InvalidRequest: Bad locale, format or policy
            ProjectNotFound: Unknown project
        """
        errors = validate_import_request(locale, format_name, policy)
        if errors:
            raise InvalidRequest(errors)
        policy = policy or self.settings.default_policy
        codec = self._codec(format_name)

        try:
            records = codec.decode(data, locale)
        except (FormatParseError, LocaleMismatch) as e:
            logger.warning("Import into %s/%s as %s failed: %s", project_id, locale, codec.format.value, e)
            return ImportResult(status="error", error=e)

        with self.store.project_lock(project_id):
            plan = reconcile(
                self.store.get_terms(project_id),
                self.store.get_translations(project_id, locale),
                records,
                policy,
                nested=codec.nested,
                settings=self.settings,
            )
            self.store.apply_import_batch(project_id, locale, plan.ops)

        summary = plan.summary
        logger.info(
            "Imported %d records into %s/%s (%s, %s): %d added, %d skipped, %d upserted",
            len(records), project_id, locale, codec.format.value, policy,
            summary.terms_added, summary.terms_skipped, summary.translations_upserted,
        )
        for issue in summary.issues:
            logger.debug("Import issue: %s", issue.message)
        return ImportResult(status="ok", summary=summary)

    def export_file(self, project_id: str, locale: str, format_name: str) -> bytes:
        """
        Export one locale of a project.

        Raises:
            InvalidRequest: Bad locale or format
            ProjectNotFound: Unknown project
        """
        return self.export(project_id, locale, format_name).content

    def export(self, project_id: str, locale: str, format_name: str) -> ExportResult:
        """Export with download metadata and the list of left-out terms."""
        errors = validate_export_request(locale, format_name)
        if errors:
            raise InvalidRequest(errors)
        codec = self._codec(format_name)

        terms = self.store.get_terms(project_id)
        translations = self.store.get_translations(project_id, locale)
        issues = []
        content = assemble(terms, translations, locale, codec, issues)

        logger.info(
            "Exported %d terms of %s/%s as %s",
            len(terms) - len(issues), project_id, locale, codec.format.value,
        )
        return ExportResult(
            content=content,
            media_type=codec.media_type,
            filename=f"{locale}.{codec.file_extension}",
            issues=issues,
        )
