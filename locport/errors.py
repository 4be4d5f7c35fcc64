#!/usr/bin/env python3
"""
Error taxonomy for the import/export engine.

Fatal errors (FormatParseError, LocaleMismatch) abort a whole import.
Per-record errors (KeyConflict, MalformedKey, InvalidValue) only skip the
record they belong to and are collected into the import summary.

Every error renders to a plain dict so the calling layer can show
file-level or field-level diagnostics.
"""

from typing import Any, Optional


class LocportError(Exception):
    """Base class for all engine errors."""

    error_type = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.error_type,
            "message": self.message,
        }


class FormatParseError(LocportError):
    """Input bytes are not valid for the selected format."""

    error_type = "format_parse_error"

    def __init__(self, reason: str, line: Optional[int] = None):
        self.reason = reason
        self.line = line
        if line is not None:
            message = f"Line {line}: {reason}"
        else:
            message = reason
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["line"] = self.line
        data["reason"] = self.reason
        return data


class LocaleMismatch(LocportError):
    """File header declares a different locale than the one requested."""

    error_type = "locale_mismatch"

    def __init__(self, declared: str, requested: str):
        self.declared = declared
        self.requested = requested
        super().__init__(
            f"File declares locale '{declared}' but import targets '{requested}'"
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["declared"] = self.declared
        data["requested"] = self.requested
        return data


class RecordError(LocportError):
    """Problem with a single record; the record is skipped."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["key"] = self.key
        return data


class KeyConflict(RecordError):
    """Key path overlaps an existing leaf or branch of the key hierarchy."""

    error_type = "key_conflict"

    def __init__(self, key: str, existing: str):
        self.existing = existing
        super().__init__(key, f"Key '{key}' conflicts with existing key '{existing}'")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["existing"] = self.existing
        return data


class MalformedKey(RecordError):
    """Key is empty, whitespace only, too long, or has an empty segment."""

    error_type = "malformed_key"

    def __init__(self, key: str, reason: str):
        self.reason = reason
        super().__init__(key, f"Malformed key {key!r}: {reason}")


class InvalidValue(RecordError):
    """Translation value cannot be stored (e.g. too long)."""

    error_type = "invalid_value"

    def __init__(self, key: str, reason: str):
        self.reason = reason
        super().__init__(key, f"Invalid value for key {key!r}: {reason}")


class PluralCollapsed(RecordError):
    """Plural variants dropped when a plural entry was reduced to one value."""

    error_type = "plural_collapsed"

    def __init__(self, key: str, dropped: list[str]):
        self.dropped = list(dropped)
        super().__init__(
            key,
            f"Kept the 'other' plural form of '{key}', "
            f"skipped {len(self.dropped)} other form(s): {', '.join(self.dropped)}",
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["dropped"] = self.dropped
        return data


class ProjectNotFound(LocportError, LookupError):
    """No project with the given id."""

    error_type = "project_not_found"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Unknown project: {project_id}")


class InvalidRequest(LocportError, ValueError):
    """Request parameters rejected at the API boundary."""

    error_type = "invalid_request"

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors
        return data
