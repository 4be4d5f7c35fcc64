#!/usr/bin/env python3
"""
Request validation for the import/export boundary.

Each function returns a list of error messages (empty if valid), so the
API layer can report every problem at once.
"""

from typing import Optional

from .config import POLICIES
from .models import Locale
from .codecs import ExportFormat


def validate_locale_code(code: Optional[str]) -> list[str]:
    """Locale must be a 2-16 character language[-region] tag."""
    if not code:
        return ["locale is required"]
    if not 2 <= len(code) <= 16:
        return [f"locale must be 2-16 characters, got {len(code)}"]
    try:
        Locale.from_code(code)
    except ValueError as e:
        return [str(e)]
    return []


def validate_format(name: Optional[str]) -> list[str]:
    if not name:
        return ["format is required"]
    try:
        ExportFormat(str(name).lower())
    except ValueError:
        available = ', '.join(f.value for f in ExportFormat)
        return [f"format must be one of: {available}"]
    return []


def validate_policy(policy: Optional[str]) -> list[str]:
    if policy is not None and policy not in POLICIES:
        return [f"policy must be one of: {', '.join(POLICIES)}"]
    return []


def validate_export_request(locale: Optional[str], format_name: Optional[str]) -> list[str]:
    return validate_locale_code(locale) + validate_format(format_name)


def validate_import_request(
    locale: Optional[str],
    format_name: Optional[str],
    policy: Optional[str] = None,
) -> list[str]:
    return validate_export_request(locale, format_name) + validate_policy(policy)
