#!/usr/bin/env python3
"""
Export assembly: turns a project's terms and one locale's translations
into a file in the requested format.
"""

import logging
from typing import Optional

from .codecs import Codec
from .errors import RecordError
from .models import Record, Term

logger = logging.getLogger(__name__)


def build_records(terms: list[Term], translations: dict[str, str]) -> list[Record]:
    """One record per term, in term order; untranslated terms get ''."""
    return [Record(key=term.key, value=translations.get(term.id, '')) for term in terms]


def assemble(
    terms: list[Term],
    translations: dict[str, str],
    locale: str,
    codec: Codec,
    issues: Optional[list[RecordError]] = None,
) -> bytes:
    """
    Encode the term set for one locale.

    Terms that the format cannot represent (key conflicts in nested
    formats, malformed keys) are left out and appended to `issues`.

    Args:
        terms: Project terms in stable order
        translations: term_id -> value for `locale`
        locale: Locale being exported
        codec: Codec of the target format
        issues: Optional list collecting skipped terms

    Returns:
        File content
    """
    skipped = [] if issues is None else issues
    start = len(skipped)

    content = codec.encode(build_records(terms, translations), locale, skipped)

    for issue in skipped[start:]:
        logger.warning("Export to %s left out %r: %s", codec.format.value, issue.key, issue.message)
    return content
