#!/usr/bin/env python3
"""
Import reconciliation.

Merges decoded records into a project's existing terms and translations
for one locale. reconcile() does not touch the store: it returns an
ImportPlan whose operations the store applies as a single batch.

Policies:
    create-only  existing translations are never overwritten
    upsert       existing translations are overwritten (counted even when
                 the value is unchanged)

New terms always get their translation attached, under both policies.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .config import DEFAULT_SETTINGS, POLICIES, POLICY_CREATE_ONLY, Settings
from .errors import (
    InvalidValue,
    KeyConflict,
    MalformedKey,
    PluralCollapsed,
    RecordError,
)
from .keypath import KeyIndex, parse, validate_term_key
from .models import Record, Term, new_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateTerm:
    """Create a term with a pre-assigned id."""
    term_id: str
    key: str


@dataclass(frozen=True)
class UpsertTranslation:
    """Insert or overwrite the translation of a term in the import locale."""
    term_id: str
    value: str


ImportOp = Union[CreateTerm, UpsertTranslation]


@dataclass
class ImportSummary:
    """Counts reported back to the caller of an import."""
    terms_added: int = 0
    terms_skipped: int = 0
    translations_upserted: int = 0
    issues: list[RecordError] = field(default_factory=list)

    def skip(self, issue: Optional[RecordError] = None, count: int = 1) -> None:
        self.terms_skipped += count
        if issue is not None:
            self.issues.append(issue)

    def to_dict(self) -> dict[str, Any]:
        return {
            "terms": {
                "added": self.terms_added,
                "skipped": self.terms_skipped,
            },
            "translations": {
                "upserted": self.translations_upserted,
            },
        }


@dataclass
class ImportPlan:
    """Operations to apply plus the summary they produce."""
    ops: list[ImportOp] = field(default_factory=list)
    summary: ImportSummary = field(default_factory=ImportSummary)


def reconcile(
    existing_terms: list[Term],
    existing_translations: dict[str, str],
    records: list[Record],
    policy: str,
    nested: bool = False,
    settings: Settings = DEFAULT_SETTINGS,
) -> ImportPlan:
    """
    Plan the merge of decoded records into the existing term set.

    Args:
        existing_terms: Terms of the project, in stable order
        existing_translations: term_id -> value for the import locale
        records: Decoded records, in file order
        policy: "create-only" or "upsert"
        nested: Whether the source format is hierarchical; enables key
            conflict checks against the existing key tree
        settings: Delimiter and length limits

    Returns:
        ImportPlan with ordered operations and the summary counts
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown policy: {policy}. Available: {', '.join(POLICIES)}")

    delimiter = settings.key_delimiter
    plan = ImportPlan()
    summary = plan.summary

    terms_by_key = {term.key: term.id for term in existing_terms}
    translations = dict(existing_translations)

    index = KeyIndex(delimiter)
    if nested:
        for term in existing_terms:
            try:
                index.add(parse(term.key, True, delimiter))
            except MalformedKey:
                # Stored through a flat format; cannot take part in the tree
                continue

    for record in records:
        key = record.key

        malformed = record.metadata.get('malformed_key')
        if malformed:
            summary.skip(MalformedKey(key, malformed))
            continue
        try:
            validate_term_key(key, settings.max_key_length)
            path = parse(key, True, delimiter) if nested else (key,)
        except MalformedKey as e:
            logger.debug("Skipping malformed key %r: %s", key, e.reason)
            summary.skip(e)
            continue

        if len(record.value) > settings.max_value_length:
            summary.skip(InvalidValue(
                key, f"value is longer than {settings.max_value_length} characters"
            ))
            continue

        dropped = record.metadata.get('dropped_plurals')
        if dropped:
            summary.skip(PluralCollapsed(key, dropped), count=len(dropped))

        term_id = terms_by_key.get(key)
        if term_id is None:
            if nested:
                blocking = index.find_conflict(path)
                if blocking is not None:
                    logger.warning("Skipping %r: conflicts with %r", key, blocking)
                    summary.skip(KeyConflict(key, blocking))
                    continue
                index.add(path)

            term_id = new_id()
            terms_by_key[key] = term_id
            plan.ops.append(CreateTerm(term_id=term_id, key=key))
            summary.terms_added += 1

        elif policy == POLICY_CREATE_ONLY and term_id in translations:
            logger.debug("Skipping %r: translation exists and policy is %s", key, policy)
            summary.skip()
            continue

        plan.ops.append(UpsertTranslation(term_id=term_id, value=record.value))
        translations[term_id] = record.value
        summary.translations_upserted += 1

    return plan
