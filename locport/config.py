#!/usr/bin/env python3
"""
Engine settings.

Settings are immutable and passed explicitly to the service, registry and
codecs; nothing is read from the environment.
"""

from dataclasses import dataclass


POLICY_CREATE_ONLY = "create-only"
POLICY_UPSERT = "upsert"
POLICIES = (POLICY_CREATE_ONLY, POLICY_UPSERT)


@dataclass(frozen=True)
class Settings:
    """Tunables shared by the codecs and the reconciliation engine."""
    key_delimiter: str = "."
    default_policy: str = POLICY_UPSERT
    xliff_source_language: str = "en"
    po_wrap_width: int = 76
    json_indent: int = 2
    max_key_length: int = 255
    max_value_length: int = 8192

    def __post_init__(self):
        if len(self.key_delimiter) != 1 or self.key_delimiter == "\\":
            raise ValueError(f"Invalid key delimiter: {self.key_delimiter!r}")
        if self.default_policy not in POLICIES:
            raise ValueError(
                f"Unknown policy: {self.default_policy}. Available: {', '.join(POLICIES)}"
            )


DEFAULT_SETTINGS = Settings()
