#!/usr/bin/env python3
"""
Base classes for format codecs.

Codec is the abstract base class every format implements. A codec turns
file bytes into Records (decode) and Records into file bytes (encode).
Codecs hold only their Settings, so one instance can serve concurrent calls.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Union

from ..config import DEFAULT_SETTINGS, Settings
from ..errors import FormatParseError, LocaleMismatch, RecordError
from ..models import Record, same_locale


class ExportFormat(str, Enum):
    """Formats supported for import and export."""
    CSV = "csv"
    XLIFF12 = "xliff12"
    JSON_FLAT = "jsonflat"
    JSON_NESTED = "jsonnested"
    YAML_FLAT = "yamlflat"
    YAML_NESTED = "yamlnested"
    PROPERTIES = "properties"
    GETTEXT = "po"
    STRINGS = "strings"


UTF16_BOMS = (b'\xff\xfe', b'\xfe\xff')


class Codec(ABC):
    """
    Abstract base class for format codecs.

    Subclasses implement parse() and render() on text; this class handles
    byte decoding, empty input and issue reporting.
    """

    # Whether keys are hierarchical in this format (JSON/YAML trees)
    nested = False

    def __init__(self, settings: Settings = DEFAULT_SETTINGS):
        self.settings = settings

    @property
    @abstractmethod
    def format(self) -> ExportFormat:
        """Format identifier."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """File extension without dot, for download names."""
        pass

    @property
    def media_type(self) -> str:
        return "text/plain; charset=utf-8"

    @abstractmethod
    def parse(self, content: str, locale: str) -> list[Record]:
        """
        Parse format-specific text into records.

        Args:
            content: Decoded file content (never blank)
            locale: Locale the caller is importing into

        Returns:
            Records in file order

        Raises:
            FormatParseError: Content is malformed
            LocaleMismatch: File declares another locale
        """
        pass

    @abstractmethod
    def render(
        self,
        records: list[Record],
        locale: str,
        issues: Optional[list[RecordError]] = None,
    ) -> str:
        """
        Render records as format-specific text.

        Args:
            records: Records in output order
            locale: Locale being exported
            issues: Collects records that cannot be represented; when None
                the first such record raises

        Returns:
            File content
        """
        pass

    def decode(self, data: bytes, locale: str) -> list[Record]:
        """Decode file bytes into records; blank files give no records."""
        content = self.read_text(data)
        if not content.strip():
            return []
        return self.parse(content, locale)

    def encode(
        self,
        records: list[Record],
        locale: str,
        issues: Optional[list[RecordError]] = None,
    ) -> bytes:
        """Encode records as UTF-8 file bytes."""
        return self.render(list(records), locale, issues).encode('utf-8')

    def read_text(self, data: Union[bytes, str]) -> str:
        """Decode bytes honoring UTF-8/UTF-16 byte order marks."""
        if isinstance(data, str):
            return data.lstrip('\ufeff')
        try:
            if data.startswith(UTF16_BOMS):
                return data.decode('utf-16')
            return data.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            line = data[:e.start].count(b'\n') + 1
            raise FormatParseError(f"Invalid text encoding: {e.reason}", line=line)

    def check_locale(self, declared: Optional[str], locale: str) -> None:
        """Fail when the file declares a locale other than the requested one."""
        if declared and declared.strip() and not same_locale(declared, locale):
            raise LocaleMismatch(declared.strip(), locale)

    def report(self, issues: Optional[list[RecordError]], error: RecordError) -> None:
        """Record an unrepresentable record, or raise when nobody collects."""
        if issues is None:
            raise error
        issues.append(error)


class CodecRegistry:
    """Registry of available codecs, keyed by format."""

    _codecs: dict[ExportFormat, type[Codec]] = {}

    @classmethod
    def register(cls, codec_class: type[Codec]) -> None:
        """Register a codec class."""
        codec = codec_class()
        cls._codecs[codec.format] = codec_class

    @classmethod
    def resolve(cls, name: Union[str, ExportFormat]) -> ExportFormat:
        """Turn a format id into an ExportFormat, raising ValueError if unknown."""
        if isinstance(name, ExportFormat):
            return name
        try:
            return ExportFormat(str(name).lower())
        except ValueError:
            available = ', '.join(f.value for f in ExportFormat)
            raise ValueError(f"Unknown format: {name}. Available: {available}")

    @classmethod
    def get(
        cls,
        name: Union[str, ExportFormat],
        settings: Settings = DEFAULT_SETTINGS,
    ) -> Codec:
        """Get a codec instance by format id."""
        fmt = cls.resolve(name)
        if fmt not in cls._codecs:
            available = ', '.join(f.value for f in cls._codecs)
            raise ValueError(f"No codec registered for {fmt.value}. Available: {available}")
        return cls._codecs[fmt](settings)

    @classmethod
    def list_formats(cls) -> list[dict[str, Any]]:
        """List all registered formats."""
        result = []
        for fmt, codec_class in cls._codecs.items():
            codec = codec_class()
            result.append({
                'format': fmt.value,
                'extension': codec.file_extension,
                'media_type': codec.media_type,
                'nested': codec.nested,
            })
        return result
