"""Parse raw uploads into structured documents.

Two input shapes are accepted:

1. A JSON object carrying metadata:

    {
      "title": "Texas Property Code - Landlord and Tenant",
      "jurisdiction": "state",
      "authorityLevel": "statute",
      "citation": "Tex. Prop. Code ch. 92",        (default: filename stem)
      "effectiveFrom": "1984-01-01",                (default: today)
      "effectiveTo": null,
      "text": "...",                                (or "rawText" / "content")
      "sections": [{"heading": ..., "citation": ..., "text": ...}],
      "amends": ["Title of an amended document"]
    }

2. Anything else is plain text: the first non-blank line is the title and
   jurisdiction/authority come from the corpus source defaults.
"""

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from ..errors import ParseError
from ..store.types import AuthorityLevel, CorpusSource, Jurisdiction

MAX_TITLE_CHARS = 200
REQUIRED_KEYS = ("title", "jurisdiction", "authorityLevel")
TEXT_KEYS = ("text", "rawText", "content")


@dataclass(frozen=True)
class ParsedSection:
    """A pre-split section of an input document."""
    citation: str
    heading: str
    text: str


@dataclass
class ParsedDocument:
    """Metadata and text extracted from one input file."""
    title: str
    citation: str
    jurisdiction: Jurisdiction
    authority_level: AuthorityLevel
    effective_from: str
    raw_text: str
    effective_to: str | None = None
    sections: list[ParsedSection] = field(default_factory=list)
    amends: list[str] = field(default_factory=list)

    def effective_sections(self) -> list[ParsedSection]:
        """Given sections, or the whole document as a single section."""
        if self.sections:
            return list(self.sections)
        return [ParsedSection(citation=self.citation, heading=self.title, text=self.raw_text)]


def decode_content(content: str | bytes) -> str:
    """Decode raw bytes as UTF-8 text."""
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Content is not valid UTF-8: {e}") from e


def filename_stem(filename: str) -> str:
    """Filename without directory and final extension."""
    return Path(filename).stem or filename


def parse_document_content(
    content: str | bytes,
    source: CorpusSource,
    filename: str,
) -> ParsedDocument:
    """Parse an uploaded file into a ParsedDocument.

    Args:
        content: Raw file content
        source: Corpus the file came from (plain-text defaults)
        filename: Original filename (citation default)

    Returns:
        ParsedDocument

    Raises:
        ParseError: Empty content, or a JSON object with missing or invalid metadata
    """
    text = decode_content(content)
    if not text.strip():
        raise ParseError(f"Empty document: {filename}")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None

    if isinstance(data, dict):
        return _parse_json_document(data, text, filename)
    return _parse_plain_text(text, source, filename)


def _parse_json_document(data: dict, content: str, filename: str) -> ParsedDocument:
    missing = [key for key in REQUIRED_KEYS if not data.get(key)]
    if missing:
        raise ParseError(f"{filename}: missing required metadata: {', '.join(missing)}")

    title = _require_str(data, "title", filename).strip()
    jurisdiction = _parse_enum(Jurisdiction, data["jurisdiction"], "jurisdiction", filename)
    authority_level = _parse_enum(AuthorityLevel, data["authorityLevel"], "authorityLevel", filename)

    raw_text = next((data[key] for key in TEXT_KEYS if data.get(key)), content)
    if not isinstance(raw_text, str):
        raise ParseError(f"{filename}: document text must be a string")

    sections = [
        _parse_section(item, i, filename)
        for i, item in enumerate(data.get("sections") or [])
    ]

    amends = data.get("amends") or []
    if not isinstance(amends, list) or not all(isinstance(t, str) for t in amends):
        raise ParseError(f"{filename}: 'amends' must be a list of titles")

    return ParsedDocument(
        title=title,
        citation=_optional_str(data, "citation", filename) or filename_stem(filename),
        jurisdiction=jurisdiction,
        authority_level=authority_level,
        effective_from=_optional_str(data, "effectiveFrom", filename) or date.today().isoformat(),
        effective_to=_optional_str(data, "effectiveTo", filename),
        raw_text=raw_text,
        sections=sections,
        amends=list(amends),
    )


def _parse_section(item, index: int, filename: str) -> ParsedSection:
    if not isinstance(item, dict):
        raise ParseError(f"{filename}: section {index} is not an object")
    citation = _require_str(item, "citation", filename, f"section {index} ")
    heading = _require_str(item, "heading", filename, f"section {index} ")
    text = _require_str(item, "text", filename, f"section {index} ")
    return ParsedSection(citation=citation, heading=heading, text=text)


def _parse_plain_text(content: str, source: CorpusSource, filename: str) -> ParsedDocument:
    first_line = next(line.strip() for line in content.splitlines() if line.strip())
    return ParsedDocument(
        title=first_line[:MAX_TITLE_CHARS],
        citation=filename_stem(filename),
        jurisdiction=source.default_jurisdiction,
        authority_level=source.default_authority_level,
        effective_from=date.today().isoformat(),
        raw_text=content,
    )


def _require_str(data: dict, key: str, filename: str, where: str = "") -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ParseError(f"{filename}: {where}'{key}' must be a non-empty string")
    return value


def _optional_str(data: dict, key: str, filename: str) -> str | None:
    """A string field that may be absent, null or blank (all -> None)."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f"{filename}: '{key}' must be a string, got {type(value).__name__}")
    return value.strip() or None


def _parse_enum(enum_cls, value, key: str, filename: str):
    if not isinstance(value, str):
        raise ParseError(f"{filename}: '{key}' must be a string")
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ParseError(f"{filename}: unknown {key} {value!r} (expected one of: {allowed})") from None
