"""Record types for the legal authority knowledge graph.

Field names are snake_case in Python. `to_record()` converts any record to the
camelCase JSON shape exchanged with the persistence and presentation layers.
"""

import re
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

SCHEMA_VERSION = "1"


class Jurisdiction(Enum):
    """Level of government that enacted a document."""
    FEDERAL = "federal"
    STATE = "state"
    MUNICIPAL = "municipal"


class AuthorityLevel(Enum):
    """Kind of enactment, from highest to lowest authority."""
    CONSTITUTION = "constitution"
    STATUTE = "statute"
    REGULATION = "regulation"
    ORDINANCE = "ordinance"


class NodeType(Enum):
    """Kind of graph node."""
    DOCUMENT = "document"
    SECTION = "section"


class EdgeType(Enum):
    """Directed relationship between two graph nodes."""
    AUTHORIZES = "AUTHORIZES"
    DERIVES_AUTHORITY_FROM = "DERIVES_AUTHORITY_FROM"
    CONFLICTS_WITH = "CONFLICTS_WITH"
    AMENDS = "AMENDS"


class Severity(Enum):
    """Severity of a detected conflict."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CorpusSource(Enum):
    """Corpus a raw document was captured from."""
    US_CODE = "us-code"
    ECFR = "ecfr"
    TEXAS_STATUTES = "texas-statutes"
    AUSTIN_ORDINANCES = "austin-ordinances"

    @property
    def default_jurisdiction(self) -> Jurisdiction:
        return _SOURCE_DEFAULTS[self][0]

    @property
    def default_authority_level(self) -> AuthorityLevel:
        return _SOURCE_DEFAULTS[self][1]


_SOURCE_DEFAULTS = {
    CorpusSource.US_CODE: (Jurisdiction.FEDERAL, AuthorityLevel.STATUTE),
    CorpusSource.ECFR: (Jurisdiction.FEDERAL, AuthorityLevel.REGULATION),
    CorpusSource.TEXAS_STATUTES: (Jurisdiction.STATE, AuthorityLevel.STATUTE),
    CorpusSource.AUSTIN_ORDINANCES: (Jurisdiction.MUNICIPAL, AuthorityLevel.ORDINANCE),
}


def new_id() -> str:
    """Generate a fresh record identifier."""
    return str(uuid4())


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SourceObject:
    """Raw capture of one ingested file (Stage A output)."""
    id: str
    key: str                # "{source}/{filename}"
    source: CorpusSource
    checksum: str           # SHA-256 hex of the raw bytes
    content_type: str
    file_size_bytes: int
    blob_id: str
    fetched_at: str = field(default_factory=utc_now)
    created_at: str = field(default_factory=utc_now)


@dataclass
class Document:
    """A legal document. One per distinct title + checksum."""
    id: str
    title: str
    jurisdiction: Jurisdiction
    authority_level: AuthorityLevel
    source: CorpusSource
    effective_from: str
    effective_to: str | None = None
    current_version_id: str | None = None
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class DocumentVersion:
    """Immutable version of a document. version_number is 1-based."""
    id: str
    document_id: str
    version_number: int
    effective_from: str
    effective_to: str | None = None
    source_blob_id: str | None = None
    ingested_at: str = field(default_factory=utc_now)
    created_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class Section:
    """Stable locator within a document (e.g. "42 U.S.C. § 3604(a)")."""
    id: str
    document_id: str
    citation: str
    heading: str
    created_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class SectionVersion:
    """Immutable text of a section as of one document version."""
    id: str
    section_id: str
    document_version_id: str
    text: str
    token_count: int
    created_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class ChunkMetadata:
    """Denormalized metadata carried by every indexed chunk."""
    jurisdiction: Jurisdiction
    authority_level: AuthorityLevel
    effective_from: str
    citation: str
    document_id: str
    heading: str
    chunk_index: int


@dataclass(frozen=True)
class Chunk:
    """Embedded chunk of a section version stored in the vector index."""
    id: str
    section_version_id: str
    chunk_index: int
    text: str
    token_count: int
    embedding: list[float]
    metadata: ChunkMetadata
    created_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class GraphNode:
    """Document or section node. Tracks current state, not history."""
    id: str
    label: str
    node_type: NodeType
    jurisdiction: Jurisdiction
    authority_level: AuthorityLevel
    citation: str | None = None
    effective_from: str | None = None
    document_id: str | None = None
    section_id: str | None = None
    created_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class GraphEdge:
    """Directed edge. At most one edge per (source, target) pair."""
    id: str
    source_node_id: str
    target_node_id: str
    edge_type: EdgeType
    severity: Severity | None = None
    rationale: str | None = None
    created_at: str = field(default_factory=utc_now)


_CAMEL_RE = re.compile(r"_([a-z0-9])")


def camel_case(name: str) -> str:
    """Convert a snake_case field name to camelCase."""
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), name)


def to_record(obj) -> dict:
    """Convert a record dataclass to its camelCase JSON shape."""
    if not is_dataclass(obj):
        raise TypeError(f"Expected a record dataclass, got {type(obj).__name__}")
    return {camel_case(f.name): _to_json_value(getattr(obj, f.name)) for f in fields(obj)}


def _to_json_value(value):
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value):
        return to_record(value)
    if isinstance(value, (list, tuple)):
        return [_to_json_value(v) for v in value]
    return value
