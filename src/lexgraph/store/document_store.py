"""Document Store: versioned documents and sections.

Holds the structured layer of an ingested corpus:

    SourceObject  raw capture record (checksum used for dedup)
    Document      -> DocumentVersion (1-based, monotonic per document)
    Section       -> SectionVersion (immutable text per document version)

Writes are append-only. The only in-place mutation is moving a document's
current_version_id; nothing is deleted except by `purge()`.
"""

import logging
import threading
from dataclasses import replace
from pathlib import Path

from .tables import frame_to_records, load_table, records_to_frame, save_table
from .types import (
    AuthorityLevel,
    CorpusSource,
    Document,
    DocumentVersion,
    Jurisdiction,
    Section,
    SectionVersion,
    SourceObject,
    new_id,
    utc_now,
)

logger = logging.getLogger(__name__)


class DocumentStore:
    """In-memory, thread-safe store for the structured document layer."""

    def __init__(self):
        self._source_objects: dict[str, SourceObject] = {}
        self._documents: dict[str, Document] = {}
        self._versions: dict[str, DocumentVersion] = {}
        self._sections: dict[str, Section] = {}
        self._section_versions: dict[str, SectionVersion] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # Source objects
    # =========================================================================

    def create_source_object(
        self,
        key: str,
        source: CorpusSource,
        checksum: str,
        content_type: str,
        file_size_bytes: int,
        blob_id: str,
    ) -> SourceObject:
        """Record a raw capture."""
        obj = SourceObject(
            id=new_id(),
            key=key,
            source=source,
            checksum=checksum,
            content_type=content_type,
            file_size_bytes=file_size_bytes,
            blob_id=blob_id,
        )
        with self._lock:
            self._source_objects[obj.id] = obj
        return obj

    def get_source_object(self, source_object_id: str) -> SourceObject:
        with self._lock:
            return self._get(self._source_objects, source_object_id, "source object")

    def list_source_objects(self) -> list[SourceObject]:
        with self._lock:
            return list(self._source_objects.values())

    # =========================================================================
    # Documents and versions
    # =========================================================================

    def create_document(
        self,
        title: str,
        jurisdiction: Jurisdiction,
        authority_level: AuthorityLevel,
        source: CorpusSource,
        effective_from: str,
        effective_to: str | None = None,
    ) -> Document:
        document = Document(
            id=new_id(),
            title=title,
            jurisdiction=jurisdiction,
            authority_level=authority_level,
            source=source,
            effective_from=effective_from,
            effective_to=effective_to,
        )
        with self._lock:
            self._documents[document.id] = document
        return document

    def create_document_version(
        self,
        document_id: str,
        effective_from: str,
        effective_to: str | None = None,
        source_blob_id: str | None = None,
    ) -> DocumentVersion:
        """Create the next version of a document.

        version_number = max(existing version numbers) + 1, starting at 1.
        """
        with self._lock:
            self._get(self._documents, document_id, "document")
            existing = [
                v.version_number for v in self._versions.values()
                if v.document_id == document_id
            ]
            version = DocumentVersion(
                id=new_id(),
                document_id=document_id,
                version_number=max(existing, default=0) + 1,
                effective_from=effective_from,
                effective_to=effective_to,
                source_blob_id=source_blob_id,
            )
            self._versions[version.id] = version
        return version

    def set_current_version(self, document_id: str, version_id: str) -> Document:
        with self._lock:
            document = self._get(self._documents, document_id, "document")
            version = self._get(self._versions, version_id, "document version")
            if version.document_id != document_id:
                raise ValueError(
                    f"Version {version_id} belongs to document {version.document_id}, "
                    f"not {document_id}"
                )
            document = replace(document, current_version_id=version_id, updated_at=utc_now())
            self._documents[document_id] = document
        return document

    def get_document(self, document_id: str) -> Document:
        with self._lock:
            return self._get(self._documents, document_id, "document")

    def get_document_version(self, version_id: str) -> DocumentVersion:
        with self._lock:
            return self._get(self._versions, version_id, "document version")

    def list_documents(self) -> list[Document]:
        with self._lock:
            return list(self._documents.values())

    def list_document_versions(self, document_id: str | None = None) -> list[DocumentVersion]:
        """Versions ordered by version number (optionally for one document)."""
        with self._lock:
            versions = [
                v for v in self._versions.values()
                if document_id is None or v.document_id == document_id
            ]
        return sorted(versions, key=lambda v: (v.document_id, v.version_number))

    def find_document_by_title(self, title: str) -> Document | None:
        with self._lock:
            for document in self._documents.values():
                if document.title == title:
                    return document
        return None

    # =========================================================================
    # Sections and section versions
    # =========================================================================

    def create_section(self, document_id: str, citation: str, heading: str) -> Section:
        section = Section(id=new_id(), document_id=document_id, citation=citation, heading=heading)
        with self._lock:
            self._get(self._documents, document_id, "document")
            self._sections[section.id] = section
        return section

    def create_section_version(
        self,
        section_id: str,
        document_version_id: str,
        text: str,
        token_count: int,
    ) -> SectionVersion:
        """Create immutable section text for a document version.

        The section and the document version must belong to the same document.
        """
        with self._lock:
            section = self._get(self._sections, section_id, "section")
            version = self._get(self._versions, document_version_id, "document version")
            if section.document_id != version.document_id:
                raise ValueError(
                    f"Section {section_id} (document {section.document_id}) cannot be versioned "
                    f"under document version {document_version_id} (document {version.document_id})"
                )
            section_version = SectionVersion(
                id=new_id(),
                section_id=section_id,
                document_version_id=document_version_id,
                text=text,
                token_count=token_count,
            )
            self._section_versions[section_version.id] = section_version
        return section_version

    def get_section(self, section_id: str) -> Section:
        with self._lock:
            return self._get(self._sections, section_id, "section")

    def list_sections(self, document_id: str | None = None) -> list[Section]:
        with self._lock:
            return [
                s for s in self._sections.values()
                if document_id is None or s.document_id == document_id
            ]

    def find_section(self, document_id: str, citation: str) -> Section | None:
        """First section of a document with the given citation."""
        with self._lock:
            for section in self._sections.values():
                if section.document_id == document_id and section.citation == citation:
                    return section
        return None

    def list_section_versions(self, document_version_id: str | None = None) -> list[SectionVersion]:
        with self._lock:
            return [
                sv for sv in self._section_versions.values()
                if document_version_id is None or sv.document_version_id == document_version_id
            ]

    # =========================================================================
    # Dedup predicates
    # =========================================================================

    def exists_by_checksum(self, checksum: str) -> bool:
        """True if a source object with this checksum was already captured."""
        with self._lock:
            return any(o.checksum == checksum for o in self._source_objects.values())

    def exists_by_title(self, title: str) -> bool:
        """True if a document with exactly this title exists."""
        return self.find_document_by_title(title) is not None

    # =========================================================================
    # Purge
    # =========================================================================

    def purge(self) -> None:
        """Delete everything, dependents first."""
        with self._lock:
            counts = (len(self._section_versions), len(self._sections), len(self._versions),
                      len(self._documents), len(self._source_objects))
            self._section_versions.clear()
            self._sections.clear()
            self._versions.clear()
            self._documents.clear()
            self._source_objects.clear()
        logger.info(
            "Purged %d section versions, %d sections, %d versions, %d documents, %d source objects",
            *counts,
        )

    @staticmethod
    def _get(table: dict, key: str, kind: str):
        if key not in table:
            raise KeyError(f"Unknown {kind}: {key}")
        return table[key]

    # =========================================================================
    # Save / Load
    # =========================================================================

    _TABLES = {
        "source_objects": (SourceObject, {"source": CorpusSource}),
        "documents": (
            Document,
            {"jurisdiction": Jurisdiction, "authority_level": AuthorityLevel, "source": CorpusSource},
        ),
        "document_versions": (DocumentVersion, {}),
        "sections": (Section, {}),
        "section_versions": (SectionVersion, {}),
    }

    def _table(self, name: str) -> dict:
        return {
            "source_objects": self._source_objects,
            "documents": self._documents,
            "document_versions": self._versions,
            "sections": self._sections,
            "section_versions": self._section_versions,
        }[name]

    def save(self, output_dir: Path | str) -> None:
        """Save all tables as parquet files in a directory."""
        output_dir = Path(output_dir)
        with self._lock:
            for name, (cls, _) in self._TABLES.items():
                df = records_to_frame(list(self._table(name).values()), cls)
                save_table(df, output_dir / f"{name}.parquet")

    @classmethod
    def load(cls, input_dir: Path | str) -> "DocumentStore":
        """Load a store saved with `save()`. Missing tables load empty."""
        input_dir = Path(input_dir)
        store = cls()
        for name, (record_cls, enum_fields) in cls._TABLES.items():
            df = load_table(input_dir / f"{name}.parquet")
            if df is None:
                continue
            table = store._table(name)
            for record in frame_to_records(df, record_cls, enum_fields):
                table[record.id] = record
        return store
