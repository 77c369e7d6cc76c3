"""Pipeline Orchestrator: four ingestion stages per source file.

    A  s3        raw capture: blob + checksummed SourceObject
    B  postgres  parse + versioned Document / Section records
    C  vector    chunk + embed + index
    D  graph     nodes, AUTHORIZES / DERIVES_AUTHORITY_FROM / CONFLICTS_WITH / AMENDS

Every stage is a plain function taking an explicit IngestionContext.
`IngestionPipeline` composes them, tracks per-stage status, and turns stage
failures into per-unit results so a bulk run carries on with the next file.
A source whose checksum or title is already known is skipped before Stage A.
"""

import logging
import mimetypes
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tqdm import tqdm

from ..config import PipelineConfig
from ..errors import DuplicateInputError, ParseError, StageExecutionError
from ..graph.graph_builder import GraphBuilder, GraphBuildResult
from ..graph.graph_store import GraphStore
from ..graph.rules import DEFAULT_CONFLICT_RULES, ConflictRule, authority_sort_key
from ..retrieval.vector_index import VectorIndex
from ..store.blob_store import BlobStore, InMemoryBlobStore
from ..store.document_store import DocumentStore
from ..store.types import (
    SCHEMA_VERSION,
    Chunk,
    ChunkMetadata,
    CorpusSource,
    Document,
    DocumentVersion,
    GraphEdge,
    GraphNode,
    Section,
    SectionVersion,
    SourceObject,
    to_record,
    utc_now,
)
from .chunker import chunk_text, estimate_token_count
from .embedder import checksum, embed
from .parser import ParsedDocument, parse_document_content
from .sample_data import DEMO_DOCUMENTS, demo_document_json

logger = logging.getLogger(__name__)

ProgressFn = Callable[[int], None]


def _no_progress(_progress: int) -> None:
    pass


# =============================================================================
# Context
# =============================================================================


@dataclass
class IngestionContext:
    """Collaborators every stage writes to."""
    blobs: BlobStore
    documents: DocumentStore
    vectors: VectorIndex
    graph: GraphStore

    @classmethod
    def in_memory(cls) -> "IngestionContext":
        return cls(
            blobs=InMemoryBlobStore(),
            documents=DocumentStore(),
            vectors=VectorIndex(),
            graph=GraphStore(),
        )

    def save(self, output_dir: Path | str) -> None:
        """Save the document, vector and graph stores under one directory."""
        output_dir = Path(output_dir)
        self.documents.save(output_dir / "documents")
        self.vectors.save(output_dir / "vectors")
        self.graph.save(output_dir / "graph")
        logger.info("Saved ingestion context to %s", output_dir)

    @classmethod
    def load(cls, input_dir: Path | str, blobs: BlobStore | None = None) -> "IngestionContext":
        input_dir = Path(input_dir)
        return cls(
            blobs=blobs if blobs is not None else InMemoryBlobStore(),
            documents=DocumentStore.load(input_dir / "documents"),
            vectors=VectorIndex.load(input_dir / "vectors"),
            graph=GraphStore.load(input_dir / "graph"),
        )

    def purge(self) -> None:
        """Delete all records: graph, then chunks, then documents."""
        self.graph.purge()
        self.vectors.purge()
        self.documents.purge()


# =============================================================================
# Stage functions
# =============================================================================


@dataclass
class StoredDocument:
    """Stage B output."""
    source_object: SourceObject
    document: Document
    version: DocumentVersion
    sections: list[Section]
    section_versions: list[SectionVersion]


def capture_source(
    ctx: IngestionContext,
    content: bytes,
    source: CorpusSource,
    filename: str,
    content_type: str,
    on_progress: ProgressFn = _no_progress,
) -> SourceObject:
    """Stage A: store raw bytes and record the capture."""
    on_progress(10)
    ref = ctx.blobs.put(content)
    on_progress(70)
    source_object = ctx.documents.create_source_object(
        key=f"{source.value}/{filename}",
        source=source,
        checksum=checksum(content),
        content_type=content_type,
        file_size_bytes=ref.size,
        blob_id=ref.id,
    )
    on_progress(100)
    logger.debug("Captured %s (%d bytes)", source_object.key, ref.size)
    return source_object


def store_document(
    ctx: IngestionContext,
    source_object: SourceObject,
    parsed: ParsedDocument,
    on_progress: ProgressFn = _no_progress,
    document_id: str | None = None,
) -> StoredDocument:
    """Stage B: create the document (or a new version of `document_id`) and its sections.

    For a new version, sections are reused by citation and only unseen
    citations get new Section records. Every section gets a new SectionVersion.
    """
    on_progress(10)
    store = ctx.documents
    if document_id is None:
        document = store.create_document(
            title=parsed.title,
            jurisdiction=parsed.jurisdiction,
            authority_level=parsed.authority_level,
            source=source_object.source,
            effective_from=parsed.effective_from,
            effective_to=parsed.effective_to,
        )
    else:
        document = store.get_document(document_id)
    on_progress(30)

    version = store.create_document_version(
        document.id,
        effective_from=parsed.effective_from,
        effective_to=parsed.effective_to,
        source_blob_id=source_object.blob_id,
    )
    document = store.set_current_version(document.id, version.id)
    on_progress(50)

    sections: list[Section] = []
    section_versions: list[SectionVersion] = []
    for parsed_section in parsed.effective_sections():
        section = store.find_section(document.id, parsed_section.citation) if document_id else None
        if section is None:
            section = store.create_section(document.id, parsed_section.citation, parsed_section.heading)
        sections.append(section)
        section_versions.append(store.create_section_version(
            section.id,
            version.id,
            text=parsed_section.text,
            token_count=estimate_token_count(parsed_section.text),
        ))
    on_progress(100)

    return StoredDocument(
        source_object=source_object,
        document=document,
        version=version,
        sections=sections,
        section_versions=section_versions,
    )


def index_chunks(
    ctx: IngestionContext,
    stored: StoredDocument,
    config: PipelineConfig,
    on_progress: ProgressFn = _no_progress,
) -> list[Chunk]:
    """Stage C: chunk every section version, embed, and insert into the index.

    Embedding runs on `config.embed_workers` threads; insertion order
    (section order, then chunk_index) does not depend on it.
    """
    document = stored.document
    sections = {s.id: s for s in stored.sections}

    pending = []
    for section_version in stored.section_versions:
        section = sections[section_version.section_id]
        for text_chunk in chunk_text(section_version.text, config.chunk):
            pending.append((section_version, section, text_chunk))
    logger.debug("Chunked %d section versions into %d chunks", len(stored.section_versions), len(pending))
    on_progress(5)

    texts = [text_chunk.text for _, _, text_chunk in pending]
    dimensions = config.embedding_dimensions
    if config.embed_workers > 1 and len(texts) > 1:
        with ThreadPoolExecutor(max_workers=config.embed_workers) as executor:
            embeddings = list(executor.map(lambda t: embed(t, dimensions), texts))
    else:
        embeddings = [embed(t, dimensions) for t in texts]

    chunks: list[Chunk] = []
    for i, ((section_version, section, text_chunk), embedding) in enumerate(zip(pending, embeddings)):
        metadata = ChunkMetadata(
            jurisdiction=document.jurisdiction,
            authority_level=document.authority_level,
            effective_from=document.effective_from,
            citation=section.citation,
            document_id=document.id,
            heading=section.heading,
            chunk_index=text_chunk.chunk_index,
        )
        chunks.append(ctx.vectors.insert_chunk(
            section_version_id=section_version.id,
            chunk_index=text_chunk.chunk_index,
            text=text_chunk.text,
            token_count=text_chunk.token_count,
            embedding=embedding,
            metadata=metadata,
        ))
        on_progress(5 + round((i + 1) / len(pending) * 95))

    on_progress(100)
    return chunks


def build_graph(
    ctx: IngestionContext,
    stored: StoredDocument,
    parsed: ParsedDocument,
    config: PipelineConfig,
    on_progress: ProgressFn = _no_progress,
    conflict_rules: Sequence[ConflictRule] = DEFAULT_CONFLICT_RULES,
) -> GraphBuildResult:
    """Stage D: graph nodes and edges for the stored document."""
    builder = GraphBuilder(ctx.graph, conflict_rules, config.conflict_match_policy)
    return builder.build(stored.document, stored.sections, amends=parsed.amends, on_progress=on_progress)


# =============================================================================
# Results and bookkeeping
# =============================================================================


class StageStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"


class IngestionStatus(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


STAGE_LABELS = {
    "s3": "Raw Capture",
    "postgres": "Parse + Store Metadata",
    "vector": "Chunk + Embed",
    "graph": "Build Graph",
}


@dataclass
class PipelineStage:
    """Status of one stage within one ingestion run."""
    id: str
    label: str
    status: StageStatus = StageStatus.PENDING
    progress: int = 0
    output_count: int = 0
    started_at: str | None = None
    completed_at: str | None = None
    error: str | None = None


def new_stages() -> list[PipelineStage]:
    return [PipelineStage(id=stage_id, label=label) for stage_id, label in STAGE_LABELS.items()]


@dataclass
class PipelineCallbacks:
    """Optional hooks for presentation layers. Stage ids are the keys of STAGE_LABELS."""
    on_stage_start: Callable[[str], None] | None = None
    on_stage_progress: Callable[[str, int], None] | None = None
    on_stage_complete: Callable[[str, int], None] | None = None
    on_stage_error: Callable[[str, str], None] | None = None


@dataclass
class IngestionOutputs:
    """Records created by one ingestion run."""
    source_objects: list[SourceObject] = field(default_factory=list)
    documents: list[Document] = field(default_factory=list)
    document_versions: list[DocumentVersion] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    section_versions: list[SectionVersion] = field(default_factory=list)
    chunks: list[Chunk] = field(default_factory=list)
    graph_nodes: list[GraphNode] = field(default_factory=list)
    graph_edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict:
        """camelCase JSON shape, tagged with the schema version."""
        return {
            "schemaVersion": SCHEMA_VERSION,
            "sourceObjects": [to_record(r) for r in self.source_objects],
            "documents": [to_record(r) for r in self.documents],
            "documentVersions": [to_record(r) for r in self.document_versions],
            "sections": [to_record(r) for r in self.sections],
            "sectionVersions": [to_record(r) for r in self.section_versions],
            "chunks": [to_record(r) for r in self.chunks],
            "graphNodes": [to_record(r) for r in self.graph_nodes],
            "graphEdges": [to_record(r) for r in self.graph_edges],
        }


@dataclass
class IngestionResult:
    """Outcome of one ingestion unit."""
    filename: str
    status: IngestionStatus
    message: str
    stage: str | None = None
    outputs: IngestionOutputs = field(default_factory=IngestionOutputs)
    stages: list[PipelineStage] = field(default_factory=new_stages)


@dataclass
class SourceItem:
    """One file for bulk ingestion."""
    content: str | bytes
    source: CorpusSource
    filename: str
    content_type: str | None = None


@dataclass
class BulkIngestionSummary:
    total: int = 0
    ingested: int = 0
    skipped: int = 0
    errors: int = 0
    results: list[IngestionResult] = field(default_factory=list)

    def add(self, result: IngestionResult) -> None:
        self.total += 1
        self.results.append(result)
        if result.status == IngestionStatus.SUCCESS:
            self.ingested += 1
        elif result.status == IngestionStatus.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1


# =============================================================================
# Orchestrator
# =============================================================================


class IngestionPipeline:
    """Run stages A to D for source files against one IngestionContext."""

    def __init__(
        self,
        context: IngestionContext,
        config: PipelineConfig | None = None,
        callbacks: PipelineCallbacks | None = None,
        conflict_rules: Sequence[ConflictRule] = DEFAULT_CONFLICT_RULES,
    ):
        """Initialize pipeline.

        Args:
            context: Stores written by the stages
            config: Pipeline tunables (defaults to PipelineConfig())
            callbacks: Stage start/progress/complete/error hooks
            conflict_rules: Conflict rules used in Stage D
        """
        self.context = context
        self.config = config or PipelineConfig()
        self.callbacks = callbacks or PipelineCallbacks()
        self.conflict_rules = tuple(conflict_rules)

    def _iter_with_progress(self, iterable, total: int, desc: str):
        """Wrap iterable with tqdm if progress is enabled."""
        if self.config.show_progress:
            return tqdm(iterable, total=total, desc=desc)
        return iterable

    # -------------------------------------------------------------------------
    # Single unit
    # -------------------------------------------------------------------------

    def ingest(
        self,
        content: str | bytes,
        source: CorpusSource,
        filename: str,
        content_type: str | None = None,
    ) -> IngestionResult:
        """Ingest one source file as a new document."""
        return self._run(content, source, filename, content_type, document_id=None)

    def ingest_revision(
        self,
        document_id: str,
        content: str | bytes,
        source: CorpusSource,
        filename: str,
        content_type: str | None = None,
    ) -> IngestionResult:
        """Ingest a new version of an existing document.

        Only the checksum is checked for duplicates; the title is expected to
        match the existing document.

        Raises:
            KeyError: No document with document_id exists (no stage is run)
        """
        self.context.documents.get_document(document_id)
        return self._run(content, source, filename, content_type, document_id=document_id)

    def _run(
        self,
        content: str | bytes,
        source: CorpusSource,
        filename: str,
        content_type: str | None,
        document_id: str | None,
    ) -> IngestionResult:
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        content_type = content_type or mimetypes.guess_type(filename)[0] or "text/plain"
        stages = {stage.id: stage for stage in new_stages()}
        outputs = IngestionOutputs()

        def result(status: IngestionStatus, message: str, stage: str | None = None) -> IngestionResult:
            return IngestionResult(
                filename=filename,
                status=status,
                message=message,
                stage=stage,
                outputs=outputs,
                stages=list(stages.values()),
            )

        try:
            self._check_duplicate(data, source, filename, check_title=document_id is None)
        except DuplicateInputError as e:
            logger.info("Skipping %s: %s", filename, e)
            return result(IngestionStatus.SKIPPED, str(e))

        try:
            source_object = self._run_stage(
                stages["s3"],
                lambda report: capture_source(self.context, data, source, filename, content_type, report),
                lambda obj: 1,
            )
            outputs.source_objects.append(source_object)

            parsed, stored = self._run_stage(
                stages["postgres"],
                lambda report: self._parse_and_store(source_object, source, filename, report, document_id),
                lambda out: 1 + len(out[1].sections) + len(out[1].section_versions),
            )
            outputs.documents.append(stored.document)
            outputs.document_versions.append(stored.version)
            outputs.sections.extend(stored.sections)
            outputs.section_versions.extend(stored.section_versions)

            chunks = self._run_stage(
                stages["vector"],
                lambda report: index_chunks(self.context, stored, self.config, report),
                len,
            )
            outputs.chunks.extend(chunks)

            graph = self._run_stage(
                stages["graph"],
                lambda report: build_graph(
                    self.context, stored, parsed, self.config, report, self.conflict_rules
                ),
                lambda out: len(out.nodes) + len(out.edges),
            )
            outputs.graph_nodes.extend(graph.nodes)
            outputs.graph_edges.extend(graph.edges)
        except StageExecutionError as e:
            return result(IngestionStatus.ERROR, str(e), stage=e.stage)

        message = (
            f"Ingested {stored.document.title} (version {stored.version.version_number}): "
            f"{len(stored.sections)} sections, {len(chunks)} chunks, "
            f"{len(graph.nodes)} nodes, {len(graph.edges)} edges"
        )
        logger.info(message)
        return result(IngestionStatus.SUCCESS, message)

    def _check_duplicate(self, data: bytes, source: CorpusSource, filename: str, check_title: bool) -> None:
        """Raise DuplicateInputError if the checksum or title was already ingested."""
        documents = self.context.documents
        checksum_exists = documents.exists_by_checksum(checksum(data))

        title_exists = False
        if check_title:
            try:
                parsed = parse_document_content(data, source, filename)
            except ParseError:
                # Reported by Stage B
                parsed = None
            title_exists = parsed is not None and documents.exists_by_title(parsed.title)

        if title_exists:
            raise DuplicateInputError("title exists")
        if checksum_exists:
            raise DuplicateInputError("checksum exists")

    def _parse_and_store(
        self,
        source_object: SourceObject,
        source: CorpusSource,
        filename: str,
        report: ProgressFn,
        document_id: str | None,
    ) -> tuple[ParsedDocument, StoredDocument]:
        raw = self.context.blobs.get(source_object.blob_id)
        parsed = parse_document_content(raw, source, filename)
        return parsed, store_document(self.context, source_object, parsed, report, document_id)

    def _run_stage(self, stage: PipelineStage, work: Callable, count: Callable):
        """Run one stage with status tracking and callbacks.

        Raises:
            StageExecutionError: The stage failed; chained to the original error
        """
        callbacks = self.callbacks
        stage.status = StageStatus.IN_PROGRESS
        stage.started_at = utc_now()
        logger.debug("Stage %s started", stage.id)
        if callbacks.on_stage_start:
            callbacks.on_stage_start(stage.id)

        def report(progress: int) -> None:
            stage.progress = max(stage.progress, min(int(progress), 100))
            if callbacks.on_stage_progress:
                callbacks.on_stage_progress(stage.id, stage.progress)

        try:
            output = work(report)
        except Exception as e:
            stage.status = StageStatus.ERROR
            stage.error = f"{type(e).__name__}: {e}"
            stage.completed_at = utc_now()
            logger.error("Stage %s failed: %s", stage.id, stage.error)
            if callbacks.on_stage_error:
                callbacks.on_stage_error(stage.id, stage.error)
            raise StageExecutionError(stage.id, stage.error) from e

        stage.status = StageStatus.COMPLETED
        stage.progress = 100
        stage.output_count = count(output)
        stage.completed_at = utc_now()
        logger.debug("Stage %s completed with %d outputs", stage.id, stage.output_count)
        if callbacks.on_stage_complete:
            callbacks.on_stage_complete(stage.id, stage.output_count)
        return output

    # -------------------------------------------------------------------------
    # Bulk
    # -------------------------------------------------------------------------

    def ingest_many(self, items: Iterable[SourceItem]) -> BulkIngestionSummary:
        """Ingest files one at a time in authority order.

        Items are sorted by jurisdiction then authority level, highest first
        (stable for ties); items that cannot be parsed go last and fail in
        Stage B.
        """
        ordered = self.order_by_authority(list(items))
        summary = BulkIngestionSummary()
        for item in self._iter_with_progress(ordered, total=len(ordered), desc="Ingesting"):
            summary.add(self.ingest(item.content, item.source, item.filename, item.content_type))

        logger.info(
            "Bulk ingestion: %d ingested, %d skipped, %d errors (of %d)",
            summary.ingested, summary.skipped, summary.errors, summary.total,
        )
        return summary

    @staticmethod
    def order_by_authority(items: list[SourceItem]) -> list[SourceItem]:
        def sort_key(item: SourceItem):
            try:
                parsed = parse_document_content(item.content, item.source, item.filename)
            except ParseError:
                return (1, 0, 0)
            return (0, *authority_sort_key(parsed.jurisdiction, parsed.authority_level))

        return sorted(items, key=sort_key)

    def ingest_demo(self) -> BulkIngestionSummary:
        """Ingest the built-in demo corpus."""
        items = [
            SourceItem(
                content=demo_document_json(entry),
                source=entry["source"],
                filename=entry["file"],
                content_type="application/json",
            )
            for entry in DEMO_DOCUMENTS
        ]
        return self.ingest_many(items)
