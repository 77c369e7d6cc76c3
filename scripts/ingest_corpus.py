#!/usr/bin/env python3
"""Ingest legal documents into the knowledge graph stores.

Runs the four-stage pipeline over the built-in demo corpus or a directory of
.json / .txt files, prints a summary, and optionally saves the stores.

Usage:
    python scripts/ingest_corpus.py --demo
    python scripts/ingest_corpus.py --input-dir ./data/texas --source texas-statutes
    python scripts/ingest_corpus.py --demo --output-dir ./data/processed --blob-dir ./data/blobs
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lexgraph.config import PipelineConfig
from lexgraph.ingestion.pipeline import IngestionContext, IngestionPipeline, SourceItem
from lexgraph.store.blob_store import FileBlobStore, InMemoryBlobStore
from lexgraph.store.types import CorpusSource, EdgeType

INPUT_PATTERNS = ("*.json", "*.txt")


def load_items(input_dir: Path, source: CorpusSource) -> list[SourceItem]:
    """Collect source files from a directory (sorted by name)."""
    paths = sorted(p for pattern in INPUT_PATTERNS for p in input_dir.glob(pattern))
    return [
        SourceItem(content=path.read_bytes(), source=source, filename=path.name)
        for path in paths
    ]


def print_summary(summary, context: IngestionContext) -> None:
    print(f"\nProcessed {summary.total} files: "
          f"{summary.ingested} ingested, {summary.skipped} skipped, {summary.errors} errors")
    for result in summary.results:
        print(f"  [{result.status.value:>7}] {result.filename}: {result.message}")

    stats = context.graph.stats()
    print(f"\nGraph: {stats['nodes']} nodes, {stats['edges']} edges")
    for edge_type in EdgeType:
        print(f"  {edge_type.value}: {stats[edge_type.value]}")

    conflicts = context.graph.list_edges(EdgeType.CONFLICTS_WITH)
    for edge in conflicts:
        source = context.graph.get_node(edge.source_node_id)
        target = context.graph.get_node(edge.target_node_id)
        print(f"\n  CONFLICT ({edge.severity.value}): {source.label} -> {target.label}")
        print(f"    {edge.rationale}")


def main():
    parser = argparse.ArgumentParser(description="Ingest legal documents into the knowledge graph")
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Ingest the built-in demo corpus",
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=None,
        help="Directory with .json / .txt source files",
    )
    parser.add_argument(
        "--source",
        choices=[s.value for s in CorpusSource],
        default=CorpusSource.US_CODE.value,
        help="Corpus the input files come from",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Save document, vector and graph stores here",
    )
    parser.add_argument(
        "--blob-dir",
        type=Path,
        default=None,
        help="Keep raw files in this directory (default: in memory)",
    )
    parser.add_argument(
        "--query",
        default=None,
        help="Run a keyword search after ingestion",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.demo and args.input_dir is None:
        parser.error("one of --demo or --input-dir is required")

    blobs = FileBlobStore(args.blob_dir) if args.blob_dir else InMemoryBlobStore()
    context = IngestionContext.in_memory()
    context.blobs = blobs

    config = PipelineConfig.from_env(show_progress=True)
    pipeline = IngestionPipeline(context, config)

    if args.demo:
        summary = pipeline.ingest_demo()
    else:
        if not args.input_dir.is_dir():
            parser.error(f"not a directory: {args.input_dir}")
        summary = pipeline.ingest_many(load_items(args.input_dir, CorpusSource(args.source)))

    print_summary(summary, context)

    if args.query:
        print(f"\nKeyword search: {args.query!r}")
        for chunk in context.vectors.keyword_search(args.query):
            print(f"  {chunk.metadata.citation} ({chunk.metadata.jurisdiction.value}): "
                  f"{chunk.text[:100]}")

    if args.output_dir:
        context.save(args.output_dir)
        print(f"\nSaved stores to {args.output_dir}")

    return 1 if summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
