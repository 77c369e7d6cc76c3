"""Error taxonomy for the ingestion pipeline."""


class LexGraphError(Exception):
    """Base class for all lexgraph errors."""


class DuplicateInputError(LexGraphError):
    """Source already ingested (matching checksum or title).

    Soft error: the orchestrator reports the unit as skipped.
    """

    def __init__(self, reason: str):
        super().__init__(f"Already ingested: {reason}")
        self.reason = reason


class ParseError(LexGraphError):
    """Input document is malformed or lacks required metadata."""


class StageExecutionError(LexGraphError):
    """A pipeline stage failed; remaining stages are not run."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"Stage '{stage}' failed: {message}")
        self.stage = stage


class GraphConsistencyError(LexGraphError):
    """An edge references a node that does not exist."""
