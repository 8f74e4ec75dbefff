"""Error taxonomy for the retrieval and extraction pipeline.

Failures only originate at the two external-capability boundaries (embedding
and generation) or at input validation. Chunking and ranking are pure.
"""


class PaperLensError(Exception):
    """Base exception for all PaperLens errors."""


class ValidationFailure(PaperLensError):
    """Malformed paper or question supplied by the caller."""


class NotFound(PaperLensError):
    """Operation addressed a paper id that does not exist."""

    def __init__(self, paper_id: object) -> None:
        super().__init__(f"Paper {paper_id} not found")
        self.paper_id = paper_id


class EmbeddingUnavailable(PaperLensError):
    """The embedding capability failed or returned a malformed vector."""


class GenerationUnavailable(PaperLensError):
    """The generation capability failed to respond."""


class MalformedGenerationOutput(PaperLensError):
    """The generation capability answered with something that is not a JSON object."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class DimensionMismatch(PaperLensError):
    """Two vectors compared for similarity have different lengths."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Vector dimension mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class AnswerFailed(PaperLensError):
    """A question could not be answered (question embedding failed)."""

    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.stage = stage
