"""
Core data types for the reply pipeline.

- PostReference: A post identifier parsed from one input line
- ProcessingResult: Scraped text and generated reply for one reference
- BatchStats: Counters collected while a batch runs
- BatchSession: Everything one batch invocation produced
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PostReference:
    """A post identifier and the input line it came from.

    Attributes:
        source_url: The trimmed input line, kept for reporting
        id: Numeric post identifier taken from the URL path
    """
    source_url: str
    id: str


@dataclass
class ProcessingResult:
    """Outcome for a single reference.

    Failed stages never drop the record; ``tweet`` and ``reply`` hold
    placeholder text instead. ``status`` names the stage that failed.

    Attributes:
        url: Source URL of the reference
        tweet: Extracted post text, or a placeholder
        reply: Generated reply, or a placeholder
        id: Post identifier
        status: "ok", "fetch_error", "extract_error", "generation_error" or "cancelled"
    """
    url: str
    tweet: str
    reply: str
    id: str = ""
    status: str = "ok"

    def to_dict(self) -> dict[str, str]:
        return {
            "url": self.url,
            "id": self.id,
            "tweet": self.tweet,
            "reply": self.reply,
            "status": self.status,
        }


@dataclass
class BatchStats:
    """Counters for one batch.

    Attributes:
        total: Number of references in the batch
        fetched: Posts retrieved from some mirror
        fetch_failed: Posts where every mirror failed
        extract_failed: Posts fetched but with no usable text
        generated: Replies produced
        generation_failed: Replies where the provider failed
        skipped: Replies not attempted because the post text was unavailable
        cancelled: References never dispatched because the batch was cancelled
    """
    total: int = 0
    fetched: int = 0
    fetch_failed: int = 0
    extract_failed: int = 0
    generated: int = 0
    generation_failed: int = 0
    skipped: int = 0
    cancelled: int = 0


@dataclass
class BatchSession:
    """State of a single batch invocation, created fresh per call.

    ``results`` is indexed like ``references``; slots are filled as items
    complete, so concurrent completion never reorders output.
    """
    references: list[PostReference]
    results: list[ProcessingResult | None] = field(default_factory=list)
    processed: int = 0
    cancelled: bool = False
    stats: BatchStats = field(default_factory=BatchStats)

    def __post_init__(self) -> None:
        if not self.results:
            self.results = [None] * len(self.references)
        self.stats.total = len(self.references)

    @property
    def total(self) -> int:
        return len(self.references)

    def record(self, index: int, result: ProcessingResult) -> None:
        self.results[index] = result
        self.processed += 1

    def completed(self) -> list[ProcessingResult]:
        """Results in input order, skipping slots that were never filled."""
        return [result for result in self.results if result is not None]
