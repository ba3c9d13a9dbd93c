"""
Core domain models and business logic.

This package contains data types, errors and helpers that are
independent of any specific pipeline stage.
"""

from .errors import (
    ExtractionError,
    FallbackExhausted,
    FetchError,
    GenerationError,
    NoValidReferences,
    PipelineError,
)
from .fallback import first_success, first_success_async
from .identifiers import extract_identifiers
from .types import BatchSession, BatchStats, PostReference, ProcessingResult

__all__ = [
    "PostReference",
    "ProcessingResult",
    "BatchStats",
    "BatchSession",
    "PipelineError",
    "FallbackExhausted",
    "FetchError",
    "ExtractionError",
    "GenerationError",
    "NoValidReferences",
    "extract_identifiers",
    "first_success",
    "first_success_async",
]
