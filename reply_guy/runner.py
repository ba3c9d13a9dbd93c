"""
Batch orchestration for reply-guy.

This module coordinates the workflow for one batch of links:
1. Parse input text into unique post references
2. Fetch each post from the first mirror that serves it
3. Extract the post text from the mirror markup
4. Generate a reply
5. Record the result, then pause before the next item

Item failures never abort the batch: they become placeholder text in the
item's result, so the output always has one record per reference, in input
order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .config import AppConfig, PipelineConfig
from .core.errors import ExtractionError, FetchError, GenerationError, NoValidReferences
from .core.identifiers import extract_identifiers
from .core.types import BatchSession, PostReference, ProcessingResult
from .fetch.extractor import ContentExtractor
from .fetch.fetcher import MirrorFetcher
from .llm.providers.base import ReplyProvider
from .llm.providers.factory import create_provider
from .utils.logging import log_event

FETCH_ERROR_TEXT = "[Error fetching post: {error}]"
EXTRACT_ERROR_TEXT = "[Error extracting post: {error}]"
GENERATION_ERROR_TEXT = "[Error generating reply: {error}]"
REPLY_SKIPPED_TEXT = "[Reply skipped: post text unavailable]"
CANCELLED_TEXT = "[Cancelled before processing]"


class RateLimiter:
    """Spaces successive acquisitions at least ``delay_seconds`` apart.

    The first acquisition never waits. A set ``cancel_event`` cuts a pending
    wait short.
    """

    def __init__(self, delay_seconds: float) -> None:
        self._delay = delay_seconds
        self._lock = asyncio.Lock()
        self._last: float | None = None

    async def wait(self, cancel_event: asyncio.Event | None = None) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last is not None:
                remaining = self._delay - (loop.time() - self._last)
                if remaining > 0:
                    await _pause(remaining, cancel_event)
            self._last = loop.time()


async def process_batch(
    references: Iterable[PostReference],
    fetcher: MirrorFetcher,
    extractor: ContentExtractor,
    provider: ReplyProvider,
    cfg: PipelineConfig,
    logger: logging.Logger | None = None,
    cancel_event: asyncio.Event | None = None,
    progress: Progress | None = None,
    progress_task: int | None = None,
) -> BatchSession:
    """Process references and return a session holding one result per reference.

    Runs strictly sequentially when ``cfg.max_concurrency`` is 1, sleeping
    ``cfg.delay_seconds`` between items (never before the first or after the
    last). With higher concurrency, item starts are still spaced by the delay
    and results keep input order.

    Setting ``cancel_event`` stops new items from being dispatched; items that
    never ran are filled with a cancellation placeholder.

    Args:
        references: Post references in input order
        fetcher: Mirror fetcher returning raw markup per post id
        extractor: Content extractor returning post text from markup
        provider: Reply provider
        cfg: Pipeline delay and concurrency settings
        logger: Logger for events
        cancel_event: Optional event that cancels the remainder of the batch
        progress: Optional Rich progress bar
        progress_task: Task ID for progress updates

    Returns:
        BatchSession with every result slot filled
    """
    logger = logger or logging.getLogger("reply_guy")
    session = BatchSession(references=list(references))
    log_event(
        logger,
        f"Batch start: {session.total} posts",
        event="batch_start",
        total=session.total,
        delay_seconds=cfg.delay_seconds,
        max_concurrency=cfg.max_concurrency,
    )

    def _record(index: int, result: ProcessingResult) -> None:
        session.record(index, result)
        if progress is not None and progress_task is not None:
            progress.advance(progress_task, 1)

    if cfg.max_concurrency <= 1:
        await _run_sequential(session, fetcher, extractor, provider, cfg, logger, cancel_event, _record)
    else:
        await _run_concurrent(session, fetcher, extractor, provider, cfg, logger, cancel_event, _record)

    _fill_cancelled(session)
    stats = session.stats
    log_event(
        logger,
        f"Batch complete: {stats.generated}/{stats.total} replies, "
        f"{stats.fetch_failed} fetch failures, {stats.extract_failed} extraction failures",
        event="batch_complete",
        total=stats.total,
        fetched=stats.fetched,
        fetch_failed=stats.fetch_failed,
        extract_failed=stats.extract_failed,
        generated=stats.generated,
        generation_failed=stats.generation_failed,
        skipped=stats.skipped,
        cancelled=stats.cancelled,
    )
    return session


async def _run_sequential(session, fetcher, extractor, provider, cfg, logger, cancel_event, record) -> None:
    last = session.total - 1
    for index, ref in enumerate(session.references):
        if _is_cancelled(cancel_event):
            session.cancelled = True
            return
        result = await _process_item(ref, fetcher, extractor, provider, session, logger)
        record(index, result)
        if index < last:
            await _pause(cfg.delay_seconds, cancel_event)


async def _run_concurrent(session, fetcher, extractor, provider, cfg, logger, cancel_event, record) -> None:
    limiter = RateLimiter(cfg.delay_seconds)
    semaphore = asyncio.Semaphore(cfg.max_concurrency)

    async def _worker(index: int, ref: PostReference) -> None:
        async with semaphore:
            if _is_cancelled(cancel_event):
                return
            await limiter.wait(cancel_event)
            if _is_cancelled(cancel_event):
                return
            result = await _process_item(ref, fetcher, extractor, provider, session, logger)
            record(index, result)

    tasks = [asyncio.create_task(_worker(i, ref)) for i, ref in enumerate(session.references)]
    await asyncio.gather(*tasks)
    if _is_cancelled(cancel_event):
        session.cancelled = True


async def _process_item(
    ref: PostReference,
    fetcher: MirrorFetcher,
    extractor: ContentExtractor,
    provider: ReplyProvider,
    session: BatchSession,
    logger: logging.Logger,
) -> ProcessingResult:
    """Run fetch, extract and generate for one reference, capturing item errors."""
    stats = session.stats
    try:
        markup = await fetcher.fetch(ref.id)
    except FetchError as exc:
        stats.fetch_failed += 1
        log_event(
            logger,
            f"Fetch failed for {ref.id}: {exc}",
            level=logging.WARNING,
            event="fetch_failed",
            url=ref.source_url,
            post_id=ref.id,
            error=str(exc),
        )
        return _skipped(ref, FETCH_ERROR_TEXT.format(error=exc), "fetch_error", session)
    stats.fetched += 1

    try:
        text = extractor.extract_text(markup)
    except ExtractionError as exc:
        stats.extract_failed += 1
        log_event(
            logger,
            f"Extract failed for {ref.id}: {exc}",
            level=logging.WARNING,
            event="extract_failed",
            url=ref.source_url,
            post_id=ref.id,
            error=str(exc),
            markup_size=len(markup),
        )
        return _skipped(ref, EXTRACT_ERROR_TEXT.format(error=exc), "extract_error", session)

    try:
        reply = await asyncio.to_thread(provider.generate, text)
    except GenerationError as exc:
        stats.generation_failed += 1
        log_event(
            logger,
            f"Reply generation failed for {ref.id}: {exc}",
            level=logging.WARNING,
            event="generation_failed",
            url=ref.source_url,
            post_id=ref.id,
            error=str(exc),
        )
        return ProcessingResult(
            url=ref.source_url,
            id=ref.id,
            tweet=text,
            reply=GENERATION_ERROR_TEXT.format(error=exc),
            status="generation_error",
        )
    stats.generated += 1
    return ProcessingResult(url=ref.source_url, id=ref.id, tweet=text, reply=reply)


def _skipped(ref: PostReference, tweet: str, status: str, session: BatchSession) -> ProcessingResult:
    # Placeholders are never sent to the reply provider
    session.stats.skipped += 1
    return ProcessingResult(url=ref.source_url, id=ref.id, tweet=tweet, reply=REPLY_SKIPPED_TEXT, status=status)


def _fill_cancelled(session: BatchSession) -> None:
    for index, result in enumerate(session.results):
        if result is not None:
            continue
        ref = session.references[index]
        session.results[index] = ProcessingResult(
            url=ref.source_url,
            id=ref.id,
            tweet=CANCELLED_TEXT,
            reply=CANCELLED_TEXT,
            status="cancelled",
        )
        session.stats.cancelled += 1
        session.cancelled = True


def _is_cancelled(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


async def _pause(delay: float, cancel_event: asyncio.Event | None) -> None:
    if cancel_event is None:
        await asyncio.sleep(delay)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return  # pause elapsed without cancellation


async def run_batch_async(
    inputs: str | Iterable[str],
    cfg: AppConfig,
    provider: ReplyProvider | None = None,
    fetcher: MirrorFetcher | None = None,
    extractor: ContentExtractor | None = None,
    logger: logging.Logger | None = None,
    llm_logger: logging.Logger | None = None,
    cancel_event: asyncio.Event | None = None,
    progress: Progress | None = None,
) -> BatchSession:
    """Parse raw link text and process the resulting references.

    Raises:
        NoValidReferences: If no link in the input yields a post id; raised
            before any network activity
    """
    text = inputs if isinstance(inputs, str) else "\n".join(inputs)
    references = extract_identifiers(text)
    if not references:
        raise NoValidReferences()

    logger = logger or logging.getLogger("reply_guy")
    provider = provider or create_provider(cfg.provider, cfg.logging, llm_logger)
    extractor = extractor or ContentExtractor(cfg.extract)
    progress_task = None
    if progress is not None:
        progress_task = progress.add_task("Posts", total=len(references))

    if fetcher is not None:
        return await process_batch(
            references, fetcher, extractor, provider, cfg.pipeline,
            logger, cancel_event, progress, progress_task,
        )
    async with MirrorFetcher(cfg.fetch, logger=logger) as owned_fetcher:
        return await process_batch(
            references, owned_fetcher, extractor, provider, cfg.pipeline,
            logger, cancel_event, progress, progress_task,
        )


def run_batch(
    inputs: str | Iterable[str],
    cfg: AppConfig,
    provider: ReplyProvider | None = None,
    show_progress: bool = False,
    console: Console | None = None,
    logger: logging.Logger | None = None,
    llm_logger: logging.Logger | None = None,
) -> BatchSession:
    """Synchronous entry point: run a whole batch and return its session.

    Args:
        inputs: Raw link text, or a sequence of lines / link blocks
        cfg: Application configuration
        provider: Reply provider; built from ``cfg.provider`` when omitted
        show_progress: Whether to display a progress bar
        console: Rich console for the progress bar (creates default if None)
        logger: Logger for events
        llm_logger: Logger for provider responses

    Returns:
        BatchSession with one result per unique post reference
    """
    if not show_progress:
        return asyncio.run(
            run_batch_async(inputs, cfg, provider=provider, logger=logger, llm_logger=llm_logger)
        )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console or Console(),
    )
    with progress:
        return asyncio.run(
            run_batch_async(
                inputs, cfg, provider=provider, logger=logger,
                llm_logger=llm_logger, progress=progress,
            )
        )
