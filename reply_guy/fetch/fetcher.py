"""
HTTP fetching of post pages from an ordered list of mirror hosts.

fetch_url performs a single GET and reports how it went; MirrorFetcher walks
the configured mirrors in priority order and returns the first body served
with a success status. Mirrors after the first success are never contacted.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

import httpx

from ..config import FetchConfig
from ..core.errors import FallbackExhausted, FetchError
from ..core.fallback import first_success_async
from ..utils.logging import log_event


@dataclass
class FetchResult:
    """Result of a single HTTP GET.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code is None when no response was received.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
        reason: "ok", "timeout", "http_status" or "transport"
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None
    reason: str = "ok"

    @property
    def ok(self) -> bool:
        return self.error is None


class MirrorFailure(Exception):
    """A single mirror did not return content."""

    def __init__(self, result: FetchResult):
        self.result = result
        self.reason = result.reason
        super().__init__(result.error or "unknown error")


async def fetch_url(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    retries: int = 0,
) -> FetchResult:
    """GET a URL, retrying transport failures with linear backoff.

    Non-2xx responses are returned immediately without retry.

    Args:
        client: Shared async client carrying headers and proxy settings
        url: The URL to fetch
        timeout: Request timeout in seconds
        retries: Number of retry attempts after a timeout or transport error

    Returns:
        FetchResult with text on success or error and reason on failure
    """
    result = FetchResult(url=url, status_code=None, text=None, error="not attempted", reason="transport")
    for attempt in range(retries + 1):
        try:
            resp = await client.get(url, timeout=timeout)
        except httpx.TimeoutException as exc:
            result = FetchResult(
                url=url, status_code=None, text=None,
                error=f"{type(exc).__name__}: {exc}", reason="timeout",
            )
        except Exception as exc:  # noqa: BLE001
            result = FetchResult(
                url=url, status_code=None, text=None,
                error=f"{type(exc).__name__}: {exc}", reason="transport",
            )
        else:
            if resp.is_success:
                return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
            return FetchResult(
                url=url,
                status_code=resp.status_code,
                text=None,
                error=f"HTTP {resp.status_code} {resp.reason_phrase}".strip(),
                reason="http_status",
            )
        if attempt < retries:
            # Linear backoff: 0.5s, 1.0s, 1.5s...
            await asyncio.sleep(0.5 * (attempt + 1))
    return result


class MirrorFetcher:
    """Retrieves the raw markup of a post from the first mirror that serves it.

    The caller owns the lifetime of an injected client; otherwise use the
    fetcher as an async context manager so its client is closed.
    """

    def __init__(
        self,
        cfg: FetchConfig,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ):
        _check_status_path(cfg.status_path)
        self.cfg = cfg
        self.mirrors = [m.strip().rstrip("/") for m in cfg.mirrors if m.strip()]
        self.logger = logger or logging.getLogger("reply_guy")
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> MirrorFetcher:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.cfg.user_agent},
                follow_redirects=True,
                trust_env=self.cfg.trust_env,
                timeout=self.cfg.timeout_seconds,
            )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def post_url(self, mirror: str, identifier: str) -> str:
        return mirror + self.cfg.status_path.format(id=identifier)

    async def fetch(self, identifier: str) -> str:
        """Return the body served by the first mirror that answers with 2xx.

        Raises:
            FetchError: If every mirror failed
        """
        if self._client is None:
            await self.__aenter__()

        async def _attempt(mirror: str) -> str:
            result = await fetch_url(
                self._client,
                self.post_url(mirror, identifier),
                timeout=self.cfg.timeout_seconds,
                retries=self.cfg.retries,
            )
            if not result.ok:
                raise MirrorFailure(result)
            return result.text or ""

        def _on_failure(mirror: str, exc: Exception) -> None:
            log_event(
                self.logger,
                f"Mirror {mirror} failed for {identifier}: {exc}",
                level=logging.INFO,
                event="mirror_failed",
                mirror=mirror,
                post_id=identifier,
                error=str(exc),
                error_category=getattr(exc, "reason", "unknown"),
            )

        try:
            return await first_success_async(
                self.mirrors, _attempt, on_failure=_on_failure, errors=MirrorFailure
            )
        except FallbackExhausted as exc:
            raise FetchError(failures=exc.failures) from exc


def _check_status_path(template: str) -> None:
    try:
        template.format(id="0")
    except (KeyError, IndexError, ValueError) as exc:
        raise ValueError(f"fetch.status_path must only use the {{id}} placeholder: {template!r}") from exc
