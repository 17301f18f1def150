"""Streaming HTTP downloads with throttled progress reporting.

Downloads are a producer of cumulative byte counts (``iter_download``)
consumed by ``ProgressReporter``. Whether a count deserves a log line is
decided by ``progress_milestone``, a pure function of bytes and total length.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

PROGRESS_STEP = 5
CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT_SECONDS = 60.0
USER_AGENT = "setup-fluence"

# Hosts that require the job's GitHub token
_GITHUB_HOSTS = ("github.com", "api.github.com")
_GITHUB_HOST_SUFFIXES = (".githubusercontent.com",)


def build_async_client(
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` used by every acquirer.

    Args:
        timeout_seconds: Per-operation timeout (connect, read, write, pool)
        extra_headers: Headers merged into the defaults
        transport: Optional transport override (tests use ``httpx.MockTransport``)
    """
    headers = {"User-Agent": USER_AGENT}
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def is_http_url(value: str) -> bool:
    """True if value is an absolute http or https URL."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def url_filename(url: str) -> str:
    """Last path segment of url (``fluence-linux-x64.tar.gz``)."""
    name = Path(urlparse(url).path).name
    return name or "download"


def requires_github_token(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return host in _GITHUB_HOSTS or host.endswith(_GITHUB_HOST_SUFFIXES)


def auth_headers_for(url: str, token: str | None) -> dict[str, str]:
    """Bearer credential for hosts that need one, empty otherwise."""
    if token and requires_github_token(url):
        return {"Authorization": f"Bearer {token}"}
    return {}


def progress_milestone(downloaded: int, total: int | None, last_logged: int) -> int | None:
    """
    Decide whether a progress line is due.

    Args:
        downloaded: Cumulative bytes received so far
        total: Declared content length (None or 0 if unknown)
        last_logged: Last percentage that was logged

    Returns:
        Percentage to log (at least PROGRESS_STEP above last_logged, capped at 100),
        or None if nothing should be logged

    Example:
        >>> progress_milestone(50, 100, 45)
        50
        >>> progress_milestone(52, 100, 50) is None
        True
    """
    if not total or total <= 0:
        return None
    progress = min(downloaded * 100 // total, 100)
    if progress >= last_logged + PROGRESS_STEP:
        return progress
    return None


class ProgressReporter:
    """Consumes cumulative byte counts and logs 5%-step milestones."""

    def __init__(self, total: int | None):
        self.total = total
        self.last_logged = 0
        self.milestones: list[int] = []

    def update(self, downloaded: int) -> None:
        milestone = progress_milestone(downloaded, self.total, self.last_logged)
        if milestone is None:
            return
        self.last_logged = milestone
        self.milestones.append(milestone)
        logger.info(f"Downloading: {milestone}%")


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("content-length")
    if value and value.isdigit():
        return int(value)
    return None


async def iter_download(
    client: httpx.AsyncClient,
    url: str,
    destination: Path,
    headers: dict[str, str] | None = None,
) -> AsyncIterator[tuple[int, int | None]]:
    """Stream url into destination, yielding ``(downloaded, total)`` after each chunk.

    Raises:
        httpx.HTTPStatusError: On a non-success status
        httpx.HTTPError: On transport failure
    """
    async with client.stream("GET", url, headers=headers) as response:
        response.raise_for_status()
        total = _content_length(response)
        downloaded = 0
        with open(destination, "wb") as f:
            async for chunk in response.aiter_bytes(CHUNK_SIZE):
                f.write(chunk)
                downloaded += len(chunk)
                yield downloaded, total


async def download_file(
    client: httpx.AsyncClient,
    url: str,
    destination: Path,
    headers: dict[str, str] | None = None,
) -> Path:
    """
    Download url to destination, logging progress in 5% increments.

    Args:
        client: Shared HTTP client
        url: Resource to fetch
        destination: File path to write
        headers: Extra request headers (credentials)

    Returns:
        destination

    Raises:
        httpx.HTTPError: If the request fails or returns a non-success status
    """
    logger.info(f"Downloading {url}")
    reporter: ProgressReporter | None = None
    async for downloaded, total in iter_download(client, url, destination, headers):
        if reporter is None:
            reporter = ProgressReporter(total)
        reporter.update(downloaded)

    logger.debug(f"Saved {url} to {destination}")
    return destination
