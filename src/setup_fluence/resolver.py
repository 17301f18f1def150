"""Specifier classifier - Label raw input text once, dispatch on the tag everywhere else.

Priority for the ``version`` input:
1. absolute http(s) URL -> UrlSpecifier
2. known channel name   -> ChannelSpecifier
3. strict semver (``v`` prefix allowed, stripped) -> SemVerSpecifier
4. anything else        -> InvalidSpecifierError

The ``artifact`` input is either a URL or an opaque artifact-store reference.

Channel membership is checked against a live listing when one is available,
otherwise against the built-in list.
"""

import json
import logging

import httpx

from .download import is_http_url
from .exceptions import InvalidSpecifierError
from .protocols import ChannelListingProtocol
from .schema import SEMVER_PATTERN
from .schema import ArtifactSource
from .schema import ArtifactSpecifier
from .schema import ChannelSpecifier
from .schema import SemVerSpecifier
from .schema import UrlSpecifier
from .schema import VersionSpecifier

logger = logging.getLogger(__name__)

CHANNELS: tuple[str, ...] = (
    "kras",
    "testnet",
    "stage",
    "latest",
    "stable",
    "main",
    "unstable",
)


def parse_semver(raw: str) -> str | None:
    """Return raw without its leading ``v`` if it is a strict semantic version, else None.

    Examples:
        >>> parse_semver("v1.2.3")
        '1.2.3'
        >>> parse_semver("1.2") is None
        True
    """
    candidate = raw.strip()
    stripped = candidate[1:] if candidate.startswith(("v", "V")) else candidate
    if SEMVER_PATTERN.match(stripped):
        return stripped
    return None


def classify(raw: str, channels: tuple[str, ...] | list[str] = CHANNELS) -> VersionSpecifier:
    """
    Classify the ``version`` input.

    Args:
        raw: Raw input text
        channels: Channel names considered valid (live listing or built-in list)

    Returns:
        UrlSpecifier, ChannelSpecifier or SemVerSpecifier

    Raises:
        InvalidSpecifierError: If raw is empty or matches none of the forms

    Example:
        >>> classify("v1.2.3")
        SemVerSpecifier(kind='semver', version='1.2.3')
        >>> classify("stable")
        ChannelSpecifier(kind='channel', name='stable')
    """
    value = raw.strip()

    if is_http_url(value):
        return UrlSpecifier(url=value)

    if value in channels:
        return ChannelSpecifier(name=value)

    version = parse_semver(value)
    if version is not None:
        return SemVerSpecifier(version=version)

    shown = f"'{value}'" if value else "empty input"
    raise InvalidSpecifierError(
        f"Invalid input 'version': {shown} is neither a semantic version nor a known channel. "
        f"Available channels: {', '.join(channels)}",
        context={"version": value, "channels": list(channels)},
    )


def classify_artifact(raw: str) -> ArtifactSource | None:
    """Classify the ``artifact`` input; None means no artifact was requested."""
    value = raw.strip()
    if not value:
        return None
    if is_http_url(value):
        return UrlSpecifier(url=value)
    return ArtifactSpecifier(name=value)


async def resolve_channels(listing: ChannelListingProtocol | None) -> tuple[str, ...]:
    """Channel names to classify against: live listing first, built-in list as fallback."""
    if listing is None:
        return CHANNELS

    live = await listing.list_channels()
    if not live:
        logger.debug("Live channel listing unavailable, using built-in channel list")
        return CHANNELS

    logger.debug(f"Using live channel listing: {', '.join(live)}")
    return tuple(live)


class HttpChannelListing:
    """Live channel listing served as a JSON array of names."""

    def __init__(self, http: httpx.AsyncClient, url: str):
        self.http = http
        self.url = url

    async def list_channels(self) -> list[str] | None:
        """Fetch the listing; None if it is unreachable or malformed."""
        try:
            response = await self.http.get(self.url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            logger.debug(f"Could not fetch channel listing from {self.url}: {e}")
            return None

        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            logger.debug(f"Channel listing at {self.url} is not a list of names")
            return None
        return data
