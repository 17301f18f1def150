"""Tests for the specifier classifier."""

import httpx
import pytest
from conftest import mock_client
from setup_fluence import CHANNELS
from setup_fluence import ArtifactSpecifier
from setup_fluence import ChannelSpecifier
from setup_fluence import InvalidSpecifierError
from setup_fluence import SemVerSpecifier
from setup_fluence import UrlSpecifier
from setup_fluence import classify
from setup_fluence import classify_artifact
from setup_fluence.resolver import HttpChannelListing
from setup_fluence.resolver import parse_semver
from setup_fluence.resolver import resolve_channels


def test_classify_url():
    assert classify("https://x/y.tar.gz") == UrlSpecifier(url="https://x/y.tar.gz")
    assert classify("http://example.com/fluence.tar.gz").kind == "url"


def test_classify_semver():
    assert classify("1.2.3") == SemVerSpecifier(version="1.2.3")


def test_classify_semver_strips_v_prefix():
    assert classify("v1.2.3") == SemVerSpecifier(version="1.2.3")


def test_classify_semver_prerelease_and_build():
    assert classify("0.15.0-rc.1+build.5") == SemVerSpecifier(version="0.15.0-rc.1+build.5")


def test_classify_channel():
    assert classify("stable") == ChannelSpecifier(name="stable")


@pytest.mark.parametrize("channel", CHANNELS)
def test_every_known_channel_classifies(channel):
    assert classify(channel) == ChannelSpecifier(name=channel)


@pytest.mark.parametrize("raw", ["not-a-version-or-channel", "1.2", "01.2.3", "ftp://host/file", ""])
def test_classify_invalid(raw):
    """Inputs that are neither URL, channel nor strict semver are rejected."""
    with pytest.raises(InvalidSpecifierError, match="Available channels"):
        classify(raw)


def test_classify_is_deterministic():
    assert classify("v2.0.0") == classify("v2.0.0")


def test_classify_uses_given_channel_list():
    """Live channel lists replace the built-in list."""
    assert classify("nightly", channels=["nightly"]) == ChannelSpecifier(name="nightly")
    with pytest.raises(InvalidSpecifierError):
        classify("stable", channels=["nightly"])


def test_parse_semver():
    assert parse_semver("v0.1.0") == "0.1.0"
    assert parse_semver("vv1.0.0") is None
    assert parse_semver("latest") is None


def test_classify_artifact():
    assert classify_artifact("") is None
    assert classify_artifact("   ") is None
    assert classify_artifact("fluence-cli") == ArtifactSpecifier(name="fluence-cli")
    assert classify_artifact("https://github.com/o/r/releases/x.tar.gz") == UrlSpecifier(
        url="https://github.com/o/r/releases/x.tar.gz"
    )


class StaticListing:
    def __init__(self, channels):
        self.channels = channels

    async def list_channels(self):
        return self.channels


@pytest.mark.asyncio
async def test_resolve_channels_prefers_live_listing():
    assert await resolve_channels(StaticListing(["a", "b"])) == ("a", "b")


@pytest.mark.asyncio
async def test_resolve_channels_falls_back_to_builtin():
    assert await resolve_channels(None) == CHANNELS
    assert await resolve_channels(StaticListing(None)) == CHANNELS
    assert await resolve_channels(StaticListing([])) == CHANNELS


@pytest.mark.asyncio
async def test_http_channel_listing():
    url = "https://example.com/channels.json"
    async with mock_client({url: httpx.Response(200, json=["stable", "nightly"])}) as http:
        assert await HttpChannelListing(http, url).list_channels() == ["stable", "nightly"]


@pytest.mark.asyncio
async def test_http_channel_listing_unavailable():
    """Unreachable or malformed listings yield None."""
    url = "https://example.com/channels.json"
    async with mock_client({}) as http:
        assert await HttpChannelListing(http, url).list_channels() is None
    async with mock_client({url: httpx.Response(200, json={"stable": 1})}) as http:
        assert await HttpChannelListing(http, url).list_channels() is None
    async with mock_client({url: httpx.Response(200, text="not json")}) as http:
        assert await HttpChannelListing(http, url).list_channels() is None
