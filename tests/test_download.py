"""Tests for streaming downloads and progress reporting."""

import logging

import httpx
import pytest
from conftest import mock_client
from setup_fluence.download import ProgressReporter
from setup_fluence.download import auth_headers_for
from setup_fluence.download import download_file
from setup_fluence.download import is_http_url
from setup_fluence.download import progress_milestone
from setup_fluence.download import url_filename


class TestProgressMilestone:
    def test_first_milestone_at_five_percent(self):
        assert progress_milestone(4, 100, 0) is None
        assert progress_milestone(5, 100, 0) == 5

    def test_skips_small_increments(self):
        assert progress_milestone(54, 100, 50) is None
        assert progress_milestone(57, 100, 50) == 57

    def test_unknown_length_never_reports(self):
        assert progress_milestone(1000, None, 0) is None
        assert progress_milestone(1000, 0, 0) is None

    def test_capped_at_hundred(self):
        """More bytes than declared never reports above 100."""
        assert progress_milestone(250, 100, 0) == 100
        assert progress_milestone(300, 100, 100) is None


def test_reporter_milestones_are_monotonic_and_bounded():
    """Milestones never decrease, step by at least 5 and stay within 100."""
    reporter = ProgressReporter(total=1000)
    for downloaded in range(0, 1201, 7):
        reporter.update(downloaded)

    milestones = reporter.milestones
    assert milestones
    assert milestones[-1] == 100
    assert all(m <= 100 for m in milestones)
    assert all(b - a >= 5 for a, b in zip(milestones, milestones[1:], strict=False))


def test_reporter_logs_progress_lines(caplog):
    reporter = ProgressReporter(total=20)
    with caplog.at_level(logging.INFO, logger="setup_fluence.download"):
        reporter.update(10)
        reporter.update(20)

    assert "Downloading: 50%" in caplog.text
    assert "Downloading: 100%" in caplog.text


def test_is_http_url():
    assert is_http_url("https://example.com/a.tar.gz")
    assert is_http_url("http://example.com")
    assert not is_http_url("example.com/a.tar.gz")
    assert not is_http_url("file:///tmp/a.tar.gz")
    assert not is_http_url("fluence-cli")


def test_url_filename():
    assert url_filename("https://host/channels/stable/fluence-linux-x64.tar.gz?x=1") == "fluence-linux-x64.tar.gz"
    assert url_filename("https://host") == "download"


def test_auth_headers_only_for_github_hosts():
    assert auth_headers_for("https://github.com/o/r/a.tar.gz", "tok") == {"Authorization": "Bearer tok"}
    assert auth_headers_for("https://objects.githubusercontent.com/x", "tok") == {"Authorization": "Bearer tok"}
    assert auth_headers_for("https://example.com/a.tar.gz", "tok") == {}
    assert auth_headers_for("https://github.com/o/r/a.tar.gz", None) == {}


@pytest.mark.asyncio
async def test_download_file_writes_body(tmp_path, caplog):
    url = "https://example.com/fluence.tar.gz"
    body = b"x" * 4096
    requests = []

    async with mock_client({url: body}, requests) as http:
        with caplog.at_level(logging.INFO, logger="setup_fluence.download"):
            result = await download_file(http, url, tmp_path / "out", headers={"Authorization": "Bearer t"})

    assert result.read_bytes() == body
    assert requests[0].headers["Authorization"] == "Bearer t"
    assert f"Downloading {url}" in caplog.text
    assert "Downloading: 100%" in caplog.text


@pytest.mark.asyncio
async def test_download_file_raises_on_http_error(tmp_path):
    async with mock_client({}) as http:
        with pytest.raises(httpx.HTTPStatusError):
            await download_file(http, "https://example.com/missing", tmp_path / "out")
