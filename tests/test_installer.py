"""Tests for the installer."""

import os

import pytest
from conftest import FAILING_SCRIPT
from conftest import write_tool_tree
from setup_fluence import BinaryInstaller
from setup_fluence import BinaryNotFoundError
from setup_fluence import InstallError
from setup_fluence import SmokeTestFailedError
from setup_fluence.installer import ensure_symlink


class PathRecorder:
    def __init__(self):
        self.paths = []

    def __call__(self, directory):
        self.paths.append(directory)


@pytest.mark.asyncio
async def test_install_links_exports_and_smoke_tests(tmp_path):
    tool_dir = tmp_path / "acquired"
    binary = write_tool_tree(tool_dir)
    bin_dir = tmp_path / "install" / "bin"
    exported = PathRecorder()

    link = await BinaryInstaller(bin_dir, export_path=exported).install(tool_dir)

    assert link == bin_dir / "fluence"
    assert link.is_symlink()
    assert link.resolve() == binary.resolve()
    assert exported.paths == [bin_dir]


@pytest.mark.asyncio
async def test_install_missing_binary(tmp_path):
    tool_dir = tmp_path / "empty"
    tool_dir.mkdir()
    exported = PathRecorder()

    with pytest.raises(BinaryNotFoundError, match="Expected binary not found"):
        await BinaryInstaller(tmp_path / "bin", export_path=exported).install(tool_dir)

    assert exported.paths == []
    assert not (tmp_path / "bin").exists()


@pytest.mark.asyncio
async def test_install_is_idempotent(tmp_path):
    """An existing correct symlink is neither an error nor recreated."""
    tool_dir = tmp_path / "acquired"
    write_tool_tree(tool_dir)
    bin_dir = tmp_path / "bin"
    installer = BinaryInstaller(bin_dir, export_path=PathRecorder())

    link = await installer.install(tool_dir)
    inode = os.lstat(link).st_ino

    await installer.install(tool_dir)

    assert os.lstat(link).st_ino == inode


@pytest.mark.asyncio
async def test_install_replaces_stale_symlink(tmp_path):
    """A symlink left by an earlier attempt at another tree is repointed."""
    stale = write_tool_tree(tmp_path / "old")
    fresh = write_tool_tree(tmp_path / "new")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    (bin_dir / "fluence").symlink_to(stale)

    link = await BinaryInstaller(bin_dir, export_path=PathRecorder()).install(tmp_path / "new")

    assert link.resolve() == fresh.resolve()


@pytest.mark.asyncio
async def test_smoke_test_failure_is_fatal(tmp_path):
    tool_dir = tmp_path / "acquired"
    write_tool_tree(tool_dir, script=FAILING_SCRIPT)

    with pytest.raises(SmokeTestFailedError, match="exited with code 3") as exc_info:
        await BinaryInstaller(tmp_path / "bin", export_path=PathRecorder()).install(tool_dir)

    assert exc_info.value.context["returncode"] == 3


@pytest.mark.asyncio
async def test_smoke_test_not_executable(tmp_path):
    tool_dir = tmp_path / "acquired"
    binary = write_tool_tree(tool_dir)
    binary.chmod(0o644)

    with pytest.raises(SmokeTestFailedError, match="Could not run"):
        await BinaryInstaller(tmp_path / "bin", export_path=PathRecorder()).install(tool_dir)


def test_ensure_symlink_refuses_regular_file(tmp_path):
    link = tmp_path / "fluence"
    link.write_text("not a link")

    with pytest.raises(InstallError, match="not a symlink"):
        ensure_symlink(link, tmp_path / "target")


def test_ensure_symlink_reports_changes(tmp_path):
    target = tmp_path / "target"
    target.write_text("")
    link = tmp_path / "fluence"

    assert ensure_symlink(link, target) is True
    assert ensure_symlink(link, target) is False
