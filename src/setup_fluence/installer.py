"""Installer - Publish an unpacked fluence tree onto PATH.

All process-wide side effects (bin directory, symlink, PATH export) live here,
behind InstallerProtocol, so the rest of the pipeline stays free of them.
"""

import asyncio
import logging
import os
from collections.abc import Callable
from collections.abc import Sequence
from pathlib import Path

from .exceptions import BinaryNotFoundError
from .exceptions import InstallError
from .exceptions import SmokeTestFailedError

logger = logging.getLogger(__name__)

EXECUTABLE_NAME = "fluence"
SMOKE_TEST_ARGS: tuple[str, ...] = ("dep", "versions")


def expected_binary_path(tool_dir: Path) -> Path:
    """Conventional executable location inside an unpacked tree."""
    return tool_dir / "fluence" / "bin" / EXECUTABLE_NAME


def _points_to(link: Path, target: Path) -> bool:
    try:
        return Path(os.readlink(link)) == target or link.resolve() == target.resolve()
    except OSError:
        return False


def ensure_symlink(link: Path, target: Path) -> bool:
    """
    Make link point at target.

    A symlink already pointing at target is left untouched. A symlink pointing
    elsewhere (e.g. at a tree from an earlier failed attempt) is replaced.

    Args:
        link: Symlink path in the bin directory
        target: Executable to point at

    Returns:
        True if the symlink was created or replaced, False if it was already correct

    Raises:
        InstallError: If link exists and is not a symlink
    """
    if link.is_symlink():
        if _points_to(link, target):
            logger.debug(f"Symlink {link} already points at {target}")
            return False
        logger.debug(f"Replacing symlink {link} -> {os.readlink(link)}")
        link.unlink()
    elif link.exists():
        raise InstallError(
            f"Cannot create symlink {link}: a file that is not a symlink already exists there",
            context={"link": str(link), "target": str(target)},
        )

    link.symlink_to(target)
    return True


class BinaryInstaller:
    """
    Install the fluence executable from an acquisition directory.

    Process:
    1. Locate ``<tool_dir>/fluence/bin/fluence``
    2. Ensure ``<bin_dir>/fluence`` symlinks to it
    3. Export bin_dir on PATH
    4. Smoke-test ``fluence dep versions`` (output goes to the job log)
    """

    def __init__(
        self,
        bin_dir: Path,
        export_path: Callable[[Path], None],
        smoke_test_args: Sequence[str] = SMOKE_TEST_ARGS,
    ):
        """Initialize installer.

        Args:
            bin_dir: Dedicated bin directory (created if missing)
            export_path: Prepends a directory to PATH for this and later CI steps
            smoke_test_args: Arguments for the self-check invocation
        """
        self.bin_dir = bin_dir
        self.export_path = export_path
        self.smoke_test_args = tuple(smoke_test_args)

    async def install(self, tool_dir: Path) -> Path:
        """
        Install the executable found in tool_dir.

        Args:
            tool_dir: Directory produced by an acquirer

        Returns:
            Path of the bin directory symlink

        Raises:
            BinaryNotFoundError: If the tree lacks the executable
            InstallError: If the bin directory or symlink cannot be created
            SmokeTestFailedError: If the self-check exits non-zero or cannot run
        """
        binary = expected_binary_path(tool_dir).resolve()
        if not binary.is_file():
            raise BinaryNotFoundError(
                f"Expected binary not found at: {binary}",
                context={"tool_dir": str(tool_dir), "expected": str(binary)},
            )

        link = self.bin_dir / EXECUTABLE_NAME
        try:
            self.bin_dir.mkdir(parents=True, exist_ok=True)
            ensure_symlink(link, binary)
        except OSError as e:
            raise InstallError(
                f"Failed to link {binary} into {self.bin_dir}: {e}",
                context={"binary": str(binary), "bin_dir": str(self.bin_dir)},
            ) from e

        self.export_path(self.bin_dir)
        logger.info(f"Installed {binary} as {link}")

        await self.smoke_test(link)
        return link

    async def smoke_test(self, executable: Path) -> None:
        """Run the self-check; stdout/stderr are inherited by the job log.

        Raises:
            SmokeTestFailedError: If the process cannot start or exits non-zero
        """
        command = [str(executable), *self.smoke_test_args]
        logger.info(f"Running {EXECUTABLE_NAME} {' '.join(self.smoke_test_args)}")
        try:
            process = await asyncio.create_subprocess_exec(*command)
            returncode = await process.wait()
        except OSError as e:
            raise SmokeTestFailedError(
                f"Could not run {' '.join(command)}: {e}",
                context={"command": command},
            ) from e

        if returncode != 0:
            raise SmokeTestFailedError(
                f"Smoke test '{' '.join(command)}' exited with code {returncode}",
                context={"command": command, "returncode": returncode},
            )
