"""CI runner facilities - Job log, PATH export, failure reporting.

Log records are written as GitHub Actions workflow commands:
DEBUG -> ``::debug::``, INFO -> plain line, WARNING -> ``::warning::``,
ERROR -> ``::error::``.
"""

import logging
import os
import sys
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "setup_fluence"


def escape_data(message: str) -> str:
    """Escape a workflow command payload so multi-line messages stay one command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandHandler(logging.StreamHandler):
    """Logging handler emitting GitHub Actions workflow commands."""

    def __init__(self, stream: TextIO | None = None):
        super().__init__(stream or sys.stdout)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"::error::{escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{escape_data(message)}"
        if record.levelno >= logging.INFO:
            return message
        return f"::debug::{escape_data(message)}"


def configure_logging(stream: TextIO | None = None) -> logging.Handler:
    """Attach a WorkflowCommandHandler to the package logger (idempotent)."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in package_logger.handlers:
        if isinstance(handler, WorkflowCommandHandler):
            return handler

    handler = WorkflowCommandHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    package_logger.propagate = False
    return handler


class ActionsRunner:
    """
    Side effects the CI runner exposes to a step.

    PATH additions go both to the current process (so the smoke test sees
    them) and to the ``GITHUB_PATH`` file (so later steps see them).
    """

    def __init__(self, environ: dict[str, str] | None = None):
        self.environ = environ if environ is not None else os.environ
        self.failed = False

    def add_path(self, directory: Path) -> None:
        path_file = self.environ.get("GITHUB_PATH")
        if path_file:
            with open(path_file, "a", encoding="utf-8") as f:
                f.write(f"{directory}{os.linesep}")

        current = self.environ.get("PATH", "")
        self.environ["PATH"] = f"{directory}{os.pathsep}{current}" if current else str(directory)
        logger.debug(f"Added {directory} to PATH")

    def set_failed(self, message: str) -> None:
        """Mark the step failed; the exit code is reported by the caller."""
        self.failed = True
        logger.error(message)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
