"""Run boundary - Wire configuration, acquirers and installer, report the outcome.

Order of work:
1. Platform gate (before any network or filesystem access)
2. Validate inputs
3. Run the fallback orchestrator
4. Report success or the causal error to the runner
"""

import asyncio
import logging
from pathlib import Path

from .acquirers import ArtifactAcquirer
from .acquirers import ChannelAcquirer
from .acquirers import ReleaseAcquirer
from .artifacts import GitHubArtifactClient
from .config import ActionInputs
from .config import load_inputs
from .download import build_async_client
from .exceptions import FluenceSetupError
from .installer import BinaryInstaller
from .orchestrator import FallbackOrchestrator
from .platform import detect_platform
from .resolver import HttpChannelListing
from .runner import ActionsRunner
from .runner import configure_logging
from .schema import PlatformKey

logger = logging.getLogger(__name__)


async def setup(inputs: ActionInputs, platform: PlatformKey, runner: ActionsRunner) -> Path:
    """
    Resolve, acquire and install fluence for one run.

    Returns:
        Path of the installed executable

    Raises:
        FluenceSetupError: Terminal failure
    """
    async with build_async_client(inputs.http_timeout_seconds) as http:
        artifact_client = GitHubArtifactClient(
            http=http,
            token=inputs.github_token,
            repository=inputs.github_repository,
            run_id=inputs.github_run_id,
            api_url=inputs.github_api_url,
        )
        channel_listing = HttpChannelListing(http, inputs.channels_url) if inputs.channels_url else None

        orchestrator = FallbackOrchestrator(
            artifact_acquirer=ArtifactAcquirer(
                http,
                inputs.runner_temp,
                artifact_client=artifact_client,
                github_token=inputs.github_token,
            ),
            channel_acquirer=ChannelAcquirer(http, inputs.runner_temp, platform, inputs.bucket_url),
            release_acquirer=ReleaseAcquirer(http, inputs.runner_temp, platform, inputs.bucket_url),
            installer=BinaryInstaller(inputs.bin_dir, export_path=runner.add_path),
            policy=inputs.if_no_artifact_found,
            channel_listing=channel_listing,
        )
        return await orchestrator.run(artifact=inputs.artifact, version=inputs.version)


def run(runner: ActionsRunner | None = None, **overrides) -> int:
    """
    Execute the action and return its exit code.

    Args:
        runner: Runner facilities (default: real GitHub Actions environment)
        **overrides: ActionInputs field values taking precedence over the environment
    """
    runner = runner or ActionsRunner()
    try:
        platform = detect_platform()
        inputs = load_inputs(**overrides)
        installed = asyncio.run(setup(inputs, platform, runner))
        logger.info(f"fluence is available at {installed}")
    except FluenceSetupError as e:
        runner.set_failed(e.message)
    return runner.exit_code


def main() -> None:
    configure_logging()
    raise SystemExit(run())
