"""Action configuration - CI inputs and runner environment.

GitHub Actions exposes ``with:`` inputs as ``INPUT_<NAME>`` environment
variables (upper-cased, hyphens kept), alongside runner variables such as
``RUNNER_TEMP``. pydantic-settings validates them once at the run boundary.
"""

import tempfile
from pathlib import Path

from pydantic import AliasChoices
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from .acquirers import DEFAULT_BUCKET_URL
from .exceptions import ConfigurationError
from .schema import FallbackPolicy


class ActionInputs(BaseSettings):
    """Validated inputs for one setup run."""

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_ignore_empty=True,
        populate_by_name=True,
    )

    artifact: str = Field(
        default="",
        validation_alias="INPUT_ARTIFACT",
        description="Artifact name, id or direct URL of a prebuilt package.",
    )
    version: str = Field(
        default="",
        validation_alias="INPUT_VERSION",
        description="Semantic version or channel name.",
    )
    if_no_artifact_found: FallbackPolicy = Field(
        default=FallbackPolicy.WARN,
        validation_alias=AliasChoices("INPUT_IF-NO-ARTIFACT-FOUND", "INPUT_IF_NO_ARTIFACT_FOUND"),
        description="Behaviour when the artifact cannot be installed.",
    )
    channels_url: str | None = Field(
        default=None,
        validation_alias="INPUT_CHANNELS-URL",
        description="Optional live channel listing (JSON array of names).",
    )
    bucket_url: str = Field(
        default=DEFAULT_BUCKET_URL,
        min_length=8,
        validation_alias="INPUT_BUCKET-URL",
        description="Base URL of release channels and version indexes.",
    )
    runner_temp: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        validation_alias="RUNNER_TEMP",
        description="Root for per-run temporary directories.",
    )
    install_root: Path | None = Field(
        default=None,
        validation_alias="INPUT_INSTALL-ROOT",
        description="Root of the stable bin directory (default: <runner_temp>/setup-fluence).",
    )
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("INPUT_GITHUB-TOKEN", "GITHUB_TOKEN"),
    )
    github_repository: str | None = Field(
        default=None,
        validation_alias="GITHUB_REPOSITORY",
    )
    github_run_id: str | None = Field(
        default=None,
        validation_alias="GITHUB_RUN_ID",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_API_URL",
    )
    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        validation_alias="INPUT_HTTP-TIMEOUT",
    )

    @field_validator("if_no_artifact_found", mode="before")
    @classmethod
    def _normalize_policy(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or FallbackPolicy.WARN.value
        return value

    @property
    def bin_dir(self) -> Path:
        root = self.install_root or self.runner_temp / "setup-fluence"
        return root / "bin"


def load_inputs(**overrides) -> ActionInputs:
    """
    Read and validate action inputs from the environment.

    Args:
        **overrides: Field values taking precedence over the environment

    Returns:
        ActionInputs

    Raises:
        ConfigurationError: If any input is invalid; an unrecognized
            ``if-no-artifact-found`` lists the available options
    """
    try:
        return ActionInputs(**overrides)
    except ValidationError as e:
        for error in e.errors():
            # loc holds whichever alias matched (field name or env var name)
            field = str(error["loc"][0]).lower().replace("-", "_") if error["loc"] else ""
            if field.endswith("if_no_artifact_found"):
                options = ", ".join(p.value for p in FallbackPolicy)
                raise ConfigurationError(
                    f"Unrecognized 'if-no-artifact-found' input. Provided: {error.get('input')}. "
                    f"Available options: {options}",
                    context={"provided": error.get("input"), "options": [p.value for p in FallbackPolicy]},
                ) from e
        raise ConfigurationError(f"Invalid action inputs: {e}") from e
