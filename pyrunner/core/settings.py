# -----------------------------------------------------------------------------
# RUNNER SETTINGS
# -----------------------------------------------------------------------------
# Responsibility: Read and validate the environment variables that configure
# a bootstrap run. Settings are re-read after the config service has injected
# variables, so an injected PORT still applies.
# -----------------------------------------------------------------------------

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from pyrunner.domain.errors import BootstrapError

DEFAULT_PORT = 8080
DEFAULT_WORKSPACE = Path("/usercontent")

# Environment variable -> settings field
ENV_FIELDS = {
    "SOURCE_URL": "source_url",
    "GITHUB_URL": "github_url",
    "GITHUB_TOKEN": "github_token",
    "S3_ENDPOINT_URL": "s3_endpoint_url",
    "OSC_ACCESS_TOKEN": "osc_access_token",
    "CONFIG_SVC": "config_svc",
    "PORT": "port",
    "RUNNER_WORKSPACE": "workspace",
    "RUNNER_GIT_DEPTH": "git_depth",
}


class InvalidSettings(BootstrapError):
    """Raised when an environment variable holds an unusable value."""

    stage = "configure"


class RunnerSettings(BaseModel):
    """
    Validated runner configuration.

    Empty environment variables count as unset, the same way the
    `${VAR:-default}` shell idiom treats them.
    """

    source_url: str = ""
    github_url: str = ""
    github_token: str | None = Field(default=None, repr=False)
    s3_endpoint_url: str | None = None
    osc_access_token: str | None = Field(default=None, repr=False)
    config_svc: str | None = None
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    workspace: Path = DEFAULT_WORKSPACE
    git_depth: int = Field(default=1, ge=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RunnerSettings":
        """
        Build settings from an environment mapping (os.environ by default).

        Raises:
            InvalidSettings: If a value fails validation (e.g. PORT=abc).
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[name].strip()
            for name, field in ENV_FIELDS.items()
            if environ.get(name, "").strip()
        }

        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{_env_name(err['loc'][0])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidSettings(f"Invalid runner configuration: {problems}") from e

    @property
    def has_config_service(self) -> bool:
        return bool(self.osc_access_token and self.config_svc)


def _env_name(field: str) -> str:
    for name, candidate in ENV_FIELDS.items():
        if candidate == field:
            return name
    return field
