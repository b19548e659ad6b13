# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# DOMAIN MODELS - BOOTSTRAP CONTRACTS
# -----------------------------------------------------------------------------
# These Pydantic models are the hand-off points of the bootstrap pipeline:
#   Resolver -> SourceLocator -> Fetcher
#   Installer -> ManifestSet
#   Detector -> ApplicationProfile -> Launcher -> LaunchCommand
#
# Each model is created once per run and discarded at process exit.
# -----------------------------------------------------------------------------

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OriginKind(str, Enum):
    """Where the application source comes from."""

    GIT = "git"
    S3 = "s3"


class RuntimeCategory(str, Enum):
    """
    Runnable application categories, in detection precedence order.

    UNDETECTED is a terminal failure state, never launched.
    """

    ASGI = "asgi"
    WSGI = "wsgi"
    GUNICORN = "gunicorn"
    SCRIPT = "script"
    PACKAGE = "package"
    UNDETECTED = "undetected"


class ServerKind(str, Enum):
    """
    The concrete process shape used to serve a category.

    WSGI apps map to either GUNICORN or FLASK depending on whether
    a production process manager is declared.
    """

    UVICORN = "uvicorn"
    GUNICORN = "gunicorn"
    FLASK = "flask"
    GUNICORN_CONFIG = "gunicorn-config"
    PYTHON_SCRIPT = "python-script"
    PYTHON_MODULE = "python-module"


class SourceLocator(BaseModel):
    """
    A classified source locator.

    Git origins fill host_path/branch/auth_token; S3 origins fill
    bucket_uri/endpoint_override. auth_token is excluded from repr so
    it can't leak through logging of the model.
    """

    model_config = ConfigDict(frozen=True)

    kind: OriginKind
    url: str = Field(..., min_length=1, description="The raw locator as supplied")

    host_path: str = Field(default="", description="organization/repository")
    branch: str = Field(default="", description="Empty means the remote default")
    auth_token: str | None = Field(default=None, repr=False)

    bucket_uri: str = Field(default="", description="s3://bucket/key")
    endpoint_override: str | None = None

    @property
    def is_git(self) -> bool:
        return self.kind == OriginKind.GIT

    def describe(self) -> str:
        """Human-readable description, safe to log."""
        if self.is_git:
            if self.branch:
                return f"{self.host_path} (branch: {self.branch})"
            return self.host_path
        if self.endpoint_override:
            return f"{self.bucket_uri} (endpoint: {self.endpoint_override})"
        return self.bucket_uri


class ManifestSet(BaseModel):
    """Which dependency manifests and hooks exist in the workspace."""

    pyproject: bool = False
    requirements: bool = False
    setup_py: bool = False
    dev_requirements: bool = False
    setup_hook: bool = False

    @property
    def has_primary(self) -> bool:
        return self.pyproject or self.requirements or self.setup_py

    @property
    def is_empty(self) -> bool:
        return not (self.has_primary or self.dev_requirements or self.setup_hook)


class ApplicationProfile(BaseModel):
    """
    The detection result consumed by the Launcher.

    Fields:
    - category: which rule matched
    - server: the process shape to launch (None when undetected)
    - entrypoint: "module:attr", "module:create_app()", a script path,
      or a package name depending on the category
    - config_file: gunicorn config path (GUNICORN category only)
    - port: bind port for the launched application
    """

    category: RuntimeCategory
    server: ServerKind | None = None
    entrypoint: str = ""
    config_file: str | None = None
    port: int = Field(default=8080, ge=1, le=65535)

    @property
    def is_detected(self) -> bool:
        return self.category != RuntimeCategory.UNDETECTED


class LaunchCommand(BaseModel):
    """A fully built process invocation."""

    argv: list[str] = Field(..., min_length=1)
    env: dict[str, str] = Field(default_factory=dict)

    @property
    def display(self) -> str:
        prefix = " ".join(f"{key}={value}" for key, value in self.env.items())
        command = " ".join(self.argv)
        return f"{prefix} {command}" if prefix else command
