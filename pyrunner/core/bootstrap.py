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
# THE BOOTSTRAPPER - PIPELINE ORCHESTRATOR
# -----------------------------------------------------------------------------
# Runs the bootstrap once, strictly in order:
#
#   _phase_resolve   -> SourceLocator
#   _phase_fetch     -> clean workspace, cwd set
#   _phase_configure -> config-service env injection, settings re-read
#   _phase_install   -> pip + setup.sh
#   _phase_detect    -> ApplicationProfile   (auto mode only)
#   launch / exec    -> process replaced
#
# Any stage failure raises a BootstrapError and nothing after it runs.
# -----------------------------------------------------------------------------

from pathlib import Path
from typing import NoReturn

from rich.console import Console

from pyrunner.core.config_service import load_config_env
from pyrunner.core.detector import detect
from pyrunner.core.fetcher import SourceFetcher
from pyrunner.core.installer import DependencyInstaller
from pyrunner.core.launcher import exec_explicit, launch
from pyrunner.core.resolver import locator_from_env, resolve
from pyrunner.core.settings import RunnerSettings
from pyrunner.domain.models import ApplicationProfile, SourceLocator
from pyrunner.infra.shell import CommandRunner, SubprocessRunner

console = Console()

AUTO_SENTINEL = "auto"


def is_auto(args: list[str]) -> bool:
    """No arguments, or the literal `auto`, selects detection."""
    return not args or args[0] == AUTO_SENTINEL


class Bootstrapper:
    """
    The bootstrap pipeline.

    Collaborators can be injected for tests; by default everything talks
    to the real environment, git, S3 and pip.
    """

    def __init__(
        self,
        settings: RunnerSettings | None = None,
        runner: CommandRunner | None = None,
        fetcher: SourceFetcher | None = None,
    ) -> None:
        self._settings = settings or RunnerSettings.from_env()
        self._runner = runner or SubprocessRunner()
        self._fetcher = fetcher or SourceFetcher(
            self._settings.workspace, git_depth=self._settings.git_depth
        )

    @property
    def settings(self) -> RunnerSettings:
        return self._settings

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def run(self, args: list[str]) -> NoReturn:
        """
        Fetch, configure, install, then launch.

        Args:
            args: CLI arguments. Empty or ["auto"] runs detection; anything
                else is executed verbatim once the workspace is ready.
        """
        workspace = self.prepare()

        if not is_auto(args):
            console.print("[cyan][RUNNER] Explicit command given, skipping detection[/cyan]")
            exec_explicit(args)
        else:
            console.print("[cyan][RUNNER] Starting application...[/cyan]")
            launch(self._phase_detect(workspace))

    def prepare(self) -> Path:
        """Run every stage up to (not including) detection."""
        source = self._phase_resolve()
        workspace = self._phase_fetch(source)
        self._phase_configure(workspace)
        self._phase_install(workspace)
        return workspace

    # =========================================================================
    # PHASES
    # =========================================================================

    def _phase_resolve(self) -> SourceLocator:
        locator = locator_from_env(self._settings)
        return resolve(
            locator,
            github_token=self._settings.github_token,
            s3_endpoint_url=self._settings.s3_endpoint_url,
        )

    def _phase_fetch(self, source: SourceLocator) -> Path:
        return self._fetcher.fetch(source)

    def _phase_configure(self, workspace: Path) -> None:
        injected = load_config_env(self._settings, self._runner, cwd=workspace)
        if "PORT" in injected:
            # An injected PORT overrides the one the runner started with
            port = RunnerSettings.from_env().port
            self._settings = self._settings.model_copy(update={"port": port})

    def _phase_install(self, workspace: Path) -> None:
        DependencyInstaller(self._runner).install(workspace)

    def _phase_detect(self, workspace: Path) -> ApplicationProfile:
        return detect(workspace, port=self._settings.port)
