# -----------------------------------------------------------------------------
# THE INSTALLER - DEPENDENCIES & SETUP HOOK
# -----------------------------------------------------------------------------
# Responsibility: Install the application's declared dependencies with pip,
# then run the optional setup.sh hook.
#
# Order:
# 1. Primary manifest, first match wins: pyproject.toml > requirements.txt > setup.py
# 2. requirements-dev.txt (if present)
# 3. setup.sh (if present)
#
# Any non-zero exit is fatal. Having no manifest at all is only a warning.
# -----------------------------------------------------------------------------

import stat
import sys
from pathlib import Path

from rich.console import Console

from pyrunner.core.manifests import DEV_REQUIREMENTS, REQUIREMENTS, SETUP_HOOK, scan_manifests
from pyrunner.domain.errors import BootstrapError
from pyrunner.domain.models import ManifestSet
from pyrunner.infra.shell import CommandFailed, CommandRunner

console = Console()


class DependencyInstallFailed(BootstrapError):
    """Raised when pip exits non-zero."""

    stage = "install"


class SetupHookFailed(BootstrapError):
    """Raised when setup.sh exits non-zero."""

    stage = "setup"


class DependencyInstaller:
    """
    Installs workspace dependencies through a CommandRunner.

    pip is invoked as `<interpreter> -m pip` so packages land in the same
    environment the launcher later runs the application with.
    """

    def __init__(self, runner: CommandRunner, python: str = sys.executable) -> None:
        self._runner = runner
        self._pip = [python, "-m", "pip", "install", "--no-cache-dir"]

    def install(self, workspace: Path) -> ManifestSet:
        """
        Install everything the workspace declares.

        Returns:
            The ManifestSet that was found.

        Raises:
            DependencyInstallFailed: pip failed.
            SetupHookFailed: setup.sh failed.
        """
        manifests = scan_manifests(workspace)
        console.print("[cyan][INSTALL] Installing Python dependencies...[/cyan]")

        if manifests.pyproject:
            console.print("[cyan][INSTALL] Found pyproject.toml, installing with pip...[/cyan]")
            self._pip_install(workspace, ["."])
        elif manifests.requirements:
            console.print("[cyan][INSTALL] Found requirements.txt, installing dependencies...[/cyan]")
            self._pip_install(workspace, ["-r", REQUIREMENTS])
        elif manifests.setup_py:
            console.print("[cyan][INSTALL] Found setup.py, installing package...[/cyan]")
            self._pip_install(workspace, ["."])
        else:
            console.print(
                "[yellow][INSTALL] Warning: No requirements.txt, pyproject.toml, or setup.py found[/yellow]"
            )

        if manifests.dev_requirements:
            console.print("[cyan][INSTALL] Installing development dependencies...[/cyan]")
            self._pip_install(workspace, ["-r", DEV_REQUIREMENTS])

        if manifests.setup_hook:
            self.run_setup_hook(workspace)

        console.print("[green][INSTALL] Dependencies ready[/green]")
        return manifests

    def _pip_install(self, workspace: Path, args: list[str]) -> None:
        argv = self._pip + args
        try:
            self._runner.run(argv, cwd=workspace)
        except CommandFailed as e:
            raise DependencyInstallFailed(
                f"pip exited with status {e.returncode}", command=" ".join(argv)
            ) from e

    def run_setup_hook(self, workspace: Path) -> None:
        """Make setup.sh executable and run it from the workspace."""
        hook = workspace / SETUP_HOOK
        console.print(f"[cyan][INSTALL] Running {SETUP_HOOK}...[/cyan]")

        hook.chmod(hook.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

        argv = [f"./{SETUP_HOOK}"]
        try:
            self._runner.run(argv, cwd=workspace)
        except CommandFailed as e:
            raise SetupHookFailed(
                f"{SETUP_HOOK} exited with status {e.returncode}", command=" ".join(argv)
            ) from e
