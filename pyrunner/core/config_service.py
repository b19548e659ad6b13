# -----------------------------------------------------------------------------
# CONFIG SERVICE - ENVIRONMENT INJECTION
# -----------------------------------------------------------------------------
# Responsibility: Pull application environment variables from an external
# application-config service before dependencies are installed.
#
# The service is queried through its CLI, which prints dotenv-style
# `export KEY=value` lines. Only variable NAMES are ever logged.
# -----------------------------------------------------------------------------

import io
import os
from pathlib import Path

from dotenv import dotenv_values
from rich.console import Console

from pyrunner.core.settings import RunnerSettings
from pyrunner.domain.errors import BootstrapError
from pyrunner.infra.shell import CommandFailed, CommandRunner

console = Console()

CONFIG_CLI = ["npx", "-y", "@osaas/cli@latest", "web", "config-to-env"]


class ConfigServiceFailed(BootstrapError):
    """Raised when the config service CLI fails."""

    stage = "configure"


def parse_env_lines(text: str) -> dict[str, str]:
    """Parse dotenv/`export` lines into a dict, dropping valueless keys."""
    values = dotenv_values(stream=io.StringIO(text))
    return {key: value for key, value in values.items() if value is not None}


def load_config_env(
    settings: RunnerSettings,
    runner: CommandRunner,
    cwd: Path | None = None,
) -> dict[str, str]:
    """
    Inject variables from the config service into os.environ.

    Skipped unless both OSC_ACCESS_TOKEN and CONFIG_SVC are set.

    Returns:
        The injected variables (empty when skipped).

    Raises:
        ConfigServiceFailed: If the CLI exits non-zero or can't start.
    """
    if not settings.has_config_service:
        console.print("[cyan][CONFIG] No config service configured, skipping[/cyan]")
        return {}

    argv = CONFIG_CLI + [settings.config_svc]
    console.print(
        f"[cyan][CONFIG] Loading environment variables from application config service "
        f"'{settings.config_svc}'[/cyan]"
    )

    try:
        result = runner.run(argv, cwd=cwd, capture=True)
    except CommandFailed as e:
        raise ConfigServiceFailed(
            f"Config service CLI failed with status {e.returncode}", command=" ".join(argv)
        ) from e

    injected = parse_env_lines(result.stdout)
    os.environ.update(injected)

    if injected:
        console.print(f"[green][CONFIG] Injected: {', '.join(sorted(injected))}[/green]")
    else:
        console.print("[yellow][CONFIG] Config service returned no variables[/yellow]")
    return injected
