# -----------------------------------------------------------------------------
# SHELL INFRASTRUCTURE - EXTERNAL COMMANDS
# -----------------------------------------------------------------------------
# Responsibility: The "run an external command, blocking" capability used by
# the installer, the setup hook and the config service.
#
# The core only depends on the CommandRunner protocol, so a different package
# manager or a recording fake (tests) can be swapped in without touching the
# detector or installer logic.
# -----------------------------------------------------------------------------

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from rich.console import Console

console = Console()

# Exit status reported when the executable itself can't be found (as a shell would)
COMMAND_NOT_FOUND = 127


class CommandFailed(Exception):
    """Raised when an external command exits non-zero or cannot start."""

    def __init__(self, argv: list[str], returncode: int, output: str = "") -> None:
        super().__init__(f"Command exited with status {returncode}: {' '.join(argv)}")
        self.argv = argv
        self.returncode = returncode
        self.output = output


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    returncode: int
    stdout: str = ""


class CommandRunner(Protocol):
    """Protocol for anything that can run a blocking external command."""

    def run(
        self,
        argv: list[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        capture: bool = False,
    ) -> CommandResult:
        """Run argv to completion. Raises CommandFailed on non-zero exit."""
        ...


class SubprocessRunner:
    """
    CommandRunner backed by subprocess.

    Output streams straight to the container log unless capture=True.
    No timeout: a hung command is the orchestrator's problem.
    """

    def run(
        self,
        argv: list[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        capture: bool = False,
    ) -> CommandResult:
        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                env=env,
                capture_output=capture,
                text=True,
            )
        except FileNotFoundError:
            console.print(f"[red][SHELL] Executable not found: {argv[0]}[/red]")
            raise CommandFailed(argv, COMMAND_NOT_FOUND)
        except OSError as e:
            raise CommandFailed(argv, COMMAND_NOT_FOUND, str(e))

        if result.returncode != 0:
            output = (result.stderr or result.stdout or "") if capture else ""
            raise CommandFailed(argv, result.returncode, output)

        return CommandResult(returncode=result.returncode, stdout=result.stdout or "")
