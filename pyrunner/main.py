# -----------------------------------------------------------------------------
# PYTHON RUNNER - CONTAINER ENTRYPOINT
# -----------------------------------------------------------------------------
# Responsibility: The single entry command of the runner image.
#
# Usage:
#   python-runner            # fetch, install, detect, launch
#   python-runner auto       # same as above
#   python-runner <cmd> ...  # fetch, install, then exec <cmd> verbatim
#
# Exit status 1 on any bootstrap failure. On success the process is replaced
# by the application and never returns here.
# -----------------------------------------------------------------------------

import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from pyrunner import __version__
from pyrunner.core.bootstrap import Bootstrapper
from pyrunner.domain.errors import BootstrapError

SYSTEM_NAME = "PYTHON RUNNER"
VERSION = __version__

console = Console()


def report_failure(error: BootstrapError) -> None:
    """Print a single diagnostic naming the stage and command."""
    body = f"[bold red]{escape(str(error))}[/bold red]"
    if error.command:
        body += f"\n\n[dim]Command:[/dim] {escape(error.command)}"
    console.print(
        Panel(body, title=f"BOOTSTRAP FAILED ({error.stage.upper()})", border_style="red")
    )


def main(argv: list[str] | None = None) -> int:
    """Run the bootstrap. Only returns on failure."""
    args = sys.argv[1:] if argv is None else argv

    # Local .env for running outside the container; real env vars win
    load_dotenv(Path.cwd() / ".env")

    console.print(f"[bold green]{SYSTEM_NAME} v{VERSION}[/bold green]")

    try:
        Bootstrapper().run(args)
    except BootstrapError as e:
        report_failure(e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
