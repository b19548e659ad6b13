# -----------------------------------------------------------------------------
# THE LAUNCHER - PROCESS REPLACEMENT
# -----------------------------------------------------------------------------
# Responsibility: Turn an ApplicationProfile into a server command and hand
# the process over to it. After exec, signals, lifecycle and restarts belong
# to the application; the runner no longer exists.
#
# Every network server binds the wildcard address on the profile's port.
# Gunicorn with an explicit config file takes its bind from that file.
# -----------------------------------------------------------------------------

import os
import subprocess
import sys
from typing import NoReturn

from rich.console import Console
from rich.markup import escape

from pyrunner.domain.errors import BootstrapError
from pyrunner.domain.models import ApplicationProfile, LaunchCommand, ServerKind

console = Console()

BIND_HOST = "0.0.0.0"

# Windows has no real exec: the new image would not keep our PID or console
CAN_REPLACE_PROCESS = os.name != "nt"

SUPPORTED_FRAMEWORKS = (
    "Supported frameworks: FastAPI, Starlette, Flask, Gunicorn\n"
    "Or provide a main.py or app.py script, or a package with __main__.py."
)


class UndetectedApplication(BootstrapError):
    """Raised when detection found nothing to launch and no command was given."""

    stage = "detect"


class LaunchFailed(BootstrapError):
    """Raised when the final command cannot be executed at all."""

    stage = "launch"


def build_command(profile: ApplicationProfile, python: str = sys.executable) -> LaunchCommand:
    """
    Build the launch command for a detected profile.

    Raises:
        UndetectedApplication: If the profile is UNDETECTED.
    """
    if not profile.is_detected or profile.server is None:
        raise UndetectedApplication(
            "Could not detect application type. Please specify a command.\n"
            + SUPPORTED_FRAMEWORKS
        )

    port = str(profile.port)
    entry = profile.entrypoint

    if profile.server == ServerKind.UVICORN:
        argv = [python, "-m", "uvicorn", entry, "--host", BIND_HOST, "--port", port]
        return LaunchCommand(argv=argv)

    if profile.server == ServerKind.GUNICORN:
        argv = [python, "-m", "gunicorn", entry, "--bind", f"{BIND_HOST}:{port}"]
        return LaunchCommand(argv=argv)

    if profile.server == ServerKind.FLASK:
        argv = [python, "-m", "flask", "run", "--host", BIND_HOST, "--port", port]
        return LaunchCommand(argv=argv, env={"FLASK_APP": entry})

    if profile.server == ServerKind.GUNICORN_CONFIG:
        argv = [python, "-m", "gunicorn", "-c", profile.config_file or "", entry]
        return LaunchCommand(argv=argv)

    if profile.server == ServerKind.PYTHON_SCRIPT:
        return LaunchCommand(argv=[python, entry])

    return LaunchCommand(argv=[python, "-m", entry])


def replace_process(command: LaunchCommand) -> NoReturn:
    """
    Exec command in place of the current process.

    Falls back to spawn-and-forward-exit-code where exec can't replace the
    process image (Windows).
    """
    env = dict(os.environ)
    env.update(command.env)

    sys.stdout.flush()
    sys.stderr.flush()

    try:
        if CAN_REPLACE_PROCESS:
            os.execvpe(command.argv[0], command.argv, env)
        process = subprocess.Popen(command.argv, env=env)
    except OSError as e:
        raise LaunchFailed(f"Could not start {command.argv[0]}: {e}", command=command.display) from e

    try:
        returncode = process.wait()
    except KeyboardInterrupt:
        # Child got the same console Ctrl-C; wait for it to exit on its own
        returncode = process.wait()
    sys.exit(returncode)


def launch(profile: ApplicationProfile) -> NoReturn:
    """Build the command for profile and replace the process with it."""
    command = build_command(profile)
    console.print(f"[bold green][LAUNCH] Starting with: {escape(command.display)}[/bold green]")
    replace_process(command)


def exec_explicit(argv: list[str]) -> NoReturn:
    """Run a user-supplied command verbatim, bypassing detection."""
    command = LaunchCommand(argv=argv)
    console.print(f"[bold green][LAUNCH] Executing: {escape(command.display)}[/bold green]")
    replace_process(command)
