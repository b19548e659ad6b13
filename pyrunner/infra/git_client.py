# -----------------------------------------------------------------------------
# GIT INFRASTRUCTURE - GitHub Checkout
# -----------------------------------------------------------------------------
# Responsibility: Clone the application repository into the workspace.
# Uses subprocess for lean, direct git command execution.
#
# Security:
# - PAT tokens are embedded in the HTTPS credential slot only
# - Tokens are NEVER logged in plain text
# - Error output is sanitized before it leaves this module
# -----------------------------------------------------------------------------

import os
import shutil
import subprocess
from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console()

GITHUB_HOST = "github.com"


class GitError(Exception):
    """Raised when a Git operation fails."""

    pass


class GitProvider:
    """
    Lean Git operations wrapper using subprocess.

    Why subprocess over gitpython:
    - No additional dependency
    - The runner image already ships the git CLI
    - Easier to debug in containers
    """

    def __init__(self, workspace_path: str | Path, token: str | None = None, depth: int = 1) -> None:
        """
        Initialize Git provider with workspace path.

        Args:
            workspace_path: Directory the repository is cloned into (must be empty).
                Relative paths are resolved against the current directory.
            token: Optional GitHub Personal Access Token for private repos.
            depth: Clone depth; 0 means full history.
        """
        self._workspace = Path(workspace_path).resolve()
        self._token = token or None
        self._depth = depth

    def _run(self, cmd: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess:
        """
        Run a git command.

        Raises:
            GitError: If the command fails (message sanitized).
        """
        env = dict(os.environ)
        # Never block on an interactive credential prompt
        env["GIT_TERMINAL_PROMPT"] = "0"

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                env=env,
            )
        except FileNotFoundError as e:
            if shutil.which(cmd[0]) is None:
                raise GitError(f"{cmd[0]} executable not found on PATH") from e
            raise GitError(f"Could not run {cmd[0]} in {cwd}: {e.strerror or e}") from e
        except subprocess.SubprocessError as e:
            raise GitError(f"Git subprocess error: {self._sanitize_output(str(e))}")

        if result.returncode != 0:
            error_msg = self._sanitize_output(
                (result.stderr or result.stdout or "Unknown error").strip()
            )
            raise GitError(f"Git command failed: {error_msg}")

        return result

    def _sanitize_output(self, text: str) -> str:
        """Remove any sensitive data from output before logging."""
        if self._token and self._token in text:
            text = text.replace(self._token, "[REDACTED]")
        return text

    def remote_url(self, host_path: str, redact: bool = False) -> str:
        """
        Build the HTTPS clone URL.

        Format: https://<token>@github.com/<org>/<repo>.git
        """
        if self._token:
            credential = "[REDACTED]" if redact else self._token
            return f"https://{credential}@{GITHUB_HOST}/{host_path}.git"
        return f"https://{GITHUB_HOST}/{host_path}.git"

    def clone_command(self, host_path: str, branch: str = "", redact: bool = False) -> list[str]:
        """The git clone argv for host_path at branch (remote default if empty)."""
        cmd = ["git", "clone"]
        if self._depth > 0:
            cmd += ["--depth", str(self._depth)]
        if branch:
            cmd += ["-b", branch]
        cmd += [self.remote_url(host_path, redact=redact), str(self._workspace)]
        return cmd

    def clone(self, host_path: str, branch: str = "") -> str:
        """
        Clone github.com/<host_path> into the workspace.

        Args:
            host_path: "org/repo"
            branch: Branch or tag to check out (remote default if empty)

        Returns:
            The short commit hash that was checked out (empty if the
            repository has no commits yet).

        Raises:
            GitError: If the clone fails (auth, not found, network).
        """
        safe_url = self.remote_url(host_path, redact=True)
        if branch:
            console.print(f"[cyan][GIT] Cloning {safe_url} (branch: {branch})...[/cyan]")
        else:
            console.print(f"[cyan][GIT] Cloning {safe_url}...[/cyan]")

        self._run(self.clone_command(host_path, branch), cwd=self._workspace.parent)

        try:
            commit = self.head_commit()
        except GitError as e:
            # Empty repositories have no HEAD; the clone itself still succeeded
            console.print(
                f"[yellow][GIT] Cloned {host_path}, no commit to report: {escape(str(e))}[/yellow]"
            )
            return ""

        console.print(f"[green][GIT] Checked out {host_path}@{commit}[/green]")
        return commit

    def head_commit(self) -> str:
        """Short hash of the checked-out commit."""
        result = self._run(["git", "rev-parse", "--short", "HEAD"], cwd=self._workspace)
        return result.stdout.strip()
