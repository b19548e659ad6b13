"""
Pytest configuration and fixtures for Python Runner tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyrunner.infra.shell import CommandFailed, CommandResult  # noqa: E402

RUNNER_ENV_VARS = (
    "SOURCE_URL",
    "GITHUB_URL",
    "GITHUB_TOKEN",
    "S3_ENDPOINT_URL",
    "OSC_ACCESS_TOKEN",
    "CONFIG_SVC",
    "PORT",
    "RUNNER_WORKSPACE",
    "RUNNER_GIT_DEPTH",
)


class RecordingRunner:
    """CommandRunner fake: records argv/cwd and fails on request."""

    def __init__(self, stdout: str = "", fail_on: str | None = None, returncode: int = 1) -> None:
        self.calls: list[tuple[list[str], Path | None]] = []
        self._stdout = stdout
        self._fail_on = fail_on
        self._returncode = returncode

    def run(self, argv, cwd=None, env=None, capture=False):
        self.calls.append((list(argv), cwd))
        if self._fail_on and self._fail_on in " ".join(argv):
            raise CommandFailed(list(argv), self._returncode)
        return CommandResult(returncode=0, stdout=self._stdout if capture else "")

    @property
    def commands(self) -> list[str]:
        return [" ".join(argv) for argv, _ in self.calls]


@pytest.fixture(autouse=True)
def clean_runner_env(monkeypatch):
    """Keep the host's environment out of every test."""
    for name in RUNNER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path):
    """An empty workspace directory."""
    path = tmp_path / "usercontent"
    path.mkdir()
    return path


@pytest.fixture
def make_project(workspace):
    """Write {relative_path: content} into the workspace and return it."""

    def _make(files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            path = workspace / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return workspace

    return _make


@pytest.fixture
def recording_runner():
    """A CommandRunner that succeeds and records every call."""
    return RecordingRunner()


@pytest.fixture
def make_runner():
    """Factory for RecordingRunner with custom stdout/failures."""
    return RecordingRunner
