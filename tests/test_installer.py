"""
Tests for dependency installation and the setup hook.
"""

import os
import sys

import pytest

from pyrunner.core.installer import DependencyInstaller, DependencyInstallFailed, SetupHookFailed

PIP = f"{sys.executable} -m pip install --no-cache-dir"


class TestPrimaryManifest:
    """Only the first primary manifest is installed."""

    def test_pyproject_wins(self, make_project, recording_runner):
        ws = make_project({"pyproject.toml": "", "requirements.txt": "flask", "setup.py": ""})
        DependencyInstaller(recording_runner).install(ws)
        assert recording_runner.commands == [f"{PIP} ."]

    def test_requirements_before_setup_py(self, make_project, recording_runner):
        ws = make_project({"requirements.txt": "flask", "setup.py": ""})
        DependencyInstaller(recording_runner).install(ws)
        assert recording_runner.commands == [f"{PIP} -r requirements.txt"]

    def test_setup_py(self, make_project, recording_runner):
        ws = make_project({"setup.py": ""})
        DependencyInstaller(recording_runner).install(ws)
        assert recording_runner.commands == [f"{PIP} ."]

    def test_runs_in_workspace(self, make_project, recording_runner):
        ws = make_project({"requirements.txt": "flask"})
        DependencyInstaller(recording_runner).install(ws)
        assert recording_runner.calls[0][1] == ws

    def test_no_manifest_is_warning(self, workspace, recording_runner, capsys):
        """Missing manifests don't fail the bootstrap."""
        manifests = DependencyInstaller(recording_runner).install(workspace)
        assert manifests.is_empty
        assert recording_runner.calls == []
        assert "No requirements.txt" in capsys.readouterr().out

    def test_custom_interpreter(self, make_project, recording_runner):
        ws = make_project({"requirements.txt": ""})
        DependencyInstaller(recording_runner, python="/opt/py/bin/python").install(ws)
        assert recording_runner.calls[0][0][:3] == ["/opt/py/bin/python", "-m", "pip"]


class TestExtras:
    """Dev requirements and setup.sh always run in addition."""

    def test_full_order(self, make_project, recording_runner):
        ws = make_project(
            {
                "requirements.txt": "flask",
                "requirements-dev.txt": "pytest",
                "setup.sh": "#!/bin/sh\necho hi\n",
            }
        )
        DependencyInstaller(recording_runner).install(ws)
        assert recording_runner.commands == [
            f"{PIP} -r requirements.txt",
            f"{PIP} -r requirements-dev.txt",
            "./setup.sh",
        ]

    def test_hook_made_executable(self, make_project, recording_runner):
        ws = make_project({"setup.sh": "#!/bin/sh\n"})
        DependencyInstaller(recording_runner).install(ws)
        assert os.access(ws / "setup.sh", os.X_OK)
        assert recording_runner.calls == [(["./setup.sh"], ws)]

    def test_dev_requirements_without_primary(self, make_project, recording_runner):
        ws = make_project({"requirements-dev.txt": "pytest"})
        DependencyInstaller(recording_runner).install(ws)
        assert recording_runner.commands == [f"{PIP} -r requirements-dev.txt"]


class TestFailures:
    """Non-zero exits are fatal."""

    def test_pip_failure(self, make_project, make_runner):
        ws = make_project({"requirements.txt": "nonexistent-pkg"})
        runner = make_runner(fail_on="pip")
        with pytest.raises(DependencyInstallFailed) as exc_info:
            DependencyInstaller(runner).install(ws)
        assert "-r requirements.txt" in exc_info.value.command
        assert exc_info.value.stage == "install"

    def test_pip_failure_stops_hook(self, make_project, make_runner):
        """Nothing runs after a failed install."""
        ws = make_project({"requirements.txt": "x", "setup.sh": ""})
        runner = make_runner(fail_on="pip")
        with pytest.raises(DependencyInstallFailed):
            DependencyInstaller(runner).install(ws)
        assert "./setup.sh" not in runner.commands

    def test_hook_failure(self, make_project, make_runner):
        ws = make_project({"setup.sh": "#!/bin/sh\nexit 2\n"})
        runner = make_runner(fail_on="setup.sh", returncode=2)
        with pytest.raises(SetupHookFailed) as exc_info:
            DependencyInstaller(runner).install(ws)
        assert "status 2" in str(exc_info.value)
        assert exc_info.value.stage == "setup"
