"""
Tests for the Bootstrapper pipeline.

Git, S3 and pip are replaced with fakes; replace_process is patched so the
test process is never exec'd away.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from pyrunner.core.bootstrap import Bootstrapper, is_auto
from pyrunner.core.config_service import ConfigServiceFailed
from pyrunner.core.installer import DependencyInstallFailed
from pyrunner.core.launcher import UndetectedApplication
from pyrunner.core.resolver import MissingSourceLocator
from pyrunner.core.settings import RunnerSettings
from pyrunner.domain.models import OriginKind

FASTAPI_PROJECT = {
    "requirements.txt": "fastapi>=0.100\nuvicorn\n",
    "main.py": "from fastapi import FastAPI\napp = FastAPI()\n",
}


@pytest.fixture
def make_fetcher(make_project):
    """A fake SourceFetcher that 'fetches' the given files into the workspace."""

    def _make(files):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = lambda source: make_project(files)
        return fetcher

    return _make


@pytest.fixture
def restore_port(monkeypatch):
    """Undo a PORT injected through the config service."""
    monkeypatch.setenv("PORT", "placeholder")
    monkeypatch.delenv("PORT")


class TestIsAuto:
    """Tests for the detection sentinel."""

    @pytest.mark.parametrize("args", [[], ["auto"], ["auto", "extra"]])
    def test_auto(self, args):
        assert is_auto(args)

    @pytest.mark.parametrize("args", [["gunicorn", "app:app"], ["python", "worker.py"], ["AUTO"]])
    def test_explicit(self, args):
        assert not is_auto(args)


class TestAutoMode:
    """Fetch, install, detect, launch."""

    def test_fastapi_end_to_end(self, workspace, recording_runner, make_fetcher):
        settings = RunnerSettings(source_url="https://github.com/acme/api", workspace=workspace)
        fetcher = make_fetcher(FASTAPI_PROJECT)

        with patch("pyrunner.core.launcher.replace_process") as mock_replace:
            Bootstrapper(settings, runner=recording_runner, fetcher=fetcher).run([])

        source = fetcher.fetch.call_args.args[0]
        assert source.kind == OriginKind.GIT
        assert source.host_path == "acme/api"
        assert recording_runner.commands == [
            f"{sys.executable} -m pip install --no-cache-dir -r requirements.txt"
        ]

        command = mock_replace.call_args.args[0]
        assert command.argv[1:] == ["-m", "uvicorn", "main:app", "--host", "0.0.0.0", "--port", "8080"]

    def test_auto_keyword(self, workspace, recording_runner, make_fetcher):
        settings = RunnerSettings(github_url="https://github.com/acme/api", workspace=workspace)

        with patch("pyrunner.core.launcher.replace_process") as mock_replace:
            Bootstrapper(settings, recording_runner, make_fetcher(FASTAPI_PROJECT)).run(["auto"])

        assert "uvicorn" in mock_replace.call_args.args[0].argv

    def test_undetected(self, workspace, recording_runner, make_fetcher):
        settings = RunnerSettings(source_url="s3://bucket/app.zip", workspace=workspace)
        fetcher = make_fetcher({"requirements.txt": "requests\n", "utils.py": "x = 1\n"})

        with patch("pyrunner.core.launcher.replace_process") as mock_replace:
            with pytest.raises(UndetectedApplication) as exc_info:
                Bootstrapper(settings, recording_runner, fetcher).run([])

        assert "Supported frameworks" in str(exc_info.value)
        mock_replace.assert_not_called()

    def test_injected_port_honored(self, workspace, make_runner, make_fetcher, restore_port):
        settings = RunnerSettings(
            source_url="https://github.com/acme/api",
            osc_access_token="tok",
            config_svc="api-config",
            workspace=workspace,
        )
        runner = make_runner(stdout="export PORT=9000\n")

        with patch("pyrunner.core.launcher.replace_process") as mock_replace:
            Bootstrapper(settings, runner, make_fetcher(FASTAPI_PROJECT)).run([])

        assert runner.commands[0].endswith("config-to-env api-config")
        assert mock_replace.call_args.args[0].argv[-1] == "9000"


class TestExplicitMode:
    """An explicit command skips detection but not fetch or install."""

    def test_command_executed_verbatim(self, workspace, recording_runner, make_fetcher):
        settings = RunnerSettings(source_url="https://github.com/acme/api", workspace=workspace)
        fetcher = make_fetcher({"requirements.txt": "celery\n", "setup.sh": "#!/bin/sh\n"})

        with patch("pyrunner.core.launcher.replace_process") as mock_replace:
            with patch("pyrunner.core.bootstrap.detect") as mock_detect:
                Bootstrapper(settings, recording_runner, fetcher).run(["celery", "-A", "tasks", "worker"])

        fetcher.fetch.assert_called_once()
        assert recording_runner.commands[-1] == "./setup.sh"
        mock_detect.assert_not_called()
        command = mock_replace.call_args.args[0]
        assert command.argv == ["celery", "-A", "tasks", "worker"]
        assert command.env == {}


class TestFailures:
    """A failing stage stops everything after it."""

    def test_missing_locator_before_fetch(self, workspace, recording_runner, make_fetcher):
        fetcher = make_fetcher(FASTAPI_PROJECT)
        with pytest.raises(MissingSourceLocator):
            Bootstrapper(RunnerSettings(workspace=workspace), recording_runner, fetcher).run([])
        fetcher.fetch.assert_not_called()

    def test_config_failure_stops_install(self, workspace, make_runner, make_fetcher):
        settings = RunnerSettings(
            source_url="https://github.com/acme/api",
            osc_access_token="tok",
            config_svc="api-config",
            workspace=workspace,
        )
        runner = make_runner(fail_on="config-to-env")

        with pytest.raises(ConfigServiceFailed):
            Bootstrapper(settings, runner, make_fetcher(FASTAPI_PROJECT)).run([])
        assert not any("pip" in command for command in runner.commands)

    def test_install_failure_stops_launch(self, workspace, make_runner, make_fetcher):
        settings = RunnerSettings(source_url="https://github.com/acme/api", workspace=workspace)

        with patch("pyrunner.core.launcher.replace_process") as mock_replace:
            with pytest.raises(DependencyInstallFailed):
                Bootstrapper(settings, make_runner(fail_on="pip"), make_fetcher(FASTAPI_PROJECT)).run(
                    ["python", "main.py"]
                )
        mock_replace.assert_not_called()
