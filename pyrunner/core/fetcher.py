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
# THE FETCHER - SOURCE ACQUISITION
# -----------------------------------------------------------------------------
# Responsibility: Populate a clean workspace with the application's files.
#
# Strategies:
# - Git: clone (shallow by default) from GitHub
# - S3: download a zip archive, extract it, drop shipped environments
#
# The workspace is wiped before every fetch. It is never synced
# incrementally, so nothing from a previous run can survive.
# -----------------------------------------------------------------------------

import os
import shutil
import tempfile
import zipfile
from pathlib import Path

from rich.console import Console

from pyrunner.domain.errors import BootstrapError
from pyrunner.domain.models import SourceLocator
from pyrunner.infra.git_client import GitError, GitProvider
from pyrunner.infra.s3_client import ObjectStore, ObjectStoreError

console = Console()

# Directories an archive must not ship: they would shadow the environment we build
BUILD_ARTIFACT_DIRS = ("__pycache__", ".venv", "venv")


class GitCloneFailed(BootstrapError):
    """Raised when the repository cannot be cloned."""

    stage = "fetch"


class ArchiveFetchFailed(BootstrapError):
    """Raised when the archive cannot be downloaded or extracted."""

    stage = "fetch"


def reset_workspace(workspace: Path) -> None:
    """
    Remove everything inside workspace (dot-files included).

    The directory itself is kept: it is usually a volume mount.
    """
    workspace.mkdir(parents=True, exist_ok=True)

    removed = 0
    for child in workspace.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
        removed += 1

    if removed:
        console.print(f"[yellow][FETCH] Cleared {removed} entries from {workspace}[/yellow]")


def purge_build_artifacts(root: Path) -> list[Path]:
    """
    Recursively delete bytecode caches and virtual environments under root.

    Returns:
        The directories that were removed.
    """
    removed: list[Path] = []
    # Top-down walk so pruned directories are never descended into
    for dirpath, dirnames, _ in os.walk(root):
        for name in list(dirnames):
            if name in BUILD_ARTIFACT_DIRS:
                target = Path(dirpath) / name
                shutil.rmtree(target, ignore_errors=True)
                dirnames.remove(name)
                removed.append(target)

    if removed:
        console.print(f"[yellow][FETCH] Removed {len(removed)} shipped cache/venv directories[/yellow]")
    return removed


def extract_archive(archive: Path, workspace: Path) -> int:
    """
    Extract a zip archive into workspace.

    Unix permission bits stored in the archive are restored, so shipped
    helper scripts stay executable.

    Returns:
        Number of members extracted.

    Raises:
        ArchiveFetchFailed: If the file is not a readable zip archive.
    """
    try:
        with zipfile.ZipFile(archive) as zf:
            members = zf.infolist()
            for info in members:
                extracted = zf.extract(info, workspace)
                mode = (info.external_attr >> 16) & 0o777
                if mode and not info.is_dir():
                    os.chmod(extracted, mode)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        raise ArchiveFetchFailed(f"Could not extract archive: {e}") from e

    console.print(f"[green][FETCH] Extracted {len(members)} files into {workspace}[/green]")
    return len(members)


class SourceFetcher:
    """
    Fetches a resolved SourceLocator into the workspace.

    Collaborators are created per fetch unless injected (tests inject fakes).
    """

    def __init__(
        self,
        workspace: Path,
        git_depth: int = 1,
        git_provider: GitProvider | None = None,
        object_store: ObjectStore | None = None,
    ) -> None:
        self._workspace = Path(workspace).resolve()
        self._git_depth = git_depth
        self._git_provider = git_provider
        self._object_store = object_store

    def fetch(self, source: SourceLocator) -> Path:
        """
        Reset the workspace, fetch source into it and chdir there.

        Returns:
            The workspace path.

        Raises:
            GitCloneFailed: Git strategy failed.
            ArchiveFetchFailed: S3 strategy failed.
        """
        console.print(f"[cyan][FETCH] Fetching {source.describe()}[/cyan]")
        reset_workspace(self._workspace)

        if source.is_git:
            self._fetch_git(source)
        else:
            self._fetch_archive(source)

        os.chdir(self._workspace)
        console.print(f"[green][FETCH] Workspace ready: {self._workspace}[/green]")
        return self._workspace

    def _fetch_git(self, source: SourceLocator) -> None:
        provider = self._git_provider or GitProvider(
            self._workspace, token=source.auth_token, depth=self._git_depth
        )
        try:
            provider.clone(source.host_path, source.branch)
        except GitError as e:
            command = " ".join(provider.clone_command(source.host_path, source.branch, redact=True))
            raise GitCloneFailed(str(e), command=command) from e

    def _fetch_archive(self, source: SourceLocator) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix="source-", suffix=".zip")
        os.close(fd)
        archive = Path(tmp_name)

        try:
            try:
                store = self._object_store or ObjectStore(endpoint_url=source.endpoint_override)
                store.download(source.bucket_uri, archive)
            except ObjectStoreError as e:
                raise ArchiveFetchFailed(str(e), command=f"download {source.bucket_uri}") from e

            extract_archive(archive, self._workspace)
        finally:
            archive.unlink(missing_ok=True)

        purge_build_artifacts(self._workspace)
