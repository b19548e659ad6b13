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
# THE DETECTOR - FRAMEWORK & ENTRYPOINT DETECTION
# -----------------------------------------------------------------------------
# Responsibility: Decide how to start the fetched project.
#
# DETECTION_RULES is evaluated top to bottom, first match wins:
#   1. ASGI     fastapi / starlette declared          -> uvicorn
#   2. WSGI     flask declared                        -> gunicorn or flask run
#   3. GUNICORN gunicorn declared + gunicorn config   -> gunicorn -c
#   4. SCRIPT   main.py / app.py                      -> python <file>
#   5. PACKAGE  <dir>/__main__.py                     -> python -m <dir>
# Nothing matched -> UNDETECTED.
#
# Entrypoint scanning is a text match, not a parser. Top-level `app = ...` and
# `application = ...` are found, as is `def create_app(` at any indentation.
# Indented, annotated (`app: FastAPI = ...`) or dynamically built apps are
# missed and fall through to the next candidate or the `main:app` default.
# -----------------------------------------------------------------------------

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from pyrunner.core.manifests import has_package
from pyrunner.domain.models import ApplicationProfile, RuntimeCategory, ServerKind

console = Console()

# Candidate modules scanned for an app object, in priority order
CANDIDATE_FILES = ("main.py", "app.py", "application.py", "server.py", "api.py")

# Structural patterns tried against each candidate, in priority order
ENTRYPOINT_PATTERNS = (
    (re.compile(r"^app\s*=", re.MULTILINE), "app"),
    (re.compile(r"^application\s*=", re.MULTILINE), "application"),
    (re.compile(r"def create_app\("), "create_app()"),
)

DEFAULT_ENTRYPOINT = "main:app"

# Conventional explicit entry modules per interface
EXPLICIT_ENTRY_FILES = {"asgi": "asgi.py", "wsgi": "wsgi.py"}

ASGI_PACKAGES = ("fastapi", "starlette")
WSGI_PACKAGE = "flask"
PROCESS_MANAGER = "gunicorn"

# First existing file wins when several are present
GUNICORN_CONFIG_FILES = ("gunicorn_config.py", "gunicorn.conf.py")

SCRIPT_FILES = ("main.py", "app.py")

PACKAGE_MAIN = "__main__.py"


def scan_entrypoint(source: str) -> str | None:
    """Return the app attribute found in source text, or None."""
    for pattern, attribute in ENTRYPOINT_PATTERNS:
        if pattern.search(source):
            return attribute
    return None


def find_app_module(workspace: Path, app_type: str) -> str:
    """
    Locate the ASGI/WSGI application object.

    Args:
        workspace: Project root
        app_type: "asgi" or "wsgi"

    Returns:
        "<module>:<attribute>", e.g. "app:app" or "main:create_app()".
        Falls back to "main:app" when no candidate matches.
    """
    explicit = EXPLICIT_ENTRY_FILES.get(app_type)
    if explicit and (workspace / explicit).is_file():
        return f"{Path(explicit).stem}:app"

    for filename in CANDIDATE_FILES:
        path = workspace / filename
        if not path.is_file():
            continue

        attribute = scan_entrypoint(path.read_text(encoding="utf-8", errors="replace"))
        if attribute:
            return f"{path.stem}:{attribute}"

    return DEFAULT_ENTRYPOINT


def find_gunicorn_config(workspace: Path) -> str | None:
    for filename in GUNICORN_CONFIG_FILES:
        if (workspace / filename).is_file():
            return filename
    return None


def find_script(workspace: Path) -> str | None:
    for filename in SCRIPT_FILES:
        if (workspace / filename).is_file():
            return filename
    return None


def find_main_package(workspace: Path) -> str | None:
    """First top-level directory (sorted, non-hidden) holding a __main__.py."""
    for child in sorted(workspace.iterdir()):
        if child.name.startswith("."):
            continue
        if child.is_dir() and (child / PACKAGE_MAIN).is_file():
            return child.name
    return None


# =========================================================================
# RULES
# =========================================================================


@dataclass(frozen=True)
class DetectionRule:
    """One entry of the ordered detection table."""

    category: RuntimeCategory
    label: str
    matches: Callable[[Path], bool]
    build: Callable[[Path, int], ApplicationProfile]


def _is_asgi(workspace: Path) -> bool:
    return any(has_package(workspace, name) for name in ASGI_PACKAGES)


def _build_asgi(workspace: Path, port: int) -> ApplicationProfile:
    return ApplicationProfile(
        category=RuntimeCategory.ASGI,
        server=ServerKind.UVICORN,
        entrypoint=find_app_module(workspace, "asgi"),
        port=port,
    )


def _is_wsgi(workspace: Path) -> bool:
    return has_package(workspace, WSGI_PACKAGE)


def _build_wsgi(workspace: Path, port: int) -> ApplicationProfile:
    # Prefer the production process manager when it is declared
    server = ServerKind.GUNICORN if has_package(workspace, PROCESS_MANAGER) else ServerKind.FLASK
    return ApplicationProfile(
        category=RuntimeCategory.WSGI,
        server=server,
        entrypoint=find_app_module(workspace, "wsgi"),
        port=port,
    )


def _is_gunicorn(workspace: Path) -> bool:
    return has_package(workspace, PROCESS_MANAGER) and find_gunicorn_config(workspace) is not None


def _build_gunicorn(workspace: Path, port: int) -> ApplicationProfile:
    return ApplicationProfile(
        category=RuntimeCategory.GUNICORN,
        server=ServerKind.GUNICORN_CONFIG,
        entrypoint=find_app_module(workspace, "wsgi"),
        config_file=find_gunicorn_config(workspace),
        port=port,
    )


def _is_script(workspace: Path) -> bool:
    return find_script(workspace) is not None


def _build_script(workspace: Path, port: int) -> ApplicationProfile:
    return ApplicationProfile(
        category=RuntimeCategory.SCRIPT,
        server=ServerKind.PYTHON_SCRIPT,
        entrypoint=find_script(workspace),
        port=port,
    )


def _is_package(workspace: Path) -> bool:
    return find_main_package(workspace) is not None


def _build_package(workspace: Path, port: int) -> ApplicationProfile:
    return ApplicationProfile(
        category=RuntimeCategory.PACKAGE,
        server=ServerKind.PYTHON_MODULE,
        entrypoint=find_main_package(workspace),
        port=port,
    )


DETECTION_RULES: tuple[DetectionRule, ...] = (
    DetectionRule(RuntimeCategory.ASGI, "FastAPI/Starlette application", _is_asgi, _build_asgi),
    DetectionRule(RuntimeCategory.WSGI, "Flask application", _is_wsgi, _build_wsgi),
    DetectionRule(RuntimeCategory.GUNICORN, "Gunicorn with config", _is_gunicorn, _build_gunicorn),
    DetectionRule(RuntimeCategory.SCRIPT, "plain Python script", _is_script, _build_script),
    DetectionRule(RuntimeCategory.PACKAGE, "Python package with __main__.py", _is_package, _build_package),
)


def detect(workspace: Path, port: int = 8080) -> ApplicationProfile:
    """
    Classify the project in workspace.

    Returns:
        The profile of the first matching rule, or an UNDETECTED profile.
    """
    console.print("[cyan][DETECT] Auto-detecting application type...[/cyan]")

    for rule in DETECTION_RULES:
        if rule.matches(workspace):
            profile = rule.build(workspace, port)
            console.print(
                f"[green][DETECT] Detected {rule.label} "
                f"(entrypoint: {profile.entrypoint})[/green]"
            )
            return profile

    console.print("[yellow][DETECT] No known application layout found[/yellow]")
    return ApplicationProfile(category=RuntimeCategory.UNDETECTED, port=port)
