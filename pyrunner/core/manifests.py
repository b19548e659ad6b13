# -----------------------------------------------------------------------------
# MANIFESTS - DECLARED DEPENDENCIES
# -----------------------------------------------------------------------------
# Responsibility: Report which manifests exist in the workspace and answer
# "is package P declared?" for the detector.
#
# The predicate is purely textual: it never runs pip or parses TOML. It is
# name-boundary aware, so "fastapi-utils" does not count as "fastapi".
# -----------------------------------------------------------------------------

import re
from pathlib import Path

from pyrunner.domain.models import ManifestSet

PYPROJECT = "pyproject.toml"
REQUIREMENTS = "requirements.txt"
SETUP_PY = "setup.py"
DEV_REQUIREMENTS = "requirements-dev.txt"
SETUP_HOOK = "setup.sh"

# What may follow a package name: version operator, extras, marker, URL ref, space
_NAME_END = r"(?=[\s=<>!~\[;@]|$)"
_QUOTED_NAME_END = r"(?=[\s=<>!~\[;@\"'])"


def scan_manifests(workspace: Path) -> ManifestSet:
    """Check which manifest files exist in the workspace root."""
    return ManifestSet(
        pyproject=(workspace / PYPROJECT).is_file(),
        requirements=(workspace / REQUIREMENTS).is_file(),
        setup_py=(workspace / SETUP_PY).is_file(),
        dev_requirements=(workspace / DEV_REQUIREMENTS).is_file(),
        setup_hook=(workspace / SETUP_HOOK).is_file(),
    )


def _read(path: Path) -> str:
    if not path.is_file():
        return ""
    return path.read_text(encoding="utf-8", errors="replace")


def declared_in_requirements(text: str, package: str) -> bool:
    """Line-anchored match: `flask`, `flask==2.0`, `Flask[async]>=2`..."""
    pattern = rf"^[ \t]*{re.escape(package)}{_NAME_END}"
    return re.search(pattern, text, re.IGNORECASE | re.MULTILINE) is not None


def declared_in_pyproject(text: str, package: str) -> bool:
    """
    Quoted PEP 508 strings (`"flask>=2"`, `'flask'`) or line-anchored table
    keys as Poetry writes them (`flask = "^2.0"`).
    """
    name = re.escape(package)
    quoted = rf"[\"']{name}{_QUOTED_NAME_END}"
    table_key = rf"^[ \t]*{name}[ \t]*="
    return (
        re.search(quoted, text, re.IGNORECASE) is not None
        or re.search(table_key, text, re.IGNORECASE | re.MULTILINE) is not None
    )


def has_package(workspace: Path, package: str) -> bool:
    """True if package is declared in requirements.txt or pyproject.toml."""
    if declared_in_requirements(_read(workspace / REQUIREMENTS), package):
        return True
    return declared_in_pyproject(_read(workspace / PYPROJECT), package)
