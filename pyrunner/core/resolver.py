# -----------------------------------------------------------------------------
# THE RESOLVER - SOURCE LOCATOR CLASSIFICATION
# -----------------------------------------------------------------------------
# Responsibility: Turn the opaque SOURCE_URL / GITHUB_URL string into a
# SourceLocator of exactly one OriginKind. There is no fallback between
# kinds: anything that isn't s3:// or a GitHub URL is rejected.
# -----------------------------------------------------------------------------

import re

from rich.console import Console

from pyrunner.core.settings import RunnerSettings
from pyrunner.domain.errors import BootstrapError
from pyrunner.domain.models import OriginKind, SourceLocator

console = Console()

S3_PREFIX = "s3://"
GIT_HOST = "github.com"
BRANCH_MARKER = "/tree/"

# Scheme, optional www. and the host, at the start of the locator
_HOST_PREFIX = re.compile(r"^(?:[a-z][a-z0-9+.-]*://)?(?:www\.)?github\.com/", re.IGNORECASE)


class MissingSourceLocator(BootstrapError):
    """Raised when neither SOURCE_URL nor GITHUB_URL is set."""

    stage = "resolve"


class UnsupportedSourceScheme(BootstrapError):
    """Raised when the locator is neither an S3 URI nor a GitHub URL."""

    stage = "resolve"


def locator_from_env(settings: RunnerSettings) -> str:
    """
    Pick the locator string. SOURCE_URL wins over GITHUB_URL.

    Raises:
        MissingSourceLocator: If neither is set.
    """
    locator = settings.source_url or settings.github_url
    if not locator:
        raise MissingSourceLocator(
            "SOURCE_URL or GITHUB_URL environment variable is required"
        )
    return locator


def normalize_host_path(path: str) -> str:
    """Strip scheme/host prefix, trailing slashes and a trailing .git."""
    path = _HOST_PREFIX.sub("", path.strip())
    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path


def split_branch(url: str) -> tuple[str, str]:
    """
    Split a GitHub URL into (host_path, branch).

    ".../org/repo/tree/feature-x" -> ("org/repo", "feature-x")
    ".../org/repo"                -> ("org/repo", "")
    """
    if BRANCH_MARKER in url:
        head, branch = url.split(BRANCH_MARKER, 1)
        return normalize_host_path(head), branch.strip("/")
    return normalize_host_path(url), ""


def resolve(
    locator: str,
    github_token: str | None = None,
    s3_endpoint_url: str | None = None,
) -> SourceLocator:
    """
    Classify a locator string.

    Args:
        locator: SOURCE_URL / GITHUB_URL value
        github_token: Credential attached to git origins
        s3_endpoint_url: Endpoint override attached to S3 origins

    Returns:
        The resolved SourceLocator.

    Raises:
        UnsupportedSourceScheme: If the locator matches no origin kind.
    """
    locator = locator.strip()

    if locator.startswith(S3_PREFIX):
        source = SourceLocator(
            kind=OriginKind.S3,
            url=locator,
            bucket_uri=locator,
            endpoint_override=s3_endpoint_url or None,
        )
    elif GIT_HOST in locator:
        host_path, branch = split_branch(locator)
        source = SourceLocator(
            kind=OriginKind.GIT,
            url=locator,
            host_path=host_path,
            branch=branch,
            auth_token=github_token or None,
        )
    else:
        raise UnsupportedSourceScheme(
            f"Unsupported URL scheme: {locator!r}. Use a GitHub URL or an S3 URL (s3://...)"
        )

    console.print(f"[cyan][RESOLVER] {source.kind.value} origin: {source.describe()}[/cyan]")
    return source
