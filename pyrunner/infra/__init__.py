# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level wrappers around external tools:
# - GitProvider: git CLI checkout with token redaction
# - ObjectStore: boto3 single-object download
# - SubprocessRunner: blocking external command capability
# -----------------------------------------------------------------------------

from .git_client import GitError, GitProvider
from .s3_client import ObjectStore, ObjectStoreError
from .shell import CommandFailed, CommandResult, CommandRunner, SubprocessRunner

__all__ = [
    "CommandFailed",
    "CommandResult",
    "CommandRunner",
    "GitError",
    "GitProvider",
    "ObjectStore",
    "ObjectStoreError",
    "SubprocessRunner",
]
