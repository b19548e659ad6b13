# -----------------------------------------------------------------------------
# OBJECT STORAGE INFRASTRUCTURE - S3 Archive Download
# -----------------------------------------------------------------------------
# Responsibility: Download a source archive from S3 or an S3-compatible store
# (MinIO and friends) to a local file.
#
# Credentials come from the standard AWS chain (AWS_ACCESS_KEY_ID,
# AWS_SECRET_ACCESS_KEY, instance profile...). An endpoint override points
# the client at a non-AWS store.
# -----------------------------------------------------------------------------

from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console

console = Console()

S3_SCHEME = "s3://"


class ObjectStoreError(Exception):
    """Raised when an object cannot be located or downloaded."""

    pass


def parse_s3_uri(uri: str) -> tuple[str, str]:
    """
    Split s3://bucket/key into (bucket, key).

    Raises:
        ObjectStoreError: If the URI is not a complete s3:// object reference.
    """
    if not uri.startswith(S3_SCHEME):
        raise ObjectStoreError(f"Invalid S3 URI: {uri}")

    path_parts = uri[len(S3_SCHEME):].split("/", 1)
    if len(path_parts) != 2 or not path_parts[0] or not path_parts[1]:
        raise ObjectStoreError(f"Invalid S3 URI format (expected s3://bucket/key): {uri}")

    return path_parts[0], path_parts[1]


class ObjectStore:
    """Thin boto3 wrapper for single-object downloads."""

    def __init__(self, endpoint_url: str | None = None) -> None:
        """
        Args:
            endpoint_url: Override the S3 endpoint (S3-compatible stores).
        """
        self._endpoint_url = endpoint_url or None
        try:
            self._client = boto3.client("s3", endpoint_url=self._endpoint_url)
        except (BotoCoreError, ValueError) as e:
            raise ObjectStoreError(f"Could not create S3 client: {e}") from e

        if self._endpoint_url:
            console.print(f"[cyan][S3] Using endpoint: {self._endpoint_url}[/cyan]")

    def download(self, uri: str, destination: Path) -> Path:
        """
        Download the object at uri to destination.

        Returns:
            The destination path.

        Raises:
            ObjectStoreError: If the object is missing or the transfer fails.
        """
        bucket, key = parse_s3_uri(uri)
        console.print(f"[cyan][S3] Downloading {uri}...[/cyan]")

        try:
            self._client.download_file(bucket, key, str(destination))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise ObjectStoreError(f"S3 download failed ({code}): {uri}") from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"S3 download failed: {e}") from e

        size = destination.stat().st_size
        console.print(f"[green][S3] Downloaded {size} bytes[/green]")
        return destination
