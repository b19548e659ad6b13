# =============================================================================
# PYTHON RUNNER S3 CLIENT TESTS
# =============================================================================
# Tests for the object-storage download wrapper.
# =============================================================================

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from pyrunner.infra.s3_client import ObjectStore, ObjectStoreError, parse_s3_uri


class TestParseS3Uri:
    """Tests for parse_s3_uri."""

    def test_bucket_and_key(self):
        assert parse_s3_uri("s3://bucket/path/to/app.zip") == ("bucket", "path/to/app.zip")

    @pytest.mark.parametrize("uri", ["s3://bucket", "s3://bucket/", "s3:///key", "https://x/y"])
    def test_invalid(self, uri):
        with pytest.raises(ObjectStoreError):
            parse_s3_uri(uri)


class TestObjectStore:
    """Tests for ObjectStore."""

    def test_endpoint_override_passed(self):
        with patch("pyrunner.infra.s3_client.boto3.client") as mock_client:
            ObjectStore(endpoint_url="http://minio:9000")
        mock_client.assert_called_once_with("s3", endpoint_url="http://minio:9000")

    def test_default_endpoint(self):
        with patch("pyrunner.infra.s3_client.boto3.client") as mock_client:
            ObjectStore()
        mock_client.assert_called_once_with("s3", endpoint_url=None)

    def test_download(self, tmp_path):
        client = MagicMock()
        client.download_file.side_effect = lambda bucket, key, dest: Path(dest).write_bytes(b"PK")
        destination = tmp_path / "source.zip"

        with patch("pyrunner.infra.s3_client.boto3.client", return_value=client):
            result = ObjectStore().download("s3://bucket/app.zip", destination)

        client.download_file.assert_called_once_with("bucket", "app.zip", str(destination))
        assert result == destination

    def test_missing_object(self, tmp_path):
        client = MagicMock()
        client.download_file.side_effect = ClientError(
            {"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject"
        )
        with patch("pyrunner.infra.s3_client.boto3.client", return_value=client):
            with pytest.raises(ObjectStoreError) as exc_info:
                ObjectStore().download("s3://bucket/missing.zip", tmp_path / "x.zip")
        assert "404" in str(exc_info.value)

    def test_network_error(self, tmp_path):
        client = MagicMock()
        client.download_file.side_effect = EndpointConnectionError(endpoint_url="http://minio:9000")
        with patch("pyrunner.infra.s3_client.boto3.client", return_value=client):
            with pytest.raises(ObjectStoreError):
                ObjectStore(endpoint_url="http://minio:9000").download(
                    "s3://bucket/app.zip", tmp_path / "x.zip"
                )

    def test_bad_endpoint(self):
        with patch("pyrunner.infra.s3_client.boto3.client", side_effect=ValueError("Invalid endpoint")):
            with pytest.raises(ObjectStoreError):
                ObjectStore(endpoint_url="not a url")
