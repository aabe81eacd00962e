"""
S3 storage for asset files (private bucket, presigned GET URLs for downloads).
Calls retry throttling/5xx/connection errors; other failures raise ExternalServiceError.
"""
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ibuddy.errors import ExternalServiceError
from ibuddy.services.retry import call_with_retry, is_transient_aws_error

logger = logging.getLogger(__name__)


class S3FileStorage:
    host = "s3"

    def __init__(self, bucket: str, region: str, client=None):
        if not bucket:
            raise ValueError("S3_BUCKET_NAME is required for S3 asset storage")
        self.bucket = bucket
        self._client = client or boto3.client("s3", region_name=region or None)

    def _call(self, operation: str, fn, **kwargs):
        try:
            return call_with_retry(fn, is_retryable=is_transient_aws_error, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 %s failed (bucket=%s key=%s): %s", operation, self.bucket, kwargs.get("Key"), e)
            raise ExternalServiceError("s3", f"{operation} failed: {e}") from e

    def save(self, key: str, data: bytes, content_type: str) -> str:
        self._call("put_object", self._client.put_object, Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        return key

    def open(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise FileNotFoundError(key) from e
            raise ExternalServiceError("s3", f"get_object failed: {e}") from e
        return response["Body"].read()

    def delete(self, key: str) -> None:
        self._call("delete_object", self._client.delete_object, Bucket=self.bucket, Key=key)

    def signed_url(self, key: str, expires_in: int) -> str | None:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise ExternalServiceError("s3", f"presign failed: {e}") from e
