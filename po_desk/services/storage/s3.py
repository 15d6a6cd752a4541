import io
import logging
from urllib.parse import quote, unquote, urlparse

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from po_desk.core.errors import StorageError
from po_desk.services.storage.base import AttachmentStorage, ProgressCallback, attachment_key

logger = logging.getLogger("po_desk.storage")

# Uploads above this size are sent as multipart transfers
MULTIPART_THRESHOLD = 8 * 1024 * 1024


class _ProgressTracker:
    """boto3 transfer callback that reports cumulative percentages."""

    def __init__(self, total: int, on_progress: ProgressCallback | None):
        self._total = total
        self._sent = 0
        self._on_progress = on_progress

    def __call__(self, bytes_amount: int) -> None:
        self._sent += bytes_amount
        if self._on_progress and self._total:
            self._on_progress(min(100.0, self._sent / self._total * 100))


class S3AttachmentStorage(AttachmentStorage):
    """Attachments in an S3-compatible bucket, served from a public base URL."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "purchaseOrders",
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client: BaseClient | None = None,
    ):
        if not bucket:
            raise ValueError("Missing S3 bucket for attachment storage")
        self._bucket = bucket
        self._prefix = prefix
        self._client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)
        self._base_url = (public_base_url or f"https://{bucket}.s3.{region}.amazonaws.com").rstrip("/")
        self._transfer_config = TransferConfig(multipart_threshold=MULTIPART_THRESHOLD)

    def upload(
        self,
        order_id: str,
        file_name: str,
        data: bytes,
        content_type: str,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        key = attachment_key(self._prefix, order_id, file_name)
        try:
            self._client.upload_fileobj(
                io.BytesIO(data),
                self._bucket,
                key,
                ExtraArgs={"ContentType": content_type},
                Callback=_ProgressTracker(len(data), on_progress),
                Config=self._transfer_config,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Upload of '{file_name}' failed: {e}") from e
        logger.info(f"Uploaded attachment s3://{self._bucket}/{key}")
        return f"{self._base_url}/{quote(key)}"

    def delete_by_url(self, url: str) -> None:
        key = self.key_from_url(url)
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Delete of '{key}' failed: {e}") from e

    def key_from_url(self, url: str) -> str:
        if url.startswith(self._base_url + "/"):
            return unquote(url[len(self._base_url) + 1:])
        return unquote(urlparse(url).path.lstrip("/"))
