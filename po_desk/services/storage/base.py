import time
from abc import ABC, abstractmethod
from typing import Callable

from po_desk.core.files import sanitize_file_name

ProgressCallback = Callable[[float], None]


def attachment_key(prefix: str, order_id: str, file_name: str, now_ms: int | None = None) -> str:
    """Object key for an order attachment: '{prefix}/{order_id}/{epoch_ms}_{name}'."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{prefix}/{order_id}/{now_ms}_{sanitize_file_name(file_name)}"


class AttachmentStorage(ABC):
    @abstractmethod
    def upload(
        self,
        order_id: str,
        file_name: str,
        data: bytes,
        content_type: str,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Store an attachment for an order. Returns its download URL.

        `on_progress` receives the transferred percentage (0-100).

        Raises:
            StorageError: If the object store rejects the upload
        """
        ...

    @abstractmethod
    def delete_by_url(self, url: str) -> None:
        """Delete the object behind a download URL.

        Raises:
            StorageError: If the object store rejects the delete
        """
        ...
