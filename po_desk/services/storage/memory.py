from po_desk.core.errors import StorageError
from po_desk.services.storage.base import AttachmentStorage, ProgressCallback, attachment_key


class InMemoryAttachmentStorage(AttachmentStorage):
    """Keeps attachments in a dict keyed by URL. Captures calls for assertion."""

    def __init__(self, base_url: str = "memory://attachments", fail_deletes: bool = False):
        self._base_url = base_url
        self._fail_deletes = fail_deletes
        self._objects: dict[str, bytes] = {}
        self._calls: list[dict] = []

    def upload(
        self,
        order_id: str,
        file_name: str,
        data: bytes,
        content_type: str,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        url = f"{self._base_url}/{attachment_key('purchaseOrders', order_id, file_name)}"
        self._objects[url] = data
        if on_progress:
            on_progress(100.0)
        self._calls.append({"action": "upload", "order_id": order_id, "file_name": file_name, "url": url})
        return url

    def delete_by_url(self, url: str) -> None:
        self._calls.append({"action": "delete", "url": url})
        if self._fail_deletes:
            raise StorageError(f"Delete of '{url}' failed")
        self._objects.pop(url, None)

    # --- Inspection API for tests ---

    @property
    def objects(self) -> dict[str, bytes]:
        return dict(self._objects)

    @property
    def all_calls(self) -> list[dict]:
        return list(self._calls)
