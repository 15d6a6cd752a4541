"""Business operations on stored purchase orders.

Every write records who made it and when. Line-item edits go through the
total recomputation in core.purchase_order so stored totals always match the
items.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator

from pydantic import BaseModel

from po_desk.core.errors import NotAuthenticatedError, OrderNotFoundError, StorageError
from po_desk.core.mapping import ItemMapping, apply_mappings
from po_desk.core.purchase_order import (
    Attachment,
    ExtractedPurchaseOrder,
    OrderStatus,
    PurchaseOrder,
    add_item,
    remove_item,
    set_item_field,
)
from po_desk.core.user import CurrentUser
from po_desk.services.assistant import OrderAssistant
from po_desk.services.orders.base import OrderRepository
from po_desk.services.storage.base import AttachmentStorage

logger = logging.getLogger("po_desk.orders")


class AttachmentResult(BaseModel):
    order: PurchaseOrder
    attachment: Attachment
    # True when the order is not yet received; clients offer to mark it so
    suggest_received: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_user(user: CurrentUser | None) -> CurrentUser:
    if user is None:
        raise NotAuthenticatedError()
    return user


class OrderService:
    def __init__(
        self,
        repository: OrderRepository,
        storage: AttachmentStorage,
        assistant: OrderAssistant,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.storage = storage
        self.assistant = assistant
        self._clock = clock
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # --- Reads ---

    def get_order(self, order_id: str) -> PurchaseOrder:
        data = self.repository.get(order_id)
        if data is None:
            raise OrderNotFoundError(order_id)
        return PurchaseOrder.model_validate(data)

    def list_orders(self) -> list[PurchaseOrder]:
        return [PurchaseOrder.model_validate(d) for d in self.repository.list_orders()]

    # --- Writes ---

    def create_order(self, extracted: ExtractedPurchaseOrder, user: CurrentUser | None) -> str:
        """Save a reviewed extraction as a new order. Returns the new id.

        A reference name is generated from the items when none was given.
        If generation fails the order is saved without one.
        """
        user = _require_user(user)
        order = extracted.model_copy()

        if order.items and not order.reference_name:
            try:
                order.reference_name = self.assistant.generate_reference_name(order.items)
            except Exception as e:
                logger.warning(f"Failed to generate reference name, saving without it: {e}")

        now = self._clock()
        stored = PurchaseOrder(
            **order.model_dump(exclude={"cnpj"}),
            cnpj=order.cnpj or "",
            user_id=user.uid,
            created_by=user.name_or_unknown,
            creator_email=user.email_or_unknown,
            created_at=now,
            updated_at=now,
            attachments=[],
        )
        order_id = self.repository.add(stored.model_dump(mode="json", exclude={"id"}))
        logger.info(f"Purchase order saved: id={order_id}, supplier={stored.supplier!r}")
        return order_id

    def update_order(self, order: PurchaseOrder, user: CurrentUser | None) -> PurchaseOrder:
        """Write every field of `order` (except its id) and stamp the updater."""
        user = _require_user(user)
        updated = order.model_copy(update={
            "updated_by": user.name_or_unknown,
            "updater_email": user.email_or_unknown,
            "updated_at": self._clock(),
        })
        self.repository.update(order.id, updated.model_dump(mode="json", exclude={"id"}))
        logger.info(f"Purchase order updated: id={order.id}")
        return updated

    def set_status(self, order_id: str, status: OrderStatus, user: CurrentUser | None) -> PurchaseOrder:
        with self._order_lock(order_id):
            order = self.get_order(order_id)
            return self.update_order(order.model_copy(update={"status": status}), user)

    def edit_item(
        self, order_id: str, index: int, field: str, value: Any, user: CurrentUser | None
    ) -> PurchaseOrder:
        with self._order_lock(order_id):
            order = self.get_order(order_id)
            return self.update_order(set_item_field(order, index, field, value), user)

    def add_item(self, order_id: str, user: CurrentUser | None) -> PurchaseOrder:
        with self._order_lock(order_id):
            return self.update_order(add_item(self.get_order(order_id)), user)

    def remove_item(self, order_id: str, index: int, user: CurrentUser | None) -> PurchaseOrder:
        with self._order_lock(order_id):
            return self.update_order(remove_item(self.get_order(order_id), index), user)

    def update_mappings(
        self, order_id: str, mappings: list[ItemMapping], user: CurrentUser | None
    ) -> PurchaseOrder:
        with self._order_lock(order_id):
            order = self.get_order(order_id)
            return self.update_order(apply_mappings(order, mappings), user)

    def delete_order(self, order_id: str, user: CurrentUser | None) -> None:
        """Delete the order, then its attachment files (best effort)."""
        _require_user(user)
        with self._order_lock(order_id):
            order = self.get_order(order_id)
            self.repository.delete(order_id)
        for attachment in order.attachments:
            self._delete_blob(attachment.url)
        logger.info(f"Purchase order deleted: id={order_id}")

    # --- Attachments ---

    def add_attachment(
        self,
        order_id: str,
        file_name: str,
        data: bytes,
        content_type: str,
        user: CurrentUser | None,
    ) -> AttachmentResult:
        """Upload the file, then append it to the order's attachments.

        The upload runs outside the order lock. The order is re-read under the
        lock before the attachment is appended.
        """
        user = _require_user(user)
        self.get_order(order_id)

        def report(progress: float) -> None:
            logger.debug(f"Uploading {file_name} for {order_id}: {progress:.0f}%")

        url = self.storage.upload(order_id, file_name, data, content_type, on_progress=report)
        attachment = Attachment(
            url=url,
            file_name=file_name,
            uploaded_by=user.uploader_label,
            uploaded_at=self._clock(),
        )
        with self._order_lock(order_id):
            order = self.get_order(order_id)
            updated = self.update_order(
                order.model_copy(update={"attachments": [*order.attachments, attachment]}), user
            )
        return AttachmentResult(
            order=updated,
            attachment=attachment,
            suggest_received=updated.status != OrderStatus.RECEIVED,
        )

    def remove_attachment(self, order_id: str, url: str, user: CurrentUser | None) -> PurchaseOrder:
        """Drop the attachment reference, then delete the file.

        Raises:
            LookupError: If the order has no attachment with this URL
        """
        with self._order_lock(order_id):
            order = self.get_order(order_id)
            remaining = [a for a in order.attachments if a.url != url]
            if len(remaining) == len(order.attachments):
                raise LookupError(f"Attachment '{url}' not found on order '{order_id}'")
            updated = self.update_order(order.model_copy(update={"attachments": remaining}), user)
        self._delete_blob(url)
        return updated

    @contextmanager
    def _order_lock(self, order_id: str) -> Iterator[None]:
        # Serializes read-modify-write of one order within this process
        with self._locks_guard:
            lock = self._locks.setdefault(order_id, threading.Lock())
        with lock:
            yield

    def _delete_blob(self, url: str) -> None:
        try:
            self.storage.delete_by_url(url)
        except StorageError as e:
            logger.warning(f"Failed to delete attachment file {url}: {e}")
