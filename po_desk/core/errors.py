class OrderNotFoundError(LookupError):
    """No purchase order exists with the requested id."""

    def __init__(self, order_id: str):
        super().__init__(f"Purchase order '{order_id}' not found")
        self.order_id = order_id


class ExtractionError(RuntimeError):
    """The AI service returned nothing usable for a document or text."""


class StorageError(RuntimeError):
    """The object store rejected an upload or a delete."""


class NotAuthenticatedError(PermissionError):
    def __init__(self):
        super().__init__("User not authenticated")
