from pydantic import BaseModel

from po_desk.core.dates import normalize_date
from po_desk.core.purchase_order import (
    ExtractedPurchaseOrder,
    PurchaseOrderItem,
    initial_status,
    is_url,
)


class ExtractionItem(BaseModel):
    """One line item as read from the supplier document."""

    code: str
    description: str
    unit: str
    quantity: float
    unit_price: float
    total_price: float


class LLMExtractionResponse(BaseModel):
    """LLM response for purchase order extraction."""

    supplier: str
    cnpj: str | None
    invoice_number: str | None
    operation: str
    branch: str
    order_number: str
    sequence: str
    date: str
    issue_date: str | None
    receipt_date: str | None
    order_link: str | None
    entry_link: str | None
    grand_total: float
    items: list[ExtractionItem] | None

    is_book: bool
    is_site: bool
    is_tax_review: bool
    is_matched: bool
    is_stock: bool
    is_remark: bool

    def to_extracted_order(self) -> ExtractedPurchaseOrder:
        """Convert the raw answer into an order ready for review.

        Status follows the invoice number, the reference name starts empty
        and nullable text fields become empty strings. Dates are normalized
        to DD/MM/YYYY and an order_link that is not a URL is dropped.
        """
        items = [PurchaseOrderItem(**item.model_dump()) for item in self.items or []]
        return ExtractedPurchaseOrder(
            supplier=self.supplier,
            cnpj=self.cnpj or "",
            invoice_number=self.invoice_number or "",
            operation=self.operation,
            branch=self.branch,
            order_number=self.order_number,
            sequence=self.sequence,
            date=normalize_date(self.date),
            issue_date=normalize_date(self.issue_date),
            receipt_date=normalize_date(self.receipt_date),
            order_link=self.order_link if is_url(self.order_link) else "",
            entry_link=self.entry_link or "",
            reference_name="",
            items=items,
            grand_total=self.grand_total or 0,
            status=initial_status(self.invoice_number),
            is_book=self.is_book,
            is_site=self.is_site,
            is_tax_review=self.is_tax_review,
            is_matched=self.is_matched,
            is_stock=self.is_stock,
            is_remark=self.is_remark,
        )
