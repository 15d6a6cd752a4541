"""AI-backed operations on purchase orders: extraction, summaries and reference names."""
import logging
import re

import opik

from po_desk.core.errors import ExtractionError
from po_desk.core.files import PDF_TYPE
from po_desk.core.llm_responses import LLMExtractionResponse
from po_desk.core.purchase_order import ExtractedPurchaseOrder, PurchaseOrderItem
from po_desk.core.workflow_state import DocumentPart
from po_desk.services.llm.base import LLMService, image_part, text_part
from po_desk.services.ocr.base import OCRService
from po_desk.services.prompt_store.base import PromptStore

logger = logging.getLogger("po_desk.assistant")

_REFERENCE_PREFIX = re.compile(r"^(nome de referência|reference name):\s*", re.IGNORECASE)


def _format_quantity(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class OrderAssistant:
    def __init__(self, llm: LLMService, ocr: OCRService, prompt_store: PromptStore):
        self.llm = llm
        self.ocr = ocr
        self.prompt_store = prompt_store

    @opik.track(name="extract_from_documents")
    def extract_from_documents(self, documents: list[DocumentPart]) -> ExtractedPurchaseOrder:
        """Extract one purchase order from images and scanned PDFs.

        Images go to the model inline; PDFs are OCR'd and their text is put in
        the prompt.
        """
        if not documents:
            raise ExtractionError("Upload an image to extract.")

        scanned = [
            self.ocr.extract_text(doc["data"]) for doc in documents
            if doc["content_type"] == PDF_TYPE
        ]
        images = [
            image_part(doc["data"], doc["content_type"]) for doc in documents
            if doc["content_type"] != PDF_TYPE
        ]

        messages = self.prompt_store.build_messages("extract", "documents", {
            "scanned_text": "\n\n".join(t for t in scanned if t),
        })
        messages[1]["content"] = [text_part(messages[1]["content"]), *images]
        return self._extract(messages, "Check the image and try again.")

    @opik.track(name="extract_from_text")
    def extract_from_text(self, text: str) -> ExtractedPurchaseOrder:
        if not text or not text.strip():
            raise ExtractionError("Provide the text to extract and summarize.")
        messages = self.prompt_store.build_messages("extract", "text", {"text": text})
        return self._extract(messages, "Check the text and try again.")

    @opik.track(name="generate_summary")
    def generate_summary(self, text: str) -> str:
        messages = self.prompt_store.build_messages("summary", "user", {"text": text})
        return self.llm.generate_text(messages).strip()

    @opik.track(name="generate_reference_name")
    def generate_reference_name(self, items: list[PurchaseOrderItem]) -> str:
        if not items:
            return ""
        description = "\n".join(
            f"- {_format_quantity(item.quantity)}x {item.description}" for item in items
        )
        messages = self.prompt_store.build_messages("reference_name", "user", {"items": description})
        answer = self.llm.generate_text(messages).strip()
        return _REFERENCE_PREFIX.sub("", answer)

    def _extract(self, messages: list[dict], retry_hint: str) -> ExtractedPurchaseOrder:
        try:
            response = self.llm.structured_output(messages, LLMExtractionResponse)
        except ExtractionError:
            raise
        except ValueError as e:
            logger.warning(f"Unparseable extraction response: {e}")
            raise ExtractionError(
                "The AI returned a response in an invalid format. "
                "Please try again or check the input data."
            ) from e

        if response is None:
            raise ExtractionError(f"The AI returned no data. {retry_hint}")
        return response.to_extracted_order()
