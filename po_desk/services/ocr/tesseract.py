import opik
import pytesseract
from pdf2image import convert_from_bytes
from PIL import Image

from po_desk.services.ocr.base import OCRService


class TesseractOCR(OCRService):
    """Scanned supplier documents: each PDF page is rendered (poppler) and read by Tesseract.

    Brazilian documents mix Portuguese and English, hence `por+eng`.
    """

    def __init__(self, lang: str = "por+eng", dpi: int = 300):
        self._lang = lang
        self._dpi = dpi

    @opik.track(name="ocr_extract_text")
    def extract_text(self, pdf_bytes: bytes) -> str:
        pages: list[Image.Image] = convert_from_bytes(pdf_bytes, dpi=self._dpi)
        page_texts = [pytesseract.image_to_string(page, lang=self._lang) for page in pages]
        return "\n".join(page_texts).strip()
