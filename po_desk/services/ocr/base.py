from abc import ABC, abstractmethod


class OCRService(ABC):
    @abstractmethod
    def extract_text(self, pdf_bytes: bytes) -> str:
        """Text of every page of a scanned PDF, in page order."""
        ...
