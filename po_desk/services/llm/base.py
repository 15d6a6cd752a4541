import base64
from abc import ABC, abstractmethod
from typing import TypeVar
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


def text_part(text: str) -> dict:
    return {"type": "text", "text": text}


def image_part(data: bytes, content_type: str) -> dict:
    """Inline image content part (base64 data URL) for vision models."""
    encoded = base64.b64encode(data).decode("ascii")
    return {"type": "image_url", "image_url": {"url": f"data:{content_type};base64,{encoded}"}}


class LLMService(ABC):
    @abstractmethod
    def structured_output(self, messages: list[dict], response_model: type[T]) -> T:
        """Call LLM and parse response into a Pydantic model.

        Message content is either a string or a list of content parts
        built with `text_part` / `image_part`.
        """
        ...

    @abstractmethod
    def generate_text(self, messages: list[dict]) -> str:
        """Call LLM and return raw text response."""
        ...
