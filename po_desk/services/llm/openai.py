from openai import APIStatusError, OpenAI

from po_desk.core.errors import ExtractionError
from po_desk.services.llm.base import LLMService, T


def _provider_message(error: APIStatusError) -> str:
    """Pull the human-readable message out of an OpenAI error body."""
    body = error.body
    if isinstance(body, dict):
        detail = body.get("error", body)
        if isinstance(detail, dict) and detail.get("message"):
            return detail["message"]
    return error.message


class OpenAILLM(LLMService):
    """OpenAI-compatible LLM service with structured output and vision input.

    Provider-side failures (quota, invalid image, bad key) are raised as
    ExtractionError carrying the provider's own message so callers can show it.
    """

    def __init__(self, model: str = "gpt-4o-mini", base_url: str | None = None, api_key: str | None = None):
        self._model = model
        self._client = OpenAI(base_url=base_url, api_key=api_key)

    def structured_output(self, messages: list[dict], response_model: type[T]) -> T:
        try:
            completion = self._client.beta.chat.completions.parse(
                model=self._model,
                messages=messages,
                response_format=response_model,
            )
        except APIStatusError as e:
            raise ExtractionError(f"API error: {_provider_message(e)}") from e

        result = completion.choices[0].message.parsed
        if result is None:
            raise ValueError(f"LLM refused to respond or failed to parse into {response_model.__name__}")
        return result

    def generate_text(self, messages: list[dict]) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=self._model,
                messages=messages,
            )
        except APIStatusError as e:
            raise ExtractionError(f"API error: {_provider_message(e)}") from e
        return completion.choices[0].message.content or ""
