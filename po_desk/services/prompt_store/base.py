from abc import ABC, abstractmethod
from typing import Any, Optional
from pydantic import BaseModel, Field


class PromptTemplate(BaseModel):
    name: str                    # "{category}.{prompt}", e.g. "extract.system"
    template: str
    description: str = ""
    params: list[str] = Field(default_factory=list)


class PromptStore(ABC):
    """Prompt templates grouped by category, one set per language.

    A category is one prompt file (`extract`, `summary`, `reference_name`).
    Each category holds a `system` prompt and one or more user prompts.
    Lookups try `language` first and then `fallback_language`.
    """

    @property
    @abstractmethod
    def language(self) -> str:
        ...

    @property
    @abstractmethod
    def fallback_language(self) -> str:
        ...

    @abstractmethod
    def get(self, category: str, name: str) -> Optional[PromptTemplate]:
        """The named prompt of a category, or None when no language has it."""
        ...

    @abstractmethod
    def list_categories(self) -> list[str]:
        ...

    @abstractmethod
    def list_prompts(self, category: str) -> list[str]:
        ...

    @staticmethod
    def render(template: PromptTemplate, params: dict[str, Any]) -> str:
        """Fill the template's placeholders.

        Raises:
            ValueError: If a declared parameter is missing from `params`
        """
        missing = [p for p in template.params if p not in params]
        if missing:
            raise ValueError(
                f"Missing required parameters for template '{template.name}': {missing}"
            )
        return template.template.format(**params)

    def get_and_render(
        self, category: str, name: str, params: Optional[dict[str, Any]] = None
    ) -> str:
        template = self.get(category, name)
        if template is None:
            raise ValueError(f"Prompt template '{category}/{name}' not found")
        return self.render(template, params or {})

    def build_messages(
        self, category: str, user_prompt: str, params: Optional[dict[str, Any]] = None
    ) -> list[dict]:
        """Chat messages for one LLM call: the category's system prompt, then `user_prompt`."""
        return [
            {"role": "system", "content": self.get_and_render(category, "system")},
            {"role": "user", "content": self.get_and_render(category, user_prompt, params)},
        ]
