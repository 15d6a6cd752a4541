import yaml
from pathlib import Path
from typing import Optional
from po_desk.services.prompt_store.base import PromptStore, PromptTemplate


class LocalPromptStore(PromptStore):
    """Prompts read from `{prompts_dir}/{language}/{category}.yaml`.

    Each top-level key of a file is a prompt:

        text:
            template: |
                Aqui está o texto para analisar:
                {text}
            description: Prompt de usuário para texto colado
            params:
                - text

    Files are parsed once and cached per language.
    """

    def __init__(self, prompts_dir: str | Path, language: str = "pt", fallback_language: str = "en"):
        self._root = Path(prompts_dir)
        if not self._root.exists():
            raise FileNotFoundError(f"Prompts directory not found: {self._root}")

        self._language = language
        self._fallback_language = fallback_language
        self._loaded: dict[tuple[str, str], dict | None] = {}

    @property
    def language(self) -> str:
        return self._language

    @property
    def fallback_language(self) -> str:
        return self._fallback_language

    def get(self, category: str, name: str) -> Optional[PromptTemplate]:
        entry = next(
            (prompts[name] for prompts in self._candidates(category) if name in prompts),
            None,
        )
        if entry is None:
            return None
        return PromptTemplate(
            name=f"{category}.{name}",
            template=entry["template"],
            description=entry.get("description", ""),
            params=entry.get("params", []),
        )

    def list_categories(self) -> list[str]:
        return sorted({
            path.stem
            for lang in self._languages()
            for path in (self._root / lang).glob("*.yaml")
        })

    def list_prompts(self, category: str) -> list[str]:
        prompts = next(iter(self._candidates(category)), {})
        return list(prompts)

    def _languages(self) -> list[str]:
        return list(dict.fromkeys([self._language, self._fallback_language]))

    def _candidates(self, category: str) -> list[dict]:
        """Loaded files for a category, preferred language first."""
        loaded = (self._load(lang, category) for lang in self._languages())
        return [prompts for prompts in loaded if prompts]

    def _load(self, lang: str, category: str) -> dict | None:
        key = (lang, category)
        if key not in self._loaded:
            path = self._root / lang / f"{category}.yaml"
            if path.exists():
                with open(path, encoding="utf-8") as f:
                    self._loaded[key] = yaml.safe_load(f)
            else:
                self._loaded[key] = None
        return self._loaded[key]
