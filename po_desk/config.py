from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str | None = None
    openai_api_key: str | None = None

    # OCR (scanned PDFs)
    ocr_engine: str = "tesseract"
    ocr_lang: str = "por+eng"

    # Prompt store
    prompt_store: str = "local"
    prompts_dir: str = "prompts"
    prompt_language: str = "pt"
    prompt_fallback_language: str = "en"

    # Order database
    order_store: str = "supabase"  # "supabase" | "memory"
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_table: str = "purchase_orders"

    # Attachment storage
    attachment_storage: str = "s3"  # "s3" | "memory"
    s3_bucket: str = ""
    s3_prefix: str = "purchaseOrders"
    s3_endpoint_url: str | None = None
    aws_region: str = "us-east-1"
    attachments_public_base_url: str | None = None

    # API
    api_key: str | None = None
    log_level: str = "INFO"

    # Order list window
    row_height: int = 68
    overscan_count: int = 5

    # Overview
    top_suppliers: int = 5

    # Opik
    opik_workspace: str | None = None
    opik_project: str = "po-desk"
    opik_api_key: str | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)
