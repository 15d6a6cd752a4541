"""ServiceBuilder: wires services, the order service and the intake workflow from AppConfig."""
from po_desk.config import AppConfig
from po_desk.order_service import OrderService
from po_desk.services.assistant import OrderAssistant
from po_desk.services.ocr.base import OCRService
from po_desk.services.ocr.tesseract import TesseractOCR
from po_desk.services.llm.base import LLMService
from po_desk.services.llm.openai import OpenAILLM
from po_desk.services.orders.base import OrderRepository
from po_desk.services.orders.memory import InMemoryOrderRepository
from po_desk.services.orders.supabase import SupabaseOrderRepository
from po_desk.services.prompt_store.base import PromptStore
from po_desk.services.prompt_store.local import LocalPromptStore
from po_desk.services.storage.base import AttachmentStorage
from po_desk.services.storage.memory import InMemoryAttachmentStorage
from po_desk.services.storage.s3 import S3AttachmentStorage
from po_desk.nodes.extract import ExtractNode
from po_desk.nodes.summarize import SummarizeNode
from po_desk.nodes.report import ReportNode
from po_desk.workflow import build_graph


class ServiceBuilder:
    """Builds the application services from config."""

    def __init__(self, config: AppConfig):
        self.config = config

        # Instantiate services
        self._ocr = self._build_ocr()
        self._llm = self._build_llm()
        self._prompt_store = self._build_prompt_store()
        self._repository = self._build_order_store()
        self._storage = self._build_attachment_storage()
        self._assistant = OrderAssistant(llm=self._llm, ocr=self._ocr, prompt_store=self._prompt_store)

    def build(self):
        """Build and return the compiled intake workflow."""
        return build_graph(
            extract_node=ExtractNode(self._assistant),
            summarize_node=SummarizeNode(self._assistant),
            report_node=ReportNode(),
        )

    def build_order_service(self) -> OrderService:
        return OrderService(
            repository=self._repository,
            storage=self._storage,
            assistant=self._assistant,
        )

    def _build_ocr(self) -> OCRService:
        if self.config.ocr_engine == "tesseract":
            return TesseractOCR(lang=self.config.ocr_lang)
        raise ValueError(f"Unknown OCR engine: {self.config.ocr_engine}")

    def _build_llm(self) -> LLMService:
        if self.config.llm_provider == "openai":
            return OpenAILLM(
                model=self.config.llm_model,
                api_key=self.config.openai_api_key,
                base_url=self.config.llm_base_url,
            )
        raise ValueError(f"Unknown LLM provider: {self.config.llm_provider}")

    def _build_prompt_store(self) -> PromptStore:
        if self.config.prompt_store == "local":
            return LocalPromptStore(
                prompts_dir=self.config.prompts_dir,
                language=self.config.prompt_language,
                fallback_language=self.config.prompt_fallback_language,
            )
        raise ValueError(f"Unknown prompt store: {self.config.prompt_store}")

    def _build_order_store(self) -> OrderRepository:
        if self.config.order_store == "memory":
            return InMemoryOrderRepository()
        if self.config.order_store == "supabase":
            return SupabaseOrderRepository(
                url=self.config.supabase_url,
                key=self.config.supabase_key,
                table=self.config.supabase_table,
            )
        raise ValueError(f"Unknown order store: {self.config.order_store}")

    def _build_attachment_storage(self) -> AttachmentStorage:
        if self.config.attachment_storage == "memory":
            return InMemoryAttachmentStorage()
        if self.config.attachment_storage == "s3":
            return S3AttachmentStorage(
                bucket=self.config.s3_bucket,
                prefix=self.config.s3_prefix,
                region=self.config.aws_region,
                endpoint_url=self.config.s3_endpoint_url,
                public_base_url=self.config.attachments_public_base_url,
            )
        raise ValueError(f"Unknown attachment storage: {self.config.attachment_storage}")
