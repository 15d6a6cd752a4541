from typing import TypedDict


class DocumentPart(TypedDict):
    file_name: str
    content_type: str
    data: bytes


class IntakeState(TypedDict, total=False):
    # --- Input (populated from the upload) ---
    documents: list[DocumentPart]
    source_text: str

    # --- Extraction ---
    extracted_data: dict | None          # ExtractedPurchaseOrder.model_dump()

    # --- Summary (text input only) ---
    summary: str

    # --- Tracking ---
    trajectory: list[str]                # node names visited
    error_message: str

    # --- Final ---
    final_status: str                    # "completed" | "error"
