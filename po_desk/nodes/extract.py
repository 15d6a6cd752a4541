from po_desk.nodes.base import BaseNode
from po_desk.services.assistant import OrderAssistant
from po_desk.core.workflow_state import IntakeState


class ExtractNode(BaseNode):
    name = "extract"

    def __init__(self, assistant: OrderAssistant):
        self.assistant = assistant

    def __call__(self, state: IntakeState) -> dict:
        if state.get("final_status") == "error":
            return {"trajectory": self.visited(state)}

        try:
            if state.get("documents"):
                order = self.assistant.extract_from_documents(state["documents"])
            else:
                order = self.assistant.extract_from_text(state.get("source_text", ""))

            return {
                "extracted_data": order.model_dump(mode="json"),
                "trajectory": self.visited(state),
            }
        except Exception as e:
            return {
                "final_status": "error",
                "error_message": str(e),
                "trajectory": self.visited(state),
            }
