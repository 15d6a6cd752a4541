import opik

from po_desk.nodes.base import BaseNode
from po_desk.services.assistant import OrderAssistant
from po_desk.core.workflow_state import IntakeState


class SummarizeNode(BaseNode):
    """Builds the shareable summary. Only pasted text is summarized."""
    name = "summarize"

    def __init__(self, assistant: OrderAssistant):
        self.assistant = assistant

    @opik.track(name="summarize_node")
    def __call__(self, state: IntakeState) -> dict:
        if state.get("final_status") == "error":
            return {"trajectory": self.visited(state)}

        text = state.get("source_text", "")
        if not text.strip():
            return {"trajectory": self.visited(state)}

        try:
            return {
                "summary": self.assistant.generate_summary(text),
                "trajectory": self.visited(state),
            }
        except Exception as e:
            return {
                "final_status": "error",
                "error_message": str(e),
                "trajectory": self.visited(state),
            }
