import opik

from po_desk.nodes.base import BaseNode
from po_desk.core.workflow_state import IntakeState


class ReportNode(BaseNode):
    name = "report"

    @opik.track(name="report_node")
    def __call__(self, state: IntakeState) -> dict:
        result = {"trajectory": self.visited(state)}

        if state.get("error_message"):
            result["final_status"] = "error"
        elif not state.get("extracted_data"):
            result["final_status"] = "error"
            result["error_message"] = "No purchase order data was extracted"
        else:
            result["final_status"] = "completed"

        return result
