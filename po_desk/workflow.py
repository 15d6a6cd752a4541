"""LangGraph workflow for document intake.

Defines the graph structure: nodes, edges, and conditional routing.
"""
from langgraph.graph import StateGraph, END

from po_desk.core.workflow_state import IntakeState
from po_desk.nodes.extract import ExtractNode
from po_desk.nodes.summarize import SummarizeNode
from po_desk.nodes.report import ReportNode


def should_continue_after_extract(state: IntakeState) -> str:
    """Route after extraction: summarize pasted text, otherwise finish."""
    if state.get("final_status") == "error":
        return "report"
    if state.get("source_text", "").strip() and not state.get("documents"):
        return "summarize"
    return "report"


def build_graph(
    extract_node: ExtractNode,
    summarize_node: SummarizeNode,
    report_node: ReportNode,
):
    """Build and compile the intake graph.

    Graph structure:
        extract → (text input?) → summarize → report
                ↘ (documents or error) → report

    Returns a compiled LangGraph that can be invoked with an IntakeState.
    """
    graph = StateGraph(IntakeState)

    graph.add_node("extract", extract_node)
    graph.add_node("summarize", summarize_node)
    graph.add_node("report", report_node)

    graph.set_entry_point("extract")

    graph.add_conditional_edges(
        "extract",
        should_continue_after_extract,
        {"summarize": "summarize", "report": "report"},
    )

    graph.add_edge("summarize", "report")
    graph.add_edge("report", END)

    return graph.compile()
