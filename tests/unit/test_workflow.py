"""Unit tests for the intake graph routing and end-to-end runs with mock services."""
from po_desk.core.errors import ExtractionError
from po_desk.nodes.extract import ExtractNode
from po_desk.nodes.report import ReportNode
from po_desk.nodes.summarize import SummarizeNode
from po_desk.services.assistant import OrderAssistant
from po_desk.services.prompt_store.local import LocalPromptStore
from po_desk.workflow import build_graph, should_continue_after_extract
from tests.mocks import MockLLM, MockOCR, make_extraction_response as make_response


def _graph(llm: MockLLM):
    assistant = OrderAssistant(llm=llm, ocr=MockOCR(), prompt_store=LocalPromptStore("prompts", language="pt"))
    return build_graph(
        extract_node=ExtractNode(assistant),
        summarize_node=SummarizeNode(assistant),
        report_node=ReportNode(),
    )


class TestRouting:
    def test_error_goes_to_report(self):
        assert should_continue_after_extract({"final_status": "error", "source_text": "x"}) == "report"

    def test_text_goes_to_summarize(self):
        assert should_continue_after_extract({"source_text": "Pedido 100"}) == "summarize"

    def test_documents_go_to_report(self):
        state = {"documents": [{"file_name": "a", "content_type": "image/png", "data": b""}], "source_text": "x"}
        assert should_continue_after_extract(state) == "report"


class TestGraphRuns:
    def test_graph_has_expected_nodes(self):
        graph = _graph(MockLLM())
        node_names = [n.name for n in graph.get_graph().nodes.values()]
        for expected in ["extract", "summarize", "report"]:
            assert expected in node_names

    def test_text_run_extracts_and_summarizes(self):
        graph = _graph(MockLLM(structured_response=make_response(), text_response="Resumo"))

        result = graph.invoke({"documents": [], "source_text": "Pedido 100", "trajectory": []})

        assert result["final_status"] == "completed"
        assert result["summary"] == "Resumo"
        assert result["extracted_data"]["order_number"] == "PED-100"
        assert result["trajectory"] == ["extract", "summarize", "report"]

    def test_document_run_skips_summary(self):
        graph = _graph(MockLLM(structured_response=make_response()))
        image = {"file_name": "a.png", "content_type": "image/png", "data": b"png"}

        result = graph.invoke({"documents": [image], "source_text": "", "trajectory": []})

        assert result["final_status"] == "completed"
        assert "summary" not in result
        assert result["trajectory"] == ["extract", "report"]

    def test_failed_extraction_reports_error(self):
        graph = _graph(MockLLM(should_raise=ExtractionError("API error: bad key")))

        result = graph.invoke({"documents": [], "source_text": "Pedido 100", "trajectory": []})

        assert result["final_status"] == "error"
        assert result["error_message"] == "API error: bad key"
        assert result["trajectory"] == ["extract", "report"]
