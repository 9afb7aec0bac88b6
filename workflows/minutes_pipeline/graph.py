"""LangGraph pipeline that extracts, summarizes and analyzes uploaded minutes."""
import logging
from functools import partial
from typing import Any, Dict, List, Literal, Optional

from langgraph.graph import END, StateGraph  # type: ignore
from supabase import Client

from lib.state import MinutesPipelineState, initial_state
from nodes.analyze_minutes import analyze_minutes_node
from nodes.extract_minutes_text import extract_minutes_text_node
from nodes.fetch_pending_minutes import fetch_pending_minutes_node
from nodes.summarize_minutes import summarize_minutes_node
from services.summarizer.chain import LLMCallable

logger = logging.getLogger(__name__)


def route_after_fetch(state: MinutesPipelineState) -> Literal["extract_text", "END"]:
    """Skip the remaining steps when nothing is pending."""
    if state.get("pending"):
        return "extract_text"
    return END


def route_after_extract(state: MinutesPipelineState) -> Literal["summarize", "END"]:
    if state.get("extracted"):
        return "summarize"
    return END


def create_graph(client: Optional[Client] = None, llm: Optional[LLMCallable] = None):
    """
    Build the compiled graph.

    fetch_pending -> extract_text -> summarize -> analyze_performance -> END

    ``client`` and ``llm`` are bound into the nodes so tests can pass fakes.
    """
    graph = StateGraph(MinutesPipelineState)

    graph.add_node("fetch_pending", partial(fetch_pending_minutes_node, client=client))
    graph.add_node("extract_text", partial(extract_minutes_text_node, client=client))
    graph.add_node("summarize", partial(summarize_minutes_node, client=client, llm=llm))
    graph.add_node("analyze_performance", partial(analyze_minutes_node, client=client, llm=llm))

    graph.set_entry_point("fetch_pending")
    graph.add_conditional_edges(
        "fetch_pending", route_after_fetch, {"extract_text": "extract_text", END: END}
    )
    graph.add_conditional_edges(
        "extract_text", route_after_extract, {"summarize": "summarize", END: END}
    )
    graph.add_edge("summarize", "analyze_performance")
    graph.add_edge("analyze_performance", END)

    return graph.compile()


def run_minutes_pipeline(
    minutes_ids: Optional[List[str]] = None,
    limit: Optional[int] = None,
    client: Optional[Client] = None,
    llm: Optional[LLMCallable] = None,
) -> Dict[str, Any]:
    """Process pending minutes and report which ids finished each step."""
    logger.info("🚀 Starting minutes pipeline")
    final_state = create_graph(client, llm).invoke(initial_state(minutes_ids, limit))
    result = {
        "pending": [row.get("id") for row in final_state.get("pending", [])],
        "extracted": final_state.get("extracted", []),
        "summarized": final_state.get("summarized", []),
        "analyzed": final_state.get("analyzed", []),
        "errors": final_state.get("errors", []),
    }
    logger.info(
        f"✅ Minutes pipeline complete: {len(result['analyzed'])} analyzed, {len(result['errors'])} error(s)"
    )
    return result
