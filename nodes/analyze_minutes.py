import logging
from typing import Any, Dict, Optional

from supabase import Client

from lib.state import MinutesPipelineState
from services.summarizer.chain import LLMCallable
from services.summarizer.run import analyze_performance
from utils.errors import PecPulseError
from utils.logging import log_error

logger = logging.getLogger(__name__)


def analyze_minutes_node(
    state: MinutesPipelineState,
    client: Optional[Client] = None,
    llm: Optional[LLMCallable] = None,
) -> Dict[str, Any]:
    """Attach progress highlights, milestones and risks to each new summary."""
    summarized = state.get("summarized", [])
    analyzed = []
    errors = []
    logger.info(f"📊 STEP 4: Analyzing performance for {len(summarized)} summary(ies)")

    for minutes_id in summarized:
        try:
            analyze_performance(minutes_id, llm=llm, client=client)
        except PecPulseError as e:
            log_error(minutes_id, "analyze_performance", e)
            errors.append(f"{minutes_id}: {e}")
            continue
        analyzed.append(minutes_id)

    return {"analyzed": analyzed, "errors": errors}
