import logging
from typing import Any, Dict, Optional

from supabase import Client

from lib.state import MinutesPipelineState
from services.summarizer.chain import LLMCallable
from services.summarizer.run import summarize
from utils.errors import PecPulseError
from utils.logging import log_error

logger = logging.getLogger(__name__)


def summarize_minutes_node(
    state: MinutesPipelineState,
    client: Optional[Client] = None,
    llm: Optional[LLMCallable] = None,
) -> Dict[str, Any]:
    extracted = state.get("extracted", [])
    summarized = []
    errors = []
    logger.info(f"📝 STEP 3: Summarizing {len(extracted)} document(s)")

    for minutes_id in extracted:
        try:
            summarize(minutes_id, llm=llm, client=client)
        except PecPulseError as e:
            log_error(minutes_id, "summarize", e)
            errors.append(f"{minutes_id}: {e}")
            continue
        summarized.append(minutes_id)

    return {"summarized": summarized, "errors": errors}
