import logging
from typing import Any, Dict, Optional

from supabase import Client

from lib.state import MinutesPipelineState
from services.ocr.run import EXTRACTION_FAILED, NOT_READABLE, run as run_ocr
from utils.errors import PecPulseError
from utils.logging import log_error

logger = logging.getLogger(__name__)


def extract_minutes_text_node(state: MinutesPipelineState, client: Optional[Client] = None) -> Dict[str, Any]:
    """Run text extraction for each pending document, one at a time."""
    pending = state.get("pending", [])
    extracted = []
    errors = []
    logger.info(f"🔎 STEP 2: Extracting text from {len(pending)} document(s)")

    for idx, row in enumerate(pending, 1):
        minutes_id = row.get("id")
        logger.info(f"  [{idx}/{len(pending)}] {minutes_id}")
        try:
            result = run_ocr(row.get("file_url"), minutes_id, client=client)
        except PecPulseError as e:
            log_error(minutes_id, "extract_text", e)
            errors.append(f"{minutes_id}: {e}")
            continue
        if result["extractedText"] in (NOT_READABLE, EXTRACTION_FAILED):
            errors.append(f"{minutes_id}: {result['extractedText']}")
            continue
        extracted.append(minutes_id)

    logger.info(f"✓ Extracted text for {len(extracted)}/{len(pending)} document(s)")
    return {"extracted": extracted, "errors": errors}
