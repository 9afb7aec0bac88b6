"""State definition for the minutes processing graph."""

import operator
from typing import Annotated, Any, Dict, List, Optional, TypedDict


class MinutesPipelineState(TypedDict):
    """State that flows through the minutes pipeline."""

    # Restrict the run to these minutes ids; None processes every pending row.
    minutes_ids: Optional[List[str]]

    # Cap on how many pending rows one run picks up.
    limit: Optional[int]

    # meeting_minutes rows selected by the fetch step.
    pending: List[Dict[str, Any]]

    # Ids that made it through each step.
    extracted: List[str]
    summarized: List[str]
    analyzed: List[str]

    # One "<minutes id>: <message>" entry per failed item, appended by every node.
    errors: Annotated[List[str], operator.add]


def initial_state(minutes_ids: Optional[List[str]] = None, limit: Optional[int] = None) -> MinutesPipelineState:
    return {
        "minutes_ids": minutes_ids,
        "limit": limit,
        "pending": [],
        "extracted": [],
        "summarized": [],
        "analyzed": [],
        "errors": [],
    }
