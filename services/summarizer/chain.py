"""LLM chains that turn minutes text into structured summaries."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.runnables import RunnableLambda
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from lib.llm_client import call_llm
from services.summarizer.prompt import (
    PERFORMANCE_SYSTEM,
    SUMMARY_SYSTEM,
    build_performance_prompt,
    build_summary_prompt,
)
from utils.errors import LLMError

LLMCallable = Callable[..., str]

SUMMARY_TEMPERATURE = 0.3
PERFORMANCE_TEMPERATURE = 0.2


class SummaryOutput(BaseModel):
    summaryText: str = ""
    decisions: List[str] = Field(default_factory=list)
    actionItems: List[Any] = Field(default_factory=list)
    sentiment: Optional[float] = None
    topics: List[str] = Field(default_factory=list)


class PerformanceAnalysisOutput(BaseModel):
    progressHighlights: List[str] = Field(default_factory=list)
    milestones: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)


def _invoke(
    prompt: str,
    system: str,
    temperature: float,
    output_model: type[BaseModel],
    llm: Optional[LLMCallable],
) -> BaseModel:
    llm = llm or call_llm
    model = RunnableLambda(lambda text: llm(text, system=system, temperature=temperature))
    chain = model | PydanticOutputParser(pydantic_object=output_model)
    try:
        return chain.invoke(prompt)
    except (OutputParserException, PydanticValidationError) as exc:
        raise LLMError("Invalid AI response format") from exc


def summarize_minutes_text(minutes: Dict[str, Any], llm: Optional[LLMCallable] = None) -> SummaryOutput:
    """Ask the model for summary, decisions, action items, sentiment and topics."""
    return _invoke(build_summary_prompt(minutes), SUMMARY_SYSTEM, SUMMARY_TEMPERATURE, SummaryOutput, llm)


def analyze_minutes_performance(
    minutes: Dict[str, Any], llm: Optional[LLMCallable] = None
) -> PerformanceAnalysisOutput:
    return _invoke(
        build_performance_prompt(minutes),
        PERFORMANCE_SYSTEM,
        PERFORMANCE_TEMPERATURE,
        PerformanceAnalysisOutput,
        llm,
    )
