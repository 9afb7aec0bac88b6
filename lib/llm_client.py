"""LLM client for OpenRouter integration."""
import logging
import re
import time
from collections import deque
from functools import lru_cache
from typing import Any, Deque, List, Optional

from openai import OpenAI

from lib.config import (
    OPENROUTER_APP_NAME,
    OPENROUTER_BASE_URL,
    OPENROUTER_MIN_REQUEST_GAP,
    OPENROUTER_MODEL,
    OPENROUTER_RATE_LIMIT_PER_MINUTE,
    OPENROUTER_SITE_URL,
    require_setting,
)
from utils.errors import LLMError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    # Configure OpenRouter client with required headers
    return OpenAI(
        base_url=OPENROUTER_BASE_URL,
        api_key=require_setting("OPENROUTER_API_KEY"),
        default_headers={
            "HTTP-Referer": OPENROUTER_SITE_URL,
            "X-Title": OPENROUTER_APP_NAME,
        },
    )


class _RateLimiter:
    """Sliding one-minute window plus a minimum gap between requests."""

    def __init__(self, per_minute: int, min_gap: float) -> None:
        self.per_minute = per_minute
        self.min_gap = min_gap
        self._sent: Deque[float] = deque()

    def wait(self) -> None:
        now = time.monotonic()
        while self._sent and now - self._sent[0] >= 60:
            self._sent.popleft()
        if len(self._sent) >= self.per_minute:
            pause = 60 - (now - self._sent[0])
            logger.info("Rate limit: waiting %.1f seconds", pause)
            time.sleep(pause)
        elif self._sent and now - self._sent[-1] < self.min_gap:
            time.sleep(self.min_gap - (now - self._sent[-1]))
        self._sent.append(time.monotonic())


_limiter = _RateLimiter(OPENROUTER_RATE_LIMIT_PER_MINUTE, OPENROUTER_MIN_REQUEST_GAP)


def _extract_text(message_content: Any) -> str:
    """Normalize OpenAI/OpenRouter responses that may be lists or strings."""
    if isinstance(message_content, str):
        return message_content.strip()
    if isinstance(message_content, list):
        parts: List[str] = []
        for part in message_content:
            if isinstance(part, dict):
                # Support both {"type":"text","text":"..."} and {"content":"..."}
                if part.get("type") == "text" and part.get("text"):
                    parts.append(part["text"])
                elif isinstance(part.get("content"), str):
                    parts.append(part["content"])
            elif isinstance(part, str):
                parts.append(part)
        return "\n".join(p.strip() for p in parts if p).strip()
    return str(message_content or "").strip()


def _is_rate_limit(error: Exception) -> bool:
    error_str = str(error)
    return "429" in error_str or "quota" in error_str.lower() or "rate" in error_str.lower()


def call_llm(
    prompt: str,
    model: Optional[str] = None,
    system: Optional[str] = None,
    temperature: float = 0.3,
    max_retries: int = 3,
) -> str:
    """
    Call OpenRouter LLM with a prompt, with rate limiting and retry logic.

    Args:
        prompt: The user prompt to send to the LLM
        model: Optional model override. Defaults to OPENROUTER_MODEL from config.
        system: Optional system message placed before the prompt.
        temperature: Sampling temperature.
        max_retries: Maximum number of retries for rate limit errors

    Returns:
        The LLM response as a string

    Raises:
        LLMError: If the request fails or the rate limit persists.
    """
    model_name = model or OPENROUTER_MODEL
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    for attempt in range(max_retries):
        try:
            _limiter.wait()

            response = _client().chat.completions.create(
                model=model_name,
                messages=messages,
                temperature=temperature,
            )

            if not response.choices:
                raise LLMError("LLM returned no choices.")

            message = response.choices[0].message
            return _extract_text(getattr(message, "content", ""))

        except LLMError:
            raise
        except Exception as e:
            if not _is_rate_limit(e):
                raise LLMError(f"LLM request failed: {e}") from e
            if attempt >= max_retries - 1:
                raise LLMError(
                    f"Rate limit exceeded after {max_retries} retries. Please wait and try again later."
                ) from e

            wait_time = 30
            retry_match = re.search(r"retry in (\d+)", str(e), re.IGNORECASE)
            if retry_match:
                wait_time = int(retry_match.group(1)) + 5
            logger.warning(
                "Rate limit hit. Waiting %s seconds before retry %s/%s",
                wait_time,
                attempt + 1,
                max_retries,
            )
            time.sleep(wait_time)

    raise LLMError("Failed to get response after retries")
