"""
Anthropic API client utilities.

This module contains functions for interacting with the Anthropic Claude API
with automatic retry logic for transient failures.
"""

import anthropic
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from config import settings

# Lazy initialization of Anthropic client
_anthropic_client = None


def get_anthropic_client() -> anthropic.AsyncAnthropic:
    """Get or create the Anthropic client instance."""
    global _anthropic_client
    if _anthropic_client is None:
        _anthropic_client = anthropic.AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
    return _anthropic_client


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(
        (anthropic.APIConnectionError, anthropic.RateLimitError)
    ),
    reraise=True,
)
async def call_anthropic_api_with_retry(
    system_prompt: str,
    user_prompt: str,
    max_tokens: int = None,
    temperature: float = None,
) -> str:
    """
    Calls Anthropic API with automatic retry logic for transient failures.

    Retries up to 3 times for:
    - APIConnectionError (network issues)
    - RateLimitError (rate limit exceeded)

    Does NOT retry for:
    - AuthenticationError (bad API key)
    - BadRequestError (malformed request)
    - Other permanent errors

    Args:
        system_prompt: Instructions and output schema
        user_prompt: Business data to analyze
        max_tokens: Response token ceiling (defaults to settings.MAX_TOKENS)
        temperature: Sampling temperature (defaults to settings.LLM_TEMPERATURE)

    Returns:
        Concatenated text of the response content blocks
    """
    client = get_anthropic_client()

    message = await client.messages.create(
        model=settings.ANTHROPIC_MODEL,
        max_tokens=max_tokens or settings.MAX_TOKENS,
        temperature=settings.LLM_TEMPERATURE if temperature is None else temperature,
        system=system_prompt,
        messages=[
            {
                "role": "user",
                "content": user_prompt,
            }
        ],
    )

    return "".join(
        block.text for block in message.content if getattr(block, "type", "") == "text"
    ).strip()
