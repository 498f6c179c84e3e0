"""Thin async wrapper around OpenAI chat completions."""

import asyncio
import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from config import settings
from pipeline.errors import LLMError, LLMTimeoutError

logger = logging.getLogger("pitch_builder")


class LLMClient:
    """Send a system + user prompt pair and return the completion text."""

    def __init__(self, openai_client: Optional[AsyncOpenAI] = None):
        self.openai = openai_client or AsyncOpenAI(api_key=settings.openai_api_key)

    async def complete(
        self,
        system: str,
        user: str,
        model: str,
        temperature: float,
        timeout: float,
        json_mode: bool = False,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Return the assistant message content.

        Raises:
            LLMTimeoutError: No answer within ``timeout`` seconds.
            LLMError: The API errored or returned an empty message.
        """
        kwargs: dict = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await asyncio.wait_for(
                self.openai.chat.completions.create(**kwargs), timeout=timeout
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            raise LLMTimeoutError(f"{model} did not respond within {timeout}s") from e
        except openai.APIStatusError as e:
            raise LLMError(f"OpenAI API error: {e.status_code} - {e.message}") from e
        except openai.APIError as e:
            raise LLMError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError(f"{model} returned an empty message")

        logger.debug(f"Raw {model} response: {content[:500]}")
        return content.strip()
