"""Rewrite a user-entered prompt or feedback snippet so it reads more clearly."""

import logging
from typing import Optional

from config import settings
from pipeline.errors import InputError
from pipeline.llm_client import LLMClient

logger = logging.getLogger("pitch_builder")

SYSTEM_PROMPTS = {
    "feedback": (
        "You are an expert at writing clear, actionable feedback for AI-generated "
        "sales content. Improve the user's feedback so it is specific, constructive "
        "and easy to act on. Keep the user's intent. Return only the improved text."
    ),
    "systemPrompt": (
        "You are an expert prompt engineer. Improve the system prompt below so it "
        "gives the model clear instructions, a well-defined output format and the "
        "right level of detail. Keep any JSON structure requirements intact. "
        "Return only the improved prompt."
    ),
    "website": (
        "You are an expert at describing websites and products for analysis. "
        "Improve the user's text so it clearly states what should be analyzed. "
        "Return only the improved text."
    ),
    "productInfo": (
        "You are an expert B2B copywriter. Improve the product description below "
        "so it is concise, concrete and benefit-oriented. Do not invent facts. "
        "Return only the improved text."
    ),
    "general": (
        "You are an expert writing assistant. Improve the user's text so it is "
        "clear, specific and well structured without changing its meaning. "
        "Return only the improved text."
    ),
}


class PromptImprover:
    """One model call, no JSON handling; upstream errors propagate."""

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or LLMClient()

    async def improve(
        self, prompt: str, context: Optional[str] = None, field_type: str = "general"
    ) -> str:
        if not prompt or not prompt.strip():
            raise InputError("Prompt text is required")

        system = SYSTEM_PROMPTS.get(field_type, SYSTEM_PROMPTS["general"])
        user = f"Text to improve:\n{prompt.strip()}"
        if context:
            user = f"Context: {context}\n\n{user}"

        logger.info(f"Improving {field_type} prompt ({len(prompt)} chars)")
        return await self.llm.complete(
            system=system,
            user=user,
            model=settings.prompt_model,
            temperature=settings.generation_temperature,
            timeout=settings.llm_timeout,
            max_tokens=1000,
        )
