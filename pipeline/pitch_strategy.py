"""Generate and revise a PitchStrategy from ProductInfo via OpenAI."""

import logging
from typing import Optional

from config import settings
from models import PipelineResult, PitchStrategy, ProductInfo, PromptConfig
from pipeline.fallbacks import keep_current_or_synthesize, synthesize_pitch_strategy
from pipeline.generator import (
    StructuredGenerator,
    format_product_info,
    require_feedback,
    to_json,
)
from pipeline.llm_client import LLMClient
from pipeline.schemas import ArtifactShape
from utils import load_prompt

logger = logging.getLogger("pitch_builder")


class PitchStrategyGenerator(StructuredGenerator[PitchStrategy]):
    """Cold call starters, talk tracks and talking points for one product."""

    shape = ArtifactShape.PITCH_STRATEGY

    def __init__(self, llm: Optional[LLMClient] = None, json_mode: Optional[bool] = None):
        super().__init__(llm, json_mode)
        self.model = settings.pitch_model
        self.temperature = settings.generation_temperature
        self.prompt = load_prompt("pitch_strategy.txt")
        self.improve_prompt = load_prompt("improve_pitch_strategy.txt")

    @staticmethod
    def _format_request(product_info: ProductInfo) -> str:
        return (
            "Generate a personalized pitch strategy based on this product information:\n\n"
            f"{format_product_info(product_info)}\n\n"
            "Create compelling talk tracks that reference these specific details and "
            "talking points that highlight the key benefits for this target audience."
        )

    async def generate(
        self,
        product_info: ProductInfo,
        prompts: Optional[PromptConfig] = None,
    ) -> PipelineResult[PitchStrategy]:
        system = (prompts and prompts.pitch_strategy) or self.prompt
        logger.info(f"Generating pitch strategy for {product_info.product_name}")
        return await self.run(
            system,
            self._format_request(product_info),
            fallback=lambda: synthesize_pitch_strategy(product_info),
        )

    async def improve(
        self,
        feedback: str,
        current_strategy: dict,
        product_info: ProductInfo,
    ) -> PipelineResult[PitchStrategy]:
        """Revise ``current_strategy``; falls back to it unchanged."""
        feedback = require_feedback(feedback)
        logger.info(f"Improving pitch strategy with feedback: {feedback[:100]}")
        user = (
            f"Current pitch strategy:\n{to_json(current_strategy)}\n\n"
            f"Product information context:\n{to_json(product_info)}\n\n"
            f"User feedback:\n{feedback}\n\n"
            "Please update the pitch strategy based on this feedback and return the "
            "improved JSON with all three components (coldCallStarters, talkTracks, "
            "talkingPoints)."
        )
        return await self.run(
            self.improve_prompt,
            user,
            fallback=lambda: keep_current_or_synthesize(
                current_strategy,
                self.shape,
                lambda: synthesize_pitch_strategy(product_info),
            ),
            temperature=settings.analysis_temperature,
        )
