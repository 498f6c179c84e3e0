"""Generate and revise objection-handling tactics via OpenAI."""

import asyncio
import logging
from typing import Optional

from config import settings
from models import (
    ObjectionHandling,
    PipelineResult,
    PitchStrategy,
    ProductInfo,
    PromptConfig,
)
from pipeline.fallbacks import keep_current_or_synthesize, synthesize_objection_handling
from pipeline.generator import (
    StructuredGenerator,
    format_pitch_strategy,
    format_product_info,
    require_feedback,
    to_json,
)
from pipeline.llm_client import LLMClient
from pipeline.schemas import ArtifactShape
from utils import load_prompt

logger = logging.getLogger("pitch_builder")


class ObjectionHandlingGenerator(StructuredGenerator[ObjectionHandling]):
    """Likely objections with a response and proof point each."""

    shape = ArtifactShape.OBJECTION_HANDLING

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        json_mode: Optional[bool] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        super().__init__(llm, json_mode)
        self.model = settings.objection_model
        self.temperature = settings.generation_temperature
        self.prompt = load_prompt("objection_handling.txt")
        self.improve_prompt = load_prompt("improve_objection_handling.txt")
        self.retry_attempts = (
            settings.objection_retry_attempts if retry_attempts is None else retry_attempts
        )
        self.retry_delay = (
            settings.objection_retry_delay if retry_delay is None else retry_delay
        )

    @staticmethod
    def _format_request(product_info: ProductInfo, pitch_strategy: Optional[PitchStrategy]) -> str:
        return (
            "Generate objection handling tactics based on this information:\n\n"
            f"PRODUCT INFORMATION:\n{format_product_info(product_info)}\n\n"
            f"PITCH STRATEGY:\n{format_pitch_strategy(pitch_strategy)}\n\n"
            "Create specific objection handling tactics that align with this product "
            "and strategy. Focus on the most likely objections this target audience "
            "would have about this specific product.\n\n"
            "RETURN ONLY JSON - NO MARKDOWN OR ADDITIONAL TEXT."
        )

    async def generate(
        self,
        product_info: ProductInfo,
        pitch_strategy: PitchStrategy,
        prompts: Optional[PromptConfig] = None,
    ) -> PipelineResult[ObjectionHandling]:
        system = (prompts and prompts.objection_handling) or self.prompt
        logger.info(f"Generating objection handling for {product_info.product_name}")
        return await self.run(
            system,
            self._format_request(product_info, pitch_strategy),
            fallback=lambda: synthesize_objection_handling(product_info),
        )

    async def improve(
        self,
        feedback: str,
        current_objections: list[dict],
        product_info: ProductInfo,
        pitch_strategy: Optional[PitchStrategy] = None,
    ) -> PipelineResult[ObjectionHandling]:
        """Revise the objections, retrying the whole request on failure.

        Up to ``retry_attempts`` extra attempts with a fixed delay; after the
        last one the current objections (or a synthesized set) come back.
        """
        feedback = require_feedback(feedback)
        user = (
            f"Current objection handling:\n"
            f"{to_json({'objectionHandling': current_objections})}\n\n"
            f"PRODUCT INFORMATION:\n{format_product_info(product_info)}\n\n"
            f"PITCH STRATEGY:\n{format_pitch_strategy(pitch_strategy)}\n\n"
            f"User feedback:\n{feedback}\n\n"
            "Please update the objection handling based on this feedback and return "
            "the improved JSON."
        )

        def fallback() -> ObjectionHandling:
            return keep_current_or_synthesize(
                {"objectionHandling": current_objections},
                self.shape,
                lambda: synthesize_objection_handling(product_info),
            )

        attempts = self.retry_attempts + 1
        result: Optional[PipelineResult[ObjectionHandling]] = None
        for attempt in range(attempts):
            result = await self.run(self.improve_prompt, user, fallback=fallback)
            if result.ok:
                return result
            if attempt < attempts - 1:
                logger.warning(
                    f"Objection improvement attempt {attempt + 1} failed, "
                    f"retrying in {self.retry_delay}s"
                )
                await asyncio.sleep(self.retry_delay)

        logger.warning(f"Objection improvement gave up after {attempts} attempts")
        return result
