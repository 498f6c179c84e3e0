"""Generate and revise the 16-day outreach cadence via OpenAI."""

import logging
from typing import Optional

from config import settings
from models import (
    EmailCadence,
    Objection,
    PipelineResult,
    PitchStrategy,
    ProductInfo,
    PromptConfig,
)
from pipeline.fallbacks import keep_current_or_synthesize, synthesize_email_cadence
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


class EmailCadenceGenerator(StructuredGenerator[EmailCadence]):
    """Emails, LinkedIn touches and calls across a 16-day sequence."""

    shape = ArtifactShape.EMAIL_CADENCE

    def __init__(self, llm: Optional[LLMClient] = None, json_mode: Optional[bool] = None):
        super().__init__(llm, json_mode)
        self.model = settings.cadence_model
        self.temperature = settings.generation_temperature
        self.prompt = load_prompt("email_cadence.txt")
        self.improve_prompt = load_prompt("improve_email_cadence.txt")

    @staticmethod
    def _format_objections(objections: Optional[list[Objection]]) -> str:
        if not objections:
            return ""
        lines = " | ".join(
            f"Objection: {o.objection} | Response: {o.response} | Proof: {o.proof_point}"
            for o in objections
        )
        return f"OBJECTION HANDLING:\n{lines}\n\n"

    def _format_request(
        self,
        product_info: ProductInfo,
        pitch_strategy: PitchStrategy,
        objections: Optional[list[Objection]],
    ) -> str:
        return (
            "Generate a personalized email cadence based on this information:\n\n"
            f"PRODUCT INFORMATION:\n"
            f"{format_product_info(product_info, include_objections=False)}\n\n"
            f"PITCH STRATEGY:\n{format_pitch_strategy(pitch_strategy)}\n\n"
            f"{self._format_objections(objections)}"
            "Create a specific email cadence that aligns with this product and target "
            "audience. Focus on their pain points and how this specific product solves "
            "their challenges. Use the success stories and differentiators in the email "
            "content."
        )

    async def generate(
        self,
        product_info: ProductInfo,
        pitch_strategy: PitchStrategy,
        objections: Optional[list[Objection]] = None,
        prompts: Optional[PromptConfig] = None,
    ) -> PipelineResult[EmailCadence]:
        system = (prompts and prompts.email_cadence) or self.prompt
        logger.info(f"Generating email cadence for {product_info.product_name}")
        return await self.run(
            system,
            self._format_request(product_info, pitch_strategy, objections),
            fallback=lambda: synthesize_email_cadence(product_info, pitch_strategy, objections),
        )

    async def improve(
        self,
        feedback: str,
        current_cadence: list[dict],
        product_info: ProductInfo,
        pitch_strategy: Optional[PitchStrategy] = None,
    ) -> PipelineResult[EmailCadence]:
        feedback = require_feedback(feedback)
        user = (
            f"Current email cadence:\n{to_json({'emailCadence': current_cadence})}\n\n"
            f"PRODUCT INFORMATION:\n"
            f"{format_product_info(product_info, include_objections=False)}\n\n"
            f"PITCH STRATEGY:\n{format_pitch_strategy(pitch_strategy)}\n\n"
            f"User feedback:\n{feedback}\n\n"
            "Please update the email cadence based on this feedback and return the "
            "improved JSON."
        )
        return await self.run(
            self.improve_prompt,
            user,
            fallback=lambda: keep_current_or_synthesize(
                {"emailCadence": current_cadence},
                self.shape,
                lambda: synthesize_email_cadence(product_info, pitch_strategy),
            ),
        )
