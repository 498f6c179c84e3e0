"""Shared resilient-extraction pipeline for model-generated artifacts.

Model call → normalize → locate JSON → validate shape.  Any failure along
the way (upstream error, timeout, no JSON, wrong shape) is logged and
answered with the caller-supplied fallback, so generation stages never
surface model-side trouble to the user.
"""

import json
import logging
from typing import Callable, Generic, Optional, TypeVar

from config import settings
from models import PipelineResult, PitchStrategy, ProductInfo
from pipeline.errors import ExtractionError, InputError, LLMError, ShapeError
from pipeline.json_locator import locate_json
from pipeline.llm_client import LLMClient
from pipeline.schemas import ArtifactShape, validate_artifact

logger = logging.getLogger("pitch_builder")

T = TypeVar("T")


def format_product_info(info: ProductInfo, include_objections: bool = True) -> str:
    """Serialize ProductInfo into the labelled block the prompts expect."""
    parts = [
        f"Product Name: {info.product_name}",
        f"Core Problem: {info.core_problem}",
        f"Key Features: {info.features_text()}",
        f"Differentiators: {info.differentiators}",
        f"Success Stories: {info.success_stories}",
        f"Ideal Customer: {info.ideal_customer}",
        f"Customer Challenges: {info.customer_challenges}",
        f"Product Solution: {info.product_solution}",
    ]
    if include_objections:
        parts.append(f"Known Objections: {info.objections}")
    return "\n".join(parts)


def format_pitch_strategy(strategy: Optional[PitchStrategy]) -> str:
    if strategy is None:
        return "Talk Tracks: Not specified\nKey Talking Points: Not specified"
    return (
        f"Talk Tracks: {' | '.join(strategy.talk_tracks)}\n"
        f"Key Talking Points: {' | '.join(strategy.talking_points)}"
    )


def require_feedback(feedback: Optional[str]) -> str:
    if not feedback or not feedback.strip():
        raise InputError("Feedback is required")
    return feedback.strip()


def to_json(value) -> str:
    if hasattr(value, "to_wire"):
        value = value.to_wire()
    return json.dumps(value, indent=2)


class StructuredGenerator(Generic[T]):
    """Base class for one artifact type; subclasses build the prompts."""

    shape: ArtifactShape
    model: str
    temperature: float

    def __init__(self, llm: Optional[LLMClient] = None, json_mode: Optional[bool] = None):
        self.llm = llm or LLMClient()
        self.json_mode = settings.use_json_mode if json_mode is None else json_mode
        self.timeout = settings.generation_timeout

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, text: str) -> T:
        """Turn a raw completion into a validated artifact.

        Raises:
            ExtractionError: No JSON object in ``text``.
            ShapeError: The object does not match ``self.shape``.
        """
        if self.json_mode:
            try:
                candidate = json.loads(text)
            except json.JSONDecodeError as e:
                raise ExtractionError(f"JSON mode response did not parse: {e}") from e
        else:
            candidate = locate_json(
                text,
                markdown_objections=self.shape is ArtifactShape.OBJECTION_HANDLING,
            )
        return validate_artifact(candidate, self.shape)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def call_model(
        self,
        system: str,
        user: str,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        return await self.llm.complete(
            system=system,
            user=user,
            model=model or self.model,
            temperature=self.temperature if temperature is None else temperature,
            timeout=self.timeout,
            json_mode=self.json_mode,
        )

    async def run(
        self,
        system: str,
        user: str,
        fallback: Callable[[], T],
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> PipelineResult[T]:
        """Return the model's artifact, or ``fallback()`` tagged ``ok=False``."""
        try:
            text = await self.call_model(system, user, temperature, model)
            value = self.parse(text)
        except (LLMError, ExtractionError, ShapeError) as e:
            logger.warning(
                f"{self.shape.value} generation degraded to fallback: "
                f"{type(e).__name__}: {e}"
            )
            return PipelineResult(ok=False, value=fallback())

        logger.info(f"{self.shape.value} generated by {model or self.model}")
        return PipelineResult(ok=True, value=value)

    async def run_strict(
        self,
        system: str,
        user: str,
        fallback: Callable[[], T],
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> PipelineResult[T]:
        """Like ``run`` but upstream errors and timeouts propagate.

        Only unusable output (no JSON, wrong shape) is answered with the
        fallback.  Used by the single-shot analysis stages.
        """
        text = await self.call_model(system, user, temperature, model)
        try:
            value = self.parse(text)
        except (ExtractionError, ShapeError) as e:
            logger.warning(f"{self.shape.value} output unusable, using template: {e}")
            return PipelineResult(ok=False, value=fallback())
        return PipelineResult(ok=True, value=value)
