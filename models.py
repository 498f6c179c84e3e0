"""Pydantic models for the pitch builder pipeline.

Attributes are snake_case in Python; the wire format is camelCase, and both
spellings are accepted on input.
"""

import re
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

NOT_SPECIFIED = "Not specified"
_UNSPECIFIED_VALUES = {"", "not specified", "unable to determine", "n/a", "none"}


def is_specified(value: Optional[str]) -> bool:
    """True when ``value`` carries a real fact rather than a placeholder."""
    return value is not None and value.strip().lower() not in _UNSPECIFIED_VALUES


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Product facts
# ---------------------------------------------------------------------------

class ProductInfo(WireModel):
    website: str = NOT_SPECIFIED
    product_name: str = NOT_SPECIFIED
    core_problem: str = NOT_SPECIFIED
    key_features: list[str] = Field(default_factory=list)
    differentiators: str = NOT_SPECIFIED
    success_stories: str = NOT_SPECIFIED
    ideal_customer: str = NOT_SPECIFIED
    customer_challenges: str = NOT_SPECIFIED
    product_solution: str = NOT_SPECIFIED
    objections: str = NOT_SPECIFIED

    @field_validator(
        "website", "product_name", "core_problem", "differentiators",
        "success_stories", "ideal_customer", "customer_challenges",
        "product_solution", "objections",
        mode="before",
    )
    @classmethod
    def _default_to_sentinel(cls, value):
        if value is None:
            return NOT_SPECIFIED
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        if not isinstance(value, str):
            value = str(value)
        return value.strip() or NOT_SPECIFIED

    @field_validator("key_features", mode="before")
    @classmethod
    def _coerce_features(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if not isinstance(value, (list, tuple)):
            raise ValueError("keyFeatures must be a list or comma-separated string")
        return [str(v).strip() for v in value if str(v).strip()]

    def features_text(self, sep: str = ", ") -> str:
        return sep.join(self.key_features) if self.key_features else NOT_SPECIFIED


class DocumentAnalysis(ProductInfo):
    """ProductInfo extracted from an uploaded PDF, plus extraction stats."""
    extraction_method: str = "none"
    extracted_text_length: int = 0


# ---------------------------------------------------------------------------
# Generated artifacts
# ---------------------------------------------------------------------------

class PitchStrategy(WireModel):
    cold_call_starters: list[str] = Field(min_length=1)
    talk_tracks: list[str] = Field(min_length=1)
    talking_points: list[str] = Field(min_length=1)


class Objection(WireModel):
    objection: str
    response: str
    proof_point: str


class ObjectionHandling(WireModel):
    objection_handling: list[Objection] = Field(min_length=1)


_DAY_NUMBER = re.compile(r"\d+")


def day_number(label: str) -> Optional[int]:
    """Numeric part of a day label such as ``"Day 12"``."""
    m = _DAY_NUMBER.search(label)
    return int(m.group()) if m else None


class EmailCadenceStep(WireModel):
    day: str
    step: str
    type: str
    content: str


class EmailCadence(WireModel):
    email_cadence: list[EmailCadenceStep] = Field(min_length=1)

    @model_validator(mode="after")
    def _days_non_decreasing(self):
        last = None
        for item in self.email_cadence:
            n = day_number(item.day)
            if n is None:
                continue
            if last is not None and n < last:
                raise ValueError(
                    f"email cadence days out of order: {item.day!r} after Day {last}"
                )
            last = n
        return self


T = TypeVar("T")


@dataclass
class PipelineResult(Generic[T]):
    """Artifact plus whether it came from the model or from synthesis."""
    ok: bool
    value: T

    @property
    def source(self) -> str:
        return "model" if self.ok else "fallback"


# ---------------------------------------------------------------------------
# Prompt configuration
# ---------------------------------------------------------------------------

class PromptConfig(WireModel):
    """Per-request system prompt overrides; ``None`` means the default."""
    pitch_strategy: Optional[str] = None
    objection_handling: Optional[str] = None
    email_cadence: Optional[str] = None


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class AnalyzeWebsiteRequest(WireModel):
    url: str


class AnalyzePdfRequest(WireModel):
    pdf_content: str
    file_name: Optional[str] = None


class ProcessFeedbackRequest(WireModel):
    feedback: str
    current_product_info: ProductInfo


class GeneratePitchStrategyRequest(WireModel):
    product_info: ProductInfo
    system_prompt: Optional[str] = None


class ImprovePitchStrategyRequest(WireModel):
    feedback: str
    current_strategy: dict
    product_info: ProductInfo


class GenerateObjectionHandlingRequest(WireModel):
    product_info: ProductInfo
    pitch_strategy: PitchStrategy
    system_prompt: Optional[str] = None


class ImproveObjectionHandlingRequest(WireModel):
    feedback: str
    current_objections: list[dict]
    product_info: ProductInfo
    pitch_strategy: Optional[PitchStrategy] = None


class GenerateEmailCadenceRequest(WireModel):
    product_info: ProductInfo
    pitch_strategy: PitchStrategy
    objection_handling: Optional[list[Objection]] = None
    system_prompt: Optional[str] = None


class ImproveEmailCadenceRequest(WireModel):
    feedback: str
    current_cadence: list[dict]
    product_info: ProductInfo
    pitch_strategy: Optional[PitchStrategy] = None


class ImprovePromptRequest(WireModel):
    prompt: str
    context: Optional[str] = None
    field_type: str = "general"
