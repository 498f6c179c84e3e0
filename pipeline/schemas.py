"""Schema validation for located JSON objects."""

from enum import Enum

from pydantic import ValidationError

from models import (
    EmailCadence,
    ObjectionHandling,
    PitchStrategy,
    ProductInfo,
    WireModel,
    is_specified,
)
from pipeline.errors import ShapeError


class ArtifactShape(str, Enum):
    PRODUCT_INFO = "productInfo"
    PITCH_STRATEGY = "pitchStrategy"
    OBJECTION_HANDLING = "objectionHandling"
    EMAIL_CADENCE = "emailCadence"


SHAPE_MODELS: dict[ArtifactShape, type[WireModel]] = {
    ArtifactShape.PRODUCT_INFO: ProductInfo,
    ArtifactShape.PITCH_STRATEGY: PitchStrategy,
    ArtifactShape.OBJECTION_HANDLING: ObjectionHandling,
    ArtifactShape.EMAIL_CADENCE: EmailCadence,
}


def _describe(err: ValidationError) -> str:
    parts = []
    for e in err.errors()[:5]:
        loc = ".".join(str(p) for p in e["loc"]) or "<root>"
        parts.append(f"{loc}: {e['msg']}")
    return "; ".join(parts)


def validate_artifact(candidate, shape: ArtifactShape):
    """Return ``candidate`` as the typed model for ``shape``.

    All or nothing: a missing key, a non-list where a list is expected, an
    empty required list or an incomplete step record rejects the whole
    object.

    Raises:
        ShapeError: ``candidate`` does not match the schema.
    """
    if not isinstance(candidate, dict):
        raise ShapeError(f"{shape.value}: expected a JSON object, got {type(candidate).__name__}")

    model = SHAPE_MODELS[shape]
    try:
        value = model.model_validate(candidate)
    except ValidationError as e:
        raise ShapeError(f"{shape.value}: {_describe(e)}") from e
    except (TypeError, ValueError) as e:
        raise ShapeError(f"{shape.value}: {e}") from e

    # ProductInfo fills gaps with the sentinel, so demand at least one anchor fact.
    if shape is ArtifactShape.PRODUCT_INFO and not (
        is_specified(value.product_name) or is_specified(value.core_problem)
    ):
        raise ShapeError("productInfo: neither productName nor coreProblem present")

    return value
