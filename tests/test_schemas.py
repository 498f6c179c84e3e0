"""Tests for artifact shape validation and the wire models behind it.

Run: pytest tests/test_schemas.py -v
Markers: unit
"""
import pytest
from pydantic import ValidationError

from models import NOT_SPECIFIED, EmailCadence, ProductInfo, is_specified
from pipeline.errors import ShapeError
from pipeline.schemas import ArtifactShape, validate_artifact

pytestmark = pytest.mark.unit


VALID_STRATEGY = {
    "coldCallStarters": ["A"],
    "talkTracks": ["T1"],
    "talkingPoints": ["P1"],
}


class TestPitchStrategyShape:
    def test_valid(self):
        strategy = validate_artifact(VALID_STRATEGY, ArtifactShape.PITCH_STRATEGY)
        assert strategy.talk_tracks == ["T1"]
        assert strategy.to_wire() == VALID_STRATEGY

    def test_rejects_missing_and_empty_lists(self):
        with pytest.raises(ShapeError):
            validate_artifact(
                {"talkTracks": [], "talkingPoints": ["x"]},
                ArtifactShape.PITCH_STRATEGY,
            )

    def test_rejects_empty_list(self):
        with pytest.raises(ShapeError):
            validate_artifact({**VALID_STRATEGY, "talkTracks": []}, ArtifactShape.PITCH_STRATEGY)

    def test_rejects_string_where_list_expected(self):
        with pytest.raises(ShapeError):
            validate_artifact(
                {**VALID_STRATEGY, "talkingPoints": "one point"},
                ArtifactShape.PITCH_STRATEGY,
            )

    def test_rejects_non_object(self):
        with pytest.raises(ShapeError):
            validate_artifact(["A"], ArtifactShape.PITCH_STRATEGY)


class TestObjectionShape:
    def test_valid(self):
        handling = validate_artifact(
            {"objectionHandling": [
                {"objection": "Too pricey", "response": "ROI", "proofPoint": "Globex"},
            ]},
            ArtifactShape.OBJECTION_HANDLING,
        )
        assert handling.objection_handling[0].proof_point == "Globex"

    def test_rejects_incomplete_entry(self):
        with pytest.raises(ShapeError):
            validate_artifact(
                {"objectionHandling": [{"objection": "Too pricey", "response": "ROI"}]},
                ArtifactShape.OBJECTION_HANDLING,
            )

    def test_rejects_empty_list(self):
        with pytest.raises(ShapeError):
            validate_artifact({"objectionHandling": []}, ArtifactShape.OBJECTION_HANDLING)


def _step(day, n):
    return {"day": day, "step": f"Step {n}", "type": "Email #1", "content": "Hi"}


class TestEmailCadenceShape:
    def test_valid(self):
        cadence = validate_artifact(
            {"emailCadence": [_step("Day 1", 1), _step("Day 1", 2), _step("Day 4", 3)]},
            ArtifactShape.EMAIL_CADENCE,
        )
        assert len(cadence.email_cadence) == 3

    def test_rejects_decreasing_days(self):
        with pytest.raises(ShapeError):
            validate_artifact(
                {"emailCadence": [_step("Day 5", 1), _step("Day 2", 2)]},
                ArtifactShape.EMAIL_CADENCE,
            )

    def test_rejects_missing_content(self):
        step = _step("Day 1", 1)
        del step["content"]
        with pytest.raises(ShapeError):
            validate_artifact({"emailCadence": [step]}, ArtifactShape.EMAIL_CADENCE)

    def test_unnumbered_days_are_not_ordered(self):
        cadence = EmailCadence.model_validate(
            {"emailCadence": [_step("Day 3", 1), _step("Follow-up", 2), _step("Day 4", 3)]}
        )
        assert cadence.email_cadence[1].day == "Follow-up"


class TestProductInfoShape:
    def test_requires_an_anchor_fact(self):
        with pytest.raises(ShapeError):
            validate_artifact({"idealCustomer": "CFOs"}, ArtifactShape.PRODUCT_INFO)

    def test_core_problem_alone_is_enough(self):
        info = validate_artifact({"coreProblem": "churn"}, ArtifactShape.PRODUCT_INFO)
        assert info.product_name == NOT_SPECIFIED

    @pytest.mark.parametrize("features", [5, True, 2.5, {"a": 1}])
    def test_non_list_features_rejected(self, features):
        with pytest.raises(ShapeError):
            validate_artifact(
                {"productName": "Acme", "keyFeatures": features}, ArtifactShape.PRODUCT_INFO
            )

    def test_placeholder_name_is_not_an_anchor(self):
        with pytest.raises(ShapeError):
            validate_artifact(
                {"productName": "Unable to determine"}, ArtifactShape.PRODUCT_INFO
            )


class TestProductInfoModel:
    def test_accepts_both_spellings(self):
        assert ProductInfo(product_name="Acme").product_name == "Acme"
        assert ProductInfo.model_validate({"productName": "Acme"}).product_name == "Acme"

    def test_wire_format_is_camel_case(self):
        wire = ProductInfo(product_name="Acme").to_wire()
        assert wire["productName"] == "Acme"
        assert wire["keyFeatures"] == []
        assert wire["coreProblem"] == NOT_SPECIFIED

    def test_null_and_blank_become_sentinel(self):
        info = ProductInfo.model_validate({"productName": None, "coreProblem": "  "})
        assert info.product_name == NOT_SPECIFIED
        assert info.core_problem == NOT_SPECIFIED

    def test_non_list_features_fail_validation(self):
        with pytest.raises(ValidationError):
            ProductInfo.model_validate({"keyFeatures": 5})

    def test_tuple_features(self):
        assert ProductInfo(key_features=("SSO", " audit ")).key_features == ["SSO", "audit"]

    def test_comma_separated_features(self):
        info = ProductInfo.model_validate({"keyFeatures": "SSO, analytics,  ,audit log"})
        assert info.key_features == ["SSO", "analytics", "audit log"]

    def test_features_text(self):
        assert ProductInfo().features_text() == NOT_SPECIFIED
        assert ProductInfo(key_features=["a", "b"]).features_text(" | ") == "a | b"

    @pytest.mark.parametrize("value,expected", [
        ("Acme", True),
        ("Not specified", False),
        ("not specified", False),
        ("Unable to determine", False),
        ("N/A", False),
        ("", False),
        (None, False),
    ])
    def test_is_specified(self, value, expected):
        assert is_specified(value) is expected
