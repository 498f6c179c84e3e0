"""Tests for shared helpers.

Run: pytest tests/test_utils.py -v
Markers: unit
"""
from pathlib import Path

import pytest

from utils import PROMPTS_DIR, extract_text_from_html, load_prompt, normalize_url

pytestmark = pytest.mark.unit


class TestNormalizeUrl:
    @pytest.mark.parametrize("raw,expected", [
        ("acme.com", "https://acme.com"),
        ("  'acme.com'  ", "https://acme.com"),
        ("http://acme.com", "http://acme.com"),
        ("HTTPS://acme.com/pricing?x=1", "https://acme.com/pricing?x=1"),
        ("www.www.acme.com", "https://www.acme.com"),
        ("//acme.com", "https://acme.com"),
    ])
    def test_normalizes(self, raw, expected):
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "https://", "/just/a/path"])
    def test_rejects_empty(self, raw):
        assert normalize_url(raw) == ""


class TestExtractTextFromHtml:
    def test_strips_scripts_styles_and_tags(self):
        html = (
            "<html><head><style>p {color: red}</style><script>var x = 1;</script></head>"
            "<body><!-- nav --><p>Fast&nbsp;onboarding &amp; SSO</p></body></html>"
        )
        assert extract_text_from_html(html) == "Fast onboarding & SSO"

    def test_truncates(self):
        html = "<p>" + "word " * 2000 + "</p>"
        assert len(extract_text_from_html(html, max_length=100)) == 100


class TestLoadPrompt:
    @pytest.mark.parametrize("name", [
        "product_analysis.txt",
        "process_feedback.txt",
        "pitch_strategy.txt",
        "improve_pitch_strategy.txt",
        "objection_handling.txt",
        "improve_objection_handling.txt",
        "email_cadence.txt",
        "improve_email_cadence.txt",
    ])
    def test_prompts_exist(self, name):
        assert load_prompt(name)

    def test_product_analysis_has_source_slot(self):
        assert "{source}" in load_prompt("product_analysis.txt")

    def test_prompts_ship_inside_the_pipeline_package(self):
        import pipeline.generator

        package_dir = Path(pipeline.generator.__file__).parent
        assert PROMPTS_DIR == package_dir / "prompts"
        assert sorted(p.name for p in PROMPTS_DIR.glob("*.txt")) == sorted([
            "email_cadence.txt",
            "improve_email_cadence.txt",
            "improve_objection_handling.txt",
            "improve_pitch_strategy.txt",
            "objection_handling.txt",
            "pitch_strategy.txt",
            "process_feedback.txt",
            "product_analysis.txt",
        ])
