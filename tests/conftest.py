"""Shared test fixtures for pytest suite.

Provides fixtures for:
- fake_llm: factory for a scripted stand-in for LLMClient
- acme_info: ProductInfo for the "Acme" onboarding product
- blank_info: ProductInfo with every field left at the sentinel
- fake_cache: in-memory AnalysisCache replacement
- make_client: FastAPI TestClient with the model, cache and HTTP client overridden
"""
import base64
import os

# Settings() is built at import time and requires a key.
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ["LOG_FILE"] = ""
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)

import httpx
import pytest

from models import ProductInfo


# ---------------------------------------------------------------------------
# Fake model client
# ---------------------------------------------------------------------------

class FakeLLM:
    """Replays scripted completions; an Exception instance is raised instead.

    The last scripted item repeats once the others are used up.
    """

    def __init__(self, *responses):
        self.responses = list(responses) or ["{}"]
        self.calls: list[dict] = []

    async def complete(self, system, user, model, temperature, timeout,
                       json_mode=False, max_tokens=None):
        self.calls.append({
            "system": system, "user": user, "model": model,
            "temperature": temperature, "timeout": timeout,
            "json_mode": json_mode, "max_tokens": max_tokens,
        })
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, BaseException):
            raise item
        return item


class FakeCache:
    def __init__(self, stored=None):
        self.stored: dict = dict(stored or {})
        self.writes: list[tuple[str, dict]] = []

    @property
    def enabled(self):
        return True

    def get_cached_analysis(self, website):
        return self.stored.get(website)

    def upsert_analysis(self, website, product_info):
        self.writes.append((website, product_info))
        self.stored[website] = product_info


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def fake_cache():
    return FakeCache()


# ---------------------------------------------------------------------------
# Product facts
# ---------------------------------------------------------------------------

@pytest.fixture
def acme_info():
    return ProductInfo(
        product_name="Acme",
        core_problem="slow onboarding",
        key_features=["guided setup", "SSO", "usage analytics"],
        differentiators="setup in under a day",
        success_stories="Globex cut onboarding time by 60%",
        ideal_customer="mid-market SaaS companies",
        customer_challenges="long time-to-value",
        product_solution="get new users productive in their first session",
        objections="too expensive, already have a tool",
    )


@pytest.fixture
def blank_info():
    return ProductInfo()


# ---------------------------------------------------------------------------
# PDF payloads
# ---------------------------------------------------------------------------

def pdf_base64(body: bytes) -> str:
    return base64.b64encode(b"%PDF-1.4\n" + body + b"\n%%EOF").decode()


@pytest.fixture
def text_pdf():
    """A small text-based PDF whose content streams hold readable literals."""
    lines = [
        b"BT /F1 12 Tf 72 700 Td (Acme speeds up customer onboarding) Tj ET",
        b"BT /F1 12 Tf 72 680 Td (Guided setup for new teams) Tj ET",
        b"BT /F1 12 Tf 72 660 Td (Single sign-on out of the box) Tj ET",
        b"BT /F1 12 Tf 72 640 Td (Usage analytics for admins) Tj ET",
        b"BT /F1 12 Tf 72 620 Td (Trusted by mid-market SaaS companies) Tj ET",
        b"BT /F1 12 Tf 72 600 Td (Globex cut onboarding time by sixty percent) Tj ET",
    ]
    return pdf_base64(b"\n".join(lines))


@pytest.fixture
def empty_pdf():
    """Decodes fine but carries no readable text."""
    return pdf_base64(b"1 0 obj << /Type /Catalog >> endobj\n\x00\x01\x02\x03")


# ---------------------------------------------------------------------------
# App client
# ---------------------------------------------------------------------------

@pytest.fixture
def make_client(fake_cache):
    """Build a TestClient whose dependencies use the given fakes.

    ``handler`` answers website fetches through ``httpx.MockTransport``.
    """
    from fastapi.testclient import TestClient

    import main

    def factory(llm=None, handler=None):
        llm = llm or FakeLLM()

        def mock_handler(request):
            return httpx.Response(200, text="<html><body>Hello</body></html>")

        async def http_client_override():
            transport = httpx.MockTransport(handler or mock_handler)
            async with httpx.AsyncClient(transport=transport) as client:
                yield client

        main.app.dependency_overrides[main.get_llm] = lambda: llm
        main.app.dependency_overrides[main.get_cache] = lambda: fake_cache
        main.app.dependency_overrides[main.get_http_client] = http_client_override
        client = TestClient(main.app)
        client.llm = llm
        client.cache = fake_cache
        return client

    yield factory

    import main
    main.app.dependency_overrides.clear()
