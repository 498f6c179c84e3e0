"""Extract ProductInfo from a website or an uploaded PDF, and revise it."""

import asyncio
import logging
from typing import Optional

import httpx

from config import settings
from models import DocumentAnalysis, PipelineResult, ProductInfo, is_specified
from pipeline.document_extractor import extract_pdf_text
from pipeline.errors import InputError, PipelineTimeoutError, UpstreamFetchError
from pipeline.fallbacks import synthesize_product_info
from pipeline.generator import StructuredGenerator, require_feedback, to_json
from pipeline.llm_client import LLMClient
from pipeline.schemas import ArtifactShape
from pipeline.supabase_client import AnalysisCache
from utils import extract_text_from_html, load_prompt, normalize_url

logger = logging.getLogger("pitch_builder")

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class ProductAnalyzer(StructuredGenerator[ProductInfo]):
    """Website/PDF analysis plus free-text feedback on the extracted facts.

    Unlike the generation stages, upstream failures here are hard errors:
    a bad URL, a non-2xx fetch, an API error or a timeout reaches the
    client.  Only unparseable model output degrades to a templated record.
    """

    shape = ArtifactShape.PRODUCT_INFO

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        cache: Optional[AnalysisCache] = None,
        json_mode: Optional[bool] = None,
    ):
        super().__init__(llm, json_mode)
        self.model = settings.website_model
        self.temperature = settings.analysis_temperature
        self.timeout = settings.llm_timeout
        self.cache = cache or AnalysisCache()
        self.prompt = load_prompt("product_analysis.txt")
        self.feedback_prompt = load_prompt("process_feedback.txt")

    def _system_prompt(self, source: str) -> str:
        return self.prompt.replace("{source}", source)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def fetch_page(self, client: httpx.AsyncClient, url: str) -> str:
        """GET a page and return its extracted text."""
        try:
            resp = await client.get(
                url,
                timeout=settings.http_timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )
        except httpx.HTTPError as e:
            raise UpstreamFetchError(f"Failed to fetch website: {e}") from e
        if resp.is_error:
            raise UpstreamFetchError(f"Failed to fetch website (HTTP {resp.status_code})")
        return extract_text_from_html(resp.text, max_length=settings.website_text_limit)

    # ------------------------------------------------------------------
    # Website
    # ------------------------------------------------------------------

    async def analyze_website(
        self, client: httpx.AsyncClient, url: str
    ) -> PipelineResult[ProductInfo]:
        if not url or not url.strip():
            raise InputError("URL is required")
        website = normalize_url(url)
        if not website:
            raise InputError(f"Invalid URL: {url!r}")

        cached = await asyncio.to_thread(self.cache.get_cached_analysis, website)
        if cached:
            logger.info(f"Cache hit: {website}")
            return PipelineResult(ok=True, value=ProductInfo.model_validate(cached))

        page_text = await self.fetch_page(client, website)
        logger.info(f"Fetched {website} ({len(page_text)} chars of text)")

        result = await self.run_strict(
            self._system_prompt("website"),
            f"Analyze this website content and extract product/audience information:\n\n{page_text}",
            fallback=lambda: synthesize_product_info(website=website),
        )
        if not is_specified(result.value.website):
            result.value.website = website

        if result.ok:
            await asyncio.to_thread(self.cache.upsert_analysis, website, result.value.to_wire())
        return result

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------

    async def _analyze_document(
        self, pdf_content: str, file_name: str
    ) -> PipelineResult[DocumentAnalysis]:
        doc = await asyncio.to_thread(extract_pdf_text, pdf_content, file_name)

        result = await self.run_strict(
            self._system_prompt("document"),
            "Please analyze this document and extract product/audience information "
            f"for sales strategy purposes.\n\nDocument content:\n{doc.text}",
            fallback=lambda: synthesize_product_info(source_name=file_name),
            model=settings.document_model,
        )
        analysis = DocumentAnalysis(
            **result.value.model_dump(),
            extraction_method=doc.method,
            extracted_text_length=len(doc.text),
        )
        return PipelineResult(ok=result.ok, value=analysis)

    async def analyze_pdf(
        self, pdf_content: str, file_name: Optional[str] = None
    ) -> PipelineResult[DocumentAnalysis]:
        """Extract text from a base64 PDF and analyze it.

        The whole path runs under ``settings.document_timeout``; the model
        call inside it under the shorter ``settings.llm_timeout``.
        """
        if not pdf_content:
            raise InputError("PDF content is required")
        file_name = file_name or "unknown"
        try:
            return await asyncio.wait_for(
                self._analyze_document(pdf_content, file_name),
                timeout=settings.document_timeout,
            )
        except asyncio.TimeoutError as e:
            raise PipelineTimeoutError(
                "Request timed out. The PDF might be too large or complex to process."
            ) from e

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    async def process_feedback(
        self, feedback: str, current: ProductInfo
    ) -> PipelineResult[ProductInfo]:
        """Apply free-text feedback to the whole record.

        Model trouble of any kind leaves ``current`` unchanged.
        """
        feedback = require_feedback(feedback)
        user = (
            f"Current product information:\n{to_json(current)}\n\n"
            f"User feedback:\n{feedback}\n\n"
            "Please update the product information based on this feedback and "
            "return the updated JSON."
        )
        return await self.run(
            self.feedback_prompt,
            user,
            fallback=lambda: current,
            model=settings.feedback_model,
        )
