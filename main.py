"""
Sales Pitch Builder API
=======================
Website / PDF → product facts → pitch strategy → objection handling → email cadence.

Usage:
    python main.py
    python main.py --host 0.0.0.0 --port 8080
    python main.py --reload
"""

import argparse
import logging
import sys
from functools import lru_cache
from typing import AsyncIterator

import httpx
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from models import (
    AnalyzePdfRequest,
    AnalyzeWebsiteRequest,
    GenerateEmailCadenceRequest,
    GenerateObjectionHandlingRequest,
    GeneratePitchStrategyRequest,
    ImproveEmailCadenceRequest,
    ImproveObjectionHandlingRequest,
    ImprovePitchStrategyRequest,
    ImprovePromptRequest,
    PipelineResult,
    ProcessFeedbackRequest,
    PromptConfig,
)
from pipeline.email_cadence import EmailCadenceGenerator
from pipeline.errors import PipelineError
from pipeline.llm_client import LLMClient
from pipeline.objection_handling import ObjectionHandlingGenerator
from pipeline.pitch_strategy import PitchStrategyGenerator
from pipeline.product_analyzer import ProductAnalyzer
from pipeline.prompt_improver import PromptImprover
from pipeline.supabase_client import AnalysisCache
from utils import load_prompt

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
_handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
if settings.log_file:
    _handlers.append(logging.FileHandler(settings.log_file))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=_handlers,
)
logger = logging.getLogger("pitch_builder")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(title="Sales Pitch Builder API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Pipeline-Source"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    logger.warning(f"{request.url.path} failed ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request body"
    logger.warning(f"{request.url.path} rejected: {message}")
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
@lru_cache
def get_llm() -> LLMClient:
    return LLMClient()


@lru_cache
def get_cache() -> AnalysisCache:
    cache = AnalysisCache()
    if not cache.enabled:
        logger.info("Supabase not configured, website analysis cache disabled")
    return cache


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


def get_product_analyzer(
    llm: LLMClient = Depends(get_llm), cache: AnalysisCache = Depends(get_cache)
) -> ProductAnalyzer:
    return ProductAnalyzer(llm, cache)


def get_pitch_generator(llm: LLMClient = Depends(get_llm)) -> PitchStrategyGenerator:
    return PitchStrategyGenerator(llm)


def get_objection_generator(llm: LLMClient = Depends(get_llm)) -> ObjectionHandlingGenerator:
    return ObjectionHandlingGenerator(llm)


def get_cadence_generator(llm: LLMClient = Depends(get_llm)) -> EmailCadenceGenerator:
    return EmailCadenceGenerator(llm)


def get_prompt_improver(llm: LLMClient = Depends(get_llm)) -> PromptImprover:
    return PromptImprover(llm)


def artifact_response(result: PipelineResult) -> JSONResponse:
    """Wire JSON for an artifact, tagged with where it came from."""
    return JSONResponse(
        content=result.value.to_wire(),
        headers={"X-Pipeline-Source": result.source},
    )


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------
@app.post("/analyze-website")
async def analyze_website(
    body: AnalyzeWebsiteRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    analyzer: ProductAnalyzer = Depends(get_product_analyzer),
):
    logger.info(f"Analyzing website: {body.url}")
    return artifact_response(await analyzer.analyze_website(client, body.url))


@app.post("/analyze-pdf")
async def analyze_pdf(
    body: AnalyzePdfRequest,
    analyzer: ProductAnalyzer = Depends(get_product_analyzer),
):
    logger.info(f"Analyzing PDF: {body.file_name or 'unknown'}")
    return artifact_response(await analyzer.analyze_pdf(body.pdf_content, body.file_name))


@app.post("/process-feedback")
async def process_feedback(
    body: ProcessFeedbackRequest,
    analyzer: ProductAnalyzer = Depends(get_product_analyzer),
):
    return artifact_response(
        await analyzer.process_feedback(body.feedback, body.current_product_info)
    )


# ---------------------------------------------------------------------------
# Pitch strategy
# ---------------------------------------------------------------------------
@app.post("/generate-pitch-strategy")
async def generate_pitch_strategy(
    body: GeneratePitchStrategyRequest,
    generator: PitchStrategyGenerator = Depends(get_pitch_generator),
):
    prompts = PromptConfig(pitch_strategy=body.system_prompt)
    return artifact_response(await generator.generate(body.product_info, prompts))


@app.post("/improve-pitch-strategy")
async def improve_pitch_strategy(
    body: ImprovePitchStrategyRequest,
    generator: PitchStrategyGenerator = Depends(get_pitch_generator),
):
    return artifact_response(
        await generator.improve(body.feedback, body.current_strategy, body.product_info)
    )


# ---------------------------------------------------------------------------
# Objection handling
# ---------------------------------------------------------------------------
@app.post("/generate-objection-handling")
async def generate_objection_handling(
    body: GenerateObjectionHandlingRequest,
    generator: ObjectionHandlingGenerator = Depends(get_objection_generator),
):
    prompts = PromptConfig(objection_handling=body.system_prompt)
    return artifact_response(
        await generator.generate(body.product_info, body.pitch_strategy, prompts)
    )


@app.post("/improve-objection-handling")
async def improve_objection_handling(
    body: ImproveObjectionHandlingRequest,
    generator: ObjectionHandlingGenerator = Depends(get_objection_generator),
):
    return artifact_response(
        await generator.improve(
            body.feedback, body.current_objections, body.product_info, body.pitch_strategy
        )
    )


# ---------------------------------------------------------------------------
# Email cadence
# ---------------------------------------------------------------------------
@app.post("/generate-email-cadence")
async def generate_email_cadence(
    body: GenerateEmailCadenceRequest,
    generator: EmailCadenceGenerator = Depends(get_cadence_generator),
):
    prompts = PromptConfig(email_cadence=body.system_prompt)
    return artifact_response(
        await generator.generate(
            body.product_info, body.pitch_strategy, body.objection_handling, prompts
        )
    )


@app.post("/improve-email-cadence")
async def improve_email_cadence(
    body: ImproveEmailCadenceRequest,
    generator: EmailCadenceGenerator = Depends(get_cadence_generator),
):
    return artifact_response(
        await generator.improve(
            body.feedback, body.current_cadence, body.product_info, body.pitch_strategy
        )
    )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------
@app.post("/improve-prompt")
async def improve_prompt(
    body: ImprovePromptRequest,
    improver: PromptImprover = Depends(get_prompt_improver),
):
    improved = await improver.improve(body.prompt, body.context, body.field_type)
    return {"improvedPrompt": improved}


@app.get("/prompts/defaults")
async def default_prompts():
    return PromptConfig(
        pitch_strategy=load_prompt("pitch_strategy.txt"),
        objection_handling=load_prompt("objection_handling.txt"),
        email_cadence=load_prompt("email_cadence.txt"),
    ).to_wire()


@app.get("/health")
async def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------
def main() -> None:
    parser = argparse.ArgumentParser(
        description="Sales Pitch Builder API"
    )
    parser.add_argument(
        "--host", default=None, help=f"Bind address (default {settings.host})"
    )
    parser.add_argument(
        "--port", "-p", type=int, default=None,
        help=f"Port to listen on (default {settings.port})",
    )
    parser.add_argument(
        "--reload", action="store_true",
        help="Restart the server when source files change",
    )

    args = parser.parse_args()

    uvicorn.run(
        "main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
