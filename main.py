"""BiasScope — side-by-side LLM chat with sentence-level bias analysis.

FastAPI application entry-point.
Serves the chat proxy consumed by the two UI panels and the bias-analysis
endpoint fed with each panel's prompts and responses.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from config import Settings, get_settings
from engine.errors import BiasScopeError, InternalError
from engine.pipeline import run_bias_analysis
from schemas.request import BiasRequest, ChatRequest
from schemas.response import BiasAnalysisResponse, ErrorResponse, ModelsResponse
from services.inference_client import InferenceClient
from services.llm_service import ChatService

VERSION = "0.1.0"

settings = get_settings()

# ── Logging ────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("biascope")


# ── Dependencies ───────────────────────────────────────────────────────

async def get_inference_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[InferenceClient]:
    """One HTTP client per request, closed once the response is built."""
    async with InferenceClient.from_settings(settings) as client:
        yield client


def get_chat_service(settings: Settings = Depends(get_settings)) -> ChatService:
    return ChatService.from_settings(settings)


# ── Lifespan ───────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    logger.info(
        "BiasScope starting — detector=%s type=%s chat_provider=%s inference=%s",
        settings.bias_detector_model,
        settings.bias_type_model,
        settings.chat_provider,
        "configured" if settings.huggingface_token else "MISSING TOKEN",
    )
    yield
    logger.info("BiasScope shutting down.")


# ── App ────────────────────────────────────────────────────────────────

app = FastAPI(
    title="BiasScope",
    description="Compare two LLMs side by side and analyse prompts and responses for bias.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BiasScopeError)
async def bias_scope_error_handler(request: Request, exc: BiasScopeError) -> JSONResponse:  # noqa: ARG001
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


# ── Routes ─────────────────────────────────────────────────────────────

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@app.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "engine": "biascope",
        "version": VERSION,
        "inference_configured": bool(settings.huggingface_token),
        "chat_provider": settings.chat_provider,
    }


@app.get("/api/models", response_model=ModelsResponse, summary="Models available for side-by-side panels")
async def list_models(settings: Settings = Depends(get_settings)) -> ModelsResponse:
    return ModelsResponse(default_model=settings.default_chat_model, models=settings.chat_model_list)


@app.post(
    "/api/bias",
    response_model=BiasAnalysisResponse,
    responses=_ERROR_RESPONSES,
    summary="Sentence-level bias analysis",
    description="Splits the text into sentences, classifies each one for bias and bias type, "
    "and returns per-sentence records plus aggregate statistics.",
)
async def analyze_bias(
    payload: BiasRequest,
    settings: Settings = Depends(get_settings),
    classifier: InferenceClient = Depends(get_inference_client),
) -> BiasAnalysisResponse:
    try:
        return await run_bias_analysis(payload.text, classifier, settings)
    except BiasScopeError:
        raise
    except Exception as exc:
        logger.exception("Bias analysis failed")
        raise InternalError(str(exc) or "Unexpected error while running bias analysis.") from exc


@app.post(
    "/api/chat",
    response_class=StreamingResponse,
    responses=_ERROR_RESPONSES,
    summary="Stream a chat completion as plain text",
)
async def chat(
    payload: ChatRequest,
    model: str | None = Query(default=None, description="Model id, e.g. 'openai/gpt-5'."),
    temp: float | None = Query(default=None, ge=0.0, le=2.0, description="Sampling temperature."),
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    stream = await chat_service.open_stream(payload.messages, model=model, temperature=temp)
    return StreamingResponse(stream, media_type="text/plain; charset=utf-8")


# ── Dev runner ─────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=True,
    )
