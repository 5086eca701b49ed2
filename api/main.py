"""
SafeTalk API — Main Application

POST /analyze  — Analyze a drafted message and return the safer rewrite
POST /send     — Analyze and deliver a message (original kept for review)
GET  /patterns — List the rule-based detection table
GET  /health   — Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from safetalk import __version__
from safetalk.config import settings
from safetalk.diff import compute_diff_spans
from safetalk.logging import setup_logging, get_logger
from safetalk.models import SEVERITY_COLOR, TONE_EMOJI, AnalysisResult
from safetalk.orchestrator import AnalysisOrchestrator, build_orchestrator
from safetalk.rules import RULES_VERSION, describe_rules
from safetalk.schemas.analysis import (
    AnalyzeRequest,
    AnalysisResponse,
    HealthResponse,
    PatternsResponse,
    SendRequest,
    SendResponse,
)

logger = get_logger("api")


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire up dependencies on startup."""
    setup_logging()
    orchestrator = _get_orchestrator()
    logger.info(
        "SafeTalk API starting",
        extra={"source": "remote" if orchestrator.remote_available else "simulation"},
    )
    yield
    logger.info("SafeTalk API shutting down")


app = FastAPI(
    title="SafeTalk API",
    description="Message analysis and neutralization for high-conflict communication",
    version=f"{__version__} (rules {RULES_VERSION})",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions — return structured error, don't leak internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. The message could not be processed."},
    )


# Lazy orchestrator
_orchestrator = None


def _get_orchestrator() -> AnalysisOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(settings)
    return _orchestrator


def _to_response(result: AnalysisResult) -> dict:
    data = result.to_dict()
    data["toneEmoji"] = TONE_EMOJI.get(result.overall_tone, TONE_EMOJI["calm"])
    data["severityColor"] = SEVERITY_COLOR.get(result.severity_level, SEVERITY_COLOR["low"])
    return data


# ============================================================
# ROUTES
# ============================================================

@app.post("/analyze", response_model=AnalysisResponse)
async def analyze_message(request: AnalyzeRequest):
    """Analyze a drafted message."""
    result = await _get_orchestrator().analyze(request.text)
    return _to_response(result)


@app.post("/send", response_model=SendResponse)
async def send_message(request: SendRequest):
    """Analyze a message and return the text to deliver."""
    if not request.text.strip():
        raise HTTPException(422, "Cannot send an empty message.")

    result = await _get_orchestrator().analyze(request.text)
    return {
        "original": request.text,
        "delivered": result.transformed_text,
        "analysis": _to_response(result),
        "diff_spans": compute_diff_spans(request.text, result.transformed_text),
    }


@app.get("/patterns", response_model=PatternsResponse)
async def get_patterns():
    """Return the rule-based detection table."""
    rules = describe_rules()
    return {
        "rules_version": RULES_VERSION,
        "total_rules": len(rules),
        "rules": rules,
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    orchestrator = _get_orchestrator()
    return {
        "status": "operational",
        "version": __version__,
        "rules_version": RULES_VERSION,
        "llm_provider": settings.LLM_PROVIDER,
        "remote_available": orchestrator.remote_available,
        "status_message": orchestrator.status_message,
    }


# --- Security + Version Headers Middleware ---
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security and version headers to all responses."""
    response = await call_next(request)
    response.headers["X-SafeTalk-Version"] = __version__
    response.headers["X-Rules-Version"] = RULES_VERSION
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT)
