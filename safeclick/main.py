# safeclick/main.py

from __future__ import annotations

import json
import logging
import os
import secrets
import time

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google.genai import errors as genai_errors

from safeclick.ai.gemini_client import MissingAPIKeyError, is_configured
from safeclick.chat_responder import get_chat_response
from safeclick.models import AnalysisResult, AnalyzeRequest, ChatReply, ChatRequest
from safeclick.threat_analyzer import InvalidImageError, analyze_threat_content, strip_data_uri

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
SENTRY_DSN = os.getenv("SENTRY_DSN", "")
MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))

# Init Sentry if configured
if SENTRY_DSN:
    sentry_sdk.init(dsn=SENTRY_DSN, traces_sample_rate=0.2)

logger = logging.getLogger("safeclick")
logging.basicConfig(level=logging.INFO, format="%(message)s")

app = FastAPI(title="SafeClick Intelligence API")

ALLOWED_ORIGINS = list({FRONTEND_URL, FRONTEND_URL.replace("www.", "")})

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------
# Error mapping
# ---------------------------------------------------------
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    sentry_sdk.capture_exception(exc)
    logger.error(json.dumps({"event": "error", "path": str(request.url), "error": str(exc)}))
    return JSONResponse({"error": "Internal server error."}, status_code=500)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Invalid request.", "detail": exc.errors()}, status_code=422)


@app.exception_handler(genai_errors.APIError)
async def model_service_exception_handler(request: Request, exc: genai_errors.APIError):
    logger.error(
        json.dumps(
            {
                "event": "model_error",
                "path": request.url.path,
                "code": getattr(exc, "code", None),
                "error": str(exc),
            }
        )
    )
    return JSONResponse({"error": "Model service call failed."}, status_code=502)


@app.exception_handler(MissingAPIKeyError)
async def missing_key_exception_handler(request: Request, exc: MissingAPIKeyError):
    logger.error(json.dumps({"event": "config_error", "path": request.url.path, "error": str(exc)}))
    return JSONResponse({"error": "Model service is not configured."}, status_code=503)


# Global headers middleware for security headers + request id
@app.middleware("http")
async def security_headers(request: Request, call_next):
    request_id = secrets.token_hex(8)
    request.state.request_id = request_id
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as exc:
        # unhandled errors still get the request id, headers and log line
        response = await generic_exception_handler(request, exc)
    duration = round((time.time() - start_time) * 1000, 2)
    logger.info(
        json.dumps(
            {
                "event": "request",
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "duration_ms": duration,
            }
        )
    )
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------
def _decoded_size(image_data: str) -> int:
    payload = strip_data_uri(image_data)
    return len(payload) * 3 // 4


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok", "gemini_configured": is_configured()}


@app.post("/analyze", response_model=AnalysisResult)
async def analyze(body: AnalyzeRequest):
    if body.image_data and _decoded_size(body.image_data) > MAX_IMAGE_BYTES:
        return JSONResponse(
            {"error": f"Image too large. Max {MAX_IMAGE_BYTES // (1024 * 1024)}MB."}, status_code=413
        )

    try:
        return await analyze_threat_content(body.text, body.image_data)
    except InvalidImageError:
        return JSONResponse({"error": "Invalid image data."}, status_code=400)


@app.post("/chat", response_model=ChatReply, response_model_exclude_none=True)
async def chat(body: ChatRequest):
    return await get_chat_response(body.history, body.mode)
