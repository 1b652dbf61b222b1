# safeclick/threat_analyzer.py

"""
AI forensic audit for suspicious messages, links and screenshots.

Public interface:

    await analyze_threat_content(text: str, image_data: str | None = None) -> AnalysisResult

The model is asked for JSON only, constrained by RESPONSE_SCHEMA. Anything
that does not parse into an AnalysisResult is replaced by FALLBACK_RESULT so
the UI always gets a renderable verdict. Transport errors are NOT caught here.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
from typing import List

from google import genai
from google.genai import types

from safeclick.ai.gemini_client import get_client
from safeclick.models import AnalysisResult

logger = logging.getLogger("safeclick.analyzer")

# ---------------------------------------------------------------------
# 1. CONSTANTS
# ---------------------------------------------------------------------

ANALYZER_MODEL = os.getenv("ANALYZER_MODEL", "gemini-3-flash-preview")
IMAGE_MIME_TYPE = "image/jpeg"


class InvalidImageError(ValueError):
    pass


PROMPT_TEMPLATE = """Act as a Senior Cyber-Forensics Lead. Analyze the following artifact for social engineering markers: "{text}".

  AUDIT SCOPE:
  1. ADVANCED EVASION: Check for character substitution, hidden subdomains, or redirection loops.
  2. PSYCHOLOGICAL VECTORS: Identify triggers like Urgency, Fear, Authority, or Social Proof.
  3. TECHNICAL RISK: Evaluate the likely payload (Credential harvesting, malware delivery, or data scraping).

  OUTPUT PROTOCOL (JSON ONLY):
  - status: 'Safe' | 'Suspicious' | 'Dangerous'
  - riskLevel: 0-100 (Integer)
  - reasoning: High-level professional technical summary of the findings.
  - suggestedActions: Tactical list of defensive protocols for the user.
  - detectedIndicators: Technical terminology of artifacts found."""

_STRING_LIST = types.Schema(type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING))

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "status": types.Schema(type=types.Type.STRING),
        "riskLevel": types.Schema(type=types.Type.NUMBER),
        "reasoning": types.Schema(type=types.Type.STRING),
        "suggestedActions": _STRING_LIST,
        "detectedIndicators": _STRING_LIST,
    },
    required=["status", "riskLevel", "reasoning", "suggestedActions", "detectedIndicators"],
)

FALLBACK_RESULT = AnalysisResult(
    status="Suspicious",
    riskLevel=50,
    reasoning="Forensic parser anomaly. Manual verification required.",
    suggestedActions=["Do not click links", "Verify source identity"],
    detectedIndicators=["Parser Error"],
)


# ---------------------------------------------------------------------
# 2. REQUEST ASSEMBLY
# ---------------------------------------------------------------------

def build_prompt(text: str) -> str:
    # artifact text may contain braces
    head, tail = PROMPT_TEMPLATE.split("{text}")
    return head + text + tail


def strip_data_uri(image_data: str) -> str:
    """
    Drop everything up to and including the first comma
    ("data:image/png;base64,XXXX" -> "XXXX"). Bare base64 passes through.
    """
    _, sep, payload = image_data.partition(",")
    return payload if sep else image_data


def decode_image(image_data: str) -> bytes:
    """
    Strict base64 decode of the data-URI payload. Blob.data holds raw bytes and
    the SDK re-encodes them, so only a canonical payload reaches the wire unchanged.
    """
    try:
        return base64.b64decode(strip_data_uri(image_data), validate=True)
    except binascii.Error as exc:
        raise InvalidImageError(f"imageData is not valid base64: {exc}") from exc


def build_contents(text: str, image_data: str | None = None) -> types.Content:
    parts: List[types.Part] = [types.Part(text=build_prompt(text))]
    if image_data:
        raw = decode_image(image_data)
        parts.append(types.Part(inline_data=types.Blob(data=raw, mime_type=IMAGE_MIME_TYPE)))
    return types.Content(role="user", parts=parts)


def build_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=RESPONSE_SCHEMA,
    )


# ---------------------------------------------------------------------
# 3. RESPONSE PARSING
# ---------------------------------------------------------------------

def parse_analysis(raw: str | None) -> AnalysisResult:
    """Validate the model's JSON text, or return a fresh copy of FALLBACK_RESULT."""
    try:
        return AnalysisResult.model_validate(json.loads(raw))
    except (TypeError, ValueError) as exc:
        # ValueError covers JSONDecodeError and pydantic's ValidationError
        logger.warning(
            json.dumps(
                {
                    "event": "analysis_fallback",
                    "error": type(exc).__name__,
                    "raw_length": len(raw or ""),
                }
            )
        )
        return FALLBACK_RESULT.model_copy(deep=True)


# ---------------------------------------------------------------------
# 4. MAIN PUBLIC FUNCTION
# ---------------------------------------------------------------------

async def analyze_threat_content(
    text: str,
    image_data: str | None = None,
    *,
    client: genai.Client | None = None,
) -> AnalysisResult:
    contents = build_contents(text, image_data)
    client = client or get_client()

    response = await client.aio.models.generate_content(
        model=ANALYZER_MODEL,
        contents=contents,
        config=build_config(),
    )

    return parse_analysis(response.text)
