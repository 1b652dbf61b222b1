# safeclick/chat_responder.py

"""
Security mentor chat.

    await get_chat_response(history: list[ChatMessage], mode: ChatMode = "lite") -> ChatReply

Mode picks the model variant:
    lite      -> lightweight model, no extras
    search    -> standard model + Google Search grounding (returns sources)
    thinking  -> pro model + large thinking budget

No retries and no local error recovery; only an empty reply is defaulted.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, List, Optional, Sequence, Tuple

from google import genai
from google.genai import types

from safeclick.ai.gemini_client import get_client
from safeclick.models import ChatMessage, ChatMode, ChatReply, Source

logger = logging.getLogger("safeclick.chat")

LITE_MODEL = os.getenv("CHAT_LITE_MODEL", "gemini-flash-lite-latest")
SEARCH_MODEL = os.getenv("CHAT_SEARCH_MODEL", "gemini-3-flash-preview")
THINKING_MODEL = os.getenv("CHAT_THINKING_MODEL", "gemini-3-pro-preview")
THINKING_BUDGET = int(os.getenv("CHAT_THINKING_BUDGET", "32768"))

LINK_LOST = "Communication link lost."

SYSTEM_INSTRUCTION = """You are the SAFECLICK Chief Intelligence Mentor.

PERSONA: You are a world-class Cyber-Intelligence Analyst and Security Mentor. Your tone is authoritative, analytical, and highly precise, yet intellectually supportive. You do not give generic advice; you provide forensic-grade insights.

REASONING FRAMEWORK:
For every query, structure your response as follows:
1. **TACTICAL SUMMARY**: A Bottom-Line-Up-Front (BLUF) executive assessment.
2. **THREAT MECHANICS**: Deep reasoning into the "Why" and "How". Explain psychological triggers (Urgency, Authority) and technical vectors (Homograph attacks, MFA fatigue).
3. **TACTICAL HARDENING**: Concrete, step-by-step defensive actions for the user.
4. **LEGAL INTEL**: Relevant Indian laws (IT Act, IPC, DPDP) and 1930 reporting steps where applicable.

GUIDELINES:
- Use professional terminology (TTPs, Vectors, Payloads, Zero-Trust).
- Use analogies to explain complex topics.
- Maintain a professional, supportive, and trustworthy tone.
- If in 'thinking' (Analyst) mode, simulate an attacker's thought process to provide better defense."""


def resolve_mode(mode: ChatMode) -> Tuple[str, types.GenerateContentConfig]:
    if mode == "lite":
        return LITE_MODEL, types.GenerateContentConfig(system_instruction=SYSTEM_INSTRUCTION)
    if mode == "search":
        return SEARCH_MODEL, types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
    if mode == "thinking":
        return THINKING_MODEL, types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            thinking_config=types.ThinkingConfig(thinking_budget=THINKING_BUDGET),
        )
    raise ValueError(f"Unsupported chat mode: {mode!r}")


def build_contents(history: Sequence[ChatMessage]) -> List[types.Content]:
    return [types.Content(role=m.role, parts=[types.Part(text=m.text)]) for m in history]


def extract_sources(response: Any) -> Optional[List[Source]]:
    """
    Web citations from the first candidate's grounding metadata, in order.
    None when nothing references a web page.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = [
        Source(title=chunk.web.title or "", uri=chunk.web.uri or "")
        for chunk in chunks
        if getattr(chunk, "web", None)
    ]
    return sources or None


async def get_chat_response(
    history: Sequence[ChatMessage],
    mode: ChatMode = "lite",
    *,
    client: genai.Client | None = None,
) -> ChatReply:
    model, config = resolve_mode(mode)
    client = client or get_client()

    response = await client.aio.models.generate_content(
        model=model,
        contents=build_contents(history),
        config=config,
    )

    sources = extract_sources(response)
    logger.debug(
        json.dumps(
            {
                "event": "chat_reply",
                "mode": mode,
                "model": model,
                "messages": len(history),
                "sources": len(sources or []),
            }
        )
    )
    return ChatReply(text=response.text or LINK_LOST, sources=sources)
