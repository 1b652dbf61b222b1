# safeclick/ai/gemini_client.py

from __future__ import annotations

import os

from google import genai

_client: genai.Client | None = None


class MissingAPIKeyError(RuntimeError):
    pass


def _api_key() -> str | None:
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")


def is_configured() -> bool:
    return bool(_api_key())


def get_client() -> genai.Client:
    """
    Process-wide Gemini client, built once on first use.
    The key is read from the environment only at that point.
    """
    global _client
    if _client is None:
        key = _api_key()
        if not key:
            raise MissingAPIKeyError("GEMINI_API_KEY is not set.")
        _client = genai.Client(api_key=key)
    return _client
