# safeclick/ai/__init__.py

"""
Gemini client handle.

Exposes:
    get_client() -> genai.Client
    is_configured() -> bool
    MissingAPIKeyError
"""

from .gemini_client import MissingAPIKeyError, get_client, is_configured
