"""
Pytest config.

Puts the repo root on sys.path so `import safeclick` works without an install,
and provides a stand-in for the Gemini client that records every call.
"""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()


class _FakeModels:
    def __init__(self, response: Any = None, exc: Optional[BaseException] = None) -> None:
        self.response = response
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    async def generate_content(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return self.response


class FakeGeminiClient:
    """Mimics the `client.aio.models.generate_content` surface of google-genai."""

    def __init__(self, response: Any = None, exc: Optional[BaseException] = None) -> None:
        self.models = _FakeModels(response=response, exc=exc)
        self.aio = SimpleNamespace(models=self.models)

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.models.calls


def make_response(text: Optional[str], chunks: Optional[list] = None) -> SimpleNamespace:
    """Response shaped like GenerateContentResponse: `.text` plus `.candidates`."""
    candidate = SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=chunks))
    return SimpleNamespace(text=text, candidates=[candidate])


@pytest.fixture
def fake_client():
    def _make(response: Any = None, exc: Optional[BaseException] = None) -> FakeGeminiClient:
        return FakeGeminiClient(response=response, exc=exc)

    return _make


@pytest.fixture(autouse=True)
def _no_process_client(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests never reuse a real client cached by an earlier test."""
    monkeypatch.setattr("safeclick.ai.gemini_client._client", None)


@pytest.fixture
def gemini_response():
    return make_response
