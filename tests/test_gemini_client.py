from __future__ import annotations

import pytest

from safeclick.ai import gemini_client


class _RecordingClient:
    created = 0

    def __init__(self, *, api_key: str) -> None:
        type(self).created += 1
        self.api_key = api_key


def test_missing_key_raises(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)

    assert gemini_client.is_configured() is False
    with pytest.raises(gemini_client.MissingAPIKeyError):
        gemini_client.get_client()


def test_client_is_built_once_from_env(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "k-123")
    monkeypatch.setattr(gemini_client.genai, "Client", _RecordingClient)
    _RecordingClient.created = 0

    first = gemini_client.get_client()
    monkeypatch.setenv("GEMINI_API_KEY", "k-rotated")
    second = gemini_client.get_client()

    assert first is second
    assert first.api_key == "k-123"
    assert _RecordingClient.created == 1


def test_api_key_fallback(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "legacy")
    monkeypatch.setattr(gemini_client.genai, "Client", _RecordingClient)

    assert gemini_client.is_configured() is True
    assert gemini_client.get_client().api_key == "legacy"


def test_package_exposes_client_helpers() -> None:
    import safeclick.ai as ai

    assert ai.get_client is gemini_client.get_client
    assert ai.is_configured is gemini_client.is_configured
    assert ai.MissingAPIKeyError is gemini_client.MissingAPIKeyError
    for name in ("get_client()", "is_configured()", "MissingAPIKeyError"):
        assert name in ai.__doc__
