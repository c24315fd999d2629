import pytest

import ai_client
from ai_client import (
    AIResponseError, AIServiceError, check_api_status, friendly_error_message,
    generate_json, parse_json_response, resolve_api_key,
)


def test_parse_json_strips_code_fences():
    text = '```json\n{"topic": "Waves"}\n```'
    assert parse_json_response(text) == {"topic": "Waves"}


def test_parse_json_plain_array():
    assert parse_json_response('[{"criteria": "Content", "points": 10}]')[0]["points"] == 10


@pytest.mark.parametrize("text", ["", "   ", None])
def test_parse_json_rejects_empty_text(text):
    with pytest.raises(AIResponseError, match="no text content"):
        parse_json_response(text)


def test_parse_json_rejects_malformed_json():
    with pytest.raises(AIResponseError, match="malformed JSON"):
        parse_json_response('{"topic": ')


@pytest.mark.parametrize("message, expected", [
    ("API key not valid. Please pass a valid API key.", "API key configured on the server is invalid"),
    ("429 Quota exceeded for requests", "quota exceeded"),
    ("Request timed out", "timed out"),
    ("Something odd", "AI Error: Something odd"),
])
def test_friendly_error_message(message, expected):
    assert expected in friendly_error_message(AIServiceError(message))


def test_friendly_error_message_empty():
    assert "An AI feature failed" in friendly_error_message(AIServiceError(""))


def test_resolve_api_key_prefers_request_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    assert resolve_api_key("openai", "request-key") == "request-key"
    assert resolve_api_key("openai") == "env-key"
    assert resolve_api_key("nobody") == ""


def test_unknown_provider_is_a_service_error():
    with pytest.raises(AIServiceError, match="Unknown AI provider"):
        generate_json("hi", provider="carrier-pigeon", api_key="k")


def test_missing_key_is_a_service_error(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(AIServiceError, match="No API key"):
        generate_json("hi", provider="gemini")


def test_generate_json_dispatches_to_provider(monkeypatch):
    seen = {}

    def fake_call(prompt, schema, system_instruction, api_key, fast=False):
        seen.update(prompt=prompt, schema=schema, api_key=api_key, fast=fast)
        return '```json\n{"ok": true}\n```'

    monkeypatch.setitem(ai_client._PROVIDERS, "anthropic", fake_call)
    result = generate_json("make a plan", schema={"type": "OBJECT"}, provider="anthropic",
                           api_key="secret", fast=True)
    assert result == {"ok": True}
    assert seen == {"prompt": "make a plan", "schema": {"type": "OBJECT"},
                    "api_key": "secret", "fast": True}


def test_provider_exception_becomes_service_error(monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setitem(ai_client._PROVIDERS, "openai", broken)
    with pytest.raises(AIServiceError, match="connection reset"):
        generate_json("x", provider="openai", api_key="k")


def test_check_api_status(monkeypatch):
    monkeypatch.setitem(ai_client._PROVIDERS, "anthropic", lambda *a, **k: "ok")
    assert check_api_status("anthropic", "k")["status"] == "success"

    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    status = check_api_status("openai")
    assert status["status"] == "error"
    assert "No API key" in status["message"]
