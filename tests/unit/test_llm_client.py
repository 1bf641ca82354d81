import asyncio
import json

import httpx
import pytest

from app.services.llm_client import GenerationError, LLMClient


def make_client(provider, handler, **kwargs):
    return LLMClient(
        provider=provider,
        model="test-model",
        base_url="http://llm.local/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_gemini_joins_candidate_parts():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "candidates": [{"content": {"parts": [{"text": "[{\"title\": "}, {"text": "\"X\"}]"}]}}],
        })

    text = asyncio.run(make_client("gemini", handler, api_key="secret").generate("hello"))
    assert text == '[{"title": "X"}]'
    assert seen["url"].startswith("http://llm.local/v1beta/models/test-model:generateContent")
    assert "key=secret" in seen["url"]
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "hello"


def test_ollama_reads_response_field():
    def handler(request):
        assert request.url.path == "/api/generate"
        body = json.loads(request.content)
        assert body["stream"] is False and body["model"] == "test-model"
        return httpx.Response(200, json={"response": "[]"})

    assert asyncio.run(make_client("ollama", handler).generate("hi")) == "[]"


def test_openai_compatible_sends_bearer_token():
    def handler(request):
        assert request.url.path == "/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    assert asyncio.run(make_client("openai_compatible", handler, api_key="sk-test").generate("hi")) == "ok"


def test_http_errors_propagate():
    def handler(request):
        return httpx.Response(503, text="overloaded")

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(make_client("ollama", handler).generate("hi"))


def test_empty_answer_and_unknown_provider_raise_generation_error():
    def handler(request):
        return httpx.Response(200, json={"candidates": []})

    with pytest.raises(GenerationError):
        asyncio.run(make_client("gemini", handler).generate("hi"))
    with pytest.raises(GenerationError):
        asyncio.run(make_client("mystery", handler).generate("hi"))
