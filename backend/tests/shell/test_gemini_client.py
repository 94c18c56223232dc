"""Unit tests for the Gemini client - HTTP is served by httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from src.shell.gemini_client import AIServiceError, GeminiClient, GeminiConfig


def make_client(handler) -> GeminiClient:
    transport = httpx.MockTransport(handler)
    return GeminiClient(
        GeminiConfig(api_key="test-key", model="test-model", base_url="https://ai.test/v1beta"),
        http_client=httpx.AsyncClient(transport=transport),
    )


def candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestGeminiClient:
    """Tests for GeminiClient."""

    def test_missing_api_key(self):
        with pytest.raises(AIServiceError):
            GeminiClient(GeminiConfig(api_key=None))

    def test_generate_json_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=candidate('{"name": "Oats", "calories": 300}'))

        client = make_client(handler)
        schema = {"type": "OBJECT"}

        result = asyncio.run(client.generate_json("be precise", [{"text": "oats"}], schema))

        assert result == {"name": "Oats", "calories": 300}
        assert seen["url"].path == "/v1beta/models/test-model:generateContent"
        assert seen["url"].params["key"] == "test-key"
        assert seen["body"]["contents"] == [{"parts": [{"text": "oats"}]}]
        assert seen["body"]["systemInstruction"] == {"parts": [{"text": "be precise"}]}
        assert seen["body"]["generationConfig"] == {
            "responseMimeType": "application/json",
            "responseSchema": schema,
        }

    def test_generate_text_without_schema(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=candidate("Great week!"))

        client = make_client(handler)

        assert asyncio.run(client.generate_text("coach", [{"text": "hi"}])) == "Great week!"
        assert "generationConfig" not in seen["body"]

    def test_http_error(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(AIServiceError, match="API error: Internal Server Error"):
            asyncio.run(client.generate_text("coach", [{"text": "hi"}]))

    def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        client = make_client(handler)

        with pytest.raises(AIServiceError, match="Could not reach"):
            asyncio.run(client.generate_text("coach", [{"text": "hi"}]))

    def test_missing_candidates(self):
        client = make_client(lambda request: httpx.Response(200, json={"candidates": []}))

        with pytest.raises(AIServiceError, match="Invalid response structure"):
            asyncio.run(client.generate_text("coach", [{"text": "hi"}]))

    def test_empty_text(self):
        client = make_client(lambda request: httpx.Response(200, json=candidate("")))

        with pytest.raises(AIServiceError, match="Invalid response from AI"):
            asyncio.run(client.generate_text("coach", [{"text": "hi"}]))

    def test_non_json_answer(self):
        client = make_client(lambda request: httpx.Response(200, json=candidate("not json")))

        with pytest.raises(AIServiceError):
            asyncio.run(client.generate_json("coach", [{"text": "hi"}], {"type": "OBJECT"}))

    def test_close(self):
        client = make_client(lambda request: httpx.Response(200, json=candidate("ok")))
        asyncio.run(client.close())
        assert client._http.is_closed
