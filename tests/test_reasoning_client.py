"""Tests for OpenAIReasoningClient wire format and tool-call loop (mocked HTTP)."""
import asyncio
import json

import httpx
import pytest

from ai_resolver.agent.builtins import default_registry
from ai_resolver.errors import ReasoningServiceError
from ai_resolver.pipeline.reasoning_client import OpenAIReasoningClient


def _message(text):
    return {
        "type": "message",
        "role": "assistant",
        "content": [{"type": "output_text", "text": text, "annotations": []}],
    }


def _client(handler, registry=None):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIReasoningClient(api_key="sk-test", model="gpt-test", registry=registry, http_client=http)


class TestResponsesApi:
    def test_web_search_request_and_text_extraction(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={"id": "resp_1", "output": [{"type": "web_search_call", "status": "completed"}, _message("{\"facts\": []}")]},
            )

        text = asyncio.run(_client(handler).complete("find facts", web_search=True, temperature=0.3))
        assert text == '{"facts": []}'

        request = seen[0]
        body = json.loads(request.content)
        assert request.url.path == "/v1/responses"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert body["model"] == "gpt-test"
        assert body["input"] == "find facts"
        assert body["temperature"] == 0.3
        assert body["tools"] == [{"type": "web_search_preview"}]

    def test_registry_tools_are_advertised(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "r", "output": [_message("ok")]})

        asyncio.run(_client(handler, default_registry()).complete("q", web_search=True, temperature=0.3))
        types = [t["type"] for t in bodies[0]["tools"]]
        assert types.count("web_search_preview") == 1
        assert {t.get("name") for t in bodies[0]["tools"]} >= {"calculate", "datetime"}

    def test_function_calls_are_executed_and_returned(self):
        bodies = []

        def handler(request):
            body = json.loads(request.content)
            bodies.append(body)
            if len(bodies) == 1:
                return httpx.Response(
                    200,
                    json={
                        "id": "resp_1",
                        "output": [
                            {
                                "type": "function_call",
                                "name": "calculate",
                                "call_id": "call_42",
                                "arguments": json.dumps({"operation": "multiply", "values": [6, 7]}),
                            }
                        ],
                    },
                )
            return httpx.Response(200, json={"id": "resp_2", "output": [_message("answer is 42")]})

        text = asyncio.run(_client(handler, default_registry()).complete("q", web_search=True, temperature=0.3))
        assert text == "answer is 42"

        follow_up = bodies[1]
        assert follow_up["previous_response_id"] == "resp_1"
        (item,) = follow_up["input"]
        assert item["type"] == "function_call_output"
        assert item["call_id"] == "call_42"
        result = json.loads(item["output"])
        assert result["success"] is True
        assert result["data"]["result"] == 42

    def test_tool_loop_is_bounded(self):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "id": "again",
                    "output": [{"type": "function_call", "name": "calculate", "call_id": "c", "arguments": "{}"}],
                },
            )

        client = _client(handler, default_registry())
        client.max_tool_rounds = 2
        with pytest.raises(ReasoningServiceError, match="kept calling tools"):
            asyncio.run(client.complete("q", web_search=True, temperature=0.3))

    def test_missing_text(self):
        def handler(request):
            return httpx.Response(200, json={"id": "r", "output": [{"type": "web_search_call"}]})

        with pytest.raises(ReasoningServiceError, match="no text content"):
            asyncio.run(_client(handler).complete("q", web_search=True, temperature=0.3))

    def test_empty_output(self):
        def handler(request):
            return httpx.Response(200, json={"id": "r", "output": []})

        with pytest.raises(ReasoningServiceError, match="no output"):
            asyncio.run(_client(handler).complete("q", web_search=True, temperature=0.3))


class TestChatCompletions:
    def test_chat_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "[]"}}]})

        text = asyncio.run(_client(handler).complete("check", web_search=False, temperature=0.2))
        assert text == "[]"

        body = json.loads(seen[0].content)
        assert seen[0].url.path == "/v1/chat/completions"
        assert body["messages"][0]["role"] == "system"
        assert "Always respond with valid JSON" in body["messages"][0]["content"]
        assert body["messages"][1] == {"role": "user", "content": "check"}
        assert body["max_tokens"] == 2000
        assert body["temperature"] == 0.2

    @pytest.mark.parametrize("message", [{"content": None}, {"content": ""}, {}, None])
    def test_missing_content(self, message):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": message}]})

        with pytest.raises(ReasoningServiceError, match="no text content"):
            asyncio.run(_client(handler).complete("q", web_search=False, temperature=0.2))

    def test_no_choices(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        with pytest.raises(ReasoningServiceError, match="no choices"):
            asyncio.run(_client(handler).complete("q", web_search=False, temperature=0.2))


class TestTransportErrors:
    def test_non_200_status(self):
        def handler(request):
            return httpx.Response(429, text="rate limited")

        with pytest.raises(ReasoningServiceError) as exc:
            asyncio.run(_client(handler).complete("q", web_search=False, temperature=0.2))
        assert exc.value.status_code == 429
        assert "rate limited" in str(exc.value)

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ReasoningServiceError, match="failed"):
            asyncio.run(_client(handler).complete("q", web_search=True, temperature=0.3))

    def test_invalid_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(ReasoningServiceError, match="failed to parse response"):
            asyncio.run(_client(handler).complete("q", web_search=False, temperature=0.2))

    @pytest.mark.parametrize("payload", [[{"choices": []}], "text", 7])
    @pytest.mark.parametrize("web_search", [True, False])
    def test_non_object_body(self, payload, web_search):
        def handler(request):
            return httpx.Response(200, json=payload)

        with pytest.raises(ReasoningServiceError, match="expected a JSON object"):
            asyncio.run(_client(handler).complete("q", web_search=web_search, temperature=0.2))
