"""
Reasoning-service client (OpenAI-compatible HTTP API).

Web-backed requests go to the Responses API with the registry's tools
attached (always including web_search_preview). If the model calls one of our
function tools, the call is routed through the registry and the result sent
back, for a bounded number of rounds. Everything else goes to Chat
Completions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ai_resolver.agent.tool_registry import ToolRegistry
from ai_resolver.agent.tool_router import RegistryToolClient, ToolClient
from ai_resolver.errors import ReasoningServiceError
from ai_resolver.pipeline.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
WEB_SEARCH_TOOL = {"type": "web_search_preview"}


class ReasoningClient(Protocol):
    async def complete(self, prompt: str, *, web_search: bool, temperature: float) -> str: ...


def _output_text(output: List[Dict[str, Any]]) -> str:
    """First output_text of the first message item that has one."""
    for item in output:
        if not isinstance(item, dict) or item.get("type") != "message":
            continue
        for content in item.get("content") or []:
            if isinstance(content, dict) and content.get("type") == "output_text" and content.get("text"):
                return content["text"]
    return ""


class OpenAIReasoningClient:
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = DEFAULT_BASE_URL,
        registry: Optional[ToolRegistry] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 300.0,
        max_tokens: int = 2000,
        max_tool_rounds: int = 5,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.registry = registry
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.max_tool_rounds = max_tool_rounds
        self._http = http_client
        self._tool_client: Optional[ToolClient] = RegistryToolClient(registry) if registry is not None else None

    async def complete(self, prompt: str, *, web_search: bool, temperature: float) -> str:
        if web_search:
            return await self._respond(prompt, temperature)
        return await self._chat(prompt, temperature)

    def _tools(self) -> List[Dict[str, Any]]:
        tools = self.registry.to_openai_spec() if self.registry is not None else []
        if not any(t.get("type") == "web_search_preview" for t in tools):
            tools.insert(0, dict(WEB_SEARCH_TOOL))
        return tools

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            if self._http is not None:
                response = await self._http.post(url, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise ReasoningServiceError(f"request to {url} failed: {e}") from e

        if response.status_code != 200:
            raise ReasoningServiceError(
                f"API returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ReasoningServiceError(f"failed to parse response: {e}") from e
        if not isinstance(data, dict):
            raise ReasoningServiceError(
                f"failed to parse response: expected a JSON object, got {type(data).__name__}"
            )
        return data

    async def _respond(self, prompt: str, temperature: float) -> str:
        tools = self._tools()
        body: Dict[str, Any] = {
            "model": self.model,
            "input": prompt,
            "tools": tools,
            "temperature": temperature,
        }

        for round_no in range(self.max_tool_rounds + 1):
            data = await self._post("/responses", body)
            output = data.get("output") or []
            if not output:
                raise ReasoningServiceError("no output in response")
            if not isinstance(output, list):
                raise ReasoningServiceError("failed to parse response: output is not a list")

            calls = [item for item in output if isinstance(item, dict) and item.get("type") == "function_call"]
            if not calls or self._tool_client is None:
                text = _output_text(output)
                if not text:
                    raise ReasoningServiceError("no text content found in response")
                return text

            if round_no == self.max_tool_rounds:
                break

            results = []
            for call in calls:
                name = call.get("name", "")
                logger.info(f"[reasoning] Model called tool {name} (call_id={call.get('call_id')})")
                result = await self._tool_client.call(name, call.get("arguments") or "{}", call_id=call.get("call_id"))
                results.append(
                    {
                        "type": "function_call_output",
                        "call_id": call.get("call_id"),
                        "output": json.dumps(result, default=str),
                    }
                )

            body = {
                "model": self.model,
                "previous_response_id": data.get("id"),
                "input": results,
                "tools": tools,
                "temperature": temperature,
            }

        raise ReasoningServiceError(f"model kept calling tools after {self.max_tool_rounds} rounds")

    async def _chat(self, prompt: str, temperature: float) -> str:
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": self.max_tokens,
        }
        data = await self._post("/chat/completions", body)
        choices = data.get("choices") or []
        if not choices:
            raise ReasoningServiceError("no choices in response")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content:
            raise ReasoningServiceError("no text content found in response")
        return content
