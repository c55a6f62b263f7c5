"""
Structured LLM invoker.

Posts role-tagged messages to an OpenAI-compatible chat completions endpoint
and hands the first choice back to the caller. Schema conformance is requested
through a strict ``response_format`` but is not checked here; callers validate
the parsed payload themselves.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from productflow.core.config import settings

logger = logging.getLogger(__name__)


class LlmError(Exception):
    """Provider call failed (transport error or non-2xx response)."""


class LlmTimeoutError(LlmError):
    """Provider did not answer within the configured timeout."""


class LlmOutputError(LlmError):
    """Missing, unparseable or schema-violating model output."""


@dataclass
class LlmMessage:
    role: str
    content: Any


@dataclass
class LlmChoice:
    message: LlmMessage
    finish_reason: Optional[str] = None


@dataclass
class LlmResponse:
    choices: List[LlmChoice] = field(default_factory=list)
    model: Optional[str] = None
    raw: Optional[Dict[str, Any]] = None


def json_schema_format(name: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    """Strict JSON-schema response format descriptor."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "strict": True,
            "schema": schema,
        },
    }


def first_content(response: Optional[LlmResponse]) -> Any:
    if response is None or not response.choices:
        return None
    return response.choices[0].message.content


def content_text(response: Optional[LlmResponse]) -> Optional[str]:
    """First choice content as text, as the provider returned it."""
    content = first_content(response)
    if content is None or isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False)


def parse_json_content(response: Optional[LlmResponse]) -> Dict[str, Any]:
    """Parsed object of the first choice.

    JSON strings are decoded; already-parsed dicts pass through unchanged.
    Anything else (no choices, null content, invalid JSON, non-object JSON)
    raises ``LlmOutputError``.
    """
    content = first_content(response)
    if isinstance(content, dict):
        return content
    if not isinstance(content, str):
        raise LlmOutputError("LLM response had no usable content")

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise LlmOutputError(f"LLM response was not valid JSON: {exc.msg}") from exc

    if not isinstance(parsed, dict):
        raise LlmOutputError("LLM response JSON was not an object")
    return parsed


def _response_from_payload(payload: Dict[str, Any]) -> LlmResponse:
    choices: List[LlmChoice] = []
    for entry in payload.get("choices") or []:
        message = entry.get("message") or {}
        choices.append(
            LlmChoice(
                message=LlmMessage(role=message.get("role") or "assistant", content=message.get("content")),
                finish_reason=entry.get("finish_reason"),
            )
        )
    return LlmResponse(choices=choices, model=payload.get("model"), raw=payload)


class LlmClient:
    """Async client for the chat completions endpoint."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_tokens: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = api_url or settings.LLM_API_URL
        self.api_key = api_key if api_key is not None else settings.LLM_API_KEY
        self.model = model or settings.LLM_MODEL
        self.timeout_seconds = timeout_seconds or settings.LLM_TIMEOUT_SECONDS
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _build_request_body(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
        }
        if response_format is not None:
            body["response_format"] = response_format
        return body

    async def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        timeout = httpx.Timeout(self.timeout_seconds)
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            response = await client.post(self.api_url, json=body, headers=self._headers())

        if response.status_code >= 400:
            raise LlmError(
                f"LLM invoke failed: {response.status_code} {response.reason_phrase} - {response.text[:500]}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise LlmOutputError("LLM provider returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise LlmOutputError("LLM provider returned an unexpected body")
        return payload

    async def invoke(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]] = None,
    ) -> LlmResponse:
        """Send ``messages`` and return the provider's choices.

        Timeouts surface as ``LlmTimeoutError``; transport failures and error
        statuses as ``LlmError``. No retries.
        """
        body = self._build_request_body(messages, response_format)
        schema_name = (response_format or {}).get("json_schema", {}).get("name")
        logger.debug("LLM invoke model=%s schema=%s messages=%d", self.model, schema_name, len(messages))

        try:
            payload = await asyncio.wait_for(self._post(body), timeout=self.timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise LlmTimeoutError(f"LLM call timed out after {self.timeout_seconds}s") from exc
        except httpx.RequestError as exc:
            raise LlmError(f"LLM request failed: {exc}") from exc

        return _response_from_payload(payload)
