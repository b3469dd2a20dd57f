"""Claude API wrapper for the pipeline stages.

Stage calls are single-shot: the SDK's own retries are disabled, so a failed
request propagates to the caller and the orchestrator aborts the run. Only
image OCR retries with backoff.

Every call returns its own usage. The client keeps no shared token log, so
one instance can serve concurrent sessions.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

import anthropic
from tenacity import retry, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-6"
FAST_MODEL = "claude-haiku-4-5-20251001"

WEB_SEARCH_TOOL = {"type": "web_search_20250305", "name": "web_search", "max_uses": 5}


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int
    model: str = ""
    search_count: int = 0
    data: dict | None = None  # tool input of a structured call

    @property
    def call(self) -> tuple[str, int, int]:
        """(model, input_tokens, output_tokens) as used by the cost calculator."""
        return (self.model, self.input_tokens, self.output_tokens)


class LLMClient:
    """Async Claude API client."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        kwargs: dict = {"max_retries": 0}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        max_tokens: int = 8192,
        *,
        context: str = "",
        use_search: bool = False,
        thinking_budget: int | None = None,
    ) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage.

        Args:
            prompt: User turn text.
            system: Persona system instruction.
            model: Claude model id.
            max_tokens: Output budget for the visible answer.
            context: Reference text sent as a separate content block before the prompt.
            use_search: Attach the server-side web search tool.
            thinking_budget: Enable extended thinking with this many budget tokens.
        """
        content: list[dict] = []
        if context:
            content.append({"type": "text", "text": context})
        content.append({"type": "text", "text": prompt})

        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": content}],
        }
        if system:
            kwargs["system"] = system
        if thinking_budget:
            kwargs["thinking"] = {"type": "enabled", "budget_tokens": thinking_budget}
            kwargs["max_tokens"] = max_tokens + thinking_budget
        if use_search:
            kwargs["tools"] = [WEB_SEARCH_TOOL]

        logger.debug(
            "LLM call: model=%s search=%s thinking=%s", model, use_search, thinking_budget
        )
        try:
            message = await self.client.messages.create(**kwargs)
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        return self._response(model, message, text)

    async def generate_structured(
        self,
        prompt: str,
        schema: dict,
        *,
        tool_name: str,
        system: str = "",
        model: str = FAST_MODEL,
        max_tokens: int = 8192,
    ) -> LLMResponse:
        """Force a single tool call whose input follows ``schema``.

        The tool input is returned in ``LLMResponse.data``.
        """
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "tools": [
                {
                    "name": tool_name,
                    "description": "Report the result in the required JSON structure.",
                    "input_schema": schema,
                }
            ],
            "tool_choice": {"type": "tool", "name": tool_name},
        }
        if system:
            kwargs["system"] = system

        logger.debug("LLM structured call: model=%s tool=%s", model, tool_name)
        try:
            message = await self.client.messages.create(**kwargs)
        except Exception:
            logger.error("LLM structured call failed", exc_info=True)
            raise

        for block in message.content:
            if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
                response = self._response(model, message, "")
                response.data = dict(block.input)
                return response
        raise ValueError(f"Model did not return a {tool_name!r} tool call")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        reraise=True,
    )
    async def extract_text_from_image(
        self,
        image_bytes: bytes,
        image_media_type: str,
        model: str = FAST_MODEL,
    ) -> str:
        """Extract Korean text from an image using Claude Vision.

        Args:
            image_bytes: Raw image bytes (PNG, JPEG, etc.)
            image_media_type: MIME type (e.g. "image/png", "image/jpeg")
            model: Claude model to use

        Returns:
            Extracted text preserving line breaks and layout.
        """
        b64_data = base64.b64encode(image_bytes).decode("utf-8")

        message = await self.client.messages.create(
            model=model,
            max_tokens=4096,
            messages=[{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": image_media_type,
                            "data": b64_data,
                        },
                    },
                    {
                        "type": "text",
                        "text": (
                            "이 이미지에서 모든 텍스트를 한국어로 추출해줘. "
                            "원본의 서식과 줄바꿈을 최대한 유지해줘. "
                            "추출된 텍스트만 출력해."
                        ),
                    },
                ],
            }],
        )
        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        return self._response(model, message, text).text

    @staticmethod
    def _response(model: str, message, text: str) -> LLMResponse:
        usage = message.usage
        server_tools = getattr(usage, "server_tool_use", None)
        searches = getattr(server_tools, "web_search_requests", None) or 0
        logger.debug(
            "LLM response: %d input, %d output tokens, %d searches",
            usage.input_tokens, usage.output_tokens, searches,
        )
        return LLMResponse(
            text=text,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            model=model,
            search_count=searches,
        )
