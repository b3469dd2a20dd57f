"""Tests for LLMClient (Claude API wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from jasaoseo.clients.llm_client import WEB_SEARCH_TOOL, LLMClient, LLMResponse


def _block(type_: str, **fields) -> MagicMock:
    block = MagicMock()
    block.type = type_
    for key, value in fields.items():
        setattr(block, key, value)
    return block


def _make_api_message(
    blocks, input_tokens: int = 100, output_tokens: int = 50, searches: int | None = None
) -> MagicMock:
    """Build a mock anthropic Message-like object."""
    message = MagicMock()
    message.usage.input_tokens = input_tokens
    message.usage.output_tokens = output_tokens
    if searches is None:
        message.usage.server_tool_use = None
    else:
        message.usage.server_tool_use.web_search_requests = searches
    message.content = blocks
    return message


@pytest.fixture
def api():
    """Patch AsyncAnthropic and yield the mocked messages.create."""
    with patch("jasaoseo.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
        mock_client = MagicMock()
        mock_client.messages.create = AsyncMock(
            return_value=_make_api_message([_block("text", text="hello world")])
        )
        mock_cls.return_value = mock_client
        yield mock_client.messages.create


class TestLLMClientInit:
    def test_init_default_disables_sdk_retries(self):
        with patch("jasaoseo.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient()
            mock_cls.assert_called_once_with(max_retries=0)

    def test_init_with_both_params_passes_both(self):
        with patch("jasaoseo.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient(api_key="test-key", timeout=30.0)
            mock_cls.assert_called_once_with(api_key="test-key", timeout=30.0, max_retries=0)


class TestLLMClientGenerate:
    async def test_generate_returns_llm_response(self, api):
        result = await LLMClient().generate("say hello")

        assert isinstance(result, LLMResponse)
        assert result.text == "hello world"
        assert result.input_tokens == 100
        assert result.output_tokens == 50

    async def test_context_sent_as_separate_block(self, api):
        await LLMClient().generate("prompt", system="persona", context="guide")

        kwargs = api.await_args.kwargs
        assert kwargs["system"] == "persona"
        assert kwargs["messages"][0]["content"] == [
            {"type": "text", "text": "guide"},
            {"type": "text", "text": "prompt"},
        ]

    async def test_thinking_enabled(self, api):
        await LLMClient().generate("prompt", max_tokens=1000, thinking_budget=2048)

        kwargs = api.await_args.kwargs
        assert kwargs["thinking"] == {"type": "enabled", "budget_tokens": 2048}
        assert kwargs["max_tokens"] == 3048
        assert "temperature" not in kwargs

    async def test_no_thinking_sends_no_sampling_params(self, api):
        await LLMClient().generate("prompt")

        kwargs = api.await_args.kwargs
        assert "thinking" not in kwargs
        assert "temperature" not in kwargs

    async def test_search_attaches_tool(self, api):
        await LLMClient().generate("prompt", use_search=True)
        assert api.await_args.kwargs["tools"] == [WEB_SEARCH_TOOL]

    async def test_only_text_blocks_are_joined(self, api):
        api.return_value = _make_api_message(
            [
                _block("thinking", thinking="reasoning"),
                _block("text", text="앞부분 "),
                _block("server_tool_use", name="web_search"),
                _block("text", text="뒷부분"),
            ]
        )
        result = await LLMClient().generate("prompt")
        assert result.text == "앞부분 뒷부분"

    async def test_errors_propagate_without_retry(self, api):
        api.side_effect = RuntimeError("overloaded")
        with pytest.raises(RuntimeError):
            await LLMClient().generate("prompt")
        assert api.await_count == 1


class TestSdkRetries:
    async def test_server_error_is_sent_once(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                500, json={"type": "error", "error": {"type": "api_error", "message": "boom"}}
            )

        llm = LLMClient(api_key="test-key", timeout=5)
        llm.client = llm.client.with_options(
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )

        with pytest.raises(anthropic.APIStatusError):
            await llm.generate("prompt", model="claude-sonnet-4-6")
        assert len(requests) == 1


class TestGenerateStructured:
    async def test_returns_tool_input(self, api):
        api.return_value = _make_api_message(
            [_block("tool_use", name="report", input={"issues": []})],
            input_tokens=40,
            output_tokens=10,
        )
        response = await LLMClient().generate_structured(
            "text", {"type": "object"}, tool_name="report", model="m1"
        )

        assert response.data == {"issues": []}
        assert response.call == ("m1", 40, 10)
        kwargs = api.await_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": "report"}
        assert kwargs["tools"][0]["input_schema"] == {"type": "object"}
        assert "temperature" not in kwargs

    async def test_missing_tool_call(self, api):
        with pytest.raises(ValueError, match="tool call"):
            await LLMClient().generate_structured("text", {}, tool_name="report")


class TestResponseUsage:
    async def test_each_response_carries_its_own_usage(self, api):
        llm = LLMClient()
        first = await llm.generate("one", model="m1")
        api.return_value = _make_api_message([_block("text", text="두번째")], 7, 3)
        second = await llm.generate("two", model="m2")

        assert first.call == ("m1", 100, 50)
        assert second.call == ("m2", 7, 3)

    async def test_search_requests_counted(self, api):
        api.return_value = _make_api_message([_block("text", text="검색 결과")], searches=2)
        response = await LLMClient().generate("prompt", use_search=True)
        assert response.search_count == 2

    async def test_no_server_tool_use_means_zero_searches(self, api):
        assert (await LLMClient().generate("prompt")).search_count == 0


class TestExtractTextFromImage:
    async def test_sends_base64_image(self, api):
        api.return_value = _make_api_message([_block("text", text="추출된 텍스트")])
        text = await LLMClient().extract_text_from_image(b"\x89PNG", "image/png")

        assert text == "추출된 텍스트"
        image = api.await_args.kwargs["messages"][0]["content"][0]
        assert image["source"]["media_type"] == "image/png"
        assert image["source"]["data"] == "iVBORw=="
