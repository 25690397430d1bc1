"""Tests for the LLM cleanup pass."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
from page2md.errors import PostProcessError
from page2md.postprocess import LLMPostProcessor, clean_markdown

ENDPOINT = "https://llm.example.test/v1/chat/completions"


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestLLMPostProcessor:
    """Tests for LLMPostProcessor."""

    @pytest.fixture
    def processor(self):
        return LLMPostProcessor(ENDPOINT, "sk-test", model="test-model", timeout=5)

    def test_payload(self, processor):
        """Test the chat-completions request body."""
        payload = processor._build_payload("# Doc\n")

        assert payload["model"] == "test-model"
        assert payload["temperature"] == 0
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1] == {"role": "user", "content": "# Doc\n"}

    def test_extract_content(self, processor):
        """Test reading the reply text."""
        assert processor._extract_content(completion("# Clean")) == "# Clean\n"

    def test_extract_content_strips_fence(self, processor):
        """Test that a fenced reply is unwrapped."""
        reply = "```markdown\n# Clean\n\nBody\n```"
        assert processor._extract_content(completion(reply)) == "# Clean\n\nBody\n"

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"choices": []},
            {"choices": [{"message": {}}]},
            {"choices": [{"message": {"content": None}}]},
            {"choices": [{"message": {"content": "   "}}]},
            "not json",
            None,
        ],
    )
    def test_extract_content_malformed(self, processor, data):
        """Test malformed or empty responses."""
        with pytest.raises(PostProcessError):
            processor._extract_content(data)

    @pytest.mark.asyncio
    async def test_clean_success(self, processor):
        """Test successful cleanup."""
        with patch.object(LLMPostProcessor, "_request", AsyncMock(return_value="# Clean\n")) as request:
            result = await processor.clean("# Dirty\n\nNav | Nav\n")

        assert result == "# Clean\n"
        request.assert_awaited_once_with("# Dirty\n\nNav | Nav\n")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            aiohttp.ClientConnectionError("connection refused"),
            asyncio.TimeoutError(),
            PostProcessError("HTTP 401: unauthorized"),
            ValueError("bad json"),
        ],
    )
    async def test_clean_failure_returns_input(self, processor, error):
        """Test that every recoverable failure keeps the original Markdown."""
        with patch.object(LLMPostProcessor, "_request", AsyncMock(side_effect=error)):
            result = await processor.clean("# Original\n")

        assert result == "# Original\n"

    @pytest.mark.asyncio
    async def test_clean_skips_empty_input(self, processor):
        """Test that empty documents are not sent."""
        with patch.object(LLMPostProcessor, "_request", AsyncMock()) as request:
            assert await processor.clean("") == ""
            assert await processor.clean("  \n") == "  \n"

        request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self):
        """Test a real connection failure."""
        processor = LLMPostProcessor("http://127.0.0.1:9/v1/chat/completions", "sk-test", timeout=2)
        assert await processor.clean("# Original\n") == "# Original\n"

    @pytest.mark.asyncio
    async def test_clean_markdown_helper(self):
        """Test the module-level helper."""
        with patch.object(LLMPostProcessor, "_request", AsyncMock(return_value="cleaned\n")):
            result = await clean_markdown("raw\n", ENDPOINT, "sk-test", model="m")

        assert result == "cleaned\n"
