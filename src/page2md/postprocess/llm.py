"""Optional LLM cleanup of converted Markdown."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

import aiohttp

from ..errors import PostProcessError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You clean up Markdown that was extracted automatically from a web page. "
    "Remove navigation menus, cookie notices, repeated fragments and other "
    "boilerplate, and repair broken formatting. Keep every piece of real "
    "content, including headings, lists and links. Reply with the Markdown "
    "document only."
)

_FENCE = re.compile(r"^```(?:markdown|md)?\s*\n(.*)\n```\s*$", re.DOTALL)


class LLMPostProcessor:
    """
    Sends Markdown to an OpenAI-compatible chat-completions endpoint.

    Cleanup is best effort: any failure (network, auth, timeout, malformed
    or empty response) is logged as a warning and the input is returned
    unchanged.

    Example:
        processor = LLMPostProcessor(
            endpoint="https://api.openai.com/v1/chat/completions",
            api_key=os.environ["OPENAI_API_KEY"],
        )
        markdown = await processor.clean(markdown)
    """

    RECOVERABLE_EXCEPTIONS = (
        PostProcessError,
        aiohttp.ClientError,
        asyncio.TimeoutError,
        ValueError,
    )

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 120.0,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        """
        Initialize the post-processor.

        Args:
            endpoint: Full URL of the chat-completions endpoint
            api_key: Bearer token
            model: Model name to request
            timeout: Total request timeout in seconds
            system_prompt: Instructions sent ahead of the document
        """
        self._endpoint = endpoint
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._system_prompt = system_prompt

    def _build_payload(self, markdown: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": markdown},
            ],
        }

    def _extract_content(self, data: Any) -> str:
        """Pull the reply text out of a chat-completions response body."""
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise PostProcessError(f"Unexpected response shape: {e!r}") from e

        if not isinstance(content, str) or not content.strip():
            raise PostProcessError("Response contained no Markdown")

        fenced = _FENCE.match(content.strip())
        if fenced:
            content = fenced.group(1)
        return content.strip() + "\n"

    async def _request(self, markdown: str) -> str:
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        headers = {"Authorization": f"Bearer {self._api_key}"}

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(
                self._endpoint,
                json=self._build_payload(markdown),
                headers=headers,
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise PostProcessError(f"HTTP {response.status}: {body[:200]}")
                data = await response.json(content_type=None)

        return self._extract_content(data)

    async def clean(self, markdown: str) -> str:
        """
        Return the cleaned Markdown, or ``markdown`` itself if cleanup fails.

        Args:
            markdown: Converted document

        Returns:
            Cleaned document
        """
        if not markdown.strip():
            return markdown

        try:
            cleaned = await self._request(markdown)
        except self.RECOVERABLE_EXCEPTIONS as e:
            logger.warning(f"LLM cleanup failed, keeping unprocessed Markdown: {e}")
            return markdown

        logger.debug(f"LLM cleanup: {len(markdown)} -> {len(cleaned)} chars")
        return cleaned


async def clean_markdown(markdown: str, endpoint: str, api_key: str, **kwargs: Any) -> str:
    """Clean ``markdown`` with a one-off LLMPostProcessor."""
    return await LLMPostProcessor(endpoint, api_key, **kwargs).clean(markdown)
