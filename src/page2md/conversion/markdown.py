"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

import html2text
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class HtmlToMarkdown:
    """
    Converts filtered HTML to Markdown.

    Uses html2text; if it fails on malformed markup the plain text of the
    document is returned instead, so conversion never raises.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert(html_string, "https://example.com/page")
    """

    def __init__(
        self,
        body_width: int = 0,
        inline_links: bool = True,
        ignore_images: bool = False,
        ignore_tables: bool = False,
        unicode_snob: bool = True,
        mark_code: bool = True,
    ):
        """
        Initialize the Markdown converter.

        Args:
            body_width: Max line width (0 = no wrapping)
            inline_links: Use inline [text](url) vs reference style
            ignore_images: Skip image conversion
            ignore_tables: Skip table conversion
            unicode_snob: Use Unicode chars where possible
            mark_code: Mark code blocks with backticks
        """
        self._options = {
            "body_width": body_width,
            "inline_links": inline_links,
            "wrap_links": False,
            "protect_links": False,
            "ignore_images": ignore_images,
            "ignore_tables": ignore_tables,
            "unicode_snob": unicode_snob,
            "escape_snob": True,
            "mark_code": mark_code,
            "default_image_alt": "",
            "single_line_break": False,
        }

    def _make_converter(self, base_url: str) -> html2text.HTML2Text:
        # html2text keeps parse state on the instance, so use one per document
        converter = html2text.HTML2Text(baseurl=base_url)
        for option, value in self._options.items():
            setattr(converter, option, value)
        return converter

    def _clean_output(self, markdown: str) -> str:
        """Clean up the converted Markdown."""
        # Strip first so whitespace-only lines (html2text's <br>) count as blank
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))
        markdown = re.sub(r"\n{3,}", "\n\n", markdown)
        markdown = markdown.strip()
        return markdown + "\n" if markdown else ""

    def _fix_relative_links(self, markdown: str, base_url: str) -> str:
        """Ensure all links are absolute."""

        def replace_link(match: re.Match[str]) -> str:
            text = match.group(1)
            url = match.group(2)

            if url.startswith(("#", "http://", "https://", "mailto:", "tel:")):
                result: str = match.group(0)
                return result

            return f"[{text}]({urljoin(base_url, url)})"

        return re.sub(r"\[([^\]]+)\]\(([^)\s]+)\)", replace_link, markdown)

    def _plain_text(self, html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")
        text: str = soup.get_text(separator="\n")
        return self._clean_output(text)

    def convert(self, html: str, url: str = "") -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string
            url: Source URL for resolving relative links (optional)

        Returns:
            Markdown string ("" for empty input)
        """
        if not html.strip():
            return ""

        try:
            markdown = self._make_converter(url).handle(html)
        except Exception as e:
            logger.error(f"Failed to convert HTML to Markdown: {e}")
            return self._plain_text(html)

        markdown = self._clean_output(markdown)
        if url:
            markdown = self._fix_relative_links(markdown, url)
        return markdown
