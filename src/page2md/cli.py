"""Command-line interface for page2md."""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Any, Optional

# Check if --doctor flag is present before checking dependencies
if "--doctor" in sys.argv:
    from .doctor import run_doctor

    sys.exit(run_doctor())

# Verify core dependencies
try:
    import aiohttp  # noqa: F401
    import bs4  # noqa: F401
    import html2text  # noqa: F401
    import playwright  # noqa: F401
    import rich  # noqa: F401
except ImportError as e:
    print(f"\nERROR: Missing required dependency: {e.name}", file=sys.stderr)
    print("\npage2md requires all core dependencies to be installed.", file=sys.stderr)
    print("\nRecommended fixes:", file=sys.stderr)
    print("  1. For pip users: pip install --upgrade --force-reinstall page2md", file=sys.stderr)
    print("  2. For development: pip install -e .[dev]", file=sys.stderr)
    print("\nTo diagnose issues, run: page2md --doctor", file=sys.stderr)
    sys.exit(1)

from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .core.converter import PageConverter
from .errors import Page2MdError
from .logging_config import setup_logging
from .models.config import Page2MdConfig
from .models.events import EventType, FetchEvent

ENV_LLM_ENDPOINT = "PAGE2MD_LLM_ENDPOINT"
ENV_LLM_API_KEY = "PAGE2MD_LLM_API_KEY"


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="page2md",
        description="Render a web page in Chromium and print it as Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Convert the rendered DOM
  page2md https://example.com > example.md

  # Convert the accessibility tree instead
  page2md https://example.com --axtree

  # Only the main content, headless
  page2md https://example.com --axtree --main-only --headless

  # Clean the result with an LLM (or set {ENV_LLM_ENDPOINT} / {ENV_LLM_API_KEY})
  page2md https://example.com --llm-endpoint https://api.openai.com/v1/chat/completions \\
      --llm-api-key '$OPENAI_API_KEY'
        """,
    )

    parser.add_argument(
        "url",
        nargs="?",
        help="URL of the page to convert",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Run diagnostic checks",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML config file (command-line flags take precedence)",
    )

    # Extraction
    extract_group = parser.add_argument_group("extraction")
    extract_group.add_argument(
        "--axtree",
        action="store_const",
        const="axtree",
        dest="mode",
        help="Convert the accessibility tree instead of the HTML",
    )
    extract_group.add_argument(
        "--main-only",
        action="store_true",
        help="Only convert main/article content when the page marks it",
    )
    extract_group.add_argument(
        "--no-footers",
        action="store_true",
        help="Drop footer and banner regions (accessibility-tree mode)",
    )
    extract_group.add_argument(
        "--indent-width",
        type=int,
        default=None,
        metavar="N",
        help="Spaces per nested list level (default: 2)",
    )
    extract_group.add_argument(
        "--exclude-tags",
        nargs="+",
        metavar="TAG",
        help="HTML tags to drop before conversion (replaces the defaults)",
    )

    # Browser
    browser_group = parser.add_argument_group("browser")
    browser_group.add_argument(
        "--headless",
        action="store_true",
        help="Run Chromium without a window",
    )
    browser_group.add_argument(
        "--timeout",
        "-t",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Page load timeout (default: 30)",
    )
    browser_group.add_argument(
        "--wait-until",
        choices=["load", "domcontentloaded", "networkidle", "commit"],
        default=None,
        help="Load state that counts as loaded (default: load)",
    )
    browser_group.add_argument(
        "--user-agent",
        type=str,
        help="Custom User-Agent string",
    )

    # LLM cleanup
    llm_group = parser.add_argument_group("LLM cleanup")
    llm_group.add_argument(
        "--llm-endpoint",
        default=os.environ.get(ENV_LLM_ENDPOINT),
        metavar="URL",
        help=f"Chat-completions endpoint (env: {ENV_LLM_ENDPOINT})",
    )
    llm_group.add_argument(
        "--llm-api-key",
        default=os.environ.get(ENV_LLM_API_KEY),
        metavar="KEY",
        help=f"API key for the endpoint (env: {ENV_LLM_API_KEY})",
    )
    llm_group.add_argument(
        "--llm-model",
        default=None,
        metavar="NAME",
        help="Model name (default: gpt-4o-mini)",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress progress output",
    )
    output_group.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="FILE",
        help="Also write logs to this file",
    )

    return parser


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``overrides`` on ``base``."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_config(args: argparse.Namespace) -> Page2MdConfig:
    """
    Build the configuration from parsed arguments.

    Raises:
        ValidationError: Invalid combination of settings
    """
    base: dict[str, Any] = {}
    if args.config:
        base = Page2MdConfig.from_yaml_file(args.config).model_dump(exclude_unset=True)

    overrides: dict[str, Any] = {}
    if args.url:
        overrides["url"] = args.url

    browser_kwargs: dict[str, Any] = {}
    if args.headless:
        browser_kwargs["headless"] = True
    if args.timeout is not None:
        browser_kwargs["timeout"] = args.timeout
    if args.wait_until:
        browser_kwargs["wait_until"] = args.wait_until
    if args.user_agent:
        browser_kwargs["user_agent"] = args.user_agent
    if browser_kwargs:
        overrides["browser"] = browser_kwargs

    conversion_kwargs: dict[str, Any] = {}
    if args.mode:
        conversion_kwargs["mode"] = args.mode
    if args.main_only:
        conversion_kwargs["main_content_only"] = True
    if args.no_footers:
        conversion_kwargs["include_low_priority"] = False
    if args.indent_width is not None:
        conversion_kwargs["indent_width"] = args.indent_width
    if args.exclude_tags:
        conversion_kwargs["exclude_tags"] = args.exclude_tags
    if conversion_kwargs:
        overrides["conversion"] = conversion_kwargs

    llm_kwargs: dict[str, Any] = {}
    if args.llm_endpoint:
        llm_kwargs["endpoint"] = args.llm_endpoint
    if args.llm_api_key:
        llm_kwargs["api_key"] = args.llm_api_key
    if args.llm_model:
        llm_kwargs["model"] = args.llm_model
    if llm_kwargs:
        overrides["llm"] = llm_kwargs

    if args.verbose:
        overrides["log_level"] = "DEBUG"
    elif args.quiet:
        overrides["log_level"] = "ERROR"
    if args.log_file:
        overrides["log_file"] = args.log_file

    return Page2MdConfig.model_validate(_merge(base, overrides))


def run_converter(args: argparse.Namespace) -> int:
    """Run the conversion with given arguments."""
    console = Console(stderr=True)

    try:
        config = build_config(args)
    except (ValidationError, ValueError, OSError, ImportError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    if not config.url:
        console.print("[red]Error:[/red] Please provide a URL to convert")
        return 1

    setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
    )

    async def run() -> int:
        try:
            async with PageConverter(config) as converter:
                if args.quiet:
                    ctx = await converter.convert()
                else:
                    with Progress(
                        SpinnerColumn(),
                        TextColumn("[progress.description]{task.description}"),
                        console=console,
                        transient=True,
                    ) as progress:
                        task = progress.add_task("Starting browser...", total=None)

                        def on_event(event: FetchEvent) -> None:
                            if event.type == EventType.FETCH_FAILED:
                                return
                            if event.type == EventType.COMPLETED:
                                progress.update(task, description=f"[green]{event.message}")
                            elif event.message:
                                progress.update(task, description=f"[cyan]{event.message}")

                        ctx = await converter.convert(emit=on_event)

        except Page2MdError as e:
            console.print(f"[red]Error:[/red] {e}")
            return 1

        if ctx.failed:
            console.print(f"[red]Error:[/red] {ctx.error}")
            if args.verbose and ctx.exception is not None:
                import traceback

                exc = ctx.exception
                traceback.print_exception(type(exc), exc, exc.__traceback__)
            return 1

        sys.stdout.write(ctx.markdown or "")
        sys.stdout.flush()
        return 0

    return asyncio.run(run())


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.doctor:
        from .doctor import run_doctor

        return run_doctor()

    return run_converter(args)


if __name__ == "__main__":
    sys.exit(main())
