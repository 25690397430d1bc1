"""Diagnostic tool for verifying the page2md installation."""

import sys
from importlib import import_module
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table


def check_dependency(
    module_name: str, package_name: Optional[str] = None, optional: bool = False
) -> tuple[bool, str]:
    """
    Check if a Python module is importable.

    Args:
        module_name: Name of the module to import
        package_name: Display name of the package (defaults to module_name)
        optional: Whether this is an optional dependency

    Returns:
        Tuple of (success: bool, message: str)
    """
    display_name = package_name or module_name

    try:
        import_module(module_name)
        return True, f"[OK] {display_name}"
    except ImportError:
        if optional:
            return False, f"[WARN] {display_name} (optional - not installed)"
        return False, f"[MISSING] {display_name}"


def check_chromium() -> tuple[bool, str]:
    """
    Check that Playwright's Chromium build is installed.

    Returns:
        Tuple of (success: bool, message: str)
    """
    try:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright
    except ImportError:
        return False, "[FAIL] Chromium - playwright not installed"

    try:
        with sync_playwright() as p:
            executable = Path(p.chromium.executable_path)
    except PlaywrightError as e:
        return False, f"[FAIL] Chromium - {e}"

    if not executable.exists():
        return False, "[FAIL] Chromium - not installed (run: playwright install chromium)"
    return True, f"[OK] Chromium ({executable})"


def check_network() -> tuple[bool, str]:
    """
    Check basic network connectivity.

    Returns:
        Tuple of (success: bool, message: str)
    """
    import socket

    try:
        socket.gethostbyname("www.google.com")
        return True, "[OK] Network connectivity"
    except socket.gaierror:
        return False, "[FAIL] Network connectivity - DNS resolution failed"
    except OSError as e:
        return False, f"[WARN] Network connectivity - {e}"


def run_doctor() -> int:
    """
    Run diagnostic checks and display results.

    Returns:
        Exit code (0 if all core checks pass, 1 otherwise)
    """
    console = Console(stderr=True)
    console.print("Running page2md diagnostics...\n")

    core_checks = [
        ("playwright.async_api", "playwright"),
        ("bs4", "beautifulsoup4"),
        ("html2text", "html2text"),
        ("aiohttp", "aiohttp"),
        ("pydantic", "pydantic"),
        ("rich", "rich"),
    ]

    optional_checks = [
        ("yaml", "pyyaml", True),
    ]

    core_results = [check_dependency(mod, pkg) for mod, pkg in core_checks]
    optional_results = [check_dependency(mod, pkg, opt) for mod, pkg, opt in optional_checks]
    browser_results = [check_chromium()]
    system_results = [check_network()]

    all_checks = {
        "Core Dependencies": core_results,
        "Optional Dependencies": optional_results,
        "Browser": browser_results,
        "System": system_results,
    }

    for category, results in all_checks.items():
        table = Table(title=category, show_header=False, box=None)
        table.add_column("Status", style="bold")

        for success, message in results:
            style = "green" if success else ("yellow" if "optional" in message else "red")
            table.add_row(message, style=style)

        console.print(table)
        console.print()

    core_failed = any(not success for success, _ in core_results + browser_results)

    if core_failed:
        console.print("\nWARNING: page2md is not ready to run!")
        console.print("\nRecommended fixes:")
        console.print("  1. pip install --upgrade --force-reinstall page2md")
        console.print("  2. playwright install chromium")
        console.print("  3. For development: pip install -e .[dev]")
        return 1

    console.print("\nAll core dependencies installed correctly!")
    if any(not success for success, _ in optional_results):
        console.print("\nOptional features available:")
        console.print("  - YAML config support: pip install page2md[yaml]")
    return 0


if __name__ == "__main__":
    sys.exit(run_doctor())
