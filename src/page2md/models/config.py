"""Pydantic configuration models for page2md."""

from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

DEFAULT_EXCLUDE_TAGS = ["script", "style", "footer", "img", "svg", "iframe", "head", "link"]


class ExtractionMode(str, Enum):
    """Which page representation to convert."""

    HTML = "html"
    AXTREE = "axtree"


def _expand_env_var(value: Optional[str]) -> Optional[str]:
    """Expand environment variable references in a string.

    Supports $VAR and ${VAR} syntax. Returns original value if
    the env var is not set.
    """
    import os
    import re

    if value is None:
        return None

    pattern = r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)"

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


class BrowserConfig(BaseModel):
    """Configuration for the Chromium session that renders the page."""

    headless: bool = Field(False, description="Run Chromium without a visible window")
    timeout: float = Field(30.0, gt=0, description="Navigation timeout in seconds")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        "load",
        description="Playwright load state that counts as navigation complete",
    )
    user_agent: Optional[str] = Field(None, description="Custom User-Agent string")
    viewport_width: int = Field(1920, ge=1, description="Viewport width in pixels")
    viewport_height: int = Field(1080, ge=1, description="Viewport height in pixels")

    model_config = {"extra": "forbid"}


class ConversionConfig(BaseModel):
    """Configuration for content extraction and Markdown conversion."""

    mode: ExtractionMode = Field(
        ExtractionMode.HTML,
        description="Convert the DOM (html) or the accessibility tree (axtree)",
    )
    exclude_tags: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_TAGS),
        description="HTML tags whose subtrees are dropped before conversion",
    )
    main_content_only: bool = Field(
        False,
        description="Restrict output to main/article regions when the page has them",
    )
    include_low_priority: bool = Field(
        True,
        description="Render footer/banner landmarks in accessibility-tree mode",
    )
    indent_width: int = Field(2, ge=1, le=8, description="Spaces per nested list level")

    model_config = {"extra": "forbid"}


class LLMConfig(BaseModel):
    """Configuration for the optional LLM cleanup pass.

    The API key supports environment variable expansion using
    $VAR or ${VAR} syntax, for example --llm-api-key '$OPENAI_API_KEY'.
    """

    endpoint: Optional[str] = Field(None, description="Chat-completions endpoint URL")
    api_key: Optional[str] = Field(None, description="Bearer token for the endpoint")
    model: str = Field("gpt-4o-mini", description="Model name sent with the request")
    timeout: float = Field(120.0, gt=0, description="Request timeout in seconds")

    model_config = {"extra": "forbid"}

    def model_post_init(self, __context: object) -> None:
        """Expand environment variables in the API key after init."""
        if self.api_key:
            object.__setattr__(self, "api_key", _expand_env_var(self.api_key))

    @model_validator(mode="after")
    def _endpoint_and_key_together(self) -> "LLMConfig":
        if bool(self.endpoint) != bool(self.api_key):
            raise ValueError("LLM endpoint and API key must be provided together")
        return self

    @property
    def enabled(self) -> bool:
        """True when both endpoint and key are set."""
        return bool(self.endpoint and self.api_key)


class Page2MdConfig(BaseModel):
    """
    Root configuration model for page2md.

    Example:
        config = Page2MdConfig(
            url="https://example.com",
            conversion=ConversionConfig(mode=ExtractionMode.AXTREE),
        )

    YAML format:
        url: https://example.com
        browser:
          headless: true
          timeout: 20
        conversion:
          mode: axtree
          indent_width: 4
    """

    url: Optional[str] = Field(None, description="Target URL to convert")

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "Page2MdConfig":
        """Load config from YAML string."""
        import yaml

        try:
            data = yaml.safe_load(yaml_str) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML config: {e}") from e
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "Page2MdConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
