"""Exception types raised while converting a page."""


class Page2MdError(Exception):
    """Base class for page2md errors."""


class NavigationError(Page2MdError):
    """The browser could not reach or load the target URL."""


class NavigationTimeoutError(NavigationError):
    """The load-complete signal did not arrive within the allotted time."""


class ExtractionError(Page2MdError):
    """The page snapshot was empty or unusable."""


class PostProcessError(Page2MdError):
    """The LLM cleanup request failed or returned something unusable."""
