"""Exception types raised by the scraper."""


class ScraperError(RuntimeError):
    """Base class for scraper failures."""


class InputValidationError(ScraperError):
    """Raised when the run input cannot be turned into a SearchRequest."""


class NavigationError(ScraperError):
    """Raised when the renderer cannot load a page (timeout or network failure)."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url
        self.message = message
