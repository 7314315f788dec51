"""Error types raised by the catalog engine."""

from typing import Optional


class CatalogError(Exception):
    """Base class for every failure the catalog engine reports."""


class NetworkError(CatalogError):
    """A request failed, was unreachable, timed out or returned an error status."""


class DecodeError(CatalogError):
    """A response or the persisted favorites did not have the expected shape."""


class PartialBatchFailure(CatalogError):
    """At least one detail fetch failed while resolving a page."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        super().__init__(f"Detail fetch failed for {url}: {cause}")
