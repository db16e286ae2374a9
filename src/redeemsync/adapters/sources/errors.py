"""Errors raised while extracting data from source pages."""

from __future__ import annotations


class ExtractionError(RuntimeError):
    """A source page could not be fetched or did not have the expected shape."""

    def __init__(self, message: str, *, source_url: str | None = None) -> None:
        super().__init__(message)
        self.source_url = source_url


class UnsupportedSourceError(ExtractionError):
    """The URL's host is not one of the known providers."""
