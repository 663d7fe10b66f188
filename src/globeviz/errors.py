# SPDX-License-Identifier: Apache-2.0
"""Exception types shared by loaders, composers and the CLI."""

from __future__ import annotations


class GlobeVizError(Exception):
    """Base class for recoverable globeviz failures."""


class FetchError(GlobeVizError):
    """Raised when a dataset or asset cannot be fetched."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(GlobeVizError):
    """Raised when a delimited-text or JSON payload is malformed."""

    def __init__(self, message: str, *, line: int | None = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class MissingFieldError(GlobeVizError, KeyError):
    """Raised when a record lacks a field required to place it on the globe."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"missing field: {field}")
        self.field = field

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0])
