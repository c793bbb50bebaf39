# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Unified exception hierarchy for Silos.

Every error raised by the retrieval core inherits from `SilosError`. Request-fatal
errors (`UnknownLanguageError`, `EmbedFailedError`, `SnippetParsingError`,
`BusyError`) surface to the caller as-is; the frontends map them to transport
responses.
"""

from __future__ import annotations

from typing import Any


class SilosError(Exception):
    """Base exception for all Silos errors.

    Provides structured error information including details and suggestions
    for resolution.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        """Initialize a Silos error.

        Args:
            message: Human-readable error message
            details: Additional context about the error
            suggestions: Actionable suggestions for resolving the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def __str__(self) -> str:
        """Return descriptive error message with context details."""
        parts = [self.message]
        if self.details:
            detail_parts = [
                f"{key.replace('_', ' ')}: {self.details[key]}"
                for key in ("language", "file_path", "collection", "expression")
                if key in self.details
            ]
            if detail_parts:
                parts.append(f"({', '.join(detail_parts)})")
        return " ".join(parts)


class ConfigurationError(SilosError):
    """Configuration and settings errors.

    Raised for invalid settings or when an optional dependency needed by the
    configured provider is not installed.
    """


class UnknownLanguageError(SilosError):
    """The language tag is unsupported, or its grammar can't be resolved."""


class EmbedFailedError(SilosError):
    """The embedding model failed to embed a prompt or description."""


class SnippetParsingError(SilosError):
    """The source buffer could not be parsed into a syntax tree."""


class InvalidExpressionError(SilosError):
    """A structural query expression failed to compile against its grammar."""


class MalformedRuleError(SilosError):
    """A rule document violates the generate or refactor rule schema."""


class Utf8Error(SilosError, ValueError):
    """A source segment or captured span is not valid UTF-8 text."""


class BusyError(SilosError):
    """The shared embed-and-search section could not be entered in time."""


class MissingSuffixError(SilosError):
    """A request description doesn't end with `" in <language>"`."""


class IndexStateError(SilosError):
    """A vector index was used outside its insert-then-build lifecycle."""


class DimensionMismatchError(SilosError):
    """An embedding's dimension doesn't match the vector index it targets."""


__all__ = (
    "BusyError",
    "ConfigurationError",
    "DimensionMismatchError",
    "EmbedFailedError",
    "IndexStateError",
    "InvalidExpressionError",
    "MalformedRuleError",
    "MissingSuffixError",
    "SilosError",
    "SnippetParsingError",
    "UnknownLanguageError",
    "Utf8Error",
)
