# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Debug aids for rule authors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from silos.engine.query import QueryResult, execute
from silos.language import resolve


if TYPE_CHECKING:
    from silos.language import SupportedLanguage


def dump_expression(source: bytes, language: str | SupportedLanguage) -> str:
    """Parse `source` and serialize its syntax tree as an s-expression."""
    return str(resolve(language).root(source))


def show_captures(
    source: bytes, language: str | SupportedLanguage, expression: str
) -> QueryResult:
    """Run `expression` over `source` and return its first match, as a mutation would see it."""
    grammar = resolve(language)
    return execute(grammar.root(source), expression, grammar, source)


__all__ = ("dump_expression", "show_captures")
