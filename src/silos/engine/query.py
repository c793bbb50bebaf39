# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Query execution: run a structural query against a syntax tree and read its first match."""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, NamedTuple

from tree_sitter import QueryCursor

from silos.exceptions import Utf8Error


if TYPE_CHECKING:
    from tree_sitter import Node, Query

    from silos.language import Grammar


logger = logging.getLogger(__name__)

ROOT_CAPTURE = "root"
"""The capture whose node span is the region a mutation replaces."""


class QueryResult(NamedTuple):
    """The first match of a query: the `root` span and the text of every other capture.

    `matched` is False when nothing matched or the match bound no `root`; the span is then
    `(0, 0)`.
    """

    start: int
    end: int
    captures: dict[str, str]
    matched: bool

    @classmethod
    def no_match(cls) -> QueryResult:
        return cls(0, 0, {}, False)


def has_root_capture(query: Query) -> bool:
    """Whether a compiled query declares a `root` capture."""
    return any(query.capture_name(i) == ROOT_CAPTURE for i in range(query.capture_count))


def encode_source(text: str) -> bytes:
    """Encode caller text as UTF-8 source bytes, raising `Utf8Error` for unpaired surrogates."""
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise Utf8Error(
            f"Source text cannot be encoded as UTF-8 at offset {e.start}",
            details={"start": e.start, "end": e.end},
        ) from e


def node_text(node: Node, source: bytes) -> str:
    """Decode the exact source text of `node`, raising `Utf8Error` on invalid UTF-8."""
    try:
        return source[node.start_byte : node.end_byte].decode("utf-8")
    except UnicodeDecodeError as e:
        raise Utf8Error(
            f"Captured span {node.start_byte}..{node.end_byte} is not valid UTF-8",
            details={"start": node.start_byte, "end": node.end_byte},
        ) from e


def execute(node: Node, expression: str, grammar: Grammar, source: bytes) -> QueryResult:
    """Compile `expression` for `grammar` and evaluate it against `node`.

    Only the first match in traversal order is used. When a capture name binds several
    nodes within that match, the last one wins.

    Raises:
        InvalidExpressionError: the expression does not compile
        Utf8Error: a captured span is not valid UTF-8
    """
    query = grammar.compile_query(expression)
    matches = QueryCursor(query).matches(node)
    if not matches:
        return QueryResult.no_match()
    _, capture_map = matches[0]
    start = end = 0
    matched = False
    captures: dict[str, str] = {}
    for name, nodes in capture_map.items():
        if not nodes:
            continue
        captured = nodes[-1]
        if name == ROOT_CAPTURE:
            start, end, matched = captured.start_byte, captured.end_byte, True
            continue
        captures[name] = node_text(captured, source)
    if not matched:
        logger.debug("Query matched without binding `%s`: %s", ROOT_CAPTURE, expression)
    return QueryResult(start, end, captures, matched)


__all__ = (
    "ROOT_CAPTURE",
    "QueryResult",
    "encode_source",
    "execute",
    "has_root_capture",
    "node_text",
)
