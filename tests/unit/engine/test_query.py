# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Tests for query execution against parsed source."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from silos.engine.query import QueryResult, encode_source, execute, has_root_capture, node_text
from silos.exceptions import InvalidExpressionError, Utf8Error


pytestmark = [pytest.mark.unit]

FUNCTION = "(function_declaration name: (identifier) @name) @root"


def test_match_reports_root_span_and_captures(go, parse_go) -> None:
    source, root = parse_go("func foo() {}\n")
    result = execute(root, FUNCTION, go, source)
    assert result == QueryResult(0, 13, {"name": "foo"}, True)


def test_root_is_not_reported_as_a_capture(go, parse_go) -> None:
    source, root = parse_go("func foo() {}\n")
    assert "root" not in execute(root, FUNCTION, go, source).captures


def test_no_match(go, parse_go) -> None:
    source, root = parse_go("func foo() {}\n")
    result = execute(root, "(call_expression) @root", go, source)
    assert result == QueryResult.no_match()
    assert not result.matched


def test_match_without_root_capture_is_not_matched(go, parse_go) -> None:
    source, root = parse_go("func foo() {}\n")
    result = execute(root, "(function_declaration name: (identifier) @name)", go, source)
    assert not result.matched
    assert (result.start, result.end) == (0, 0)
    assert result.captures == {"name": "foo"}


def test_only_first_match_is_used(go, parse_go) -> None:
    source, root = parse_go("func first() {}\nfunc second() {}\n")
    result = execute(root, FUNCTION, go, source)
    assert result.captures == {"name": "first"}
    assert (result.start, result.end) == (0, 15)


def test_last_node_wins_for_repeated_capture(go, parse_go) -> None:
    source, root = parse_go("func f(a int) {}\n")
    expression = (
        "(function_declaration name: (identifier) @id "
        "parameters: (parameter_list (parameter_declaration name: (identifier) @id))) @root"
    )
    assert execute(root, expression, go, source).captures == {"id": "a"}


def test_captures_are_exact_source_text(go, parse_go) -> None:
    source, root = parse_go('func f() { s := "héllo" }\n')
    result = execute(root, "(interpreted_string_literal) @lit @root", go, source)
    assert result.captures == {"lit": '"héllo"'}
    assert source[result.start : result.end].decode() == '"héllo"'


def test_invalid_expression_raises(go, parse_go) -> None:
    source, root = parse_go("func foo() {}\n")
    with pytest.raises(InvalidExpressionError):
        execute(root, "(not_a_real_node) @root", go, source)


def test_has_root_capture(go) -> None:
    assert has_root_capture(go.compile_query(FUNCTION))
    assert not has_root_capture(go.compile_query("(identifier) @name"))


def test_node_text_rejects_invalid_utf8() -> None:
    node = SimpleNamespace(start_byte=0, end_byte=2)
    with pytest.raises(Utf8Error):
        node_text(node, b"\xff\xfe")  # type: ignore[arg-type]
    span = SimpleNamespace(start_byte=1, end_byte=3)
    assert node_text(span, b"xok!") == "ok"  # type: ignore[arg-type]


def test_encode_source_rejects_lone_surrogates() -> None:
    assert encode_source("h\u00e9") == b"h\xc3\xa9"
    with pytest.raises(Utf8Error) as exc_info:
        encode_source("ok \ud800")
    assert exc_info.value.details == {"start": 3, "end": 4}
