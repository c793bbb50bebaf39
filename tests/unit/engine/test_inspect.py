# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Tests for the rule authoring aids."""

from __future__ import annotations

import pytest

from silos.engine.inspect import dump_expression, show_captures
from silos.exceptions import UnknownLanguageError


pytestmark = [pytest.mark.unit]


def test_dump_expression_serializes_tree() -> None:
    sexp = dump_expression(b"func foo() {}\n", "go")
    assert sexp.startswith("(source_file")
    assert "(function_declaration name: (identifier)" in sexp


def test_dump_expression_accepts_aliases() -> None:
    assert dump_expression(b"fn main() {}\n", "rs").startswith("(source_file")


def test_dump_expression_unknown_language() -> None:
    with pytest.raises(UnknownLanguageError):
        dump_expression(b"x", "nonexistent-lang")


def test_show_captures_matches_mutation_view() -> None:
    result = show_captures(
        b"func foo() {}\n", "go", "(function_declaration name: (identifier) @name) @root"
    )
    assert result.matched
    assert (result.start, result.end) == (0, 13)
    assert result.captures == {"name": "foo"}


def test_show_captures_without_match() -> None:
    result = show_captures(b"package main\n", "go", "(function_declaration) @root")
    assert not result.matched
    assert result.captures == {}
