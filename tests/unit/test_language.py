# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Tests for the language registry and grammar wrapper."""

from __future__ import annotations

import pytest

from silos.exceptions import InvalidExpressionError, SnippetParsingError, UnknownLanguageError
from silos.language import (
    LANGUAGE_TAGS,
    Grammar,
    SupportedLanguage,
    resolve,
    resolve_from_extension,
    supported_language,
)


pytestmark = [pytest.mark.unit]


class TestTags:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("go", SupportedLanguage.GO),
            ("h", SupportedLanguage.C),
            ("hpp", SupportedLanguage.CPP),
            ("ts", SupportedLanguage.JAVASCRIPT),
            ("rs", SupportedLanguage.RUST),
            ("rust", SupportedLanguage.RUST),
            ("  Go ", SupportedLanguage.GO),
        ],
    )
    def test_tags_resolve_to_their_language(self, tag: str, expected: SupportedLanguage) -> None:
        assert supported_language(tag) is expected

    def test_every_language_has_its_own_name_as_a_tag(self) -> None:
        for language in SupportedLanguage:
            assert LANGUAGE_TAGS[language.value] is language

    def test_aliases_reach_enum_lookup(self) -> None:
        assert SupportedLanguage.from_string("rs") is SupportedLanguage.RUST
        assert SupportedLanguage.is_member("cxx")
        assert not SupportedLanguage.is_member("python")

    def test_unknown_tag_is_rejected(self) -> None:
        with pytest.raises(UnknownLanguageError) as exc_info:
            supported_language("nonexistent-lang")
        assert "nonexistent-lang" in str(exc_info.value)
        assert exc_info.value.suggestions

    def test_tags_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            LANGUAGE_TAGS["py"] = SupportedLanguage.GO  # type: ignore[index]


class TestResolve:
    @pytest.mark.parametrize("language", list(SupportedLanguage))
    def test_every_language_loads_a_grammar(self, language: SupportedLanguage) -> None:
        grammar = resolve(language)
        assert grammar.language is language
        assert grammar.root(b"").type

    def test_aliases_share_one_grammar(self) -> None:
        assert resolve("rs") is resolve("rust")

    def test_resolve_from_extension(self) -> None:
        assert resolve_from_extension("src/main.go").language is SupportedLanguage.GO
        assert resolve_from_extension("lib.RS").language is SupportedLanguage.RUST

    @pytest.mark.parametrize("path", ["Makefile", "script.py"])
    def test_resolve_from_extension_rejects(self, path: str) -> None:
        with pytest.raises(UnknownLanguageError):
            resolve_from_extension(path)


class TestGrammar:
    def test_parse_is_best_effort_on_invalid_code(self) -> None:
        root = resolve("go").root(b"func {{{ nope")
        assert root.has_error

    def test_parser_without_tree_is_a_parsing_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class NoTreeParser:
            def __init__(self, language: object) -> None:
                pass

            def parse(self, source: bytes) -> None:
                return None

        monkeypatch.setattr("silos.language.Parser", NoTreeParser)
        with pytest.raises(SnippetParsingError):
            resolve("go").parse(b"package main\n")

    def test_compiled_queries_are_cached(self) -> None:
        grammar = resolve("go")
        expression = "(identifier) @root"
        assert grammar.compile_query(expression) is grammar.compile_query(expression)

    def test_query_cache_is_bounded(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("silos.language.QUERY_CACHE_SIZE", 8)
        grammar = Grammar(SupportedLanguage.GO, resolve("go").ts_language)
        for i in range(50):
            grammar.compile_query(f'((identifier) @x (#eq? @x "n{i}")) @root')
        assert grammar.query_cache_size() == 8
        # the most recent expressions are the ones kept
        latest = '((identifier) @x (#eq? @x "n49")) @root'
        assert grammar.compile_query(latest) is grammar.compile_query(latest)
        assert grammar.query_cache_size() == 8

    def test_failed_compiles_are_not_cached(self) -> None:
        grammar = Grammar(SupportedLanguage.GO, resolve("go").ts_language)
        with pytest.raises(InvalidExpressionError):
            grammar.compile_query("(no_such_node) @root")
        assert grammar.query_cache_size() == 0

    @pytest.mark.parametrize(
        "expression",
        ["(no_such_node) @root", "((function_declaration"],
    )
    def test_invalid_expression(self, expression: str) -> None:
        with pytest.raises(InvalidExpressionError) as exc_info:
            resolve("go").compile_query(expression)
        assert exc_info.value.details["expression"] == expression
