# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""The language registry: supported languages, their tags, and their tree-sitter grammars.

Every language tag that Silos accepts (corpus directory names, request fields, file
extensions) resolves through this module, so the index builder and the retrieval state
never disagree about which languages exist.
"""

from __future__ import annotations

import importlib
import logging

from functools import cache, lru_cache
from pathlib import Path
from types import MappingProxyType

from tree_sitter import Language, Node, Parser, Query, QueryError, Tree

from silos._common import BaseEnum
from silos.exceptions import InvalidExpressionError, SnippetParsingError, UnknownLanguageError


logger = logging.getLogger(__name__)


class SupportedLanguage(str, BaseEnum):
    """Languages with a bundled tree-sitter grammar."""

    GO = "go"
    C = "c"
    CPP = "cpp"
    JAVASCRIPT = "javascript"
    RUST = "rust"

    @classmethod
    def aliases(cls) -> dict[str, SupportedLanguage]:
        return dict(LANGUAGE_TAGS)

    @property
    def grammar_module(self) -> str:
        """The import name of the grammar package for this language."""
        return f"tree_sitter_{self.value}"


LANGUAGE_TAGS: MappingProxyType[str, SupportedLanguage] = MappingProxyType({
    "go": SupportedLanguage.GO,
    "c": SupportedLanguage.C,
    "h": SupportedLanguage.C,
    "cpp": SupportedLanguage.CPP,
    "hpp": SupportedLanguage.CPP,
    "cc": SupportedLanguage.CPP,
    "cxx": SupportedLanguage.CPP,
    "hh": SupportedLanguage.CPP,
    "js": SupportedLanguage.JAVASCRIPT,
    "mjs": SupportedLanguage.JAVASCRIPT,
    "cjs": SupportedLanguage.JAVASCRIPT,
    "ts": SupportedLanguage.JAVASCRIPT,
    "javascript": SupportedLanguage.JAVASCRIPT,
    "rs": SupportedLanguage.RUST,
    "rust": SupportedLanguage.RUST,
})
"""Every accepted tag or file extension (without the dot), mapped to its language.

TypeScript sources are read with the JavaScript grammar.
"""


QUERY_CACHE_SIZE = 256
"""How many compiled queries each grammar keeps; the least recently used are evicted first."""


class Grammar:
    """A loaded tree-sitter grammar for one supported language.

    Parsers are created per call; compiled queries are kept in a bounded LRU cache, since
    the debug surfaces accept arbitrary caller expressions.
    """

    __slots__ = ("_compiled", "language", "ts_language")

    def __init__(self, language: SupportedLanguage, ts_language: Language) -> None:
        self.language = language
        self.ts_language = ts_language
        self._compiled = lru_cache(maxsize=QUERY_CACHE_SIZE)(self._compile)

    def __repr__(self) -> str:
        return f"Grammar({self.language.value!r})"

    def parse(self, source: bytes) -> Tree:
        """Parse `source` into a syntax tree.

        Tree-sitter produces a best-effort tree for invalid input; only a parser that
        returns no tree at all is a parsing failure.
        """
        try:
            tree = Parser(self.ts_language).parse(source)
        except (TypeError, ValueError) as e:
            raise SnippetParsingError(
                f"Failed to parse source as {self.language}",
                details={"language": self.language.value, "error": str(e)},
            ) from e
        if tree is None:
            raise SnippetParsingError(
                f"The {self.language} parser produced no tree",
                details={"language": self.language.value},
            )
        return tree

    def root(self, source: bytes) -> Node:
        """Parse `source` and return the root node."""
        return self.parse(source).root_node

    def compile_query(self, expression: str) -> Query:
        """Compile a structural query expression, raising `InvalidExpressionError` on failure."""
        return self._compiled(expression)

    def query_cache_size(self) -> int:
        """How many compiled queries are currently cached."""
        return self._compiled.cache_info().currsize

    def _compile(self, expression: str) -> Query:
        try:
            return Query(self.ts_language, expression)
        except (QueryError, ValueError) as e:
            raise InvalidExpressionError(
                f"Query failed to compile: {e}",
                details={"language": self.language.value, "expression": expression},
                suggestions=[
                    "Check node type and field names against the grammar",
                    "Run `silos dump-expression` on a sample file to see the node types",
                ],
            ) from e


@cache
def _load_grammar(language: SupportedLanguage) -> Grammar:
    try:
        module = importlib.import_module(language.grammar_module)
        ts_language = Language(module.language())
    except (ImportError, AttributeError, ValueError) as e:
        raise UnknownLanguageError(
            f"The grammar for {language} could not be loaded",
            details={"language": language.value, "error": str(e)},
            suggestions=[f"Install the `{language.grammar_module.replace('_', '-')}` package"],
        ) from e
    logger.debug("Loaded tree-sitter grammar for %s", language)
    return Grammar(language, ts_language)


def supported_language(tag: str | SupportedLanguage) -> SupportedLanguage:
    """Resolve a tag to its `SupportedLanguage` without loading the grammar."""
    if isinstance(tag, SupportedLanguage):
        return tag
    if (language := LANGUAGE_TAGS.get(str(tag).strip().lower())) is not None:
        return language
    raise UnknownLanguageError(
        f"Unsupported language: {tag!r}",
        details={"language": tag},
        suggestions=[f"Use one of: {', '.join(sorted(LANGUAGE_TAGS))}"],
    )


def resolve(tag: str | SupportedLanguage) -> Grammar:
    """Resolve a language tag to its grammar."""
    return _load_grammar(supported_language(tag))


def resolve_from_extension(path: str | Path) -> Grammar:
    """Resolve a file path's extension to a grammar."""
    suffix = Path(path).suffix
    if not suffix:
        raise UnknownLanguageError(
            f"Cannot infer a language for {path}: it has no extension",
            details={"file_path": str(path)},
            suggestions=["Pass the language explicitly"],
        )
    return resolve(suffix.removeprefix("."))


__all__ = (
    "LANGUAGE_TAGS",
    "QUERY_CACHE_SIZE",
    "Grammar",
    "SupportedLanguage",
    "resolve",
    "resolve_from_extension",
    "supported_language",
)
