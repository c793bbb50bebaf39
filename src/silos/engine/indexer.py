# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""The index builder: walk the rule corpora once at startup and build the retrieval state.

The corpus root holds `generate/<language>/*.kdl` and `refactor/<language>/*.kdl`. Language
directory names go through the language registry, so `rs/` and `rust/` fill the same
index. Each per-language index is built exactly once, after all of its inserts, even when it
received no rules.

A malformed rule file, an expression that fails to compile, or an unsupported language
directory is fatal when `strict` is set. Otherwise the file (or directory) is skipped with a
warning. The same policy applies to both corpora.
"""

from __future__ import annotations

import logging

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, overload

from silos.engine.discovery import CorpusMode, corpus_root, discover_rule_files
from silos.engine.query import has_root_capture
from silos.engine.rules import MutationCollection, load_generate_rule, load_refactor_rule
from silos.exceptions import (
    InvalidExpressionError,
    MalformedRuleError,
    SilosError,
    UnknownLanguageError,
)
from silos.language import Grammar, SupportedLanguage, resolve
from silos.providers.vector_index import VectorIndex, memory_client
from silos.state import GenerateCorpus, RefactorCorpus, RetrievalState


if TYPE_CHECKING:
    from qdrant_client import QdrantClient

    from silos.config.settings import SilosSettings
    from silos.providers.embedding import EmbeddingProvider


logger = logging.getLogger(__name__)

_RECOVERABLE = (MalformedRuleError, InvalidExpressionError, UnknownLanguageError)


@dataclass
class CorpusProblem:
    """A rule file or language directory that failed to load."""

    path: Path
    error: SilosError

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"


@dataclass
class _Walk:
    """Files grouped by language, with the problems met while grouping them."""

    files: dict[SupportedLanguage, list[Path]] = field(default_factory=dict)
    grammars: dict[SupportedLanguage, Grammar] = field(default_factory=dict)
    problems: list[CorpusProblem] = field(default_factory=list)


def _fail_or_skip(problem: CorpusProblem, *, strict: bool) -> None:
    if strict:
        raise problem.error
    logger.warning("Skipping %s", problem)


def _walk(root: Path, extensions: Iterable[str], *, strict: bool) -> _Walk:
    walk = _Walk()
    for dirname, files in discover_rule_files(root, extensions).items():
        try:
            grammar = resolve(dirname)
        except UnknownLanguageError as e:
            e.details.setdefault("file_path", str(root / dirname))
            problem = CorpusProblem(root / dirname, e)
            walk.problems.append(problem)
            _fail_or_skip(problem, strict=strict)
            continue
        walk.grammars[grammar.language] = grammar
        walk.files.setdefault(grammar.language, []).extend(files)
    return walk


def validate_expressions(collection: MutationCollection, grammar: Grammar, path: Path) -> None:
    """Compile every expression in `collection` and warn about those without a `root` capture.

    Raises:
        InvalidExpressionError: an expression does not compile for `grammar`
    """
    for position, mutation in enumerate(collection.mutations):
        try:
            query = grammar.compile_query(mutation.expression)
        except InvalidExpressionError as e:
            e.details.setdefault("file_path", str(path))
            raise
        if not has_root_capture(query):
            logger.warning(
                "Mutation %d in %s has no `root` capture and will never apply", position, path
            )


def _collection_name(mode: CorpusMode, language: SupportedLanguage) -> str:
    return f"{mode.value}-{language.value}"


def build_generate_corpus(
    root: Path,
    embedder: EmbeddingProvider[Any],
    *,
    extensions: Iterable[str] = (".kdl", ".rule"),
    strict: bool = True,
    client: QdrantClient | None = None,
) -> GenerateCorpus:
    """Embed every generate rule's description and index its snippet body."""
    client = client or memory_client()
    walk = _walk(root, extensions, strict=strict)
    corpus = GenerateCorpus()
    for language, files in sorted(walk.files.items(), key=lambda item: item[0].value):
        index = VectorIndex[str](
            _collection_name(CorpusMode.GENERATE, language), embedder.dimension, client=client
        )
        for path in files:
            try:
                rule = load_generate_rule(path)
            except MalformedRuleError as e:
                _fail_or_skip(CorpusProblem(path, e), strict=strict)
                continue
            logger.debug("Indexing generate rule %s", path)
            index.insert(embedder.embed(rule.description), rule.body)
        index.build()
        logger.info("Built %s generate index with %d snippets", language, len(index))
        corpus.indexes[language] = index
    return corpus


def build_refactor_corpus(
    root: Path,
    embedder: EmbeddingProvider[Any],
    *,
    extensions: Iterable[str] = (".kdl", ".rule"),
    strict: bool = True,
    client: QdrantClient | None = None,
) -> RefactorCorpus:
    """Compile every refactor rule, embed its description, and index its position.

    Positions are assigned sequentially across all languages and index into the corpus's
    `mutations_collection`.
    """
    client = client or memory_client()
    walk = _walk(root, extensions, strict=strict)
    corpus = RefactorCorpus()
    for language, files in sorted(walk.files.items(), key=lambda item: item[0].value):
        grammar = walk.grammars[language]
        index = VectorIndex[int](
            _collection_name(CorpusMode.REFACTOR, language), embedder.dimension, client=client
        )
        for path in files:
            try:
                collection = load_refactor_rule(path)
                validate_expressions(collection, grammar, path)
            except (MalformedRuleError, InvalidExpressionError) as e:
                _fail_or_skip(CorpusProblem(path, e), strict=strict)
                continue
            logger.debug("Indexing refactor rule %s", path)
            index.insert(embedder.embed(collection.description), len(corpus.mutations_collection))
            corpus.mutations_collection.append(collection)
        index.build()
        logger.info("Built %s refactor index with %d rules", language, len(index))
        corpus.indexes[language] = index
    return corpus


@overload
def build_corpus(
    root_directory: Path,
    mode: Literal[CorpusMode.GENERATE],
    embedder: EmbeddingProvider[Any],
    **kwargs: Any,
) -> GenerateCorpus: ...
@overload
def build_corpus(
    root_directory: Path,
    mode: Literal[CorpusMode.REFACTOR],
    embedder: EmbeddingProvider[Any],
    **kwargs: Any,
) -> RefactorCorpus: ...
def build_corpus(
    root_directory: Path, mode: CorpusMode, embedder: EmbeddingProvider[Any], **kwargs: Any
) -> GenerateCorpus | RefactorCorpus:
    """Build one corpus from `<root_directory>/<mode>/`."""
    root = corpus_root(root_directory, mode)
    if mode is CorpusMode.GENERATE:
        return build_generate_corpus(root, embedder, **kwargs)
    return build_refactor_corpus(root, embedder, **kwargs)


def build_state(
    settings: SilosSettings,
    embedder: EmbeddingProvider[Any] | None = None,
    *,
    client: QdrantClient | None = None,
) -> RetrievalState:
    """Build both corpora and hand them to a new `RetrievalState`.

    Args:
        settings: Corpus location, startup policy, and embedding configuration
        embedder: An embedding provider; one is created from settings if omitted
        client: The Qdrant client to hold the indexes; in-memory if omitted
    """
    if embedder is None:
        from silos.providers.embedding import get_embedding_provider

        embedder = get_embedding_provider(settings.embedding)
    client = client or memory_client()
    options: dict[str, Any] = {
        "extensions": settings.rule_extensions,
        "strict": settings.strict_corpus,
        "client": client,
    }
    logger.info("Building corpora from %s", settings.snippets_path)
    generate = build_corpus(settings.snippets_path, CorpusMode.GENERATE, embedder, **options)
    refactor = build_corpus(settings.snippets_path, CorpusMode.REFACTOR, embedder, **options)
    return RetrievalState(embedder, generate, refactor, lock_timeout=settings.lock_timeout)


def check_corpus(
    snippets_path: Path, extensions: Iterable[str] = (".kdl", ".rule")
) -> tuple[int, list[CorpusProblem]]:
    """Load and compile every rule in both corpora without embedding anything.

    Returns:
        The number of rule files that loaded cleanly, and the problems found
    """
    extensions = tuple(extensions)
    ok = 0
    problems: list[CorpusProblem] = []
    for mode in CorpusMode:
        walk = _walk(corpus_root(snippets_path, mode), extensions, strict=False)
        problems.extend(walk.problems)
        for language, files in walk.files.items():
            for path in files:
                try:
                    if mode is CorpusMode.GENERATE:
                        _ = load_generate_rule(path)
                    else:
                        validate_expressions(
                            load_refactor_rule(path), walk.grammars[language], path
                        )
                except _RECOVERABLE as e:
                    problems.append(CorpusProblem(path, e))
                    continue
                ok += 1
    return ok, problems


__all__ = (
    "CorpusProblem",
    "build_corpus",
    "build_generate_corpus",
    "build_refactor_corpus",
    "build_state",
    "check_corpus",
    "validate_expressions",
)
