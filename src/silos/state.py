# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Retrieval state: the built corpora, the embedding model, and the lock that guards them.

`RetrievalState` is created once at startup by the index builder and then shared by every
request handler. The embedding model and the index searches are not assumed to be safe for
concurrent use, so each request embeds and searches inside one exclusive section. Mutation
application runs outside it.
"""

from __future__ import annotations

import logging
import threading

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from silos.engine import inspect, mutation
from silos.engine.discovery import CorpusMode
from silos.engine.query import encode_source
from silos.exceptions import BusyError, SilosError, UnknownLanguageError
from silos.language import SupportedLanguage, resolve, supported_language


if TYPE_CHECKING:
    from silos.engine.query import QueryResult
    from silos.engine.rules import MutationCollection
    from silos.providers.embedding import EmbeddingProvider
    from silos.providers.vector_index import VectorIndex


logger = logging.getLogger(__name__)


@dataclass
class GenerateCorpus:
    """Per-language indexes from description vectors to snippet bodies."""

    indexes: dict[SupportedLanguage, VectorIndex[str]] = field(default_factory=dict)


@dataclass
class RefactorCorpus:
    """Per-language indexes from description vectors to positions in `mutations_collection`."""

    indexes: dict[SupportedLanguage, VectorIndex[int]] = field(default_factory=dict)
    mutations_collection: list[MutationCollection] = field(default_factory=list)


def _index_for[T](
    indexes: dict[SupportedLanguage, VectorIndex[T]], language: SupportedLanguage, mode: CorpusMode
) -> VectorIndex[T]:
    if (index := indexes.get(language)) is None:
        raise UnknownLanguageError(
            f"snippets were requested for a language with no {mode} corpus: {language}",
            details={"language": language.value},
            suggestions=[f"Add rules under <snippets>/{mode}/{language.value}/"],
        )
    return index


class RetrievalState:
    """Serves generate and refactor requests against the corpora built at startup."""

    def __init__(
        self,
        embedder: EmbeddingProvider[Any],
        generate: GenerateCorpus,
        refactor: RefactorCorpus,
        *,
        lock_timeout: float = 30.0,
    ) -> None:
        self.embedder = embedder
        self.generate_corpus = generate
        self.refactor_corpus = refactor
        self.lock_timeout = lock_timeout
        self._lock = threading.Lock()

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise BusyError(
                "the retrieval state is busy",
                details={"lock_timeout": self.lock_timeout},
                suggestions=["Retry the request", "Raise `lock_timeout` in settings"],
            )
        try:
            yield
        finally:
            self._lock.release()

    def languages(self, corpus: CorpusMode | str) -> list[SupportedLanguage]:
        """Languages with a built index in one corpus."""
        corpus = CorpusMode.from_string(corpus) if isinstance(corpus, str) else corpus
        indexes = (
            self.generate_corpus.indexes
            if corpus is CorpusMode.GENERATE
            else self.refactor_corpus.indexes
        )
        return sorted(indexes, key=lambda language: language.value)

    def generate(self, language: str | SupportedLanguage, prompt: str, top_k: int) -> list[str]:
        """Return up to `top_k` snippet bodies whose descriptions are closest to `prompt`.

        Raises:
            UnknownLanguageError: the language is unsupported or has no generate corpus
            EmbedFailedError: the embedding model failed
            BusyError: the shared section could not be entered in time
        """
        lang = supported_language(language)
        index = _index_for(self.generate_corpus.indexes, lang, CorpusMode.GENERATE)
        with self._exclusive():
            target = self.embedder.embed(prompt)
            return index.search(target, top_k)

    def refactor(
        self, language: str | SupportedLanguage, prompt: str, body: str, top_k: int
    ) -> list[str]:
        """Rewrite `body` with each of the `top_k` refactor rules closest to `prompt`.

        The body is parsed once and every candidate applies to that one tree. A candidate that
        fails to apply is logged and left out, so the result may be shorter than `top_k` or
        empty.

        Raises:
            UnknownLanguageError: the language is unsupported or has no refactor corpus
            Utf8Error: `body` holds text that cannot be encoded as UTF-8
            SnippetParsingError: `body` could not be parsed
            EmbedFailedError: the embedding model failed
            BusyError: the shared section could not be entered in time
        """
        lang = supported_language(language)
        index = _index_for(self.refactor_corpus.indexes, lang, CorpusMode.REFACTOR)
        grammar = resolve(lang)
        source = encode_source(body)
        root = grammar.root(source)
        with self._exclusive():
            target = self.embedder.embed(prompt)
            candidates = index.search(target, top_k)
        results: list[str] = []
        for collection_index in candidates:
            collection = self.refactor_corpus.mutations_collection[collection_index]
            try:
                results.append(mutation.apply(grammar, source, root, collection))
            except SilosError as e:
                logger.error(
                    "failed to apply mutations from collection %d (%r): %s",
                    collection_index,
                    collection.description,
                    e,
                )
        return results

    def dump_expression(self, source: bytes, language: str | SupportedLanguage) -> str:
        """The s-expression of `source`'s syntax tree."""
        return inspect.dump_expression(source, language)

    def show_captures(
        self, source: bytes, language: str | SupportedLanguage, expression: str
    ) -> QueryResult:
        """The first match of `expression` over `source`."""
        return inspect.show_captures(source, language, expression)


__all__ = ("GenerateCorpus", "RefactorCorpus", "RetrievalState")
