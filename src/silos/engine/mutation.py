# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""The mutation engine: rewrite a source buffer with a `MutationCollection`.

Each mutation's first query match yields a `[start, end)` span and a rewrite text. The
source is cut at every span boundary, and each segment either keeps its original text or,
when a rewrite starts at the segment's offset, is replaced by that rewrite.

Rewrites are keyed by start offset, so when two mutations start at the same offset the
later one in document order wins. Overlapping spans are not validated; the result is
whatever the segment walk produces.
"""

from __future__ import annotations

import logging

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, NamedTuple

from silos.engine.query import execute
from silos.exceptions import Utf8Error


if TYPE_CHECKING:
    from tree_sitter import Node

    from silos.engine.rules import MutationCollection
    from silos.language import Grammar


logger = logging.getLogger(__name__)


class Segment(NamedTuple):
    """A contiguous `[start, end)` slice of the source buffer."""

    start: int
    end: int

    def decode(self, source: bytes) -> str:
        try:
            return source[self.start : self.end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise Utf8Error(
                f"Source segment {self.start}..{self.end} is not valid UTF-8",
                details={"start": self.start, "end": self.end},
            ) from e


def split_at_boundaries(length: int, boundaries: Iterable[int]) -> list[Segment]:
    """Partition `[0, length)` into contiguous segments cut at every boundary.

    Boundaries are deduplicated and sorted, so every byte lands in exactly one segment.
    Boundaries outside `[0, length]` are clamped.
    """
    cuts = sorted({0, length, *(min(max(b, 0), length) for b in boundaries)})
    return [Segment(a, b) for a, b in zip(cuts, cuts[1:], strict=False)]


def splice(source: bytes, rewrites: dict[int, str], boundaries: Sequence[int]) -> str:
    """Assemble output from the source segments, substituting rewrites by start offset."""
    pieces = [
        rewrites[segment.start] if segment.start in rewrites else segment.decode(source)
        for segment in split_at_boundaries(len(source), boundaries)
    ]
    return "".join(pieces)


def apply(
    grammar: Grammar, source: bytes, root: Node, collection: MutationCollection
) -> str:
    """Apply every mutation in `collection` to `source` and return the rewritten text.

    `root` is the parsed root of `source`, shared across calls. A mutation whose query
    finds no match (or binds no `root`) is skipped.

    Raises:
        InvalidExpressionError: a mutation's expression fails to compile
        Utf8Error: an emitted source segment or a captured span is not valid UTF-8
    """
    boundaries: list[int] = []
    rewrites: dict[int, str] = {}
    for position, mutation in enumerate(collection.mutations):
        result = execute(root, mutation.expression, grammar, source)
        if not result.matched:
            logger.warning(
                "Mutation %d of %r matched no `root` capture; skipping it",
                position,
                collection.description,
            )
            continue
        logger.debug("mutation query expression matched: %s", result)
        boundaries.extend((result.start, result.end))
        rewrite = mutation.rewrite(result.captures)
        logger.debug("AST rewritten to %r", rewrite)
        rewrites[result.start] = rewrite
    return splice(source, rewrites, boundaries)


__all__ = ("Segment", "apply", "splice", "split_at_boundaries")
