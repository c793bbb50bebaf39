# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""The structural mutation engine: rule documents, query execution, and rewriting.

The index builder lives in `silos.engine.indexer` and is not re-exported here, since it
depends on the retrieval state.
"""

from silos.engine.discovery import CorpusMode, discover_rule_files
from silos.engine.inspect import dump_expression, show_captures
from silos.engine.mutation import Segment, apply, split_at_boundaries
from silos.engine.query import QueryResult, execute
from silos.engine.rules import (
    CaptureSubstitute,
    LiteralSubstitute,
    Mutation,
    MutationCollection,
    SnippetRule,
    Substitute,
    load_generate_rule,
    load_refactor_rule,
    parse_generate_rule,
    parse_refactor_rule,
)


__all__ = (
    "CaptureSubstitute",
    "CorpusMode",
    "LiteralSubstitute",
    "Mutation",
    "MutationCollection",
    "QueryResult",
    "Segment",
    "SnippetRule",
    "Substitute",
    "apply",
    "discover_rule_files",
    "dump_expression",
    "execute",
    "load_generate_rule",
    "load_refactor_rule",
    "parse_generate_rule",
    "parse_refactor_rule",
    "show_captures",
    "split_at_boundaries",
)
