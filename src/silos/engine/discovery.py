# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Rule corpus discovery over the `<root>/<mode>/<language>/*.kdl` layout."""

from __future__ import annotations

import logging

from collections.abc import Iterable
from pathlib import Path

from silos._common import BaseEnum


logger = logging.getLogger(__name__)


class CorpusMode(str, BaseEnum):
    """The two retrieval corpora, each in its own subdirectory of the snippets root."""

    GENERATE = "generate"
    REFACTOR = "refactor"


def _normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    return frozenset(f".{ext.lower().lstrip('.')}" for ext in extensions)


def discover_rule_files(
    mode_root: Path, extensions: Iterable[str] = (".kdl", ".rule")
) -> dict[str, list[Path]]:
    """Find rule files, grouped by their language directory name.

    Files are sorted by name so identifiers assigned while indexing are stable. A missing
    `mode_root` yields no languages; a language directory without rule files yields an
    empty list.

    Args:
        mode_root: The corpus directory, e.g. `snippets/refactor`
        extensions: Accepted rule file extensions

    Returns:
        A mapping of directory name to its rule files
    """
    if not mode_root.is_dir():
        logger.info("No corpus directory at %s", mode_root)
        return {}
    accepted = _normalize_extensions(extensions)
    discovered: dict[str, list[Path]] = {}
    for language_dir in sorted(p for p in mode_root.iterdir() if p.is_dir()):
        if language_dir.name.startswith("."):
            continue
        discovered[language_dir.name] = sorted(
            path
            for path in language_dir.iterdir()
            if path.is_file() and path.suffix.lower() in accepted
        )
    return discovered


def corpus_root(snippets_path: Path, mode: CorpusMode) -> Path:
    """The directory holding one corpus under the snippets root."""
    return snippets_path / mode.value


__all__ = ("CorpusMode", "corpus_root", "discover_rule_files")
