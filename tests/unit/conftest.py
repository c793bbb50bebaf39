# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Unit test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from tree_sitter import Node

from silos.language import Grammar, resolve


@pytest.fixture
def go() -> Grammar:
    """The Go grammar."""
    return resolve("go")


@pytest.fixture
def parse_go(go: Grammar) -> Callable[[str], tuple[bytes, Node]]:
    """Encode Go source and parse it, returning the bytes and the root node."""

    def _parse(text: str) -> tuple[bytes, Node]:
        source = text.encode("utf-8")
        return source, go.root(source)

    return _parse
