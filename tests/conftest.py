# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Global pytest configuration and fixtures for Silos tests."""

from __future__ import annotations

import hashlib
import os
import re

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import pytest

from silos.config.settings import SilosSettings, reset_settings
from silos.providers.embedding import EmbeddingProvider


# ===========================================================================
# *                    Deterministic embedder (no model downloads)
# ===========================================================================

FAKE_DIMENSION = 32


class FakeEmbedder(EmbeddingProvider[None]):
    """Bag-of-words embedder: each word hashes to one axis.

    Identical texts embed identically, and texts sharing words are closer than texts that
    share none. Every call is recorded in `calls`.
    """

    def __init__(self, *, fail: bool = False, dimension: int = FAKE_DIMENSION) -> None:
        super().__init__(None, "fake-bag-of-words")
        self.fail = fail
        self._dimension = dimension
        self.calls: list[str] = []

    @property
    def dimension(self) -> int:
        return self._dimension

    def _embed(self, text: str) -> Sequence[float]:
        self.calls.append(text)
        if self.fail:
            raise RuntimeError("model exploded")
        vector = np.zeros(self._dimension, dtype=np.float32)
        for word in re.findall(r"\w+", text.lower()):
            digest = hashlib.sha256(word.encode("utf-8")).digest()
            vector[int.from_bytes(digest[:4], "little") % self._dimension] += 1.0
        if not vector.any():
            vector[0] = 1.0
        return vector


@pytest.fixture
def make_embedder() -> Callable[..., FakeEmbedder]:
    """Factory for fake embedders."""
    return FakeEmbedder


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


# ===========================================================================
# *                    Rule corpora on disk
# ===========================================================================

RENAME_RULE = """\
description "rename function"
mutation {
    expression "(function_declaration name: (identifier) @name @root)"
    substitute {
        capture "name"
        literal "_renamed"
    }
}
"""

WRAP_RULE = """\
description "wrap function body in a comment"
mutation {
    expression "(function_declaration) @root"
    substitute {
        literal "/* "
        capture "missing"
        literal "removed */"
    }
}
"""

RUST_RULE = """\
description "make function public"
mutation {
    expression "(function_item name: (identifier) @name) @root"
    substitute {
        literal "pub fn "
        capture "name"
        literal "() {}"
    }
}
"""


def kdl_string(text: str) -> str:
    """Quote text as a KDL string."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def generate_rule(desc: str, body: str) -> str:
    return f"desc {kdl_string(desc)}\nbody {kdl_string(body)}\n"


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write_rule(tmp_path: Path) -> Callable[..., Path]:
    """Write a rule file under `<tmp>/snippets/<mode>/<language>/<name>`."""

    def _write(mode: str, language: str, name: str, content: str) -> Path:
        return write_file(tmp_path / "snippets" / mode / language / name, content)

    return _write


@pytest.fixture
def snippets_dir(tmp_path: Path, write_rule: Callable[..., Path]) -> Path:
    """A small corpus: two Go snippets, two Go refactors, and one Rust refactor."""
    write_rule(
        "generate", "go", "read_file.kdl",
        generate_rule("read a file", 'data, err := os.ReadFile("path")\n'),
    )
    write_rule(
        "generate", "go", "http_server.kdl",
        generate_rule("start an http server", 'http.ListenAndServe(":8080", nil)\n'),
    )
    write_rule("refactor", "go", "rename.kdl", RENAME_RULE)
    write_rule("refactor", "go", "wrap.kdl", WRAP_RULE)
    write_rule("refactor", "rs", "public.kdl", RUST_RULE)
    return tmp_path / "snippets"


@pytest.fixture
def settings(snippets_dir: Path) -> SilosSettings:
    return SilosSettings(snippets_path=snippets_dir, lock_timeout=1.0)


@pytest.fixture
def state(settings: SilosSettings, embedder: FakeEmbedder) -> Any:
    from silos.engine.indexer import build_state

    return build_state(settings, embedder)


# ===========================================================================
# *                    Isolation
# ===========================================================================


@pytest.fixture(autouse=True)
def isolated_test_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test from an empty working directory, with a temporary HOME and fresh settings.

    Keeps `silos.toml` files and `SILOS_*` variables from the developer's environment out of
    the tests.
    """
    fake_home = tmp_path / "home"
    fake_home.mkdir(exist_ok=True)
    monkeypatch.setenv("HOME", str(fake_home))
    work = tmp_path / "work"
    work.mkdir(exist_ok=True)
    monkeypatch.chdir(work)
    for key in [key for key in os.environ if key.startswith("SILOS_")]:
        monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()
