# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Helpers shared by the CLI commands."""

from __future__ import annotations

import logging
import sys

from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, NoReturn

from rich.console import Console
from rich.markup import escape

from silos.common.logging import setup_logger_from_settings
from silos.config.settings import update_settings
from silos.engine.indexer import build_state
from silos.providers.embedding import get_embedding_provider


if TYPE_CHECKING:
    from silos.config.settings import SilosSettings
    from silos.exceptions import SilosError
    from silos.state import RetrievalState


logger = logging.getLogger(__name__)

SILOS_PREFIX = "[bold cyan]silos[/bold cyan]"

console = Console(markup=True, emoji=False, highlight=False)

ProviderName = Literal["sentence-transformers", "fastembed"]


def configure(
    *,
    snippets: Path | None = None,
    model_id: str | None = None,
    revision: str | None = None,
    gpu: int | None = None,
    provider: ProviderName | None = None,
    lenient: bool = False,
    **overrides: Any,
) -> SilosSettings:
    """Apply command-line overrides on top of the configured settings and set up logging."""
    updates: dict[str, Any] = {
        "snippets_path": snippets,
        "embedding": {
            "model_id": model_id,
            "revision": revision,
            "gpu": gpu,
            "provider": provider,
        },
        **overrides,
    }
    if lenient:
        updates["strict_corpus"] = False
    settings = update_settings(**updates)
    setup_logger_from_settings(settings.logging)
    return settings


def load_state(settings: SilosSettings) -> RetrievalState:
    """Load the embedding model and build both corpora."""
    with console.status(f"{SILOS_PREFIX} Indexing rules from {settings.snippets_path}..."):
        embedder = get_embedding_provider(settings.embedding)
        return build_state(settings, embedder)


def read_source(path: Path) -> bytes:
    """Read a source file for parsing."""
    try:
        return path.read_bytes()
    except OSError as e:
        fail(f"Cannot read {path}: {e.strerror or e}")


def report_error(error: SilosError) -> None:
    """Print a core error with its suggestions."""
    console.print(f"{SILOS_PREFIX} [bold red]Error:[/bold red] {escape(str(error))}")
    if error.suggestions:
        console.print(f"{SILOS_PREFIX} [yellow]Suggestions:[/yellow]")
        for suggestion in error.suggestions:
            console.print(f"  • {escape(suggestion)}")


def fail(message: str, code: int = 1) -> NoReturn:
    console.print(f"{SILOS_PREFIX} [bold red]{escape(message)}[/bold red]")
    sys.exit(code)


__all__ = (
    "SILOS_PREFIX",
    "ProviderName",
    "configure",
    "console",
    "fail",
    "load_state",
    "read_source",
    "report_error",
)
