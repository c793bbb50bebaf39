# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Silos CLI - Check Command."""

from __future__ import annotations

import sys

from pathlib import Path
from typing import Annotated

import cyclopts

from cyclopts import App
from rich.markup import escape
from rich.table import Table

from silos.cli.utils import SILOS_PREFIX, configure, console
from silos.engine.indexer import check_corpus


app = App(help="Validate every rule in the corpora without loading a model.")


@app.default
def check(
    *,
    snippets: Annotated[Path | None, cyclopts.Parameter(name=["--snippets", "-s"])] = None,
) -> None:
    """Parse every rule file and compile every query expression, then report problems."""
    settings = configure(snippets=snippets)
    ok, problems = check_corpus(settings.snippets_path, settings.rule_extensions)
    if not problems:
        console.print(f"{SILOS_PREFIX} [green]{ok} rule files OK[/green]")
        return
    table = Table(show_header=True, header_style="bold red")
    table.add_column("Path", style="cyan")
    table.add_column("Problem", style="white")
    for problem in problems:
        table.add_row(escape(str(problem.path)), escape(problem.error.message))
    console.print(table)
    console.print(f"{SILOS_PREFIX} [red]{len(problems)} problems[/red], {ok} rule files OK")
    sys.exit(1)


__all__ = ("app",)
