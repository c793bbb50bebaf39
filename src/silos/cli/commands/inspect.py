# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Silos CLI - Rule Authoring Aids."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import cyclopts

from cyclopts import App
from rich.markup import escape
from rich.table import Table

from silos.cli.utils import SILOS_PREFIX, console, fail, read_source, report_error
from silos.engine.inspect import dump_expression as dump_tree
from silos.engine.inspect import show_captures as first_match
from silos.exceptions import SilosError
from silos.language import resolve, resolve_from_extension


dump_expression_app = App(help="Print the syntax tree of a source file as an s-expression.")
show_captures_app = App(help="Print the first match of a query expression in a source file.")


def _language(file: Path, language: str | None) -> str:
    grammar = resolve(language) if language else resolve_from_extension(file)
    return grammar.language.value


@dump_expression_app.default
def dump_expression(
    file: Path,
    *,
    language: Annotated[str | None, cyclopts.Parameter(name=["--language", "-l"])] = None,
) -> None:
    """Print FILE's syntax tree, to help write query expressions."""
    source = read_source(file)
    try:
        sexp = dump_tree(source, _language(file, language))
    except SilosError as e:
        report_error(e)
        fail("Could not dump the expression")
    console.out(sexp)


@show_captures_app.default
def show_captures(
    file: Path,
    expression: str,
    *,
    language: Annotated[str | None, cyclopts.Parameter(name=["--language", "-l"])] = None,
) -> None:
    """Run EXPRESSION over FILE and print the `root` span and every capture of its first match."""
    source = read_source(file)
    try:
        result = first_match(source, _language(file, language), expression)
    except SilosError as e:
        report_error(e)
        fail("Could not run the expression")
    if not result.matched:
        console.print(f"{SILOS_PREFIX} [yellow]No match bound a `root` capture.[/yellow]")
    else:
        console.print(f"{SILOS_PREFIX} root: bytes {result.start}..{result.end}")
    if not result.captures:
        return
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Capture", style="cyan")
    table.add_column("Text", style="white")
    for name, text in sorted(result.captures.items()):
        table.add_row(name, escape(text))
    console.print(table)


__all__ = ("dump_expression_app", "show_captures_app")
