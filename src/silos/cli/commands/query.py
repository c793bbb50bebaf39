# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Silos CLI - Generate and Refactor Commands.

Both commands build the corpora in-process, answer one request, and exit.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import cyclopts

from cyclopts import App
from rich.rule import Rule

from silos.cli.utils import (
    SILOS_PREFIX,
    ProviderName,
    configure,
    console,
    fail,
    load_state,
    read_source,
    report_error,
)
from silos.exceptions import SilosError
from silos.language import resolve_from_extension


generate_app = App(help="Find the snippets closest to a description.")
refactor_app = App(help="Rewrite a file with the refactor rules closest to a description.")


def _print_results(results: list[str], empty_message: str) -> None:
    if not results:
        console.print(f"{SILOS_PREFIX} [yellow]{empty_message}[/yellow]")
        return
    for rank, result in enumerate(results, start=1):
        console.print(Rule(f"#{rank}", align="left"))
        console.out(result, end="" if result.endswith("\n") else "\n")


@generate_app.default
def generate(
    prompt: str,
    *,
    language: Annotated[str, cyclopts.Parameter(name=["--language", "-l"])],
    top_k: Annotated[int | None, cyclopts.Parameter(name=["--top-k", "-k"])] = None,
    snippets: Annotated[Path | None, cyclopts.Parameter(name=["--snippets", "-s"])] = None,
    model_id: str | None = None,
    provider: ProviderName | None = None,
    lenient: bool = False,
) -> None:
    """Print the snippet bodies whose descriptions are closest to PROMPT.

    Parameters
    ----------
    prompt
        What the snippet should do.
    language
        Language tag, such as `go` or `rs`.
    top_k
        Number of snippets to print.
    snippets
        Directory containing the rule corpora.
    model_id
        Embedding model to use.
    provider
        Embedding backend.
    lenient
        Skip malformed rule files instead of failing.
    """
    settings = configure(snippets=snippets, model_id=model_id, provider=provider, lenient=lenient)
    try:
        state = load_state(settings)
        results = state.generate(language, prompt, top_k or settings.default_top_k)
    except SilosError as e:
        report_error(e)
        fail("Generate failed")
    _print_results(results, "No snippets matched.")


@refactor_app.default
def refactor(
    prompt: str,
    file: Path,
    *,
    language: Annotated[str | None, cyclopts.Parameter(name=["--language", "-l"])] = None,
    top_k: Annotated[int | None, cyclopts.Parameter(name=["--top-k", "-k"])] = None,
    snippets: Annotated[Path | None, cyclopts.Parameter(name=["--snippets", "-s"])] = None,
    model_id: str | None = None,
    provider: ProviderName | None = None,
    lenient: bool = False,
) -> None:
    """Print FILE rewritten by each of the refactor rules closest to PROMPT.

    Parameters
    ----------
    prompt
        The refactor to perform.
    file
        Source file to rewrite. It is not modified.
    language
        Language tag. Defaults to the one implied by the file extension.
    top_k
        Number of candidate rewrites to print.
    snippets
        Directory containing the rule corpora.
    model_id
        Embedding model to use.
    provider
        Embedding backend.
    lenient
        Skip malformed rule files instead of failing.
    """
    source = read_source(file)
    try:
        body = source.decode("utf-8")
    except UnicodeDecodeError:
        fail(f"{file} is not valid UTF-8")
    settings = configure(snippets=snippets, model_id=model_id, provider=provider, lenient=lenient)
    try:
        lang = language or resolve_from_extension(file).language
        state = load_state(settings)
        results = state.refactor(lang, prompt, body, top_k or settings.default_top_k)
    except SilosError as e:
        report_error(e)
        fail("Refactor failed")
    _print_results(results, "No refactor rule applied.")


__all__ = ("generate_app", "refactor_app")
