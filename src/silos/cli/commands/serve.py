# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Silos CLI - Serve Command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import cyclopts

from cyclopts import App

from silos.cli.utils import (
    SILOS_PREFIX,
    ProviderName,
    configure,
    console,
    fail,
    load_state,
    report_error,
)
from silos.exceptions import SilosError


app = App(help="Index the rule corpora and serve them over HTTP.")


@app.default
def serve(
    *,
    snippets: Annotated[Path | None, cyclopts.Parameter(name=["--snippets", "-s"])] = None,
    host: str | None = None,
    port: int | None = None,
    model_id: str | None = None,
    revision: str | None = None,
    gpu: int | None = None,
    provider: ProviderName | None = None,
    lenient: bool = False,
) -> None:
    """Start the Silos HTTP server.

    Parameters
    ----------
    snippets
        Directory containing the `generate` and `refactor` rule corpora.
    host
        Interface to bind.
    port
        Port to listen on.
    model_id
        Embedding model to use (a sentence-transformers model on Hugging Face).
    revision
        Revision or branch of the model.
    gpu
        Run the model on the Nth GPU device.
    provider
        Embedding backend.
    lenient
        Skip malformed rule files with a warning instead of refusing to start.
    """
    from silos.server.app import serve as serve_http

    settings = configure(
        snippets=snippets,
        model_id=model_id,
        revision=revision,
        gpu=gpu,
        provider=provider,
        lenient=lenient,
        server={"host": host, "port": port},
    )
    try:
        state = load_state(settings)
    except SilosError as e:
        report_error(e)
        fail("Could not build the rule corpora")
    address = f"http://{settings.server.host}:{settings.server.port}"
    console.print(f"{SILOS_PREFIX} [green]Serving on {address}[/green]")
    serve_http(state, settings)


__all__ = ("app",)
