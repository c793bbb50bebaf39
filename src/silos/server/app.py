# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""The HTTP frontend. Registers routes over a built `RetrievalState`."""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Any

from pydantic import PositiveInt, ValidationError
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from silos._common import FROZEN_VERBATIM_CONFIG, BasedModel
from silos.engine.discovery import CorpusMode
from silos.engine.query import encode_source
from silos.exceptions import (
    BusyError,
    EmbedFailedError,
    InvalidExpressionError,
    MissingSuffixError,
    SilosError,
    SnippetParsingError,
    UnknownLanguageError,
    Utf8Error,
)


if TYPE_CHECKING:
    from silos.config.settings import SilosSettings
    from silos.state import RetrievalState


_logger = logging.getLogger(__name__)

LANGUAGE_SEPARATOR = " in "

STATUS_CODES: dict[type[SilosError], int] = {
    MissingSuffixError: 400,
    UnknownLanguageError: 400,
    SnippetParsingError: 422,
    InvalidExpressionError: 422,
    Utf8Error: 422,
    EmbedFailedError: 500,
    BusyError: 504,
}


# -------------------------
# Request bodies
# -------------------------
class _Request(BasedModel):
    model_config = FROZEN_VERBATIM_CONFIG


class GenerateRequest(_Request):
    desc: str
    """The prompt, suffixed with `" in <language>"`."""
    top_k: PositiveInt | None = None


class RefactorRequest(_Request):
    desc: str
    """The prompt, suffixed with `" in <language>"`."""
    body: str
    """The code to rewrite."""
    top_k: PositiveInt | None = None


class ExpressionRequest(_Request):
    source: str
    language: str


class CapturesRequest(_Request):
    source: str
    language: str
    expression: str


def split_prompt(desc: str) -> tuple[str, str]:
    """Split `"<prompt> in <language>"` at the last `" in "`.

    Raises:
        MissingSuffixError: `desc` has no `" in "`
    """
    prompt, separator, language = desc.rpartition(LANGUAGE_SEPARATOR)
    if not separator or not language.strip():
        raise MissingSuffixError(
            "the description must end with ` in <language>`",
            suggestions=["Example: `read a file line by line in go`"],
        )
    return prompt, language.strip()


async def _parse[M: BasedModel](request: Request, model: type[M]) -> M:
    return model.model_validate_json(await request.body())


def _status_for(error: SilosError) -> int:
    return next(
        (status for kind, status in STATUS_CODES.items() if isinstance(error, kind)), 500
    )


async def silos_error_handler(_request: Request, exc: SilosError) -> Response:
    """Render a core error as a plain-text response with its mapped status."""
    status = _status_for(exc)
    if status >= 500:
        _logger.error("Request failed: %s", exc)
    else:
        _logger.info("Request rejected: %s", exc)
    return PlainTextResponse(str(exc), status_code=status)


async def validation_error_handler(_request: Request, exc: ValidationError) -> Response:
    errors = exc.errors(include_url=False, include_context=False, include_input=False)
    return JSONResponse({"errors": errors}, status_code=400)


# -------------------------
# Plain route handlers
# -------------------------
def _state(request: Request) -> RetrievalState:
    return request.app.state.retrieval


def _top_k(request: Request, top_k: int | None) -> int:
    return request.app.state.settings.default_top_k if top_k is None else top_k


async def get_snippet(request: Request) -> Response:
    """Return the snippet bodies closest to the prompt."""
    payload = await _parse(request, GenerateRequest)
    prompt, language = split_prompt(payload.desc)
    results = await run_in_threadpool(
        _state(request).generate, language, prompt, _top_k(request, payload.top_k)
    )
    return JSONResponse(results)


async def get_refactor(request: Request) -> Response:
    """Return the body rewritten by each of the closest refactor rules."""
    payload = await _parse(request, RefactorRequest)
    prompt, language = split_prompt(payload.desc)
    results = await run_in_threadpool(
        _state(request).refactor, language, prompt, payload.body, _top_k(request, payload.top_k)
    )
    return JSONResponse(results)


async def debug_expression(request: Request) -> Response:
    """Return the s-expression of the source's syntax tree."""
    payload = await _parse(request, ExpressionRequest)
    sexp = await run_in_threadpool(
        _state(request).dump_expression, encode_source(payload.source), payload.language
    )
    return PlainTextResponse(sexp)


async def debug_captures(request: Request) -> Response:
    """Return the first match of an expression over the source."""
    payload = await _parse(request, CapturesRequest)
    result = await run_in_threadpool(
        _state(request).show_captures,
        encode_source(payload.source),
        payload.language,
        payload.expression,
    )
    return JSONResponse(result._asdict())


async def health(request: Request) -> Response:
    state = _state(request)
    body: dict[str, Any] = {"status": "ok"} | {
        mode.value: [str(language) for language in state.languages(mode)] for mode in CorpusMode
    }
    return JSONResponse(body)


def create_app(state: RetrievalState, settings: SilosSettings) -> Starlette:
    """Create the HTTP application over a built retrieval state."""
    app = Starlette(
        routes=[
            Route("/api/v1/get", get_snippet, methods=["POST"]),
            Route("/api/v2/get", get_refactor, methods=["POST"]),
            Route("/api/debug/expression", debug_expression, methods=["POST"]),
            Route("/api/debug/captures", debug_captures, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
        ],
        exception_handlers={
            SilosError: silos_error_handler,
            ValidationError: validation_error_handler,
        },
    )
    app.state.retrieval = state
    app.state.settings = settings
    return app


def serve(state: RetrievalState, settings: SilosSettings) -> None:
    """Serve the application with uvicorn until interrupted."""
    import uvicorn

    _logger.info("Serving on http://%s:%d", settings.server.host, settings.server.port)
    uvicorn.run(
        create_app(state, settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
        log_config=None,
    )


__all__ = (
    "CapturesRequest",
    "ExpressionRequest",
    "GenerateRequest",
    "RefactorRequest",
    "create_app",
    "serve",
    "split_prompt",
)
