# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Set up a logger with optional rich formatting."""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler


if TYPE_CHECKING:
    from silos.config.settings import LoggingSettings


def get_rich_handler(**kwargs: Any) -> RichHandler:
    """A rich log handler writing to stderr."""
    return RichHandler(
        console=Console(stderr=True, markup=True, soft_wrap=True),
        markup=False,
        rich_tracebacks=True,
        **kwargs,
    )


def setup_logger(
    name: str | None = "silos",
    *,
    level: int | str = logging.WARNING,
    rich: bool = True,
    rich_options: dict[str, Any] | None = None,
) -> logging.Logger:
    """Set up a logger with optional rich formatting."""
    if not rich:
        logging.basicConfig(level=level)
        logger = logging.getLogger(name)
        logger.setLevel(level)
        return logger
    handler = get_rich_handler(**(rich_options or {}))
    logger = logging.getLogger(name)
    logger.setLevel(level)
    # Clear existing handlers to prevent duplication
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def setup_logger_from_settings(
    settings: LoggingSettings, name: str | None = "silos"
) -> logging.Logger:
    return setup_logger(name, level=settings.level, rich=settings.rich)


__all__ = ("get_rich_handler", "setup_logger", "setup_logger_from_settings")
