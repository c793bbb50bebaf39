# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Shared utilities."""

from silos.common.logging import get_rich_handler, setup_logger, setup_logger_from_settings


__all__ = ("get_rich_handler", "setup_logger", "setup_logger_from_settings")
