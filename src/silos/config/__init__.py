# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Configuration for Silos."""

from silos.config.settings import (
    DEFAULT_MODEL,
    DEFAULT_REVISION,
    EmbeddingSettings,
    LoggingSettings,
    ServerSettings,
    SilosSettings,
    get_settings,
    reset_settings,
    update_settings,
)


__all__ = (
    "DEFAULT_MODEL",
    "DEFAULT_REVISION",
    "EmbeddingSettings",
    "LoggingSettings",
    "ServerSettings",
    "SilosSettings",
    "get_settings",
    "reset_settings",
    "update_settings",
)
