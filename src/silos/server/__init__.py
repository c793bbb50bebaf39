# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""HTTP server for Silos."""

from silos.server.app import create_app, serve, split_prompt


__all__ = ("create_app", "serve", "split_prompt")
