# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Silos: retrieval-backed snippet generation and structural refactoring.

Rules are kept in per-language corpora and found by embedding similarity. Generate rules
return a stored snippet; refactor rules rewrite the caller's code with tree-sitter queries.
"""

from silos._version import __version__


__all__ = ("__version__",)
