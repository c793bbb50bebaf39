# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Embedding providers: local models that turn rule descriptions and prompts into vectors.

Concrete providers import their model libraries on first use, so only the configured
backend needs to be installed.
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Any

from silos.providers.embedding.base import EmbeddingProvider


if TYPE_CHECKING:
    from silos.config.settings import EmbeddingSettings


logger = logging.getLogger(__name__)


def get_embedding_provider(settings: EmbeddingSettings) -> EmbeddingProvider[Any]:
    """Create the embedding provider named in settings.

    Raises:
        ConfigurationError: the provider's library is not installed
    """
    model_id, revision = settings.resolve_model_and_revision()
    logger.info(
        "Loading %s embedding model %s@%s on %s",
        settings.provider,
        model_id,
        revision,
        settings.device,
    )
    if settings.provider == "fastembed":
        from silos.providers.embedding.fastembed import FastEmbedEmbeddingProvider

        return FastEmbedEmbeddingProvider.from_settings(settings)
    from silos.providers.embedding.sentence_transformers import (
        SentenceTransformersEmbeddingProvider,
    )

    return SentenceTransformersEmbeddingProvider.from_settings(settings)


__all__ = ("EmbeddingProvider", "get_embedding_provider")
