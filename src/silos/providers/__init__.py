# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""The external collaborators behind retrieval: embedding models and nearest-neighbor indexes."""

from silos.providers.embedding import EmbeddingProvider, get_embedding_provider
from silos.providers.vector_index import VectorIndex, memory_client


__all__ = ("EmbeddingProvider", "VectorIndex", "get_embedding_provider", "memory_client")
