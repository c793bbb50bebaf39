# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Provider for Sentence Transformers models."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from silos.exceptions import ConfigurationError
from silos.providers.embedding.base import EmbeddingProvider


try:
    from sentence_transformers import SentenceTransformer
except ImportError as e:
    raise ConfigurationError(
        "Please install the `sentence-transformers` package to use the Sentence Transformers "
        "provider: `pip install sentence-transformers`"
    ) from e


if TYPE_CHECKING:
    from collections.abc import Sequence

    from silos.config.settings import EmbeddingSettings


class SentenceTransformersEmbeddingProvider(EmbeddingProvider[SentenceTransformer]):
    """Sentence Transformers embedding provider."""

    def __init__(
        self,
        model_name: str,
        *,
        revision: str | None = None,
        device: str | None = None,
        client: SentenceTransformer | None = None,
        **client_kwargs: Any,
    ) -> None:
        """Load the model, unless a ready `client` is given."""
        if client is None:
            client = SentenceTransformer(
                model_name, revision=revision, device=device, **client_kwargs
            )
        super().__init__(client, model_name)
        self._dimension: int | None = None

    @classmethod
    def from_settings(cls, settings: EmbeddingSettings) -> SentenceTransformersEmbeddingProvider:
        model_id, revision = settings.resolve_model_and_revision()
        return cls(model_id, revision=revision, device=settings.device)

    @property
    def dimension(self) -> int:
        if self._dimension is None:
            dimension = self.client.get_sentence_embedding_dimension()
            self._dimension = dimension if dimension else len(self.embed(""))
        return self._dimension

    def _embed(self, text: str) -> Sequence[float]:
        result: np.ndarray = self.client.encode(
            text, normalize_embeddings=True, convert_to_numpy=True, show_progress_bar=False
        )
        return result


__all__ = ("SentenceTransformersEmbeddingProvider",)
