# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""FastEmbed embedding provider implementation.

FastEmbed is a lightweight and efficient library for generating embeddings locally, on ONNX
runtime instead of torch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from silos.exceptions import ConfigurationError
from silos.providers.embedding.base import EmbeddingProvider


try:
    from fastembed import TextEmbedding
except ImportError as e:
    raise ConfigurationError(
        'FastEmbed is not installed. Please install it with `pip install "silos[fastembed]"`.'
    ) from e


if TYPE_CHECKING:
    from collections.abc import Sequence

    from silos.config.settings import EmbeddingSettings


class FastEmbedEmbeddingProvider(EmbeddingProvider[TextEmbedding]):
    """FastEmbed implementation of the embedding provider."""

    def __init__(
        self,
        model_name: str,
        *,
        device_ids: list[int] | None = None,
        client: TextEmbedding | None = None,
        **client_kwargs: Any,
    ) -> None:
        if client is None:
            if device_ids:
                client_kwargs |= {"cuda": True, "device_ids": device_ids}
            client = TextEmbedding(model_name=model_name, **client_kwargs)
        super().__init__(client, model_name)
        self._dimension: int | None = None

    @classmethod
    def from_settings(cls, settings: EmbeddingSettings) -> FastEmbedEmbeddingProvider:
        # FastEmbed pins model files itself; the revision setting has no counterpart here
        model_id, _ = settings.resolve_model_and_revision()
        return cls(model_id, device_ids=None if settings.gpu is None else [settings.gpu])

    @property
    def dimension(self) -> int:
        if self._dimension is None:
            known = next(
                (
                    model["dim"]
                    for model in TextEmbedding.list_supported_models()
                    if str(model.get("model", "")).lower() == self.model_name.lower()
                ),
                None,
            )
            self._dimension = int(known) if known else len(self.embed(""))
        return self._dimension

    def _embed(self, text: str) -> Sequence[float]:
        return next(iter(self.client.query_embed([text])))


__all__ = ("FastEmbedEmbeddingProvider",)
