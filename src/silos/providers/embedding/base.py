# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""The embedding provider interface."""

from __future__ import annotations

import logging

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

from silos.exceptions import EmbedFailedError


logger = logging.getLogger(__name__)


class EmbeddingProvider[EmbeddingClient](ABC):
    """
    Abstract class for an embedding provider.

    Turns a text into a fixed-length, L2-normalized vector.

    Implementations wrap a local model client and only implement `_embed` and `dimension`.
    Every failure inside the client surfaces as `EmbedFailedError`. Providers are not assumed
    to be re-entrant; callers serialize access.
    """

    def __init__(self, client: EmbeddingClient, model_name: str) -> None:
        """Initialize the embedding provider.

        Args:
            client: The loaded model client
            model_name: The model identifier, for logging and error details
        """
        self._client = client
        self.model_name = model_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model_name={self.model_name!r})"

    @property
    def client(self) -> EmbeddingClient:
        """The underlying model client."""
        return self._client

    @property
    @abstractmethod
    def dimension(self) -> int:
        """The length of every vector this provider returns."""

    @abstractmethod
    def _embed(self, text: str) -> Sequence[float]:
        """Embed one text with the underlying client."""

    def embed(self, text: str) -> list[float]:
        """Embed `text` into a normalized vector.

        Raises:
            EmbedFailedError: the model failed or returned a non-finite vector
        """
        try:
            raw = self._embed(text)
        except EmbedFailedError:
            raise
        except Exception as e:
            logger.exception("Embedding failed with %s", self.model_name)
            raise EmbedFailedError(
                "failed to embed prompt",
                details={"model": self.model_name, "error": str(e)},
            ) from e
        return self.normalize(raw)

    @staticmethod
    def normalize(embedding: Sequence[float] | np.ndarray) -> list[float]:
        """Normalize an embedding vector to unit L2 length.

        Returns the input as floats if the vector is empty or has zero norm.
        Raises EmbedFailedError if the input contains non-finite values.
        """
        arr = np.asarray(embedding, dtype=np.float32).reshape(-1)
        if arr.size == 0:
            return arr.tolist()
        if not np.all(np.isfinite(arr)):
            raise EmbedFailedError(
                "Embedding vector contains non-finite values (NaN or Inf)",
                details={
                    "embedding_size": int(arr.size),
                    "has_nan": bool(np.isnan(arr).any()),
                    "has_inf": bool(np.isinf(arr).any()),
                },
                suggestions=["Check the embedding model output for numerical stability issues"],
            )
        denom = float(np.linalg.norm(arr))
        return arr.tolist() if denom == 0.0 else (arr / denom).tolist()

    @staticmethod
    def is_normalized(embedding: Sequence[float], *, tol: float = 1e-5) -> bool:
        """Return True if the vector's L2 norm is approximately 1 within tol."""
        arr = np.asarray(embedding, dtype=np.float32)
        if arr.size == 0 or not np.all(np.isfinite(arr)):
            return False
        return bool(np.isclose(float(np.linalg.norm(arr)), 1.0, atol=tol, rtol=0.0))


__all__ = ("EmbeddingProvider",)
