# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Nearest-neighbor indexes over Qdrant's in-memory mode.

An index has two phases. While open it buffers inserts; `build` creates the Qdrant
collection, uploads every point, and seals the index. Only a built index can be searched.
"""

from __future__ import annotations

import logging

from collections.abc import Sequence
from typing import Any, cast

from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from silos.exceptions import DimensionMismatchError, IndexStateError


logger = logging.getLogger(__name__)

_PAYLOAD_KEY = "value"


def memory_client() -> QdrantClient:
    """A Qdrant client backed by process memory."""
    return QdrantClient(location=":memory:")


class VectorIndex[T]:
    """An insert-then-build nearest-neighbor index mapping vectors to values of type `T`.

    Values are stored as point payloads, so they must be JSON-compatible (strings, ints).
    """

    def __init__(
        self,
        collection_name: str,
        dimension: int,
        *,
        client: QdrantClient | None = None,
        distance: Distance = Distance.EUCLID,
    ) -> None:
        self.collection_name = collection_name
        self.dimension = dimension
        self.distance = distance
        self._client = client or memory_client()
        self._pending: list[PointStruct] = []
        self._count = 0
        self._built = False

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        phase = "built" if self._built else "open"
        return f"VectorIndex({self.collection_name!r}, size={self._count}, {phase})"

    @property
    def is_built(self) -> bool:
        return self._built

    def insert(self, vector: Sequence[float], value: T) -> None:
        """Buffer a point. Only valid before `build`."""
        if self._built:
            raise IndexStateError(
                "Cannot insert into an index that has already been built",
                details={"collection": self.collection_name},
            )
        self._check_dimension(vector)
        self._pending.append(
            PointStruct(id=self._count, vector=list(vector), payload={_PAYLOAD_KEY: value})
        )
        self._count += 1

    def build(self) -> None:
        """Create the collection and upload the buffered points. A second call does nothing."""
        if self._built:
            logger.debug("Index %s is already built", self.collection_name)
            return
        _ = self._client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(size=self.dimension, distance=self.distance),
        )
        if self._pending:
            _ = self._client.upsert(collection_name=self.collection_name, points=self._pending)
        self._pending = []
        self._built = True
        logger.debug("Built index %s with %d points", self.collection_name, self._count)

    def search(self, vector: Sequence[float], k: int) -> list[T]:
        """Return up to `k` values, nearest first."""
        if not self._built:
            raise IndexStateError(
                "Cannot search an index before it is built",
                details={"collection": self.collection_name},
            )
        self._check_dimension(vector)
        if k <= 0 or not self._count:
            return []
        response = self._client.query_points(
            collection_name=self.collection_name,
            query=list(vector),
            limit=k,
            with_payload=True,
        )
        return [cast(T, self._value(point.payload)) for point in response.points]

    @staticmethod
    def _value(payload: dict[str, Any] | None) -> Any:
        return (payload or {}).get(_PAYLOAD_KEY)

    def _check_dimension(self, vector: Sequence[float]) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatchError(
                f"Expected a {self.dimension}-dimensional vector, got {len(vector)}",
                details={"collection": self.collection_name},
            )


__all__ = ("VectorIndex", "memory_client")
