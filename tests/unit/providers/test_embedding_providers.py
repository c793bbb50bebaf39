# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Tests for embedding providers, with model clients mocked out."""

from __future__ import annotations

import math

from unittest.mock import MagicMock

import numpy as np
import pytest

from silos.config.settings import DEFAULT_MODEL, EmbeddingSettings
from silos.exceptions import EmbedFailedError
from silos.providers.embedding import EmbeddingProvider, get_embedding_provider


pytestmark = [pytest.mark.unit]


class TestNormalize:
    def test_unit_length(self) -> None:
        vector = EmbeddingProvider.normalize([3.0, 4.0])
        assert vector == pytest.approx([0.6, 0.8])
        assert EmbeddingProvider.is_normalized(vector)

    def test_zero_and_empty_vectors_pass_through(self) -> None:
        assert EmbeddingProvider.normalize([0.0, 0.0]) == [0.0, 0.0]
        assert EmbeddingProvider.normalize([]) == []
        assert not EmbeddingProvider.is_normalized([])

    @pytest.mark.parametrize("bad", [math.nan, math.inf])
    def test_non_finite_values_fail(self, bad: float) -> None:
        with pytest.raises(EmbedFailedError):
            EmbeddingProvider.normalize([1.0, bad])


class TestEmbed:
    def test_embed_normalizes(self, embedder) -> None:
        vector = embedder.embed("read a file")
        assert len(vector) == embedder.dimension
        assert EmbeddingProvider.is_normalized(vector)
        assert embedder.calls == ["read a file"]

    def test_client_failure_becomes_embed_failed(self, make_embedder) -> None:
        failing = make_embedder(fail=True)
        with pytest.raises(EmbedFailedError) as exc_info:
            failing.embed("anything")
        assert str(exc_info.value) == "failed to embed prompt"
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestSentenceTransformers:
    @pytest.fixture
    def provider_cls(self):
        pytest.importorskip("sentence_transformers")
        from silos.providers.embedding.sentence_transformers import (
            SentenceTransformersEmbeddingProvider,
        )

        return SentenceTransformersEmbeddingProvider

    def test_embed_with_client(self, provider_cls) -> None:
        client = MagicMock()
        client.encode.return_value = np.array([0.0, 2.0], dtype=np.float32)
        client.get_sentence_embedding_dimension.return_value = 2
        provider = provider_cls("org/model", client=client)
        assert provider.embed("hello") == pytest.approx([0.0, 1.0])
        assert provider.dimension == 2
        client.encode.assert_called_once_with(
            "hello", normalize_embeddings=True, convert_to_numpy=True, show_progress_bar=False
        )

    def test_from_settings_passes_revision_and_device(
        self, provider_cls, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        model_cls = MagicMock()
        monkeypatch.setattr(
            "silos.providers.embedding.sentence_transformers.SentenceTransformer", model_cls
        )
        provider = get_embedding_provider(EmbeddingSettings(revision="refs/pr/21", gpu=0))
        assert isinstance(provider, provider_cls)
        model_cls.assert_called_once_with(DEFAULT_MODEL, revision="refs/pr/21", device="cuda:0")

    def test_client_errors_are_wrapped(self, provider_cls) -> None:
        client = MagicMock()
        client.encode.side_effect = RuntimeError("CUDA out of memory")
        with pytest.raises(EmbedFailedError):
            provider_cls("org/model", client=client).embed("hello")


class TestFastEmbed:
    @pytest.fixture
    def provider_cls(self):
        pytest.importorskip("fastembed")
        from silos.providers.embedding.fastembed import FastEmbedEmbeddingProvider

        return FastEmbedEmbeddingProvider

    def test_embed_with_client(self, provider_cls) -> None:
        client = MagicMock()
        client.query_embed.side_effect = lambda texts: iter([np.array([3.0, 4.0])])
        provider = provider_cls("custom/unlisted-model", client=client)
        assert provider.embed("hello") == pytest.approx([0.6, 0.8])
        assert provider.dimension == 2

    def test_selected_by_settings(self, provider_cls, monkeypatch: pytest.MonkeyPatch) -> None:
        model_cls = MagicMock()
        monkeypatch.setattr("silos.providers.embedding.fastembed.TextEmbedding", model_cls)
        provider = get_embedding_provider(EmbeddingSettings(provider="fastembed", model_id="x/y"))
        assert isinstance(provider, provider_cls)
        model_cls.assert_called_once_with(model_name="x/y")
