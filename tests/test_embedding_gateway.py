"""Tests for the embedding gateway."""

import pytest

from project_brain.core.errors import ProviderError
from project_brain.domain.models import EmbeddingResult, EmbeddingType
from project_brain.services.embedding_gateway import EmbeddingGateway, cosine_similarity


class TestEmbed:
    async def test_single_text(self, embeddings, provider):
        vector = await embeddings.embed("hello")
        assert vector == provider.vector_for("hello")
        assert provider.calls == [(["hello"], EmbeddingType.DOCUMENT)]

    async def test_truncates_to_budget(self, provider):
        gateway = EmbeddingGateway(provider, max_chars=10)
        await gateway.embed("x" * 50)
        sent, _ = provider.calls[0]
        assert sent == ["x" * 10]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_rejected_without_call(self, embeddings, provider, text):
        with pytest.raises(ProviderError):
            await embeddings.embed(text)
        assert provider.calls == []

    async def test_provider_failure_is_provider_error(self, embeddings, provider):
        provider.fail_on.add("boom")
        with pytest.raises(ProviderError):
            await embeddings.embed("boom")

    async def test_unexpected_exception_wrapped(self, provider):
        class Broken:
            dimensions = 8

            async def embed(self, texts, embedding_type):
                raise RuntimeError("socket closed")

        with pytest.raises(ProviderError, match="socket closed"):
            await EmbeddingGateway(Broken()).embed("hi")

    async def test_dimension_mismatch_rejected(self, provider):
        provider.vectors["odd"] = [1.0, 0.0]
        with pytest.raises(ProviderError, match="dimension"):
            await EmbeddingGateway(provider).embed("odd")

    async def test_usage_passed_through(self, embeddings, provider):
        provider.total_tokens = 42
        result = await embeddings.embed_with_usage("hello")
        assert isinstance(result, EmbeddingResult)
        assert result.total_tokens == 42


class TestEmbedBatch:
    async def test_empty_batch_makes_no_call(self, embeddings, provider):
        assert await embeddings.embed_batch([]) == []
        assert provider.calls == []

    async def test_order_and_length_preserved(self, embeddings, provider):
        texts = ["c", "a", "b"]
        vectors = await embeddings.embed_batch(texts, EmbeddingType.QUERY)
        assert vectors == [provider.vector_for(t) for t in texts]
        assert len(provider.calls) == 1

    async def test_short_response_rejected(self):
        class Short:
            dimensions = 2

            async def embed(self, texts, embedding_type):
                return EmbeddingResult(vectors=[[1.0, 0.0]])

        with pytest.raises(ProviderError):
            await EmbeddingGateway(Short()).embed_batch(["a", "b"])


class TestCosineSimilarity:
    def test_identical_and_opposite(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_orthogonal_and_zero(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [1.0, 2.0])
