"""Tests for the dedup/write gateway."""

import asyncio

import pytest

from project_brain.core.errors import ValidationError
from project_brain.domain.models import ChunkRecord, Fact, FactWrite, JournalEntry


def chunk_request(**overrides):
    request = {
        "type": "chunk",
        "project": "p1",
        "source": "notes",
        "uri": "note://launch",
        "title": "Launch",
        "content": "Product Hunt launch Oct 22",
    }
    request.update(overrides)
    return request


class TestChunkWrites:
    async def test_insert_then_skip(self, write_gateway, store, provider):
        first = await write_gateway.write(chunk_request())
        second = await write_gateway.write(chunk_request())

        assert not first.skipped
        assert second.skipped
        assert len(store.chunks) == 1
        # The duplicate never reached the embedding provider
        assert len(provider.calls) == 1

    async def test_stored_chunk_has_content_and_embedding(self, write_gateway, store, provider):
        await write_gateway.write(chunk_request())
        stored = store.chunks["note://launch"]
        assert stored.content == "Product Hunt launch Oct 22"
        assert len(stored.embedding) == provider.dimensions

    async def test_embeds_content_not_title(self, write_gateway, provider):
        await write_gateway.write(chunk_request())
        sent, _ = provider.calls[0]
        assert sent == ["Product Hunt launch Oct 22"]

    async def test_token_estimate_fallback(self, write_gateway):
        result = await write_gateway.write(chunk_request(content="x" * 10))
        assert isinstance(result.record, ChunkRecord)
        assert result.record.token_estimate == 3

    async def test_explicit_tokens_win(self, write_gateway, provider):
        provider.total_tokens = 99
        result = await write_gateway.write(chunk_request(tokens=7))
        assert result.record.token_estimate == 7

    async def test_provider_usage_used_when_reported(self, write_gateway, provider):
        provider.total_tokens = 11
        result = await write_gateway.write(chunk_request())
        assert result.record.token_estimate == 11

    @pytest.mark.parametrize("missing", ["source", "uri", "content"])
    async def test_required_fields(self, write_gateway, provider, missing):
        request = chunk_request()
        del request[missing]
        with pytest.raises(ValidationError):
            await write_gateway.write(request)
        assert provider.calls == []

    async def test_blank_content_rejected(self, write_gateway):
        with pytest.raises(ValidationError):
            await write_gateway.write(chunk_request(content="   "))

    async def test_concurrent_duplicate_counts_as_skip(self, write_gateway, store):
        results = await asyncio.gather(
            write_gateway.write(chunk_request()),
            write_gateway.write(chunk_request()),
        )
        assert sorted(r.skipped for r in results) == [False, True]
        assert len(store.chunks) == 1

    async def test_insert_race_counts_as_skip(self, write_gateway, store, provider):
        await write_gateway.write(chunk_request())

        async def lookup_misses(uri):
            return None

        store.get_chunk_by_uri = lookup_misses
        result = await write_gateway.write(chunk_request())

        assert result.skipped
        assert len(provider.calls) == 2
        assert len(store.chunks) == 1

    async def test_default_project(self, write_gateway, store):
        request = chunk_request()
        del request["project"]
        await write_gateway.write(request)
        assert store.chunks["note://launch"].project == "personal"


class TestFactWrites:
    async def test_upsert_overwrites_value(self, write_gateway, store):
        await write_gateway.write({"type": "fact", "project": "p1", "kind": "deadline", "key": "x", "value": "A"})
        result = await write_gateway.write(
            {"type": "fact", "project": "p1", "kind": "deadline", "key": "x", "value": "B"}
        )

        assert len(store.facts) == 1
        assert store.facts[("p1", "deadline", "x")].value == "B"
        assert isinstance(result.record, Fact)
        assert result.record.value == "B"

    async def test_distinct_kinds_are_distinct_facts(self, write_gateway, store):
        await write_gateway.write({"type": "fact", "project": "p1", "kind": "deadline", "key": "x", "value": "A"})
        await write_gateway.write({"type": "fact", "project": "p1", "kind": "goal", "key": "x", "value": "A"})
        assert len(store.facts) == 2

    async def test_accepts_typed_request(self, write_gateway, store):
        await write_gateway.write(FactWrite(project="p1", kind="goal", key="users", value="100"))
        assert ("p1", "goal", "users") in store.facts

    @pytest.mark.parametrize("missing", ["kind", "key", "value"])
    async def test_required_fields(self, write_gateway, missing):
        request = {"type": "fact", "project": "p1", "kind": "deadline", "key": "x", "value": "A"}
        del request[missing]
        with pytest.raises(ValidationError):
            await write_gateway.write(request)


class TestJournalWrites:
    async def test_append_only(self, write_gateway, store):
        entry = {"type": "journal", "project": "p1", "summary": "Shipped v1", "tags": ["release"]}
        await write_gateway.write(entry)
        result = await write_gateway.write(entry)

        assert len(store.journal) == 2
        assert isinstance(result.record, JournalEntry)
        assert result.record.tags == ["release"]

    async def test_summary_required(self, write_gateway):
        with pytest.raises(ValidationError):
            await write_gateway.write({"type": "journal", "project": "p1", "details": "no summary"})


class TestDispatch:
    async def test_unknown_type(self, write_gateway):
        with pytest.raises(ValidationError, match="Unknown write type"):
            await write_gateway.write({"type": "memo", "project": "p1"})

    async def test_missing_type(self, write_gateway):
        with pytest.raises(ValidationError):
            await write_gateway.write({"project": "p1", "summary": "x"})

    async def test_tool_payload_form(self, write_gateway, store):
        await write_gateway.write(
            {"project": "p1", "type": "journal", "payload": {"summary": "Finalized PH gallery images"}}
        )
        assert store.journal[0].summary == "Finalized PH gallery images"
        assert store.journal[0].project == "p1"
