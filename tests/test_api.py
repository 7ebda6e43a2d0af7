"""Tests for the HTTP surface and its error mapping."""

import pytest
from fastapi.testclient import TestClient

from project_brain.api.dependencies import build_container
from project_brain.core.errors import ProviderError
from project_brain.main import create_app


@pytest.fixture
def client(config, store, provider, language_model):
    app = create_app(container=build_container(config, store, provider, language_model))
    return TestClient(app, raise_server_exceptions=False)


def write_chunk(client, uri="u1", content="Product Hunt launch Oct 22"):
    return client.post(
        "/tools/write_memory",
        json={
            "project": "p1",
            "type": "chunk",
            "payload": {"source": "notes", "uri": uri, "title": "Launch", "content": content},
        },
    )


class TestCoreEndpoints:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

    def test_services_not_initialized(self, config):
        client = TestClient(create_app(config=config), raise_server_exceptions=False)
        response = client.post("/tools/search_memory", json={"query": "x"})
        assert response.status_code == 503


class TestMemoryTools:
    def test_write_then_duplicate(self, client):
        first = write_chunk(client)
        second = write_chunk(client)

        assert first.status_code == 200
        assert first.json()["skipped"] is False
        assert first.json()["record"]["uri"] == "u1"
        assert second.json()["skipped"] is True

    def test_write_fact(self, client, store):
        response = client.post(
            "/tools/write_memory",
            json={"type": "fact", "project": "p1", "kind": "deadline", "key": "launch", "value": "2025-10-22"},
        )
        assert response.status_code == 200
        assert response.json()["record"]["value"] == "2025-10-22"
        assert ("p1", "deadline", "launch") in store.facts

    def test_unknown_write_type(self, client):
        response = client.post("/tools/write_memory", json={"type": "memo", "project": "p1"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "1002"

    def test_missing_field(self, client):
        response = client.post("/tools/write_memory", json={"type": "fact", "project": "p1", "kind": "goal"})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "key"

    def test_search(self, client):
        write_chunk(client)
        response = client.post("/tools/search_memory", json={"query": "launch", "project": "p1", "top_k": 3})

        assert response.status_code == 200
        (hit,) = response.json()
        assert hit["uri"] == "u1"
        assert "embedding" not in hit
        assert -1.0 <= hit["similarity"] <= 1.0

    def test_search_blank_query(self, client):
        response = client.post("/tools/search_memory", json={"query": "  "})
        assert response.status_code == 400
        assert response.json()["level"] == "warning"

    def test_search_malformed_body(self, client):
        response = client.post("/tools/search_memory", json={"query": "x", "top_k": "many"})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "top_k"

    def test_get_facts(self, client):
        client.post(
            "/tools/write_memory",
            json={"type": "fact", "project": "p1", "kind": "goal", "key": "users", "value": "100"},
        )
        response = client.post("/tools/get_facts", json={"project": "p1", "kind": "goal"})
        assert [f["key"] for f in response.json()] == ["users"]

    def test_get_chunk(self, client):
        write_chunk(client)
        assert client.get("/tools/chunks", params={"uri": "u1"}).json()["content"] == "Product Hunt launch Oct 22"

    def test_get_missing_chunk(self, client):
        response = client.get("/tools/chunks", params={"uri": "nope"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "1003"

    def test_unexpected_error(self, client, store):
        async def broken(uri):
            raise RuntimeError("disk on fire")

        store.get_chunk_by_uri = broken
        response = client.get("/tools/chunks", params={"uri": "u1"})
        assert response.status_code == 500
        assert response.json()["error_code"] == "1000"


class TestAnswerEndpoints:
    def test_ask(self, client, language_model):
        write_chunk(client)
        response = client.post("/api/ask", json={"message": "When is the launch?", "project": "p1"})

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == language_model.answer
        assert body["citations"][0]["uri"] == "u1"
        assert body["metadata"]["memories_retrieved"] == 1

    def test_ask_blank(self, client):
        assert client.post("/api/ask", json={"message": ""}).status_code == 400

    def test_ask_unknown_model(self, client):
        response = client.post("/api/ask", json={"message": "Hi", "model": "gpt-4"})
        assert response.status_code == 400

    def test_provider_failure_is_bad_gateway(self, client, language_model):
        language_model.error = ProviderError("model unavailable")
        response = client.post("/api/ask", json={"message": "Hi"})
        assert response.status_code == 502
        assert response.json()["error"] == "model unavailable"

    def test_ingest(self, client):
        records = [
            {"project": "p1", "source": "notes", "uri": f"u{i}", "title": "t", "content": f"note {i}"}
            for i in range(3)
        ]
        first = client.post("/api/ingest", json={"records": records, "concurrency": 2})
        second = client.post("/api/ingest", json={"records": records})

        assert first.json() == {"inserted": 3, "skipped": 0, "failed": 0, "tokens": 6}
        assert second.json()["skipped"] == 3

    def test_ingest_conversation(self, client, store):
        response = client.post(
            "/api/ingest-conversation",
            json={
                "project": "p1",
                "messages": [
                    {"role": "user", "content": "When is the launch?"},
                    {"role": "assistant", "content": "Oct 22", "citations": [{"title": "Launch", "uri": "u1"}]},
                ],
            },
        )
        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["uri"].startswith("shainai://conversation/conv_")
        assert store.chunks[body["uri"]].source == "shainai"

    def test_ingest_empty_conversation(self, client):
        response = client.post("/api/ingest-conversation", json={"messages": []})
        assert response.status_code == 400
