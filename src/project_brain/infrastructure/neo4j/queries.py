"""Centralized Cypher definitions.

Every query the store runs lives here. Methods return ``(query, params)``
tuples where ``params`` holds any defaults the query needs.
"""

from typing import Any, LiteralString

# Properties returned for a chunk; the embedding is never sent back
_CHUNK_PROJECTION: LiteralString = (
    "{.id, .project, .source, .uri, .title, .content, .token_estimate, .created_at}"
)


class SchemaQueries:
    """Constraints and indexes the store relies on."""

    @staticmethod
    def constraints() -> list[LiteralString]:
        """Uniqueness constraints backing insert-if-absent and fact upserts."""
        return [
            "CREATE CONSTRAINT memory_chunk_uri IF NOT EXISTS "
            "FOR (c:MemoryChunk) REQUIRE c.uri IS UNIQUE",
            "CREATE CONSTRAINT fact_identity IF NOT EXISTS "
            "FOR (f:Fact) REQUIRE (f.project, f.kind, f.key) IS UNIQUE",
            "CREATE INDEX memory_chunk_project IF NOT EXISTS FOR (c:MemoryChunk) ON (c.project)",
            "CREATE INDEX journal_entry_project IF NOT EXISTS FOR (j:JournalEntry) ON (j.project)",
        ]


class ChunkQueries:
    """Queries over :MemoryChunk nodes."""

    @staticmethod
    def get_by_uri() -> tuple[LiteralString, dict[str, Any]]:
        query: LiteralString = (
            "MATCH (c:MemoryChunk {uri: $uri}) "
            "RETURN c " + _CHUNK_PROJECTION + " AS chunk "
            "LIMIT 1"
        )
        return query, {}

    @staticmethod
    def insert_if_absent() -> tuple[LiteralString, dict[str, Any]]:
        """Atomic insert keyed on ``uri``.

        ``created`` is false when a chunk with the uri already existed, also
        when another writer created it a moment earlier.
        """
        query: LiteralString = (
            "MERGE (c:MemoryChunk {uri: $uri}) "
            "ON CREATE SET c.id = $id, c.project = $project, c.source = $source, "
            "c.title = $title, c.content = $content, c.token_estimate = $token_estimate, "
            "c.embedding = $embedding, c.created_at = $created_at "
            "RETURN c " + _CHUNK_PROJECTION + " AS chunk, c.id = $id AS created"
        )
        return query, {}

    @staticmethod
    def similarity_search() -> tuple[LiteralString, dict[str, Any]]:
        """Exact cosine ranking over the filtered chunks.

        Neo4j normalizes cosine to ``(1 + cos) / 2``; it is mapped back to raw
        cosine so antipodal vectors score negative.
        """
        query: LiteralString = (
            "MATCH (c:MemoryChunk) "
            "WHERE ($project IS NULL OR c.project = $project) "
            "AND ($since IS NULL OR c.created_at >= $since) "
            "WITH c, 2 * vector.similarity.cosine(c.embedding, $embedding) - 1 AS similarity "
            "RETURN c " + _CHUNK_PROJECTION + " AS chunk, similarity "
            "ORDER BY similarity DESC, c.created_at DESC, c.uri ASC "
            "LIMIT $top_k"
        )
        return query, {"project": None, "since": None}


class FactQueries:
    """Queries over :Fact and :JournalEntry nodes."""

    @staticmethod
    def upsert() -> tuple[LiteralString, dict[str, Any]]:
        query: LiteralString = (
            "MERGE (f:Fact {project: $project, kind: $kind, key: $key}) "
            "ON CREATE SET f.id = $id "
            "SET f.value = $value, f.updated_at = $updated_at "
            "RETURN f {.id, .project, .kind, .key, .value, .updated_at} AS fact"
        )
        return query, {}

    @staticmethod
    def list_facts() -> tuple[LiteralString, dict[str, Any]]:
        query: LiteralString = (
            "MATCH (f:Fact) "
            "WHERE ($project IS NULL OR f.project = $project) "
            "AND ($kind IS NULL OR f.kind = $kind) "
            "AND ($keys IS NULL OR f.key IN $keys) "
            "RETURN f {.id, .project, .kind, .key, .value, .updated_at} AS fact "
            "ORDER BY f.updated_at DESC"
        )
        return query, {"project": None, "kind": None, "keys": None}

    @staticmethod
    def insert_journal() -> tuple[LiteralString, dict[str, Any]]:
        query: LiteralString = (
            "CREATE (j:JournalEntry {id: $id, project: $project, summary: $summary, "
            "details: $details, tags: $tags, created_at: $created_at}) "
            "RETURN j {.id, .project, .summary, .details, .tags, .created_at} AS entry"
        )
        return query, {}
