"""Neo4j driver and schema management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import Neo4jError, ServiceUnavailable

from project_brain.core.base import DatabaseErrorDetails, ErrorCode
from project_brain.core.config import Settings, settings
from project_brain.core.decorators import error_context
from project_brain.core.errors import ServiceError
from project_brain.core.logging import get_logger
from project_brain.infrastructure.neo4j.queries import SchemaQueries

logger = get_logger(__name__)


@asynccontextmanager
async def create_neo4j_driver(
    config: Settings | None = None,
    max_connection_pool_size: int = 50,
    max_connection_lifetime: int = 3600,
) -> AsyncIterator[AsyncDriver]:
    """Open a Neo4j driver for the lifetime of the block.

    Connectivity is verified before the driver is handed out and the driver
    is closed on exit.

    Raises:
        ServiceError: If Neo4j cannot be reached
    """
    config = config or settings

    logger.info(
        "Creating Neo4j driver",
        uri=config.neo4j_uri,
        pool_size=max_connection_pool_size,
        connection_lifetime=max_connection_lifetime,
    )

    driver = AsyncGraphDatabase.driver(
        config.neo4j_uri,
        auth=(config.neo4j_user, config.neo4j_password),
        max_connection_pool_size=max_connection_pool_size,
        max_connection_lifetime=max_connection_lifetime,
    )

    try:
        try:
            await driver.verify_connectivity()
        except (ServiceUnavailable, Neo4jError, OSError) as e:
            raise ServiceError(
                message=f"Cannot connect to Neo4j at {config.neo4j_uri}: {e!s}",
                details=DatabaseErrorDetails(
                    source="neo4j_driver",
                    operation="verify_connectivity",
                    service_name="Neo4j",
                    endpoint=config.neo4j_uri,
                ),
                code=ErrorCode.DB_CONNECTION,
            ) from e
        logger.info("Neo4j connection established")
        yield driver
    finally:
        await driver.close()
        logger.info("Neo4j driver closed")


@error_context()
async def ensure_schema(driver: AsyncDriver) -> None:
    """Create the constraints and indexes the memory store relies on."""
    async with driver.session() as session:
        for statement in SchemaQueries.constraints():
            result = await session.run(statement)
            await result.consume()
    logger.info("Neo4j schema ensured")
