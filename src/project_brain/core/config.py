"""Configuration management."""


from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OwnerConfig(BaseModel):
    """Configuration for the person whose projects this brain remembers."""

    name: str = Field(default="Shaina", description="The name of the person the assistant works for")
    assistant_name: str = Field(default="ShainAI", description="How the assistant refers to itself")

    @property
    def possessive(self) -> str:
        """Get possessive form of the name (e.g., 'Shaina's')."""
        if self.name.endswith('s'):
            return f"{self.name}'"
        return f"{self.name}'s"


class Settings(BaseSettings):
    # API Keys
    voyage_api_key: str = ""
    anthropic_api_key: str = ""

    # Neo4j
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"

    # App config
    debug: bool = True

    # Embeddings
    embedding_model: str = Field(default="voyage-3", description="Voyage model used for chunk and query vectors")
    embedding_max_chars: int = Field(default=8000, description="Character budget per embedding input")

    # Language model
    chat_model: str = Field(default="claude-sonnet-4-5-20250929", description="Default answer model")
    allowed_chat_models: list[str] = Field(
        default_factory=lambda: ["claude-sonnet-4-5-20250929", "claude-haiku-4-5-20251001"],
        description="Models a caller may select per question",
    )
    chat_max_tokens: int = 2000

    # Ingestion
    ingest_concurrency: int = Field(default=5, description="Records written concurrently per window")
    max_chunk_size: int = Field(default=1500, description="Paragraph-aligned chunk size in characters")

    # Answering
    ask_top_k: int = 5
    context_excerpt_chars: int = 500
    default_fact_kind: str = "decision"
    default_project: str = "personal"

    # Personalization
    owner_name: str = Field(default="Shaina", description="Name of the person using this project brain")
    assistant_name: str = Field(default="ShainAI", description="Name the assistant answers as")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore extra fields in .env file
        env_nested_delimiter="__",
    )

    @property
    def owner(self) -> OwnerConfig:
        """Get owner configuration."""
        return OwnerConfig(name=self.owner_name, assistant_name=self.assistant_name)


settings = Settings()
