"""Application settings loaded from .env file."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./promptchart.db"
    DB_SCHEMA: str = "public"          # postgres only
    EXCLUDED_TABLES: str = (
        "SequelizeMeta,alembic_version,schema_migrations,flyway_schema_history,"
        "django_migrations,knex_migrations,knex_migrations_lock"
    )

    # Schema cache
    SCHEMA_CACHE_TTL_SECONDS: int = 3600

    # Query execution
    QUERY_TIMEOUT_MS: int = 30_000
    MAX_ROWS: int = 10_000

    # Ollama
    OLLAMA_HOST: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5-coder:7b"
    OLLAMA_TIMEOUT_SECONDS: int = 60
    OLLAMA_NUM_CTX: int = 8192
    GENERATION_TEMPERATURE: float = 0.2
    COST_PER_1M_TOKENS: float = 0.0     # local models are free; set for hosted ones

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def excluded_table_list(self) -> list[str]:
        return [t.strip() for t in self.EXCLUDED_TABLES.split(",") if t.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
