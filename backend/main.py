"""
PromptChart — natural-language questions to Vega-Lite charts.
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import charts, health, schema
from config import settings
from core.chart_pipeline import ChartPipeline
from core.db_connector import create_engine_from_settings
from core.schema_cache import SchemaCache
from core.schema_introspector import SchemaIntrospector
from integrations.ollama_client import OllamaClient

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("promptchart")


def build_pipeline() -> ChartPipeline:
    engine = create_engine_from_settings()
    introspector = SchemaIntrospector(
        engine,
        db_schema=settings.DB_SCHEMA,
        excluded_tables=settings.excluded_table_list,
    )
    cache = SchemaCache(introspector.discover, ttl_seconds=settings.SCHEMA_CACHE_TTL_SECONDS)
    return ChartPipeline(
        engine=engine,
        introspector=introspector,
        schema_cache=cache,
        client=OllamaClient(),
        timeout_ms=settings.QUERY_TIMEOUT_MS,
        max_rows=settings.MAX_ROWS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("PromptChart starting up…")
    if getattr(app.state, "pipeline", None) is None:
        app.state.pipeline = build_pipeline()
    yield
    app.state.pipeline.engine.dispose()
    logger.info("PromptChart shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="PromptChart",
    description="Ask questions about your database in plain English and get Vega-Lite charts back.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router, prefix="/api")
app.include_router(charts.router, prefix="/api")
app.include_router(schema.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)
