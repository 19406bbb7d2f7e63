"""GET /api/schema — cached database schema, cache control and table statistics."""
import logging
from fastapi import APIRouter, HTTPException, Request

from core.errors import IntrospectionError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/schema")
def get_schema(request: Request, force_refresh: bool = False):
    pipeline = request.app.state.pipeline
    try:
        schema = pipeline.get_schema(force_refresh=force_refresh)
    except IntrospectionError as e:
        raise HTTPException(503, detail=f"{e.message}. {e.hint}")
    return schema.model_dump(by_alias=True)


@router.post("/schema/invalidate")
def invalidate_schema(request: Request):
    request.app.state.pipeline.invalidate_schema_cache()
    logger.info("Schema cache invalidated via API")
    return {"message": "Schema cache invalidated. The next request re-introspects the database."}


@router.get("/schema/stats")
def get_schema_stats(request: Request):
    """Per-table row counts for every discovered table."""
    try:
        stats = request.app.state.pipeline.schema_stats()
    except IntrospectionError as e:
        raise HTTPException(503, detail=f"{e.message}. {e.hint}")
    return stats.model_dump(by_alias=True)
