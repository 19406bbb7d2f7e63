"""GET /api/health — database and text-generation service check."""
import logging
from fastapi import APIRouter, Request

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(request: Request):
    pipeline = request.app.state.pipeline
    db_status  = pipeline.check_database_health()
    gen_status = pipeline.check_generation_service_health()
    overall = "ok" if db_status["ok"] and gen_status["ok"] else "degraded"
    return {
        "status": overall,
        "services": {
            "database":   db_status,
            "generation": gen_status,
        },
    }
