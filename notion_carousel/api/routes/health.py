"""
Health check routes
"""

from fastapi import APIRouter
import structlog

from ...core.config import config

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/")
async def health_check():
    """Configuration readiness check

    Missing configuration is reported as degraded: the slides endpoint
    still answers with demonstration slides.
    """
    ready, reason = config.validate_required_for_fetch()

    if not ready:
        logger.warning("Health check degraded", reason=reason)

    return {
        "status": "healthy" if ready else "degraded",
        "details": {
            "notion_token_configured": bool(config.notion_token),
            "default_database_configured": bool(config.notion_database_id),
            "notion_debug": config.is_notion_debug_enabled,
            "environment": config.environment,
            "reason": None if ready else reason
        }
    }
