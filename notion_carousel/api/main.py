"""
FastAPI application for Notion Carousel
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from ..core.config import config
from ..core.exceptions import NotionCarouselError
from ..services.notion import NotionService
from .routes import carousel, health, slides

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

# Global service instance (lazy initialization for serverless)
notion_service = None


def get_or_create_notion_service():
    """Get or create the Notion service with lazy initialization"""
    global notion_service
    if notion_service is None:
        logger.info("Initializing Notion service (lazy initialization)", version=config.version)
        notion_service = NotionService()
    return notion_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - minimal for serverless compatibility"""
    logger.info("Starting Notion Carousel application", version=config.version)
    yield
    logger.info("Shutting down Notion Carousel application")


# Create FastAPI application
app = FastAPI(
    title="Notion Carousel",
    description="Notion database slideshow backend",
    version=config.version,
    docs_url="/docs" if config.is_development else None,
    redoc_url="/redoc" if config.is_development else None,
    lifespan=lifespan
)

# Service is resolved per request so tests and serverless cold starts can swap it
app.state.get_notion_service = get_or_create_notion_service

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"] if config.is_development else [],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def frame_ancestors_header(request: Request, call_next):
    """Allow embedding the viewer inside Notion pages"""
    response = await call_next(request)
    response.headers["Content-Security-Policy"] = f"frame-ancestors {config.frame_ancestors};"
    return response


# Include route modules
app.include_router(slides.router, prefix="/api/slides", tags=["slides"])
app.include_router(carousel.router, prefix="/api/carousel", tags=["carousel"])
app.include_router(health.router, prefix="/health", tags=["health"])


@app.exception_handler(NotionCarouselError)
async def notion_carousel_exception_handler(request: Request, exc: NotionCarouselError):
    """Handle Notion Carousel specific exceptions"""
    logger.error(
        "Notion carousel error",
        error_code=exc.error_code,
        message=exc.message,
        path=request.url.path
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": True,
            "error_code": exc.error_code,
            "message": exc.message,
            "timestamp": time.time()
        }
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    logger.error(
        "HTTP error",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.detail,
            "status_code": exc.status_code,
            "timestamp": time.time()
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(
        "Unexpected error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "message": "Internal server error",
            "timestamp": time.time()
        }
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Notion Carousel",
        "version": config.version,
        "status": "running",
        "docs_url": "/docs" if config.is_development else None
    }


@app.get("/version")
async def version():
    """Get application version"""
    return {
        "version": config.version,
        "environment": config.environment
    }
