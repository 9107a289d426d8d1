"""
Voice Form Filler - Backend Application

FastAPI application for filling uploaded HTML forms by voice.
Provides endpoints for form upload, region editing, voice interpretation,
image attachment and export.

Features:
    - Blank detection and editable region conversion with BeautifulSoup
    - Voice command interpretation with OpenAI chat completions
    - Inline image embedding as data URLs
    - HTML, XLSX (openpyxl) and print-ready exports

Run:
    python main.py
    # or
    uvicorn main:app --reload
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import uvicorn

from config.settings import settings
from utils.logging import setup_logging, get_logger
from utils.exceptions import FormFillError
from utils.rate_limit import limiter, rate_limit_exceeded_handler

# Import Routers
from routers import forms, voice_agent

# Initialize logging
setup_logging()
logger = get_logger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events:
        - Startup: Report configuration
        - Shutdown: Log exit
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    if settings.OPENAI_API_KEY:
        logger.info("OpenAI API key configured")
    else:
        logger.warning("OPENAI_API_KEY not set; voice commands fall back to raw transcripts")

    yield

    # Shutdown
    logger.info("Shutting down application")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title=settings.APP_NAME,
    description="Voice-driven HTML form filling API",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Attach rate limiter to app state
app.state.limiter = limiter


# =============================================================================
# Middleware
# =============================================================================

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip Compression
app.add_middleware(GZipMiddleware, minimum_size=500)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(FormFillError)
async def formfill_exception_handler(request: Request, exc: FormFillError):
    """
    Handle custom FormFill exceptions.

    Returns standardized error response with appropriate status code.
    """
    logger.error(f"{type(exc).__name__}: {exc.message}", extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler: log the traceback, answer 500 with the message."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc)}
    )


# Rate limit exceeded handler
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# =============================================================================
# Routers
# =============================================================================

app.include_router(voice_agent.router)
app.include_router(forms.router)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint - basic health check.

    Returns:
        dict: Simple status message
    """
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Detailed health check endpoint.

    Checks:
        - API key configuration
        - Remote voice agent configuration
        - Lazy-loaded services status

    Returns:
        dict: Health status with component details
    """
    from core.dependencies import get_initialized_services

    return {
        "status": "healthy",
        "components": {
            "openai_configured": bool(settings.OPENAI_API_KEY),
            "remote_voice_agent": settings.VOICE_AGENT_URL is not None,
        },
        "services_loaded": get_initialized_services(),
        "version": settings.APP_VERSION
    }


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
