from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

import aiohttp

from .config import settings
from .middleware.error_handler import register_error_handlers
from .monitoring.metrics import metrics_endpoint
from .routes.ai import router as ai_router
from .routes.health import router as health_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.api_title} with {len(settings.models)} models")
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not set; AI endpoints will answer 500")

    # One connection pool for all gateway attempts
    app.state.http_session = aiohttp.ClientSession()

    yield
    # Shutdown
    await app.state.http_session.close()
    logger.info(f"Shutting down {settings.api_title}")

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    debug=settings.debug,
    lifespan=lifespan
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(health_router)
app.include_router(ai_router)

if settings.enable_metrics:
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)

@app.get("/")
async def root():
    return {
        "message": f"{settings.api_title} API",
        "version": settings.api_version,
        "docs": "/docs"
    }
