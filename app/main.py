"""Main FastAPI application for portfolio analytics."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .routers import analytics, ai, health
from .services.positions import PositionProviderError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        *([logging.FileHandler(settings.log_file)] if settings.log_file else [])
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info(
        f"Starting Portfolio Analytics API (positions from {settings.position_source}, "
        f"base currency {settings.base_currency})"
    )
    yield
    logger.info("Shutting down Portfolio Analytics API")


# Create FastAPI app
app = FastAPI(
    title="Portfolio Analytics API",
    description="Concentration risk, diversification and insights for an investment portfolio",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else ["https://yourdomain.com"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PositionProviderError)
async def position_provider_error_handler(request: Request, exc: PositionProviderError):
    """Holdings retrieval failed upstream of the analytics engine."""
    logger.error(f"Position provider failed for {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# Include routers
app.include_router(health.router)
app.include_router(analytics.router)
app.include_router(ai.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Portfolio Analytics API",
        "version": __version__,
        "status": "operational",
        "base_currency": settings.base_currency,
        "position_source": settings.position_source
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
