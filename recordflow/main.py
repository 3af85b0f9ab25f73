"""
Recordflow Service - FastAPI Application

Converts recorded browser scripts into self-healing locators, named
interaction methods, step descriptions and a module-partitioned page architecture.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from recordflow import __version__
from recordflow.config import settings, log_settings
from recordflow.api.routes import health, convert

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler: logs effective configuration on startup."""
    logger.info("=" * 60)
    logger.info("Starting Recordflow Service")
    logger.info("=" * 60)

    log_settings()

    logger.info("=" * 60)
    logger.info(f"Service ready on port {settings.SERVICE_PORT}")
    logger.info("=" * 60)

    yield

    logger.info("Shutdown complete")


API_PREFIX = settings.API_PREFIX

# Create FastAPI application
app = FastAPI(
    title="Recordflow Service",
    description="""
Turns recorded browser scripts into test-automation artifacts.

## Pipeline

| Stage | Responsibility |
|-------|---------------|
| Extraction | Awaited locate-and-act calls to normalized actions |
| Patterns | Dropdown, modal, login, search and navigation idioms |
| Context | Element kind, owning module, purpose |
| Locators | Ranked, self-healing strategies with stability scores |
| Naming | Unique element and method names per module |
| Organization | Shared navigation component plus one page per module |
""",
    version=__version__,
    lifespan=lifespan,
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
    openapi_url=f"{API_PREFIX}/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(convert.router, prefix=API_PREFIX, tags=["Conversion"])


# Root health check (for direct container health checks)
@app.get("/health")
async def root_health():
    """Root health check for container/load balancer"""
    return {"status": "UP", "service": settings.SERVICE_NAME}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Recordflow Service",
        "version": __version__,
        "port": settings.SERVICE_PORT,
        "endpoints": {
            "health": f"{API_PREFIX}/health",
            "convert": f"{API_PREFIX}/convert",
            "validate": f"{API_PREFIX}/validate",
            "docs": f"{API_PREFIX}/docs"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "recordflow.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=True
    )
