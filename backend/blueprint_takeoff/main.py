"""
Blueprint Takeoff Backend API

FastAPI application for deterministic residential material takeoffs.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.takeoff import router as takeoff_router
from .core.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="""
## Blueprint Takeoff API

Deterministic quantity takeoff for residential construction.

### Core Principle: Same Inputs, Same Numbers

Every quantity comes from a documented formula over the building
parameters and a versioned material catalog:
- Net quantity before waste
- Waste-adjusted purchase quantity
- Per-line confidence

### Capabilities

- **Takeoff**: 11 trades from foundation to finishes
- **Audit**: 7-layer validation with a 0-100 score and A-D grade
- **Edits**: quantity changes and removals with an immediate re-audit
- **Export**: CSV, Excel and estimate drafts
- **AI Review**: optional advisory second pass (Anthropic)
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API routers
app.include_router(takeoff_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Deterministic residential material takeoff API",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {
        "status": "ok",
        "app": settings.app_name,
        "version": settings.app_version,
    }
