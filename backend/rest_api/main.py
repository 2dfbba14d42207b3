"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.admin import router as admin_router
from rest_api.routers.health import router as health_router
from shared.config.settings import settings


# Create FastAPI application
app = FastAPI(
    title="Retail Ops REST API",
    description="Multi-tenant retail back-office listing API",
    version="0.1.0",
    lifespan=lifespan,
)

# Security headers, content-type validation and request correlation
register_middlewares(app)

# CORS middleware for dashboard access
configure_cors(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(admin_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
