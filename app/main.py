"""
Main FastAPI application entry point.
"""

from fastapi import FastAPI

from app.config import get_settings
from app.api import router as api_router
from app.logging_config import configure_logging

settings = get_settings()

configure_logging()

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Mortgage and investment calculators",
    version="0.1.0",
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}
