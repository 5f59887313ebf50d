"""FastAPI application for the style audit service."""

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .audit import router as audit_router

VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str


def create_app() -> FastAPI:
    """Build the API application."""
    app = FastAPI(
        title="Style Audit API",
        description="Typography, WCAG contrast and layout audits of rendered pages",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(audit_router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return HealthResponse(
            status="healthy",
            version=VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    return app


app = create_app()
