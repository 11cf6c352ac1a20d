"""FastAPI application factory"""

import uvicorn
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from agrigrow_lending.api.middleware import RequestIDMiddleware, MetricsMiddleware
from agrigrow_lending.api.v1 import schedules, servicing, risk
from agrigrow_lending.infrastructure.observability.logging import setup_logging
from agrigrow_lending.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="AgriGrow Lending Service",
        description="Repayment scheduling, overdue tracking and risk scoring for agricultural microloans",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(schedules.router, prefix="/v1", tags=["schedules"])
    app.include_router(servicing.router, prefix="/v1", tags=["servicing"])
    app.include_router(risk.router, prefix="/v1", tags=["risk"])

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn (the `agrigrow-lending` console script)"""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
