"""
Frontend Edge Service - Main Application
Proxies user and processing requests to the backend with structured logs and telemetry
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.models.outcomes import RequestLogRecord
from app.routes import health, load_test, processing, users
from app.utils.backend_client import BackendClient
from app.utils.logger import setup_logging
from app.utils.observability import ObservabilitySink, create_observability_sink

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events"""
    settings: Settings = app.state.settings
    settings.log_config()

    await app.state.backend_client.start()
    logger.info(
        "Frontend server started",
        port=settings.port,
        backend=settings.backend_url,
        otelEndpoint=settings.otel_exporter_otlp_endpoint
    )

    yield

    logger.info("Frontend server shutting down")
    await app.state.backend_client.stop()
    app.state.sink.shutdown()


def create_app(
    settings: Optional[Settings] = None,
    sink: Optional[ObservabilitySink] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the edge application.

    Args:
        settings: Configuration; read from the environment when omitted
        sink: Observability sink; built from settings when omitted
        transport: httpx transport for backend calls, used to stub the backend
    """
    settings = settings or get_settings()
    setup_logging(settings.logging_config_path, settings.log_level, settings.log_format)
    sink = sink or create_observability_sink(settings)

    app = FastAPI(
        title="Frontend Edge Service",
        description="Edge proxy in front of the backend service",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sink = sink
    app.state.backend_client = BackendClient(settings.backend_config(), sink=sink, transport=transport)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Trace and emit one request record per request, whatever the outcome"""
        sink: ObservabilitySink = request.app.state.sink
        start = time.perf_counter()
        status_code = 500
        with sink.server_span(request.method, request.url.path, request.headers) as span:
            try:
                response = await call_next(request)
                status_code = response.status_code
                return response
            finally:
                span.set_attribute("http.status_code", status_code)
                sink.record_request(RequestLogRecord(
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    client_address=request.client.host if request.client else "unknown",
                ))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unknown routes and unsupported methods are both reported as Not Found"""
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={"error": "Not Found", "path": request.url.path}
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Last-resort handler for failures escaping a route"""
        logger.error(
            "Unhandled error",
            error=str(exc),
            method=request.method,
            path=request.url.path,
            exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": str(exc)}
        )

    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(processing.router, prefix="/api", tags=["Processing"])
    app.include_router(load_test.router, prefix="/api", tags=["Load Test"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": settings.service_name,
            "version": settings.service_version,
            "message": "Welcome to Observability Stack Demo",
            "endpoints": {
                "health": "/health",
                "users": "/api/users",
                "user": "/api/users/:id",
                "process": "/api/process",
                "loadTest": "/api/load-test"
            }
        }

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
