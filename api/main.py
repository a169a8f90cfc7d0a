"""
FastAPI application exposing zip code weather lookups.
"""
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.metrics import (
    cache_entries_gauge,
    get_content_type,
    get_metrics,
    health_check_counter,
    request_counter,
    request_duration,
    requests_remaining_gauge,
    set_app_info,
    weather_lookup_counter,
)
from weather_lookup.cache import ResponseCache
from weather_lookup.errors import WeatherLookupError
from weather_lookup.provider import OpenWeatherProvider
from weather_lookup.rate_limiter import RateLimiter
from weather_lookup.service import WeatherLookupService

from .config import Settings, load_settings
from .logging_config import log_request, setup_logging

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str
    message: str


class ApiUsageResponse(BaseModel):
    requestsUsed: int
    requestsRemaining: int
    maxRequests: int
    resetTime: str
    cacheSize: int
    status: str


def build_lookup_service(settings: Settings) -> WeatherLookupService:
    """Wire provider, rate limiter and cache from settings."""
    provider = OpenWeatherProvider(
        api_key=settings.openweather_api_key,
        base_url=settings.openweather_base_url,
        timeout=settings.provider_timeout_seconds,
    )
    return WeatherLookupService(
        provider=provider,
        rate_limiter=RateLimiter(max_requests=settings.max_daily_requests),
        cache=ResponseCache(
            ttl=timedelta(seconds=settings.cache_ttl_seconds),
            max_entries=settings.cache_max_entries,
        ),
    )


def get_lookup_service(request: Request) -> WeatherLookupService:
    return request.app.state.lookup_service


def _record_service_state(service: WeatherLookupService) -> None:
    limiter = service.rate_limiter
    requests_remaining_gauge.set(max(0, limiter.max_requests - limiter.request_count))
    cache_entries_gauge.set(service.cache.size())


def _endpoint_label(path: str) -> str:
    """Normalize endpoint for metrics (remove dynamic parts)."""
    if path.startswith("/weather/"):
        return "/weather"
    if path in ("/health", "/api-usage", "/metrics"):
        return path
    return "other"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan event handler."""
    logger.info("Weather API starting up")

    settings: Settings = app.state.settings
    if settings.openweather_api_key:
        logger.info("OPENWEATHER_API_KEY is configured")
    else:
        logger.warning(
            "OPENWEATHER_API_KEY is not set; weather lookups will fail until it is"
        )

    logger.info(
        f"Configuration: max_daily_requests={settings.max_daily_requests}, "
        f"cache_ttl_seconds={settings.cache_ttl_seconds}, "
        f"provider_timeout_seconds={settings.provider_timeout_seconds}"
    )

    set_app_info(version=APP_VERSION, environment=os.getenv("DEPLOYMENT_ENV", "local"))
    _record_service_state(app.state.lookup_service)

    yield

    logger.info("Weather API shutting down")


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[WeatherLookupService] = None,
) -> FastAPI:
    """
    Create the application.

    The lookup service is built once here and shared by every request
    through ``app.state``.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Weather API",
        description="Current weather by US zip code",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.lookup_service = service or build_lookup_service(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Collect Prometheus metrics for HTTP requests."""
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        endpoint = _endpoint_label(request.url.path)
        request_counter.labels(
            method=request.method, endpoint=endpoint, status_code=response.status_code
        ).inc()
        request_duration.labels(method=request.method, endpoint=endpoint).observe(
            duration
        )
        return response

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        health_check_counter.labels(status="ok").inc()
        return HealthResponse(status="OK", message="Weather API is running")

    @app.get("/metrics")
    def metrics_endpoint():
        """Prometheus metrics endpoint."""
        return Response(content=get_metrics(), media_type=get_content_type())

    @app.get("/api-usage", response_model=ApiUsageResponse)
    def api_usage(service: WeatherLookupService = Depends(get_lookup_service)):
        """Report rate limit usage and cache size without performing a lookup."""
        usage = service.usage()
        _record_service_state(service)
        return ApiUsageResponse(**usage)

    @app.get("/weather/{zip_code}")
    def get_weather(
        zip_code: str, service: WeatherLookupService = Depends(get_lookup_service)
    ) -> Dict[str, Any]:
        """Current weather for a US zip code."""
        request_id = str(uuid.uuid4())
        start_time = time.time()

        try:
            result = service.lookup(zip_code)
        except WeatherLookupError as e:
            duration_ms = int((time.time() - start_time) * 1000)
            weather_lookup_counter.labels(outcome=e.error_type).inc()
            log_request(
                logger,
                request_id,
                "weather_lookup",
                duration_ms,
                "error",
                f"Lookup failed: {e.error_type}",
                zip_code=zip_code,
            )
            raise
        except Exception as e:
            weather_lookup_counter.labels(outcome="internal_error").inc()
            logger.exception(
                f"Unexpected error in weather lookup: {e}",
                extra={"request_id": request_id, "zip_code": zip_code},
            )
            raise WeatherLookupError() from e
        finally:
            _record_service_state(service)

        duration_ms = int((time.time() - start_time) * 1000)
        outcome = "cache_hit" if result["fromCache"] else "fetched"
        weather_lookup_counter.labels(outcome=outcome).inc()
        log_request(
            logger,
            request_id,
            "weather_lookup",
            duration_ms,
            "success",
            "Lookup completed successfully",
            zip_code=zip_code,
            outcome=outcome,
        )
        return result

    @app.exception_handler(WeatherLookupError)
    async def lookup_error_handler(request: Request, exc: WeatherLookupError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unknown routes and methods are reported as a plain 404."""
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": "Route not found"})

        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=app.state.settings.port,
        log_level="info",
        reload=False,
    )
