"""
Application factory.

Wires repositories, use cases, middleware and routers into a FastAPI app.
"""
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from config.settings import Settings, get_settings
from internal.infrastructure.postgres import (
    PostgresAdminRepository,
    PostgresAnalyticsRepository,
    PostgresCategoryRepository,
    PostgresProductRepository,
    create_pool,
)
from internal.transport.http.dependencies import set_dependencies
from internal.transport.http.errors import register_exception_handlers
from internal.transport.http.middleware import MetricsMiddleware, RateLimitMiddleware
from internal.transport.http.v1.admin import router as admin_router
from internal.transport.http.v1.auth import router as auth_router
from internal.transport.http.v1.categories import router as categories_router
from internal.transport.http.v1.handlers import router as products_router
from internal.transport.http.v1.tracking import router as tracking_router
from internal.usecase.admin_auth import AdminAuthService
from internal.usecase.analytics import AnalyticsService
from internal.usecase.catalog_service import CatalogService
from internal.usecase.category_service import CategoryService
from internal.usecase.create_product import CreateProductUseCase
from internal.usecase.export_products import ExportProductsUseCase
from internal.usecase.search_products import SearchProductsUseCase
from internal.usecase.track_engagement import TrackClickUseCase, TrackConversionUseCase
from internal.usecase.update_product import (
    BulkDeleteProductsUseCase,
    DeleteProductUseCase,
    UpdateProductUseCase,
)
from pkg.logger.logger import get_logger, set_request_id
from pkg.resilience.rate_limiter import IPRateLimiter


logger = get_logger(__name__)


def build_services(pool, settings: Settings) -> dict:
    """
    Wire repositories and use cases on top of a connection pool.

    Args:
        pool: asyncpg connection pool.
        settings: Application settings.

    Returns:
        Keyword arguments for set_dependencies.
    """
    product_repository = PostgresProductRepository(pool)
    category_repository = PostgresCategoryRepository(pool)
    admin_repository = PostgresAdminRepository(pool)
    analytics_repository = PostgresAnalyticsRepository(pool)

    return {
        "create_use_case": CreateProductUseCase(repository=product_repository),
        "update_use_case": UpdateProductUseCase(repository=product_repository),
        "delete_use_case": DeleteProductUseCase(repository=product_repository),
        "bulk_delete_use_case": BulkDeleteProductsUseCase(repository=product_repository),
        "export_use_case": ExportProductsUseCase(repository=product_repository),
        "search_use_case": SearchProductsUseCase(repository=product_repository),
        "catalog_service": CatalogService(repository=product_repository),
        "track_click_use_case": TrackClickUseCase(repository=product_repository),
        "track_conversion_use_case": TrackConversionUseCase(repository=product_repository),
        "category_service": CategoryService(
            repository=category_repository,
            product_repository=product_repository,
            count_active_only=settings.category_count_active_only,
        ),
        "analytics_service": AnalyticsService(
            repository=analytics_repository,
            product_repository=product_repository,
        ),
        "auth_service": AdminAuthService(
            repository=admin_repository,
            secret=settings.jwt_secret,
            token_ttl_seconds=settings.token_ttl_seconds,
            password_hash_iterations=settings.password_hash_iterations,
        ),
    }


def create_app(settings: Optional[Settings] = None, use_lifespan: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings, defaults to get_settings().
        use_lifespan: Open the database pool on startup; tests disable it
            and register their own dependencies.

    Returns:
        Configured application.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager.

        Handles startup and shutdown of resources.
        """
        logger.info("Starting storefront API...", environment=settings.environment)

        try:
            db_pool = await create_pool(
                settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
            )
            logger.info("Database pool created")
        except Exception as e:
            logger.error("Failed to create database pool", error=str(e))
            raise

        services = build_services(db_pool, settings)
        set_dependencies(**services)

        await services["auth_service"].ensure_default_admin(
            settings.admin_email,
            settings.admin_password,
        )

        logger.info("Storefront API started successfully")

        yield

        logger.info("Shutting down storefront API...")
        await db_pool.close()
        logger.info("Storefront API shutdown complete")

    set_dependencies(
        cookie_name=settings.cookie_name,
        cookie_domain=settings.cookie_domain,
        cookie_secure=settings.is_production,
        environment=settings.environment,
    )

    app = FastAPI(
        title="Storefront API",
        description="Affiliate storefront catalog, tracking and back office",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    register_exception_handlers(app, expose_internal_errors=not settings.is_production)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Rate limiting middleware
    app.add_middleware(
        RateLimitMiddleware,
        limiter=IPRateLimiter(
            requests_per_minute=settings.max_requests_per_minute,
            strict_requests=settings.auth_max_requests,
            strict_window_seconds=settings.auth_window_seconds,
        ),
        trusted_proxies=settings.trusted_proxies,
    )

    # Metrics middleware
    app.add_middleware(MetricsMiddleware)

    # Request ID middleware
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        """
        Add request ID to context for logging and tracing.
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

    # Include routers
    app.include_router(products_router)
    app.include_router(tracking_router)
    app.include_router(categories_router)
    app.include_router(admin_router)
    app.include_router(auth_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "service": settings.app_name}

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics in text format."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app
