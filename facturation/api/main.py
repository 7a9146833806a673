"""
FastAPI application factory.

The lifespan brings the schema up to date before the pool opens and runs
the overdue sweep in the background when an interval is configured.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facturation import __version__
from facturation.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from facturation.api.middleware.error_handler import setup_exception_handlers
from facturation.api.middleware.logging import REQUEST_ID_HEADER, USER_ID_HEADER
from facturation.api.routes import (
    clients_router,
    health_router,
    invoice_status_router,
    invoices_router,
    line_items_router,
)
from facturation.config import configure_logging, get_logger, get_settings
from facturation.core.exceptions import ConfigurationError

logger = get_logger(__name__)


async def prepare_database() -> None:
    """Apply pending migrations, then open the shared pool."""
    from facturation.infrastructure.storage.sqlite import get_pool
    from facturation.infrastructure.storage.sqlite.migrations.migrator import (
        run_migrations,
    )

    results = await run_migrations()
    failed = [r.version for r in results if not r.success]
    if failed:
        raise ConfigurationError(
            f"Database migrations failed: {failed}",
            code="MIGRATION_FAILED",
            details={"versions": failed},
        )
    logger.info("database_initialized", applied=[r.version for r in results])

    await get_pool()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        environment=settings.environment,
    )

    try:
        await prepare_database()
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    app.state.sweep_scheduler = None
    interval = settings.billing.overdue_sweep_interval_seconds
    if interval > 0:
        from facturation.application.scheduler import OverdueSweepScheduler

        app.state.sweep_scheduler = OverdueSweepScheduler(interval_seconds=interval)
        app.state.sweep_scheduler.start()

    logger.info("application_started")
    try:
        yield
    finally:
        if app.state.sweep_scheduler is not None:
            await app.state.sweep_scheduler.stop()

        from facturation.infrastructure.storage.sqlite import close_pool

        await close_pool()
        logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the API with middleware, exception handlers and routers."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Invoices, line items and the invoice status workflow",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Last added is outermost, so unhandled errors are logged before conversion
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
            allow_headers=["Content-Type", REQUEST_ID_HEADER, USER_ID_HEADER],
            expose_headers=[REQUEST_ID_HEADER, "X-Response-Time"],
        )

    setup_exception_handlers(app)

    # The status router carries the fixed /overdue-sweep path and goes
    # before the id-parameterised invoice routes
    app.include_router(health_router)
    app.include_router(clients_router)
    app.include_router(invoice_status_router)
    app.include_router(invoices_router)
    app.include_router(line_items_router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        """Container liveness check."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


def main() -> None:
    """``facturation-api`` entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "facturation.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )


if __name__ == "__main__":
    main()
