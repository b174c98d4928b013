from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from autoexpense.api.middleware.error_handler import (
    handle_domain_error,
    handle_generic_error,
    handle_validation_error,
)
from autoexpense.api.middleware.logging import RequestLoggingMiddleware
from autoexpense.api.v1 import router as v1_router
from autoexpense.api.v1.health import router as health_router
from autoexpense.config import settings
from autoexpense.container import AppContainer
from autoexpense.core.exceptions import AutoExpenseError
from autoexpense.core.logging import setup_logging
from autoexpense.db.session import AsyncSessionLocal, async_engine, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.log_level, settings.log_json)
    await init_db(async_engine)
    container = AppContainer(settings, AsyncSessionLocal)
    await container.start()
    app.state.container = container
    yield
    # Shutdown
    await container.aclose()
    await async_engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Auto Expense API",
        description="Transaction alert ingestion with local or spreadsheet storage",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(AutoExpenseError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()
