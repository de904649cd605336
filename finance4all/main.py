import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from finance4all.auth import TokenVerifier, FirebaseTokenVerifier
from finance4all.config import Settings, get_settings
from finance4all.db.core import Database
from finance4all.errors import ErrorReporter, register_exception_handlers
from finance4all.logging_config import setup_logging, get_logger, RequestLoggingMiddleware
from finance4all.routers.users import router as users_router
from finance4all.routers.accounts import router as accounts_router
from finance4all.routers.categories import router as categories_router
from finance4all.routers.transactions import router as transactions_router
from finance4all.routers.budgets import router as budgets_router
from finance4all.routers.projections import router as projections_router
from finance4all.routers.analytics import router as analytics_router


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    token_verifier: Optional[TokenVerifier] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the API.

    The database handle and the token verifier are created at startup
    unless they are passed in, and live on ``app.state`` until shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(
            app_log_level=settings.APP_LOG_LEVEL,
            third_party_log_level=settings.THIRD_PARTY_LOG_LEVEL,
            log_file=settings.LOG_FILE,
        )
        app.state.db = database or Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        app.state.db.create_all()
        app.state.token_verifier = token_verifier or FirebaseTokenVerifier(settings)
        logger.info("%s %s starting (%s)", settings.APP_NAME, settings.VERSION, settings.ENVIRONMENT)
        yield
        logger.info("%s shutting down", settings.APP_NAME)
        app.state.db.dispose()

    app = FastAPI(title="Finance4All API", version=settings.VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.error_reporter = ErrorReporter()
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(users_router)
    app.include_router(accounts_router)
    app.include_router(categories_router)
    app.include_router(transactions_router)
    app.include_router(budgets_router)
    app.include_router(projections_router)
    app.include_router(analytics_router)

    @app.get("/health")
    def health(request: Request):
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/")
    def read_root():
        return {
            "message": "Welcome to Finance4All API",
            "version": settings.VERSION,
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "users": "/users",
                "accounts": "/accounts",
                "categories": "/categories",
                "transactions": "/transactions",
                "budgets": "/budgets",
                "projections": "/projections",
                "analytics": "/analytics",
            },
        }

    @app.get("/hello")
    def hello():
        return {"message": "Welcome to Finance4All API!"}

    return app


app = create_app()
