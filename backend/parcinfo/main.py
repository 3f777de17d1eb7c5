from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from parcinfo import __version__
from parcinfo.api.errors import register_exception_handlers
from parcinfo.api.v1.router import api_router
from parcinfo.core.config import settings
from parcinfo.core.database import close_db, init_db
from parcinfo.core.logging_config import logger
from parcinfo.core.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from parcinfo.core.rate_limiter import limiter
from parcinfo.core.session_store import build_session_store
from parcinfo.db.seed_data import seed_if_empty


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    await init_db()
    logger.info("[Startup] Database tables ready")

    if settings.should_seed_demo_data and await seed_if_empty():
        logger.info("[Startup] Demo data loaded")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await app.state.session_store.close()
    await close_db()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Computer inventory and access management across establishments",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # Built here rather than in lifespan so the store exists even without startup events
    app.state.session_store = build_session_store(settings)
    app.state.limiter = limiter

    register_exception_handlers(app)

    # Middleware (order matters - last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=1024 * 1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness check"""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": __version__,
            "environment": settings.ENVIRONMENT,
        }

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run(
        "parcinfo.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
