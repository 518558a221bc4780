import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import Settings, get_settings
from core.database import build_engine, build_sessionmaker
from core.log import setup_logging
from services.siege_repository import SiegeRepository

from routes.sieges import router as sieges_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[SiegeRepository] = None,
) -> FastAPI:
    """
    Build the API. Pass ``repository`` to serve from an existing data source
    (tests); otherwise an engine is created from ``settings.DATABASE_URL``
    and disposed on shutdown.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    engine = None
    if repository is None:
        engine = build_engine(settings)
        repository = SiegeRepository(build_sessionmaker(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ANN201
        logger.info("%s %s ready", settings.APP_TITLE, settings.APP_VERSION)
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    # ───────────────── CORS ─────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ───────────────── ERRORS ─────────────────
    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "internal server error"})

    # ───────────────── HEALTH ─────────────────
    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "version": settings.APP_VERSION,
        }

    # ───────────────── ROUTERS ─────────────────
    app.include_router(sieges_router)

    return app


app = create_app()


# ───────────────── LOCAL RUN ─────────────────
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
