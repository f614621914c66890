from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from core.config import Settings, cors_origins, load_settings
from core.db import Database, get_db
from core.errors import ConfigError, ServiceError, register_exception_handlers
from core.log import configure_logging
from people import router as people_router

logger = logging.getLogger(__name__)

INDEX_HTML = Path(people_router.__file__).resolve().parent / "static" / "index.html"


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the application.

    `settings` and `database` are resolved at startup when omitted, so
    importing this module needs no environment.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            if database is not None:
                # A supplied store already carries its own connection settings.
                resolved = settings or Settings()
                db = database
            else:
                resolved = settings or load_settings()
                db = Database(resolved)
            configure_logging(resolved.log_level)

            # The store must be ready before the server accepts connections.
            await db.initialize()
        except ServiceError as exc:
            logger.error("startup_failed error=%s", exc)
            raise
        app.state.db = db
        try:
            yield
        finally:
            logger.info("shutting_down")
            await db.close()

    app = FastAPI(title="people-service", lifespan=lifespan)

    origins = list(settings.cors_origins if settings else cors_origins())
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(people_router.router, tags=["people"])

    @app.get("/health")
    async def health(db: Database = Depends(get_db)) -> dict:
        await db.ping()
        return {"status": "ok", "database": "ok"}

    @app.get("/", include_in_schema=False)
    def root() -> FileResponse:
        return FileResponse(INDEX_HTML, media_type="text/html")

    return app


app = create_app()


def run() -> None:
    """
    Console entry point: `people-service`.
    """
    try:
        settings = load_settings()
    except ConfigError as exc:
        configure_logging("INFO")
        logger.error("startup_failed error=%s", exc)
        sys.exit(1)

    configure_logging(settings.log_level)

    import uvicorn

    logger.info("starting host=%s port=%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
