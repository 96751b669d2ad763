"""Nodetree FastAPI application entry point.

Run with ``uvicorn nodetree.main:app`` or ``python -m nodetree.main``.
"""

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from nodetree.config import DEFAULT_CORS_ORIGINS, Settings, load_settings
from nodetree.db.connection import Database
from nodetree.nodes.router import get_node_service
from nodetree.nodes.router import router as nodes_router
from nodetree.nodes.service import NodeService
from nodetree.nodes.store import NodeStore

VERSION = "0.1.0"

logger = logging.getLogger("nodetree")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Without explicit settings, the environment (and .env) is read at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the database once and wire the service into the routes."""
        active = settings or load_settings()
        logging.basicConfig(
            level=active.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        db = await Database.connect(active.db_path)
        logger.info("Database ready at %s", active.db_path)

        store = NodeStore(db, create_retries=active.create_retries)
        service = NodeService(store, default_language=active.default_language)
        app.dependency_overrides[get_node_service] = lambda: service

        app.state.db = db
        app.state.settings = active
        yield

        app.dependency_overrides.pop(get_node_service, None)
        await db.close()
        logger.info("Database closed")

    app = FastAPI(
        title="Nodetree",
        description=(
            "Forest of numbered nodes: sequential ids, localized titles,"
            " bounded-depth subtree queries and orphan-safe deletion"
        ),
        version=VERSION,
        lifespan=lifespan,
        docs_url="/api-docs",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins if settings else DEFAULT_CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    app.include_router(nodes_router)

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", "version": VERSION}

    return app


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log method, path, status and duration of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    if response.status_code >= 500:
        level = logging.ERROR
    elif response.status_code >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.log(
        level,
        "%s %s -> %d (%.1fms)",
        request.method, request.url.path, response.status_code, duration_ms,
    )
    return response


app = create_app()


def main() -> None:
    """Serve with uvicorn using settings from the environment."""
    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
