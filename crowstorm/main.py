"""FastAPI app factory: static asset routes, health check and startup prefetch."""
from __future__ import annotations

import time
from collections.abc import Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from crowstorm import __version__
from crowstorm.api import router as asset_router
from crowstorm.domain.content_types import default_extension_table
from crowstorm.logging_conf import get_logger, setup_logging
from crowstorm.settings import Settings, load_settings
from prefetch import pipeline

# Configure logging before anything else.
setup_logging()
logger = get_logger("app")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="CrowStorm content server", version=__version__)

    # Read-only after this point; request threads share them without locks.
    app.state.settings = settings
    app.state.content_types = default_extension_table()
    app.state.prefetch_report = None

    @app.on_event("startup")
    async def _on_startup() -> None:
        logger.info(
            "startup",
            extra={"event": "startup", "asset_root": str(settings.asset_root)},
        )
        if not settings.prefetch_on_startup:
            return
        # Uvicorn binds its socket only after startup completes, so data is
        # in place before the first request. ConfigError aborts startup.
        app.state.prefetch_report = await run_in_threadpool(
            pipeline.run,
            settings.source_list,
            settings.data_dir,
            url_template=settings.query_url_template,
            timeout=settings.fetch_timeout,
            max_workers=settings.fetch_workers,
        )

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        logger.info("shutdown", extra={"event": "shutdown"})

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """JSON request logging with a correlation id.

        - Propagates an incoming X-Request-ID or mints one
        - Logs start and end events with method/path/status/elapsed_ms
        - Echoes X-Request-ID on the response
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        end: dict[str, object] = {
            "event": "request_end",
            "status_code": response.status_code,
            "elapsed_ms": round(elapsed_ms, 2),
            "request_id": request_id,
        }
        # Set by the asset routes: what was served, or why nothing was.
        asset = getattr(request.state, "asset", None)
        if asset is not None:
            end.update(
                asset_path=str(asset.path),
                asset_bytes=len(asset.body),
                content_type=asset.content_type,
            )
        rejection = getattr(request.state, "asset_rejection", None)
        if rejection:
            end["asset_rejection"] = rejection
        logger.info("request.end", extra=end)
        return response

    # Registered before the catch-all asset route.
    @app.get("/health", summary="Liveness/readiness check")
    async def health() -> JSONResponse:
        return JSONResponse(content={"ok": True})

    app.include_router(asset_router)

    return app


# ASGI entrypoint for uvicorn: `uvicorn crowstorm.main:app --port 18080`
app = create_app()
