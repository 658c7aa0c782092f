"""
Main application entry point.
The app root owns the single Catalog instance and exposes it over HTTP.
"""
import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from catalog import __version__
from catalog.catalog import Catalog
from catalog.config import config
from catalog.errors import (
    InvalidProductError,
    InvalidQueryError,
    LoadError,
    NotFoundError,
    RetryExhaustedError,
    StorageError
)
from catalog.health import router as health_router
from catalog.logger import logger
from catalog.query import QuerySpec
from catalog.sentry import capture_retry_exhaustion, initialize_sentry
from catalog.utils.retry import async_retry


async def warm_cache(catalog: Catalog):
    """Load the snapshot at startup; an offline start is allowed and retried by later reads."""

    @async_retry(exceptions=(LoadError,))
    async def load_snapshot():
        return await catalog.get_snapshot()

    try:
        snapshot = await load_snapshot()
        logger.info(f"Catalog cache warm ({len(snapshot)} products)")
    except RetryExhaustedError as e:
        logger.warning(f"Starting with a cold catalog cache: {e}")
        capture_retry_exhaustion("warm_cache", config.MAX_RETRIES, str(e))


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").lower() in ("1", "true", "yes")


def _parse_int(value: Optional[str], name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidQueryError(f"{name} must be an integer, got {value!r}") from None


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        raise InvalidProductError("Request body must be a JSON object") from None


def create_app(catalog: Optional[Catalog] = None) -> FastAPI:
    """Build the FastAPI app around a catalog (built from config when omitted)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting catalog service")
        initialize_sentry()

        app.state.catalog = catalog or Catalog.from_config(config)
        await app.state.catalog.initialize()
        # Warm in the background so an offline upstream cannot hold up startup
        app.state.warmup = asyncio.create_task(warm_cache(app.state.catalog))

        yield

        logger.info("Shutting down catalog service")
        app.state.warmup.cancel()
        await asyncio.gather(app.state.warmup, return_exceptions=True)
        await app.state.catalog.close()

    app = FastAPI(
        title="Catalog Cache API",
        description="Product catalog served from a synchronized local cache",
        version=__version__,
        debug=config.DEBUG,
        lifespan=lifespan
    )
    app.include_router(health_router)

    @app.exception_handler(LoadError)
    async def load_error_handler(request: Request, exc: LoadError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidQueryError)
    @app.exception_handler(InvalidProductError)
    async def invalid_request_handler(request: Request, exc: Exception):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage error: {exc}")
        return JSONResponse(status_code=507, content={"detail": "Storage unavailable"})

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "Catalog Cache",
            "version": __version__,
            "status": "operational",
            "page_size_options": config.PAGE_SIZE_OPTIONS,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/api/v1/products")
    async def list_products(request: Request):
        params = request.query_params
        spec = QuerySpec(
            search_term=params.get("search", ""),
            sort_key=params.get("sort") or None,
            sort_descending=_parse_bool(params.get("desc")),
            page_index=_parse_int(params.get("page"), "page", 0),
            page_size=_parse_int(params.get("page_size"), "page_size", config.DEFAULT_PAGE_SIZE)
        )
        page = await request.app.state.catalog.query(spec)
        return page.to_dict()

    @app.get("/api/v1/products/{product_id}")
    async def get_product(product_id: int, request: Request):
        product = await request.app.state.catalog.get_product(product_id)
        return product.to_dict()

    @app.post("/api/v1/products", status_code=201)
    async def create_product(request: Request):
        draft = await _read_json(request)
        product = await request.app.state.catalog.create(draft)
        return product.to_dict()

    @app.patch("/api/v1/products/{product_id}")
    async def update_product(product_id: int, request: Request):
        patch = await _read_json(request)
        product = await request.app.state.catalog.update(product_id, patch)
        return product.to_dict()

    @app.delete("/api/v1/products/{product_id}", status_code=204)
    async def delete_product(product_id: int, request: Request):
        await request.app.state.catalog.delete(product_id)
        return Response(status_code=204)

    @app.post("/api/v1/cache/reset")
    async def reset_cache(request: Request):
        await request.app.state.catalog.reset()
        return {"cache": request.app.state.catalog.coordinator.state.value}

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
