from __future__ import annotations
import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import orders
import products
from config import Settings, get_settings
from database import Store, get_store
from errors import ShopError
from seed import seed_products

logger = logging.getLogger(__name__)

START_TIME = time.monotonic()


class SeedResponse(BaseModel):
    inserted: int


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def error_body(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}


def install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
        extra = {"errors": exc.errors} if exc.errors else {}
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, **extra))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = []
        for err in exc.errors():
            # Drop the leading "body"/"query"/"path" segment
            field = ".".join(str(part) for part in err["loc"][1:])
            messages.append(f"{field}: {err['msg']}" if field else err["msg"])
        return JSONResponse(status_code=400, content=error_body("Validation failed", errors=messages))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content=error_body("Route not found", path=request.url.path),
            )
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))

    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = error_body("Internal Server Error", error=str(exc))
        if settings.is_development:
            body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=body)

    app.add_exception_handler(PyMongoError, internal_error)
    app.add_exception_handler(Exception, internal_error)


def create_app(store: Optional[Store] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        logger.info("Server running in %s mode", settings.ENVIRONMENT)
        owned = app.state.store is None
        if owned:
            app.state.store = Store.connect(settings)
        try:
            await app.state.store.ensure_indexes()
        except PyMongoError as e:
            logger.error("Could not create indexes: %s", e)
        yield
        if owned:
            app.state.store.close()

    app = FastAPI(title="Peachwood Jewellery API", version="1.0.0", lifespan=lifespan)
    app.state.store = store
    app.state.settings = settings

    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["*"],
        )

    install_error_handlers(app, settings)
    app.include_router(products.router)
    app.include_router(orders.router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to Peachwood Jewellery API",
            "version": "1.0.0",
            "endpoints": {
                "products": {
                    "getAll": "GET /api/products",
                    "getById": "GET /api/products/:id",
                    "getByCategory": "GET /api/products/category/:category",
                },
                "orders": {
                    "create": "POST /api/orders",
                    "getById": "GET /api/orders/:id",
                    "getByNumber": "GET /api/orders/number/:orderNumber",
                },
            },
        }

    @app.get("/health")
    async def health():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.monotonic() - START_TIME,
        }

    @app.get("/test")
    async def test(store: Store = Depends(get_store)):
        try:
            colls = await store.collection_names()
            return {
                "backend": "✅ Running",
                "database": "✅ Available",
                "database_name": store.name,
                "connection_status": "Connected",
                "collections": colls,
            }
        except PyMongoError as e:
            return {"backend": "✅ Running", "database": "❌ Not Available", "error": str(e)}

    @app.post("/api/seed", response_model=SeedResponse)
    async def seed(store: Store = Depends(get_store)):
        # Inserts only when the product collection is empty
        return SeedResponse(inserted=await seed_products(store))

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().PORT)
