from __future__ import annotations

import socket
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Path, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import Settings, load_settings
from db import Database, SQLiteDatabase, create_database
from logging_config import configure_logging
from models.health import Health
from models.product import Product
from repository import ProductNotFoundError, ProductRepository, RepositoryError


def get_repository(request: Request) -> ProductRepository:
    return request.app.state.repository


def _echo_replaced(product: Product, product_id: int) -> Product:
    # updated_at approximates the refresh the UPDATE just made
    now = datetime.now(timezone.utc)
    return product.model_copy(update={
        "id": product_id,
        "created_at": product.created_at or now,
        "updated_at": now,
    })


# -----------------------------------------------------------------------------
# Product endpoints
# -----------------------------------------------------------------------------

router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.post(
    "/",
    response_model=Product,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_product(product: Product, repo: ProductRepository = Depends(get_repository)):
    """Create a new product and return it as stored."""
    try:
        product_id = repo.create(
            product.name,
            product.category,
            product.unit,
            product.quantity,
            product.price,
            product.expiry_date,
        )
    except RepositoryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create product")

    try:
        return repo.get_by_id(product_id)
    except RepositoryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to retrieve created product")


@router.get("/", response_model=List[Product], response_model_exclude_none=True)
def list_products(repo: ProductRepository = Depends(get_repository)):
    """List every product."""
    try:
        return repo.get_all()
    except RepositoryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to retrieve products")


@router.get("/{product_id}", response_model=Product, response_model_exclude_none=True)
def get_product(
    product_id: int = Path(..., description="Product ID"),
    repo: ProductRepository = Depends(get_repository),
):
    """Get a specific product by ID."""
    try:
        return repo.get_by_id(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    except RepositoryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to retrieve product")


@router.put("/{product_id}", response_model=Product, response_model_exclude_none=True)
def replace_product(
    product: Product,
    product_id: int = Path(..., description="Product ID"),
    repo: ProductRepository = Depends(get_repository),
):
    """
    Replace a product entirely. Fields left out of the body are reset to their
    defaults. The response echoes the body with the path ID and a fresh
    updated_at; it is not re-read from the database.
    """
    try:
        repo.update(
            product_id,
            product.name,
            product.category,
            product.unit,
            product.quantity,
            product.price,
            product.expiry_date,
        )
    except RepositoryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update product")

    return _echo_replaced(product, product_id)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int = Path(..., description="Product ID"),
    repo: ProductRepository = Depends(get_repository),
):
    """Delete a product."""
    try:
        repo.delete(product_id)
    except RepositoryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete product")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Health endpoints
# ============================================================================

health_router = APIRouter(tags=["health"])


def _host_ip() -> str:
    try:
        return socket.gethostbyname(socket.gethostname())
    except socket.gaierror:
        return "127.0.0.1"


def make_health(echo: Optional[str], path_echo: Optional[str] = None) -> Health:
    return Health(
        status=200,
        status_message="OK",
        timestamp=datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
        ip_address=_host_ip(),
        echo=echo,
        path_echo=path_echo,
    )


@health_router.get("/health", response_model=Health)
def get_health_no_path(echo: str | None = Query(None, description="Optional echo string")):
    return make_health(echo=echo, path_echo=None)


@health_router.get("/health/{path_echo}", response_model=Health)
def get_health_with_path(
        path_echo: str = Path(...,
                              description="Required echo in the URL path"),
        echo: str | None = Query(None, description="Optional echo string"),
):
    return make_health(echo=echo, path_echo=path_echo)


async def invalid_request_handler(request: Request, exc: RequestValidationError):
    # malformed JSON, a body of the wrong shape and a non-integer ID all land here
    logger.debug("Rejected {} {}: {}", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request"},
    )


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """
    Build the application. `db` overrides the handle that `settings` would
    select, which is how tests plug in an in-memory SQLite database.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    if db is None:
        db = create_database(settings)
    elif isinstance(db, SQLiteDatabase):
        db.init_schema()

    app = FastAPI(
        title="Inventory Management API",
        description="FastAPI microservice for managing the products held in inventory",
        version="1.0.0",
    )
    app.state.repository = ProductRepository(db)

    # ============================================================================
    # CORS Middleware Configuration
    # ============================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, invalid_request_handler)
    app.include_router(health_router)
    app.include_router(router)

    return app



# -----------------------------------------------------------------------------
# Run the app
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=load_settings().port, reload=True)
