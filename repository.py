"""Data access for the `products` table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from db import Database, Row
from models.product import Product

QUERY_CREATE_PRODUCT = """
    INSERT INTO products (name, category, quantity, unit, price, expiry_date, created_at, updated_at)
    VALUES (%s, %s, %s, %s, %s, %s, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
"""

QUERY_GET_PRODUCT_BY_ID = """
    SELECT id, name, category, quantity, unit, price, expiry_date, created_at, updated_at
    FROM products
    WHERE id = %s
"""

QUERY_GET_PRODUCTS = """
    SELECT id, name, category, quantity, unit, price, expiry_date, created_at, updated_at
    FROM products
    ORDER BY id
"""

QUERY_UPDATE_PRODUCT = """
    UPDATE products
    SET name = %s, category = %s, quantity = %s, unit = %s, price = %s, expiry_date = %s,
        updated_at = CURRENT_TIMESTAMP
    WHERE id = %s
"""

QUERY_DELETE_PRODUCT = """
    DELETE FROM products WHERE id = %s
"""


class RepositoryError(Exception):
    """Base class for product store failures."""


class PersistenceError(RepositoryError):
    """The database call or the row mapping for `operation` failed."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"failed to {operation}: {cause}")
        self.operation = operation
        self.__cause__ = cause


class ProductNotFoundError(RepositoryError):
    def __init__(self, product_id: int):
        super().__init__(f"product {product_id} not found")
        self.product_id = product_id


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC for binding; naive input is taken to already be UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_db_datetime(value):
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def row_to_product(row: Row) -> Product:
    """
    Convert a `products` row into a Product. Stored datetimes are naive UTC
    and come back UTC-aware; a NULL expiry_date stays None.
    """
    return Product(
        id=row["id"],
        name=row["name"],
        category=row["category"],
        quantity=row["quantity"],
        unit=row["unit"],
        price=row["price"],
        expiry_date=_from_db_datetime(row.get("expiry_date")),
        created_at=_from_db_datetime(row["created_at"]),
        updated_at=_from_db_datetime(row["updated_at"]),
    )


class ProductRepository:
    """Issues parameterized SQL for product operations against a Database handle."""

    def __init__(self, db: Database):
        self.db = db

    def create(
        self,
        name: str,
        category: str,
        unit: str,
        quantity: int,
        price: float,
        expiry_date: Optional[datetime] = None,
    ) -> int:
        """Insert a product and return its generated id."""
        try:
            result = self.db.execute(
                QUERY_CREATE_PRODUCT,
                (name, category, quantity, unit, price, to_db_datetime(expiry_date)),
            )
        except Exception as e:
            logger.error("create product failed: {}", e)
            raise PersistenceError("create product", e) from e

        logger.info("Created product {} ({})", result.lastrowid, name)
        return result.lastrowid

    def get_by_id(self, product_id: int) -> Product:
        try:
            row = self.db.query_row(QUERY_GET_PRODUCT_BY_ID, (product_id,))
            product = row_to_product(row) if row is not None else None
        except Exception as e:
            logger.error("get product {} failed: {}", product_id, e)
            raise PersistenceError("get product", e) from e

        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def get_all(self) -> List[Product]:
        # a single bad row fails the whole listing
        try:
            rows = self.db.query(QUERY_GET_PRODUCTS)
            return [row_to_product(row) for row in rows]
        except Exception as e:
            logger.error("list products failed: {}", e)
            raise PersistenceError("get products", e) from e

    def update(
        self,
        product_id: int,
        name: str,
        category: str,
        unit: str,
        quantity: int,
        price: float,
        expiry_date: Optional[datetime] = None,
    ) -> None:
        """
        Replace every mutable field of a product and refresh updated_at.
        Updating an id that does not exist affects zero rows and is not an error.
        """
        try:
            result = self.db.execute(
                QUERY_UPDATE_PRODUCT,
                (name, category, quantity, unit, price, to_db_datetime(expiry_date), product_id),
            )
        except Exception as e:
            logger.error("update product {} failed: {}", product_id, e)
            raise PersistenceError("update product", e) from e

        logger.info("Updated product {} ({} row(s))", product_id, result.rowcount)

    def delete(self, product_id: int) -> None:
        """Delete a product. Deleting an id that does not exist is not an error."""
        try:
            result = self.db.execute(QUERY_DELETE_PRODUCT, (product_id,))
        except Exception as e:
            logger.error("delete product {} failed: {}", product_id, e)
            raise PersistenceError("delete product", e) from e

        logger.info("Deleted product {} ({} row(s))", product_id, result.rowcount)
