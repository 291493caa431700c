from __future__ import annotations

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """
    An item in the inventory. Used as the request body, the row mapping and
    the response. Every field has a default, so a body that leaves a field
    out decodes to the zero value for it.
    """
    id: int = Field(
        default=0,
        description="Server-generated Product ID. Ignored on input.",
        json_schema_extra={"example": 1},
    )
    name: str = Field(
        default="",
        description="Product name.",
        json_schema_extra={"example": "Milk"},
    )
    category: str = Field(
        default="",
        description="Product category (e.g. Dairy, Meat, Grains).",
        json_schema_extra={"example": "Dairy"},
    )
    quantity: int = Field(
        default=0,
        description="Available stock.",
        json_schema_extra={"example": 10},
    )
    unit: str = Field(
        default="",
        description="Measurement unit (kg, liters, pieces).",
        json_schema_extra={"example": "Liter"},
    )
    price: float = Field(
        default=0.0,
        description="Price per unit.",
        json_schema_extra={"example": 2.5},
    )
    expiry_date: Optional[datetime] = Field(
        default=None,
        description="Expiration date, only for perishable goods. Omitted from responses when absent.",
        json_schema_extra={"example": "2025-12-31T00:00:00Z"},
    )
    created_at: Optional[datetime] = Field(
        default=None,
        description="Creation timestamp. Set by the server.",
        json_schema_extra={"example": "2025-09-30T10:20:30Z"},
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last update timestamp. Set by the server.",
        json_schema_extra={"example": "2025-09-30T12:00:00Z"},
    )

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {
                    "name": "Milk",
                    "category": "Dairy",
                    "quantity": 10,
                    "unit": "Liter",
                    "price": 2.5,
                    "expiry_date": "2025-12-31T00:00:00Z",
                }
            ]
        },
    )
