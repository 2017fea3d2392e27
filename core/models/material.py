# =============================================================================
# core/models/material.py - Material Inventory Schemas
# =============================================================================
# Inventory is organised as  brand -> category -> material.
# Brands are addressed by slug; categories carry the brand slug as text.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_BRAND_COLOR = "#3B82F6"
ERICSSON_CATEGORY_COLOR = "#3B82F6"
OTHER_CATEGORY_COLOR = "#DC2626"


class MaterialStatus(str, Enum):
    """Availability of a material item."""
    AVAILABLE = "available"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    DISCONTINUED = "discontinued"


class BrandCreate(BaseModel):
    """
    Request body for adding a brand.

    Example:
        {"name": "Ericsson"}  ->  slug "ericsson"
    """
    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    color: str | None = Field(default=None, max_length=20)


class CategoryCreate(BaseModel):
    """Request body for adding a category under a brand."""
    name: str | None = Field(default=None, max_length=255)
    brand: str | None = None
    description: str | None = None
    color: str | None = Field(default=None, max_length=20)


class CategoryUpdate(BaseModel):
    """Request body for editing a category."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    color: str | None = Field(default=None, max_length=20)


class MaterialCreate(BaseModel):
    """
    Request body for adding a material.

    Example:
        {"name": "RRU 4471", "category_id": "...", "quantity": 12}
    """
    name: str | None = Field(default=None, max_length=255)
    category_id: str | None = None
    brand: str | None = None
    description: str | None = None
    notes: str | None = None
    part_number: str | None = None
    quantity: int = Field(default=0, ge=0)
    unit: str = "pcs"
    location: str | None = None
    status: MaterialStatus = MaterialStatus.AVAILABLE


class MaterialUpdate(BaseModel):
    """Request body for editing a material; only provided fields change."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    category_id: str | None = None
    description: str | None = None
    notes: str | None = None
    part_number: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    unit: str | None = None
    location: str | None = None
    status: MaterialStatus | None = None
