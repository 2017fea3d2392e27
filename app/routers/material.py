# =============================================================================
# app/routers/material.py - Material Inventory Endpoints
# =============================================================================
# Brands, categories and material items.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.material import (
    BrandCreate,
    CategoryCreate,
    CategoryUpdate,
    MaterialCreate,
    MaterialUpdate,
)
from core.services.material_service import MaterialService

router = APIRouter()

CategoryId = Annotated[UUID, Path(description="Category UUID")]
MaterialId = Annotated[UUID, Path(description="Material UUID")]


# =============================================================================
# Brands
# =============================================================================

@router.get("/brands")
async def list_brands(user: AuthUser = Depends(get_current_user)):
    """
    All brands, newest first.

    `table_exists` is false (with no brands) when the brands table
    hasn't been created yet.
    """
    return MaterialService.list_brands()


@router.post("/brands", status_code=201)
async def create_brand(
    request: BrandCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Add a brand.

    Raises:
        400: Blank name
        409: A brand with the same slug exists
    """
    return {"brand": MaterialService.create_brand(user.id, request)}


@router.get("/brands/{slug}")
async def get_brand(
    slug: Annotated[str, Path(min_length=1, max_length=100, description="Brand slug")],
    user: AuthUser = Depends(get_current_user),
):
    """A brand by slug, or a placeholder for unknown slugs."""
    return {"brand": MaterialService.get_brand(slug)}


# =============================================================================
# Categories
# =============================================================================

@router.get("/categories")
async def list_categories(
    brand: Annotated[str | None, Query(description="Brand slug")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Categories of a brand, oldest first.

    Raises:
        400: No brand given
    """
    return {"categories": MaterialService.list_categories(brand)}


@router.post("/categories", status_code=201)
async def create_category(
    request: CategoryCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Add a category under a brand."""
    return {"category": MaterialService.create_category(user.id, request)}


@router.put("/categories/{category_id}")
async def update_category(
    category_id: CategoryId,
    request: CategoryUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Edit a category."""
    return {"category": MaterialService.update_category(category_id, request)}


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: CategoryId,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a category and the materials in it."""
    MaterialService.delete_category(category_id)
    return {"success": True}


# =============================================================================
# Materials
# =============================================================================

@router.get("/items")
async def list_materials(
    category_id: Annotated[str | None, Query(description="Category UUID")] = None,
    brand: Annotated[str | None, Query(description="Brand slug")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Materials newest first, with category name and color."""
    return MaterialService.list_materials(category_id=category_id, brand=brand)


@router.post("/items", status_code=201)
async def create_material(
    request: MaterialCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Add a material."""
    return {"material": MaterialService.create_material(user.id, request)}


@router.put("/items/{material_id}")
async def update_material(
    material_id: MaterialId,
    request: MaterialUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Edit one of the caller's materials."""
    return {"material": MaterialService.update_material(material_id, user.id, request)}


@router.delete("/items/{material_id}")
async def delete_material(
    material_id: MaterialId,
    user: AuthUser = Depends(get_current_user),
):
    """Delete one of the caller's materials."""
    MaterialService.delete_material(material_id, user.id)
    return {"success": True}
