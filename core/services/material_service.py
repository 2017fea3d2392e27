# =============================================================================
# core/services/material_service.py - Material Inventory Logic
# =============================================================================
# Brands, categories and materials for the inventory pages.
#
# Tables:
#   material_brands     (slug unique)
#   material_categories (brand = brand slug)
#   materials           (category_id -> material_categories.id)
#
# Brands and categories are shared; materials can only be changed by the
# user who created them.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import ConflictError, NotFoundError, ValidationFailedError, translate_database_error
from core.models.material import (
    DEFAULT_BRAND_COLOR,
    ERICSSON_CATEGORY_COLOR,
    OTHER_CATEGORY_COLOR,
    BrandCreate,
    CategoryCreate,
    CategoryUpdate,
    MaterialCreate,
    MaterialUpdate,
)
from core.services.common import execute, first_row, rows_of
from lib.supabase_client import SupabaseClient, is_missing_table_error
from lib.utils import normalize_uuid, slugify, utc_now_iso

logger = logging.getLogger(__name__)

BRANDS_TABLE = "material_brands"
CATEGORIES_TABLE = "material_categories"
MATERIALS_TABLE = "materials"

# Materials are returned with their category's name and color embedded
MATERIAL_SELECT = "*, material_categories (name, color)"


class MaterialService:
    """Service for the material inventory."""

    # -------------------------------------------------------------------------
    # Brands
    # -------------------------------------------------------------------------

    @staticmethod
    def list_brands() -> dict[str, Any]:
        """
        All brands, newest first.

        A missing brands table isn't an error here: the inventory page
        falls back to its built-in brands.

        Returns:
            {"brands": [...], "table_exists": bool}
        """
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(BRANDS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            if is_missing_table_error(e):
                logger.warning(f"{BRANDS_TABLE} table is missing, returning no brands")
                return {"brands": [], "table_exists": False}
            raise translate_database_error(e, "fetch brands", resource="brand", table=BRANDS_TABLE) from e

        return {"brands": rows_of(response), "table_exists": True}

    @staticmethod
    def create_brand(user_id: str | UUID, request: BrandCreate) -> dict[str, Any]:
        """
        Add a brand; the slug is derived from the name.

        Raises:
            ValidationFailedError: Blank name
            ConflictError: A brand with the same slug exists
        """
        name = (request.name or "").strip()
        if not name:
            raise ValidationFailedError("Brand name is required")

        slug = slugify(name)
        if not slug:
            raise ValidationFailedError("Brand name must contain letters or digits")

        if MaterialService._fetch(BRANDS_TABLE, {"slug": slug}, "brand"):
            raise ConflictError("Brand already exists", details={"slug": slug})

        client = SupabaseClient.get_client()
        brand = first_row(execute(
            client.table(BRANDS_TABLE).insert({
                "name": name,
                "slug": slug,
                "description": request.description or f"{name} equipment and materials",
                "color": request.color or DEFAULT_BRAND_COLOR,
                "created_by": normalize_uuid(user_id),
            }),
            "create brand",
            resource="brand",
            table=BRANDS_TABLE,
        ), "create brand")

        logger.info(f"Created brand: {slug}")
        return brand

    @staticmethod
    def get_brand(slug: str) -> dict[str, Any]:
        """
        A brand by slug.

        Unknown slugs get a placeholder (capitalised slug, default color)
        so brand pages always render.
        """
        brand = MaterialService._fetch(BRANDS_TABLE, {"slug": slug}, "brand")
        if brand:
            return brand
        return {
            "name": slug[:1].upper() + slug[1:],
            "slug": slug,
            "color": DEFAULT_BRAND_COLOR,
        }

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    @staticmethod
    def list_categories(brand: str | None) -> list[dict[str, Any]]:
        """Categories of one brand, oldest first."""
        if not brand or not brand.strip():
            raise ValidationFailedError("Brand parameter is required")

        client = SupabaseClient.get_client()
        return rows_of(execute(
            client.table(CATEGORIES_TABLE)
            .select("*")
            .eq("brand", brand.strip())
            .order("created_at"),
            "fetch categories",
            resource="category",
            table=CATEGORIES_TABLE,
        ))

    @staticmethod
    def create_category(user_id: str | UUID, request: CategoryCreate) -> dict[str, Any]:
        """Add a category; color defaults by brand."""
        name = (request.name or "").strip()
        brand = (request.brand or "").strip()
        if not name or not brand:
            raise ValidationFailedError("Name and brand are required")

        color = request.color or (ERICSSON_CATEGORY_COLOR if brand == "ericsson" else OTHER_CATEGORY_COLOR)
        client = SupabaseClient.get_client()
        category = first_row(execute(
            client.table(CATEGORIES_TABLE).insert({
                "name": name,
                "description": request.description,
                "brand": brand,
                "color": color,
                "created_by": normalize_uuid(user_id),
            }),
            "create category",
            resource="category",
            table=CATEGORIES_TABLE,
        ), "create category")

        logger.info(f"Created category {category['id']} for brand: {brand}")
        return category

    @staticmethod
    def update_category(category_id: str | UUID, request: CategoryUpdate) -> dict[str, Any]:
        """Edit a category's name, description or color."""
        update_data = request.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
        update_data["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(CATEGORIES_TABLE).update(update_data).eq("id", normalize_uuid(category_id)),
            "update category",
            resource="category",
            table=CATEGORIES_TABLE,
        ))
        if not rows:
            raise NotFoundError("category", str(category_id))

        logger.info(f"Updated category: {category_id}")
        return rows[0]

    @staticmethod
    def delete_category(category_id: str | UUID) -> None:
        """Delete a category and, first, every material in it."""
        category_id_str = normalize_uuid(category_id)
        if not MaterialService._fetch(CATEGORIES_TABLE, {"id": category_id_str}, "category"):
            raise NotFoundError("category", category_id_str)

        client = SupabaseClient.get_client()
        execute(
            client.table(MATERIALS_TABLE).delete().eq("category_id", category_id_str),
            "delete category materials",
            resource="material",
            table=MATERIALS_TABLE,
        )
        execute(
            client.table(CATEGORIES_TABLE).delete().eq("id", category_id_str),
            "delete category",
            resource="category",
            table=CATEGORIES_TABLE,
        )
        logger.info(f"Deleted category: {category_id_str}")

    # -------------------------------------------------------------------------
    # Materials
    # -------------------------------------------------------------------------

    @staticmethod
    def list_materials(category_id: str | None = None, brand: str | None = None) -> dict[str, Any]:
        """
        Materials newest first, with their category's name and color.

        Returns:
            {"materials": [...], "table_exists": True}
        """
        client = SupabaseClient.get_client()
        query = client.table(MATERIALS_TABLE).select(MATERIAL_SELECT)
        if category_id:
            query = query.eq("category_id", category_id)
        if brand:
            query = query.eq("brand", brand)

        materials = rows_of(execute(
            query.order("created_at", desc=True),
            "fetch materials",
            resource="material",
            table=MATERIALS_TABLE,
        ))
        return {"materials": materials, "table_exists": True}

    @staticmethod
    def create_material(user_id: str | UUID, request: MaterialCreate) -> dict[str, Any]:
        """Add a material to a category."""
        name = (request.name or "").strip()
        if not name or not request.category_id:
            raise ValidationFailedError("Name and category are required")

        data = request.model_dump(mode="json")
        data["name"] = name
        data["created_by"] = normalize_uuid(user_id)

        client = SupabaseClient.get_client()
        material = first_row(execute(
            client.table(MATERIALS_TABLE).insert(data),
            "create material",
            resource="material",
            table=MATERIALS_TABLE,
        ), "create material")

        logger.info(f"Created material {material['id']} in category: {request.category_id}")
        return material

    @staticmethod
    def update_material(material_id: str | UUID, user_id: str | UUID, request: MaterialUpdate) -> dict[str, Any]:
        """Edit one of the caller's materials."""
        update_data = request.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        update_data["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(MATERIALS_TABLE)
            .update(update_data)
            .eq("id", normalize_uuid(material_id))
            .eq("created_by", normalize_uuid(user_id)),
            "update material",
            resource="material",
            table=MATERIALS_TABLE,
        ))
        if not rows:
            raise NotFoundError("material", str(material_id))

        logger.info(f"Updated material: {material_id}")
        return rows[0]

    @staticmethod
    def delete_material(material_id: str | UUID, user_id: str | UUID) -> None:
        """Delete one of the caller's materials."""
        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(MATERIALS_TABLE)
            .delete()
            .eq("id", normalize_uuid(material_id))
            .eq("created_by", normalize_uuid(user_id)),
            "delete material",
            resource="material",
            table=MATERIALS_TABLE,
        ))
        if not rows:
            raise NotFoundError("material", str(material_id))
        logger.info(f"Deleted material: {material_id}")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _fetch(table: str, match: dict[str, Any], resource: str) -> dict[str, Any] | None:
        try:
            return SupabaseClient.fetch_one(table, match)
        except Exception as e:
            raise translate_database_error(e, f"fetch {resource}", resource=resource, table=table) from e
