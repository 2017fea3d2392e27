# =============================================================================
# tests/test_material_service.py - Material Inventory Tests
# =============================================================================
# This module contains tests for:
# - Brands: missing table fallback, slug conflicts, placeholder brands
# - Categories: brand-dependent colors, cascade delete
# - Materials: creator-only updates and deletes
# =============================================================================

import pytest

from app.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationFailedError
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
from core.services.material_service import MATERIAL_SELECT, MaterialService
from tests.conftest import USER_ID, api_error

CATEGORY_ID = "99999999-9999-9999-9999-999999999991"
MATERIAL_ID = "99999999-9999-9999-9999-999999999992"


class TestBrands:
    """Test brand listing and creation."""

    def test_missing_table_is_reported_not_raised(self, fake_supabase):
        fake_supabase.queue("material_brands", api_error("42P01", 'relation "material_brands" does not exist'))

        assert MaterialService.list_brands() == {"brands": [], "table_exists": False}

    def test_other_errors_propagate(self, fake_supabase):
        fake_supabase.queue("material_brands", api_error("08006", "connection lost"))

        with pytest.raises(DatabaseError):
            MaterialService.list_brands()

    def test_list(self, fake_supabase):
        fake_supabase.queue("material_brands", [{"slug": "nokia"}])

        assert MaterialService.list_brands() == {"brands": [{"slug": "nokia"}], "table_exists": True}

    def test_create_derives_slug_and_defaults(self, fake_supabase):
        fake_supabase.queue("material_brands", [], [{"id": "b1", "slug": "huawei-tech"}])

        brand = MaterialService.create_brand(USER_ID, BrandCreate(name=" Huawei Tech "))

        assert brand["slug"] == "huawei-tech"
        insert = fake_supabase.queries("material_brands", "insert")[0].payload
        assert insert["name"] == "Huawei Tech"
        assert insert["slug"] == "huawei-tech"
        assert insert["description"] == "Huawei Tech equipment and materials"
        assert insert["color"] == DEFAULT_BRAND_COLOR
        assert insert["created_by"] == USER_ID

    def test_slug_conflict(self, fake_supabase):
        fake_supabase.queue("material_brands", [{"id": "b1", "slug": "nokia"}])

        with pytest.raises(ConflictError):
            MaterialService.create_brand(USER_ID, BrandCreate(name="NOKIA"))
        assert fake_supabase.queries("material_brands", "insert") == []

    def test_name_without_letters(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            MaterialService.create_brand(USER_ID, BrandCreate(name="???"))

    def test_unknown_slug_gets_placeholder(self, fake_supabase):
        fake_supabase.queue("material_brands", [])

        assert MaterialService.get_brand("zte") == {"name": "Zte", "slug": "zte", "color": DEFAULT_BRAND_COLOR}


class TestCategories:
    """Test categories."""

    def test_brand_is_required(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            MaterialService.list_categories(" ")

    def test_list_by_brand(self, fake_supabase):
        fake_supabase.queue("material_categories", [{"id": CATEGORY_ID}])

        MaterialService.list_categories("ericsson")

        assert fake_supabase.queries("material_categories")[0].filters() == {"brand": "ericsson"}

    @pytest.mark.parametrize(
        "brand,color",
        [("ericsson", ERICSSON_CATEGORY_COLOR), ("nokia", OTHER_CATEGORY_COLOR)],
    )
    def test_default_color_depends_on_brand(self, fake_supabase, brand, color):
        fake_supabase.queue("material_categories", [{"id": CATEGORY_ID}])

        MaterialService.create_category(USER_ID, CategoryCreate(name="Radios", brand=brand))

        insert = fake_supabase.queries("material_categories", "insert")[0].payload
        assert insert["color"] == color

    def test_explicit_color_wins(self, fake_supabase):
        fake_supabase.queue("material_categories", [{"id": CATEGORY_ID}])

        MaterialService.create_category(USER_ID, CategoryCreate(name="Radios", brand="nokia", color="#00FF00"))

        assert fake_supabase.queries("material_categories", "insert")[0].payload["color"] == "#00FF00"

    def test_update_missing(self, fake_supabase):
        fake_supabase.queue("material_categories", [])

        with pytest.raises(NotFoundError):
            MaterialService.update_category(CATEGORY_ID, CategoryUpdate(name="Antennas"))

    def test_delete_removes_materials_first(self, fake_supabase):
        fake_supabase.queue("material_categories", [{"id": CATEGORY_ID}])

        MaterialService.delete_category(CATEGORY_ID)

        materials_delete = fake_supabase.queries("materials", "delete")[0]
        category_delete = fake_supabase.queries("material_categories", "delete")[0]
        assert materials_delete.filters() == {"category_id": CATEGORY_ID}
        assert fake_supabase.executed.index(materials_delete) < fake_supabase.executed.index(category_delete)

    def test_delete_unknown(self, fake_supabase):
        fake_supabase.queue("material_categories", [])

        with pytest.raises(NotFoundError):
            MaterialService.delete_category(CATEGORY_ID)
        assert fake_supabase.queries("materials") == []


class TestMaterials:
    """Test materials."""

    def test_list_embeds_category(self, fake_supabase):
        fake_supabase.queue("materials", [{"id": MATERIAL_ID, "material_categories": {"name": "Radios"}}])

        result = MaterialService.list_materials(category_id=CATEGORY_ID)

        assert result["table_exists"] is True
        query = fake_supabase.queries("materials")[0]
        assert query.args_of("select") == [(MATERIAL_SELECT,)]
        assert query.filters() == {"category_id": CATEGORY_ID}

    def test_create_defaults(self, fake_supabase):
        fake_supabase.queue("materials", [{"id": MATERIAL_ID}])

        MaterialService.create_material(USER_ID, MaterialCreate(name=" RRU 4471 ", category_id=CATEGORY_ID))

        insert = fake_supabase.queries("materials", "insert")[0].payload
        assert insert["name"] == "RRU 4471"
        assert insert["quantity"] == 0
        assert insert["unit"] == "pcs"
        assert insert["status"] == "available"
        assert insert["created_by"] == USER_ID

    def test_create_requires_category(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            MaterialService.create_material(USER_ID, MaterialCreate(name="RRU"))

    def test_update_is_creator_only(self, fake_supabase):
        fake_supabase.queue("materials", [])

        with pytest.raises(NotFoundError):
            MaterialService.update_material(MATERIAL_ID, USER_ID, MaterialUpdate(quantity=3))

        update = fake_supabase.queries("materials", "update")[0]
        assert update.filters() == {"id": MATERIAL_ID, "created_by": USER_ID}

    def test_update_ignores_explicit_nulls(self, fake_supabase):
        fake_supabase.queue("materials", [{"id": MATERIAL_ID, "quantity": 3}])

        MaterialService.update_material(MATERIAL_ID, USER_ID, MaterialUpdate(name=None, status=None, quantity=3))

        update = fake_supabase.queries("materials", "update")[0]
        assert set(update.payload) == {"quantity", "updated_at"}

    def test_delete(self, fake_supabase):
        fake_supabase.queue("materials", [{"id": MATERIAL_ID}])

        MaterialService.delete_material(MATERIAL_ID, USER_ID)

        assert fake_supabase.queries("materials", "delete")[0].filters() == {"id": MATERIAL_ID, "created_by": USER_ID}
