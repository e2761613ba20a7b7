"""
Tests for resolving spoken products against the catalog.
"""
from voice_order.schemas.commands import ExtractedSlots, ProductSlot, QuantityKind, QuantitySlot
from voice_order.services.catalog import SqlCatalog, matches_term
from voice_order.services.item_resolver import resolve, resolve_items, resolve_quantity


class TestResolveQuantity:
    def test_exact_value(self):
        assert resolve_quantity(QuantitySlot(value=2, unit="kg")) == 2.0

    def test_range_uses_minimum(self):
        assert resolve_quantity(QuantitySlot(kind=QuantityKind.RANGE, min=2, max=3, unit="kg")) == 2.0

    def test_missing_quantity_defaults_to_one(self):
        assert resolve_quantity(None) == 1.0
        assert resolve_quantity(QuantitySlot(unit="kg")) == 1.0


class TestResolve:
    def test_first_match_wins(self, fake_catalog):
        item = resolve(fake_catalog, ProductSlot(name="rice"), QuantitySlot(value=2, unit="kg"))

        assert item.product.name == "Basmati Rice"
        assert item.quantity == 2.0
        assert item.unit == "kg"
        assert item.price == 120.0
        assert item.line_total == 240.0

    def test_unit_inherited_from_product(self, fake_catalog):
        item = resolve(fake_catalog, ProductSlot(name="milk"), None)

        assert item.product.name == "Amul Milk"
        assert item.quantity == 1.0
        assert item.unit == "l"

    def test_max_price_filters_candidates(self, fake_catalog):
        item = resolve(fake_catalog, ProductSlot(name="rice", max_price=100), None)
        assert item.product.name == "Brown Rice"

    def test_category_is_passed_to_catalog(self, fake_catalog):
        resolve(fake_catalog, ProductSlot(name="dal", category="pulses"), None)
        assert fake_catalog.searches == [("dal", "pulses", None)]

    def test_inactive_product_is_not_resolved(self, fake_catalog):
        assert resolve(fake_catalog, ProductSlot(name="saffron"), None) is None

    def test_unknown_product_is_omitted(self, fake_catalog):
        assert resolve_items(fake_catalog, ExtractedSlots(product=ProductSlot(name="caviar"))) == []

    def test_no_product_slot(self, fake_catalog):
        assert resolve_items(fake_catalog, ExtractedSlots(quantity=QuantitySlot(value=1, unit="kg"))) == []
        assert fake_catalog.searches == []


class TestCatalogMatching:
    def test_alternative_name_matches(self, fake_catalog):
        rice = fake_catalog.products[0]
        assert matches_term(rice, "चावल")

    def test_active_voice_pattern_matches(self, fake_catalog):
        assert matches_term(fake_catalog.products[0], "Chawal")

    def test_inactive_voice_pattern_is_ignored(self, fake_catalog):
        sugar = fake_catalog.products[1]
        assert not matches_term(sugar, "cheeni")

    def test_blank_term_matches_nothing(self, fake_catalog):
        assert not matches_term(fake_catalog.products[0], "  ")


class TestSqlCatalog:
    def test_search_orders_by_id_and_skips_inactive(self, db_session):
        results = SqlCatalog(db_session).search("rice")
        assert [p.name for p in results] == ["Basmati Rice", "Brown Rice"]

    def test_search_by_hindi_name(self, db_session):
        results = SqlCatalog(db_session).search("चावल")
        assert [p.name for p in results] == ["Basmati Rice"]

    def test_category_and_price_filters(self, db_session):
        catalog = SqlCatalog(db_session)
        assert catalog.search("rice", category="GRAINS", max_price=100)[0].name == "Brown Rice"
        assert catalog.search("rice", category="dairy") == []

    def test_inactive_product_not_returned(self, db_session):
        assert SqlCatalog(db_session).search("saffron") == []
