"""
Unit tests for listing helpers: slugs, default SEO fields and price per unit.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from bigha.models.enums import AreaUnit, PropertyType
from bigha.schemas.property import PropertyCreate, PropertyUpdate
from bigha.services.property_service import compute_price_per_unit
from bigha.services.seo_service import (
    SEO_DESCRIPTION_MAX_LENGTH,
    SEO_TITLE_MAX_LENGTH,
    generate_seo_fields,
    generate_slug,
)


class TestGenerateSlug:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Agricultural Land in Karnal, Haryana!", "agricultural-land-in-karnal-haryana"),
            ("  Multiple   spaces  ", "multiple-spaces"),
            ("already-a--slug", "already-a-slug"),
            ("!!!", ""),
        ],
    )
    def test_slugs(self, text, expected):
        assert generate_slug(text) == expected


class TestGenerateSeoFields:
    def test_title_and_keywords(self):
        fields = generate_seo_fields(PropertyType.AGRICULTURAL, "Karnal", "Karnal", "Haryana", AreaUnit.ACRE)

        assert fields.title == "Agricultural in Karnal, Karnal"
        assert fields.seo_title == "Agricultural in Karnal, Karnal | 2bigha"
        assert fields.slug_base == "agricultural-in-karnal-karnal"
        assert fields.seo_keywords == "agricultural, karnal, haryana, acre, property for sale, 2bigha"

    def test_without_location(self):
        fields = generate_seo_fields(PropertyType.PLOT)

        assert fields.title == "Plot"
        assert "for sale in India" in fields.seo_description

    def test_long_values_are_truncated(self):
        fields = generate_seo_fields(PropertyType.COMMERCIAL, "C" * 80, "D" * 80, "S" * 80)

        assert len(fields.seo_title) <= SEO_TITLE_MAX_LENGTH
        assert fields.seo_title.endswith("...")
        assert len(fields.seo_description) <= SEO_DESCRIPTION_MAX_LENGTH


class TestPricePerUnit:
    def test_rounds_to_paise(self):
        assert compute_price_per_unit(Decimal("100000"), Decimal("3")) == Decimal("33333.33")

    @pytest.mark.parametrize(
        "price,area",
        [(None, Decimal("2")), (Decimal("100"), None), (Decimal("100"), Decimal("0"))],
    )
    def test_undefined_without_both_values(self, price, area):
        assert compute_price_per_unit(price, area) is None


class TestPropertySchemas:
    def test_create_requires_title_and_type(self):
        with pytest.raises(ValidationError):
            PropertyCreate(title="Farm")

    def test_create_defaults(self):
        data = PropertyCreate(title="Farm plot", property_type=PropertyType.AGRICULTURAL)

        assert data.status.value == "DRAFT"
        assert data.is_featured is False

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValidationError):
            PropertyUpdate(price=Decimal("-1"))

    def test_latitude_is_bounded(self):
        with pytest.raises(ValidationError):
            PropertyUpdate(location={"lat": 91, "lng": 77})

    def test_blank_city_becomes_none(self):
        assert PropertyUpdate(city="   ").city is None
