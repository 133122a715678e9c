"""Tests for onboarding input checks."""

import pytest

from leaselink.modules.onboarding.services import validate_onboarding


pytestmark = pytest.mark.unit

VALID = {
    "property_name": "Maple Court",
    "address": "12 Maple Street",
    "property_type": "apartment",
    "bedrooms": 2,
    "bathrooms": 1.5,
    "area_names": ["Kitchen", "Bathroom"],
}


class TestValidateOnboarding:
    """Tests for validate_onboarding."""

    def test_valid_input(self):
        assert validate_onboarding(**VALID) is None

    def test_blank_address(self):
        assert validate_onboarding(**{**VALID, "address": "   "}) == "Address is required"

    @pytest.mark.parametrize(
        ("override", "message"),
        [
            ({"property_name": ""}, "Property name is required"),
            ({"property_name": "   "}, "Property name is required"),
            ({"address": None}, "Address is required"),
            ({"bedrooms": -1}, "Bedrooms cannot be negative"),
            ({"bedrooms": 2**31}, "Bedrooms cannot exceed 2147483647"),
            ({"bathrooms": -0.5}, "Bathrooms must be between 0 and 99.9"),
            ({"bathrooms": 100}, "Bathrooms must be between 0 and 99.9"),
            ({"area_names": ["Kitchen", " "]}, "Area names cannot be blank"),
        ],
    )
    def test_rejections(self, override, message):
        assert validate_onboarding(**{**VALID, **override}) == message

    def test_unknown_property_type(self):
        problem = validate_onboarding(**{**VALID, "property_type": "castle"})

        assert problem is not None
        assert problem.startswith("Property type must be one of")

    def test_long_area_name(self):
        problem = validate_onboarding(**{**VALID, "area_names": ["x" * 101]})

        assert problem == "Area names are limited to 100 characters"

    def test_bedrooms_at_column_limit(self):
        assert validate_onboarding(**{**VALID, "bedrooms": 2**31 - 1}) is None

    def test_area_names_unique_ignoring_case(self):
        problem = validate_onboarding(**{**VALID, "area_names": ["Kitchen", " KITCHEN"]})

        assert problem == "Area name 'KITCHEN' is listed more than once"

    def test_areas_optional_by_default(self):
        assert validate_onboarding(**{**VALID, "area_names": []}) is None

    def test_areas_required_when_configured(self):
        problem = validate_onboarding(**{**VALID, "area_names": []}, require_areas=True)

        assert problem == "At least one area is required"
