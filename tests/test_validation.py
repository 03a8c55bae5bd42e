"""Unit tests for utils/validation.py."""

import pytest

from utils.validation import (
    REQUIRED_FIELDS_ERROR,
    parse_product_links,
    validate_image_count,
    validate_required,
)


class TestValidateRequired:
    def test_valid(self):
        assert validate_required("Asha", "9876543210") == (True, "")

    @pytest.mark.parametrize(
        "name,contact",
        [(None, "123"), ("Asha", None), ("", "123"), ("Asha", ""), ("   ", "123"), ("Asha", " \t\n")],
    )
    def test_missing_or_blank(self, name, contact):
        assert validate_required(name, contact) == (False, REQUIRED_FIELDS_ERROR)

    def test_error_message(self):
        assert REQUIRED_FIELDS_ERROR == "Name and contact are required."


class TestValidateImageCount:
    def test_within_limit(self):
        assert validate_image_count(6, max_images=6) == (True, "")

    def test_over_limit(self):
        ok, err = validate_image_count(7, max_images=6)
        assert ok is False
        assert "Maximum 6" in err


class TestParseProductLinks:
    def test_drops_blank_lines_and_keeps_order(self):
        assert parse_product_links("http://a.com\n\nhttp://b.com\n  \n") == ["http://a.com", "http://b.com"]

    def test_trims_each_line(self):
        assert parse_product_links("  http://a.com  \r\n\thttp://b.com") == ["http://a.com", "http://b.com"]

    def test_empty_input(self):
        assert parse_product_links(None) == []
        assert parse_product_links("") == []
        assert parse_product_links("\n \n") == []

    def test_duplicates_are_kept(self):
        assert parse_product_links("x\nx") == ["x", "x"]
