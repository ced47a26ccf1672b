"""Tests for cross-field business rules and the safety check."""

from dataclasses import replace
from decimal import Decimal

import pytest

from storefront.placement.rules import check_business_rules, check_safety, has_sequential_run
from storefront.placement.schema import ValidatedOrder


@pytest.fixture()
def order():
    return ValidatedOrder(
        last_name="Doe",
        first_name="Jane",
        email="jane@x.com",
        phone="77123456",
        platform_id="5f0c6c1e-8a52-4b8e-9d53-2f1f3e0b7a11",
        account_name="Jane Doe",
        account_number="AB12345",
        product_id="0b8f2f6e-3c1d-4d2a-a0f4-6c5e9d7b8a21",
        fee=Decimal("5000"),
    )


class TestBusinessRules:
    def test_regular_order_passes(self, order):
        result = check_business_rules(order)
        assert result.passed is True
        assert result.violations == []

    @pytest.mark.parametrize("account_name", ["Test", "placeholder", "Nom Du Compte", "ACCOUNT NAME"])
    def test_placeholder_account_name(self, order, account_name):
        result = check_business_rules(replace(order, account_name=account_name))
        assert result.violations == ["placeholder_account_name"]

    def test_placeholder_customer_name(self, order):
        result = check_business_rules(replace(order, first_name="Test", last_name="Test"))
        assert "placeholder_customer_name" in result.violations

    def test_single_placeholder_word_in_name_is_fine(self, order):
        result = check_business_rules(replace(order, first_name="Demo", last_name="Ndiaye"))
        assert result.passed is True

    @pytest.mark.parametrize("account_number", ["AB123456", "987654X", "CD-000000", "abcdef12"])
    def test_sequential_account_number(self, order, account_number):
        result = check_business_rules(replace(order, account_number=account_number))
        assert result.violations == ["sequential_account_number"]

    @pytest.mark.parametrize("contact", ["jane@x.com", "77123456"])
    def test_account_name_is_contact_detail(self, order, contact):
        result = check_business_rules(replace(order, account_name=contact))
        assert result.violations == ["account_name_is_contact_detail"]

    def test_international_phone_as_account_name(self, order):
        result = check_business_rules(replace(order, phone="+22177123456", account_name="22177123456"))
        assert result.violations == ["account_name_is_contact_detail"]

    def test_violations_accumulate(self, order):
        result = check_business_rules(replace(order, account_name="test", account_number="111111"))
        assert result.passed is False
        assert result.violations == ["placeholder_account_name", "sequential_account_number"]


class TestSequentialRuns:
    @pytest.mark.parametrize("value", ["123456", "654321", "aaaaaa", "XYZ000000", "mnopqr"])
    def test_runs_of_six(self, value):
        assert has_sequential_run(value) is True

    @pytest.mark.parametrize("value", ["12345", "AB12345", "123-456", "12a456", "9abcde"])
    def test_shorter_or_broken_runs(self, value):
        assert has_sequential_run(value) is False

    def test_custom_length(self):
        assert has_sequential_run("1234", length=4) is True


class TestSafetyCheck:
    def test_clean_order_passes(self, order):
        assert check_safety(order).passed is True

    def test_markup_left_in_any_field_fails(self, order):
        result = check_safety(replace(order, account_name="<img src=x>"))
        assert result.passed is False
        assert result.violations == ["account_name"]

    def test_control_characters_fail(self, order):
        result = check_safety(replace(order, last_name="Doe\x1b"))
        assert result.violations == ["last_name"]
