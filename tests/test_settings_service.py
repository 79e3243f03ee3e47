"""Tests for SettingsService implementation."""

from decimal import Decimal

import pytest

from quotebook.domain.value_objects import CurrencyDisplayFormat, DocumentType
from quotebook.exceptions import InvalidSettingsError, TemplateNotFoundError
from quotebook.repositories.sqlite import SQLiteDatabase, SQLiteSettingsRepository
from quotebook.services.settings import SettingsServiceImpl


def _error_fields(exc: InvalidSettingsError) -> list[str]:
    return [error["field"] for error in exc.context["errors"]]


class TestDefaults:
    def test_get_settings_creates_defaults_once(
        self, db: SQLiteDatabase, settings_service: SettingsServiceImpl
    ):
        settings = settings_service.get_settings()

        assert settings.default_currency == "USD"
        assert settings.selected_template_id == "classic"
        assert SQLiteSettingsRepository(db).get_settings() is not None

    def test_defaults_follow_configured_currency(self, db: SQLiteDatabase):
        service = SettingsServiceImpl(
            SQLiteSettingsRepository(db), default_currency="EUR", default_template_id="modern"
        )

        settings = service.get_settings()

        assert settings.default_currency == "EUR"
        assert settings.selected_template_id == "modern"

    def test_get_profile_creates_placeholder(self, settings_service: SettingsServiceImpl):
        assert settings_service.get_profile().business_name == "Your Business"


class TestBusinessProfile:
    def test_save_business_profile(self, settings_service: SettingsServiceImpl):
        profile = settings_service.save_business_profile(
            {"business_name": "  Studio North ", "country": "CA", "email": "hi@north.test"}
        )

        assert profile.business_name == "Studio North"
        assert profile.country == "CA"
        assert settings_service.get_profile().email == "hi@north.test"

    def test_business_name_and_country_required(self, settings_service: SettingsServiceImpl):
        with pytest.raises(InvalidSettingsError) as exc_info:
            settings_service.save_business_profile({"business_name": "", "country": ""})

        assert set(_error_fields(exc_info.value)) == {"business_name", "country"}

    def test_invalid_email_rejected(self, settings_service: SettingsServiceImpl):
        with pytest.raises(InvalidSettingsError) as exc_info:
            settings_service.save_business_profile(
                {"business_name": "Studio", "country": "CA", "email": "not-an-email"}
            )

        assert _error_fields(exc_info.value) == ["email"]

    def test_brand_color_normalized(self, settings_service: SettingsServiceImpl):
        assert settings_service.save_brand_color("#1a2b3c").brand_color == "#1A2B3C"
        assert settings_service.save_brand_color(None).brand_color == "#000000"

    def test_brand_color_must_be_hex(self, settings_service: SettingsServiceImpl):
        with pytest.raises(InvalidSettingsError):
            settings_service.save_brand_color("blue")


class TestSections:
    def test_financial_settings(self, settings_service: SettingsServiceImpl):
        settings = settings_service.save_financial_settings(
            {
                "default_currency": "eur",
                "currency_display_format": "code_after",
                "tax_name": "VAT",
                "default_tax_rate": "19",
            }
        )

        assert settings.default_currency == "EUR"
        assert settings.currency_display_format == CurrencyDisplayFormat.CODE_AFTER
        assert settings.default_tax_rate == Decimal("19")
        assert settings_service.get_settings().tax_name == "VAT"

    def test_tax_name_required_when_tax_shown(self, settings_service: SettingsServiceImpl):
        with pytest.raises(InvalidSettingsError):
            settings_service.save_financial_settings({"show_tax_settings": True, "tax_name": ""})

    def test_tax_rate_bounds(self, settings_service: SettingsServiceImpl):
        with pytest.raises(InvalidSettingsError) as exc_info:
            settings_service.save_financial_settings({"default_tax_rate": "150"})

        assert _error_fields(exc_info.value) == ["default_tax_rate"]

    def test_quote_settings(self, settings_service: SettingsServiceImpl):
        settings = settings_service.save_quote_settings(
            {"quote_prefix": "EST", "quote_next_number": 10, "quote_validity_days": 14}
        )

        assert settings.quote_prefix == "EST"
        assert settings_service.preview_next_number(DocumentType.QUOTE) == "EST-010"

    def test_quote_validity_must_be_positive(self, settings_service: SettingsServiceImpl):
        with pytest.raises(InvalidSettingsError):
            settings_service.save_quote_settings({"quote_validity_days": 0})

    def test_invoice_bank_details_required_when_shown(
        self, settings_service: SettingsServiceImpl
    ):
        with pytest.raises(InvalidSettingsError):
            settings_service.save_invoice_settings(
                {"show_bank_details": True, "bank_name": "Northwind"}
            )

    def test_invoice_settings_with_bank_details(self, settings_service: SettingsServiceImpl):
        settings = settings_service.save_invoice_settings(
            {
                "invoice_prefix": "BILL",
                "show_bank_details": True,
                "bank_name": "Northwind",
                "account_name": "Studio North",
                "account_number": "12345678",
                "routing_number": "021000021",
            }
        )

        assert settings.show_bank_details is True
        assert settings.invoice_prefix == "BILL"

    def test_failed_save_leaves_settings_untouched(
        self, settings_service: SettingsServiceImpl
    ):
        with pytest.raises(InvalidSettingsError):
            settings_service.save_quote_settings({"quote_prefix": "X", "quote_next_number": 0})

        assert settings_service.get_settings().quote_prefix == "Q"


class TestTemplatesAndVisibility:
    def test_select_template(self, settings_service: SettingsServiceImpl):
        assert settings_service.select_template("modern").selected_template_id == "modern"

    def test_unknown_template_rejected(self, settings_service: SettingsServiceImpl):
        with pytest.raises(TemplateNotFoundError):
            settings_service.select_template("baroque")

    def test_default_visibility_merges_flags(self, settings_service: SettingsServiceImpl):
        settings = settings_service.save_default_visibility(
            {"business_fields": {"tax_id": False, "unknown": False}, "client_fields": {"email": 0}}
        )

        assert settings.default_business_fields.tax_id is False
        assert settings.default_business_fields.email is True
        assert settings.default_client_fields.email is False


class TestNumbering:
    def test_take_next_number_advances_and_persists(
        self, settings_service: SettingsServiceImpl
    ):
        assert settings_service.take_next_number(DocumentType.INVOICE) == "INV-001"
        assert settings_service.take_next_number(DocumentType.INVOICE) == "INV-002"
        assert settings_service.preview_next_number(DocumentType.INVOICE) == "INV-003"
        assert settings_service.preview_next_number(DocumentType.QUOTE) == "Q-001"
