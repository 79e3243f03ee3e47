"""SettingsService implementation: business profile, defaults and numbering."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import asdict, fields
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import CurrencyDisplayFormat, DocumentType
from quotebook.exceptions import InvalidSettingsError
from quotebook.logging_config import get_logger
from quotebook.repositories.interfaces import SettingsRepository
from quotebook.services.interfaces import SettingsService
from quotebook.templates.registry import require_template

logger = get_logger(__name__)

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class _Section(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class BusinessProfileSection(_Section):
    business_name: str = Field(min_length=1)
    personal_name: str | None = None
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str = Field(min_length=1)
    tax_id: str | None = None
    registration_number: str | None = None
    logo_url: str | None = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        if v and not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v or None


class BrandSection(_Section):
    brand_color: str | None = None

    @field_validator("brand_color")
    @classmethod
    def check_color(cls, v: str | None) -> str:
        if not v:
            return "#000000"
        if not HEX_COLOR_PATTERN.match(v):
            raise ValueError("Brand color must be a hex value like #1A2B3C")
        return v.upper()


class FinancialSection(_Section):
    default_currency: str = Field(min_length=3, max_length=3)
    currency_display_format: CurrencyDisplayFormat = CurrencyDisplayFormat.SYMBOL_BEFORE
    fiscal_year_start_month: int = Field(ge=1, le=12)
    fiscal_year_start_day: int = Field(ge=1, le=31)
    show_tax_settings: bool = True
    tax_name: str = ""
    default_tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def require_tax_name(self) -> FinancialSection:
        if self.show_tax_settings and not self.tax_name:
            raise ValueError("Tax name is required when tax settings are enabled")
        return self


class QuoteSection(_Section):
    quote_title: str = ""
    quote_prefix: str = ""
    quote_next_number: int = Field(ge=1)
    quote_validity_days: int = Field(ge=1)
    quote_default_notes: str | None = None
    quote_default_terms: str | None = None


class InvoiceSection(_Section):
    invoice_title: str = ""
    invoice_prefix: str = ""
    invoice_next_number: int = Field(ge=1)
    invoice_default_due_days: int = Field(ge=1)
    invoice_default_notes: str | None = None
    invoice_default_terms: str | None = None
    show_bank_details: bool = False
    bank_name: str | None = None
    account_name: str | None = None
    account_number: str | None = None
    routing_number: str | None = None
    iban: str | None = None
    swift_code: str | None = None

    @model_validator(mode="after")
    def require_bank_details(self) -> InvoiceSection:
        if self.show_bank_details:
            missing = [
                name
                for name in ("bank_name", "account_name", "account_number", "routing_number")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"Bank details required: {', '.join(missing)}")
        return self


def _validate(model: type[BaseModel], section: str, data: Mapping[str, Any]) -> BaseModel:
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or section,
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        raise InvalidSettingsError(section, errors) from None


def _current_values(target: object, model: type[BaseModel]) -> dict[str, Any]:
    return {name: getattr(target, name) for name in model.model_fields}


def _merge_flags(current: Any, changes: Mapping[str, Any] | None) -> Any:
    if not changes:
        return current
    allowed = {f.name for f in fields(current)}
    values = asdict(current)
    values.update({k: bool(v) for k, v in changes.items() if k in allowed})
    return type(current)(**values)


class SettingsServiceImpl(SettingsService):
    """Reads and writes the single settings record, creating defaults on demand."""

    def __init__(
        self,
        settings_repo: SettingsRepository,
        default_currency: str = "USD",
        default_template_id: str = "classic",
    ) -> None:
        self._settings_repo = settings_repo
        self._default_currency = default_currency
        self._default_template_id = default_template_id

    def get_settings(self) -> UserSettings:
        settings = self._settings_repo.get_settings()
        if settings is None:
            settings = UserSettings(
                default_currency=self._default_currency,
                selected_template_id=self._default_template_id,
            )
            self._settings_repo.save_settings(settings)
            logger.info("default_settings_created", currency=self._default_currency)
        return settings

    def get_profile(self) -> BusinessProfile:
        profile = self._settings_repo.get_profile()
        if profile is None:
            profile = BusinessProfile()
            self._settings_repo.save_profile(profile)
        return profile

    def save_business_profile(self, data: Mapping[str, Any]) -> BusinessProfile:
        profile = self.get_profile()
        merged = {**_current_values(profile, BusinessProfileSection), **data}
        section = _validate(BusinessProfileSection, "business_profile", merged)
        for key, value in section.model_dump().items():
            setattr(profile, key, value)
        profile.touch()
        self._settings_repo.save_profile(profile)
        logger.info("settings_saved", section="business_profile")
        return profile

    def save_brand_color(self, color: str | None) -> BusinessProfile:
        profile = self.get_profile()
        section = _validate(BrandSection, "brand", {"brand_color": color})
        profile.brand_color = section.model_dump()["brand_color"]
        profile.touch()
        self._settings_repo.save_profile(profile)
        logger.info("settings_saved", section="brand", brand_color=profile.brand_color)
        return profile

    def _save_section(
        self, model: type[BaseModel], section_name: str, data: Mapping[str, Any]
    ) -> UserSettings:
        settings = self.get_settings()
        merged = {**_current_values(settings, model), **data}
        section = _validate(model, section_name, merged)
        for key, value in section.model_dump().items():
            setattr(settings, key, value)
        settings.touch()
        self._settings_repo.save_settings(settings)
        logger.info("settings_saved", section=section_name)
        return settings

    def save_financial_settings(self, data: Mapping[str, Any]) -> UserSettings:
        return self._save_section(FinancialSection, "financial", data)

    def save_quote_settings(self, data: Mapping[str, Any]) -> UserSettings:
        return self._save_section(QuoteSection, "quote", data)

    def save_invoice_settings(self, data: Mapping[str, Any]) -> UserSettings:
        return self._save_section(InvoiceSection, "invoice", data)

    def select_template(self, template_id: str) -> UserSettings:
        template = require_template(template_id)
        settings = self.get_settings()
        settings.selected_template_id = template.id
        settings.touch()
        self._settings_repo.save_settings(settings)
        logger.info("template_selected", template_id=template.id)
        return settings

    def save_default_visibility(self, data: Mapping[str, Any]) -> UserSettings:
        settings = self.get_settings()
        settings.default_business_fields = _merge_flags(
            settings.default_business_fields, data.get("business_fields")
        )
        settings.default_client_fields = _merge_flags(
            settings.default_client_fields, data.get("client_fields")
        )
        settings.touch()
        self._settings_repo.save_settings(settings)
        logger.info("settings_saved", section="visibility")
        return settings

    def preview_next_number(self, document_type: DocumentType) -> str:
        return self.get_settings().peek_number(document_type)

    def take_next_number(self, document_type: DocumentType) -> str:
        settings = self.get_settings()
        number = settings.take_number(document_type)
        self._settings_repo.save_settings(settings)
        logger.debug(
            "document_number_assigned",
            document_type=document_type.value,
            document_number=number,
        )
        return number


__all__ = [
    "BusinessProfileSection",
    "FinancialSection",
    "InvoiceSection",
    "QuoteSection",
    "SettingsServiceImpl",
]
