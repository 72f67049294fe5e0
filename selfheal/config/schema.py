from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEFAULT_NAVIGATION_MAPPING = {
    "Dashboard": '[data-testid="dashboard-link"]',
    "Products": '[data-testid="products-link"]',
    "Home": '[data-testid="home-link"]',
    "Cart": '[data-testid="cart-link"]',
    "Profile": '[data-testid="profile-link"]',
    "Components": '[data-testid="components-link"]',
}

DEFAULT_FIELD_MAPPING = {
    "firstName": '[data-testid="first-name-input"]',
    "lastName": '[data-testid="last-name-input"]',
    "email": '[data-testid="email-input"]',
    "phone": '[data-testid="phone-input"]',
    "address": '[data-testid="address-input"]',
    "city": '[data-testid="city-input"]',
}


class HealingConfig(BaseModel):
    test_id_attributes: list[str] = Field(default_factory=lambda: ["data-testid"])
    action_timeout_seconds: float = 5.0
    max_attempts: int = 3
    prefer_learned_healing: bool = True
    skip_missing_fields: bool = False
    navigation_mapping: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_NAVIGATION_MAPPING))
    field_mapping: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_FIELD_MAPPING))
    telemetry_root: str = "artifacts"

    @field_validator("test_id_attributes")
    @classmethod
    def validate_test_id_attributes(cls, value: list[str]) -> list[str]:
        normalized = [item.strip().lower() for item in value if item.strip()]
        if not normalized:
            raise ValueError("test_id_attributes must name at least one attribute")
        return normalized

    @field_validator("action_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value < 0:
            raise ValueError("action_timeout_seconds must not be negative")
        return value

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_attempts must be at least 1")
        return value

    @field_validator("navigation_mapping", "field_mapping")
    @classmethod
    def validate_mapping(cls, value: dict[str, str]) -> dict[str, str]:
        empty = [label for label, selector in value.items() if not selector.strip()]
        if empty:
            raise ValueError(f"Empty selectors for: {', '.join(empty)}")
        return value
