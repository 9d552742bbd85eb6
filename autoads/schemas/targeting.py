"""
Targeting types.

Targeting is an allow-list per dimension; a missing dimension means no
restriction. Values are normalized when the model is built, so anything
holding a Targeting can rely on its shape.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Order matters only for serialization
DIMENSIONS: tuple[str, ...] = ("fuel_type", "body_type", "make", "location")

# Sponsored listings are filtered on vehicle shape only
SPONSORED_DIMENSIONS: tuple[str, ...] = ("fuel_type", "body_type")


class Targeting(BaseModel):
    """Campaign targeting rules."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    fuel_type: tuple[str, ...] | None = Field(default=None, alias="fuelType")
    body_type: tuple[str, ...] | None = Field(default=None, alias="bodyType")
    make: tuple[str, ...] | None = None
    location: tuple[str, ...] | None = None

    @field_validator("fuel_type", "body_type", "make", "location", mode="before")
    @classmethod
    def normalize_values(cls, value: Any) -> tuple[str, ...] | None:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        elif not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("targeting values must be a list of strings")
        seen: dict[str, None] = {}
        for item in value:
            item = str(item).strip()
            if item:
                seen.setdefault(item, None)
        return tuple(seen) or None

    @classmethod
    def empty(cls) -> "Targeting":
        return cls()

    def allowed(self, dimension: str) -> tuple[str, ...] | None:
        return getattr(self, dimension)

    def is_empty(self) -> bool:
        return all(self.allowed(d) is None for d in DIMENSIONS)

    def to_json(self) -> dict[str, list[str]]:
        """JSON-ready form with camelCase keys and unset dimensions omitted."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        return {key: list(values) for key, values in data.items()}


class TargetingContext(BaseModel):
    """Attributes of the page or search the ad will appear on."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    fuel_type: str | None = Field(default=None, alias="fuelType")
    body_type: str | None = Field(default=None, alias="bodyType")
    make: str | None = None
    location: str | None = None

    def value(self, dimension: str) -> str | None:
        return getattr(self, dimension)
