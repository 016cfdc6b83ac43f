from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class PlaceOrderLineRequest(CamelBaseModel):
    item_id: str
    price_id: str | None = None
    quantity: int = 1
    notes: str | None = None


class PlaceOrderRequest(CamelBaseModel):
    diner_count: int | None = Field(default=None, ge=1)
    lines: list[PlaceOrderLineRequest] = Field(default_factory=list)


class UpdateOrderStatusRequest(CamelBaseModel):
    status: str


class SoundToggleRequest(CamelBaseModel):
    enabled: bool
