"""Order, OrderSide, OrderStatus - orders as the service reports them."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    """Observed lifecycle: OPEN -> PARTIAL -> FILLED, OPEN -> FILLED, OPEN/PARTIAL -> CANCELED."""

    OPEN = "OPEN"
    PARTIAL = "PARTIAL"
    FILLED = "FILLED"
    CANCELED = "CANCELED"


TERMINAL_STATUSES = frozenset({OrderStatus.FILLED, OrderStatus.CANCELED})

_TIMESTAMP = TypeAdapter(datetime)


def lenient_timestamp(value: Any) -> datetime | None:
    """createdAt is display-only: blank or unparseable values become None."""
    if value is None or value == "":
        return None
    try:
        return _TIMESTAMP.validate_python(value)
    except ValidationError:
        return None


class Order(BaseModel):
    """One resting or historical order. Wire field for side is ``type``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    side: OrderSide = Field(..., alias="type")
    price: float = Field(..., ge=0, allow_inf_nan=False)
    quantity: float = Field(..., allow_inf_nan=False)
    status: OrderStatus
    created_at: datetime | None = Field(None, alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, value: Any) -> Any:
        return lenient_timestamp(value)

    @field_validator("side", mode="before")
    @classmethod
    def _side_lower(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class OrderForm(BaseModel):
    """Raw order-entry input, as typed. Validated only on submit."""

    model_config = ConfigDict(frozen=True)

    side: str = "buy"
    price: str = ""
    quantity: str = ""
