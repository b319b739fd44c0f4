"""Trade - one completed match between a buy and a sell order."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from minidex.models.order import lenient_timestamp


class Trade(BaseModel):
    """Executed trade. Order ids are back-references only and may be dangling."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None
    buy_order_id: str = Field(..., alias="buyOrderId")
    sell_order_id: str = Field(..., alias="sellOrderId")
    price: float = Field(..., allow_inf_nan=False)
    quantity: float = Field(..., allow_inf_nan=False)
    created_at: datetime | None = Field(None, alias="createdAt")

    @field_validator("id", "buy_order_id", "sell_order_id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, value: Any) -> Any:
        return lenient_timestamp(value)
