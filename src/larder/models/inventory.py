"""Inventory and calendar input models."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuantityConfidence(str, Enum):
    """How much the recorded quantity of a lot can be trusted."""

    EXACT = "exact"
    ESTIMATE = "estimate"
    UNKNOWN = "unknown"


class InventoryLot(BaseModel):
    """One inventory record of an ingredient with its own quantity and expiry."""

    id: str = Field(min_length=1)
    canonical_name: str = Field(min_length=1)
    quantity: Optional[float] = Field(default=None, ge=0)
    quantity_confidence: QuantityConfidence = Field(default=QuantityConfidence.EXACT)
    unit: str = Field(min_length=1)
    expiration_date: Optional[date] = Field(default=None)
    created_at: datetime

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    @model_validator(mode="before")
    @classmethod
    def _infer_unknown_confidence(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("quantity") is None and "quantity_confidence" not in data:
            data = dict(data)
            data["quantity_confidence"] = QuantityConfidence.UNKNOWN
        return data

    @model_validator(mode="after")
    def _quantity_matches_confidence(self) -> "InventoryLot":
        if self.quantity_confidence is QuantityConfidence.UNKNOWN:
            if self.quantity is not None:
                raise ValueError("lots with unknown confidence cannot carry a quantity")
        elif self.quantity is None:
            raise ValueError(
                f"lots with {self.quantity_confidence.value} confidence require a quantity"
            )
        return self

    @property
    def is_unknown_quantity(self) -> bool:
        return self.quantity_confidence is QuantityConfidence.UNKNOWN


class CalendarBlock(BaseModel):
    """Busy interval from a household calendar."""

    starts_at: datetime
    ends_at: datetime
    source: Literal["manual", "google", "outlook"] = Field(default="manual")
    title: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _ordered(self) -> "CalendarBlock":
        if self.starts_at.tzinfo is None or self.ends_at.tzinfo is None:
            raise ValueError("calendar blocks require timezone-aware timestamps")
        if self.ends_at <= self.starts_at:
            raise ValueError("calendar block must end after it starts")
        return self
