from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CATEGORIES


class ExpenseIn(BaseModel):
    description: str
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    category: str = "food"

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("description must not be empty")
        return v

    @field_validator("category")
    @classmethod
    def valid_category(cls, v: str) -> str:
        if v not in CATEGORIES:
            raise ValueError("unsupported category")
        return v


class ExpenseRecord(ExpenseIn):
    """A logged expense. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: datetime
    date: str

    @field_validator("timestamp")
    @classmethod
    def timestamp_aware(cls, v: datetime) -> datetime:
        # Stored records always carry a UTC offset; tolerate naive input as UTC.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_storage(self) -> dict:
        """Serialize with the field layout of the stored JSON array."""
        ts = self.timestamp.astimezone(timezone.utc)
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "timestamp": ts.strftime("%Y-%m-%dT%H:%M:%S.")
            + f"{ts.microsecond // 1000:03d}Z",
            "date": self.date,
        }


class ExpenseOut(BaseModel):
    id: int
    description: str
    amount: float
    category: str
    timestamp: datetime
    date: str
