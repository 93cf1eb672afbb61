from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .constants import API_KEY_PREFIX


class ProfileIn(BaseModel):
    api_key: str
    monthly_budget: int = Field(..., gt=0)

    @field_validator("api_key")
    @classmethod
    def valid_api_key(cls, v: str) -> str:
        v = v.strip()
        if not v or not v.startswith(API_KEY_PREFIX):
            raise ValueError(f"API key must start with {API_KEY_PREFIX}")
        return v


class ProfileOut(BaseModel):
    """Profile as exposed over the API; the credential is never echoed back."""

    configured: bool
    api_key_set: bool
    api_key_hint: str = ""
    monthly_budget: int = 0
