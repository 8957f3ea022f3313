# callbridge/schemas/admin.py
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SubaccountIn(BaseModel):
    # all optional here; the directory decides what "missing" means so the
    # admin API answers 400 missing_fields instead of a schema error
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    location_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("locationId", "location_id"),
    )
    ghl_inbound_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ghlInboundUrl", "ghl_inbound_url"),
    )
    did_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("didNumber", "did_number"),
    )

    @field_validator("name", "location_id", "ghl_inbound_url", "did_number", mode="before")
    @classmethod
    def _coerce(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip() or None
        return v
