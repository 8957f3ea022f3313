# callbridge/schemas/webhooks.py
from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import RequestRejected


def _to_str(v: Any) -> Any:
    """Workflows and PBX templates send numbers as JSON ints; keep them as text."""
    if v is None:
        return None
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    if isinstance(v, str):
        return v.strip() or None
    return v


class OutboundCallRequest(BaseModel):
    """`customData` of a GHL workflow webhook asking us to place a call."""
    model_config = ConfigDict(extra="ignore")

    type: Literal["outbound_call"] = "outbound_call"
    phone: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("phone", "from_number", "phoneNumber"),
    )
    contact_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("contactId", "contact_id"),
    )
    name: Optional[str] = None
    location_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("locationId", "location_id"),
    )

    @field_validator("phone", "contact_id", "name", "location_id", mode="before")
    @classmethod
    def _coerce(cls, v):
        return _to_str(v)

    def source(self) -> Dict[str, Any]:
        """Field set written to the call log for this request."""
        return {
            "phone": self.phone,
            "contactId": self.contact_id,
            "name": self.name,
            "locationId": self.location_id,
        }


# type tag -> model; add new GHL-originated event shapes here
CRM_EVENT_TYPES: Dict[str, Type[BaseModel]] = {
    "outbound_call": OutboundCallRequest,
}


class GhlWebhook(BaseModel):
    model_config = ConfigDict(extra="ignore")

    custom_data: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("customData", "custom_data"),
    )

    @field_validator("custom_data", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or {}

    def event(self) -> OutboundCallRequest:
        """
        Resolve the tagged `customData` to its typed event.

        Raises RequestRejected(type_missing | unknown_type | location_id_missing).
        """
        kind = _to_str(self.custom_data.get("type"))
        if not kind:
            raise RequestRejected("type_missing", "No type provided")
        model = CRM_EVENT_TYPES.get(kind)
        if model is None:
            raise RequestRejected("unknown_type", f"Unknown type: {kind}")
        try:
            ev = model.model_validate(self.custom_data)
        except ValidationError as e:
            raise RequestRejected("invalid_payload", f"Invalid customData for {kind}") from e
        if not ev.location_id:
            raise RequestRejected("location_id_missing", "locationId missing")
        return ev


class VodiaNewCall(BaseModel):
    """Vodia PBX "new call" notification."""
    model_config = ConfigDict(extra="ignore")

    to_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("to_number", "toNumber", "to", "callee"),
    )
    from_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("from_number", "fromNumber", "from", "caller"),
    )
    from_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("from_name", "fromName", "caller_name", "callerName"),
    )
    contact_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("contact_id", "contactId"),
    )
    call_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("call_id", "callId", "id"),
    )

    @field_validator("to_number", "from_number", "from_name", "contact_id", "call_id", mode="before")
    @classmethod
    def _coerce(cls, v):
        return _to_str(v)
