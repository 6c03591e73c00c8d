"""Schemas for check-ins."""

import base64
import binascii
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator


class CheckInRequest(BaseModel):
    """Check in to a property. The photo, if any, is base64-encoded."""

    latitude: float | None = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    longitude: float | None = Field(default=None, ge=-180, le=180, allow_inf_nan=False)
    message: str | None = Field(default=None, max_length=500)
    photo_base64: str | None = None

    @field_validator("photo_base64")
    @classmethod
    def validate_photo(cls, v: str | None) -> str | None:
        """Reject photos that are not valid base64."""
        if v is None or v == "":
            return None
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("photo_base64 is not valid base64") from e
        return v

    def photo_bytes(self) -> bytes | None:
        if self.photo_base64 is None:
            return None
        return base64.b64decode(self.photo_base64)


class CheckInResponse(BaseModel):
    """A recorded check-in."""

    id: str
    visitor_id: str
    visitor_name: str | None = None
    property_id: str
    property_owner_id: str
    message: str | None = None
    has_photo: bool = False
    photo_url: str | None = None
    tb_earned: int
    reference_date: date
    created_at: datetime

    model_config = {"from_attributes": True}


class CheckInReceiptResponse(BaseModel):
    """Result of a check-in for the visitor."""

    check_in: CheckInResponse
    visitor_tb_earned: int
    owner_tb_earned: int
