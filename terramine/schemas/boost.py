"""Schemas for boosts."""

from datetime import datetime

from pydantic import BaseModel


class BoostStatusResponse(BaseModel):
    """Current boost for the account."""

    is_active: bool
    expiry: datetime | None = None
    remaining_minutes: int
    free_grants_remaining: int
    free_quota: int
    paid_grants_remaining: int
    minutes_until_replenish: int
    multiplier: int

    model_config = {"from_attributes": True}
