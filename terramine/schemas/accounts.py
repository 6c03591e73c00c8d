"""Schemas for accounts, sessions and earnings."""

from datetime import datetime

from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    """Create the account of the authenticated identity."""

    email: str | None = Field(default=None, max_length=255)


class ProfileUpdate(BaseModel):
    """Partial profile update."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    nickname: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)


class IncomeEstimate(BaseModel):
    daily: float
    monthly: float


class AccountResponse(BaseModel):
    """Account as seen by its owner."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None
    address: str | None = None
    display_name: str
    tb_balance: int
    total_check_ins: int
    total_tb_earned: int
    earnings_total: float
    last_earnings_update: datetime
    property_count: int = 0
    estimated_income: IncomeEstimate | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class OfflineEarningsResponse(BaseModel):
    """Earnings caught up when a session starts or is flushed."""

    previous_total: float
    new_earnings: float
    total: float
    seconds_elapsed: float
    boosted_seconds: float

    model_config = {"from_attributes": True}


class LiveEarningsResponse(BaseModel):
    """Money counter value."""

    amount: float
    formatted: str
    rate_per_second: float
    boost_active: bool
    live_session: bool

    model_config = {"from_attributes": True}


class PositionReport(BaseModel):
    """A GPS fix pushed by the client."""

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
