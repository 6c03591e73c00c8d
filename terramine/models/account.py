"""Owner account model: balances, earnings accumulator and boost fields."""

from datetime import date, datetime

from sqlalchemy import Date, Double, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from terramine.database import Base, UTCDateTime, utc_now
from terramine.engine.boost import DEFAULT_POLICY, BoostState


class Account(Base):
    """A player, identified by the external authentication provider's id."""

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255))

    # Profile
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    nickname: Mapped[str | None] = mapped_column(String(50))
    address: Mapped[str | None] = mapped_column(String(500))

    # Discrete spendable currency
    tb_balance: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"))
    total_check_ins: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"))
    total_tb_earned: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"))

    # Real-currency accumulator, only ever grows
    earnings_total: Mapped[float] = mapped_column(Double, default=0.0, server_default=text("0"))
    last_earnings_update: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    # Boost
    free_boosts_remaining: Mapped[int] = mapped_column(
        Integer,
        default=DEFAULT_POLICY.free_quota,
        server_default=text(str(DEFAULT_POLICY.free_quota)),
    )
    boost_started_at: Mapped[datetime | None] = mapped_column(UTCDateTime)
    boost_end_time: Mapped[datetime | None] = mapped_column(UTCDateTime)
    next_free_boost_reset: Mapped[datetime | None] = mapped_column(UTCDateTime)
    paid_boosts_used: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"))
    paid_boosts_day: Mapped[date | None] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    @property
    def display_name(self) -> str:
        """Nickname, else the email's local part, else a short id."""
        if self.nickname:
            return self.nickname
        if self.email:
            return self.email.split("@")[0]
        return self.id[:8]

    @property
    def boost_state(self) -> BoostState:
        return BoostState(
            free_grants_remaining=self.free_boosts_remaining,
            expiry=self.boost_end_time,
            next_free_replenish=self.next_free_boost_reset,
            paid_grants_used=self.paid_boosts_used,
            started_at=self.boost_started_at,
            paid_day=self.paid_boosts_day,
        )

    def apply_boost_state(self, state: BoostState) -> None:
        """Copy an engine state onto the persisted columns."""
        self.free_boosts_remaining = state.free_grants_remaining
        self.boost_end_time = state.expiry
        self.next_free_boost_reset = state.next_free_replenish
        self.paid_boosts_used = state.paid_grants_used
        self.boost_started_at = state.started_at
        self.paid_boosts_day = state.paid_day
