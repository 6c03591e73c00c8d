"""Check-in model: a visitor's in-person visit to someone else's property."""

from datetime import date, datetime
from uuid import uuid4

from sqlalchemy import Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from terramine.database import Base, UTCDateTime, utc_now


class CheckIn(Base):
    """One visit. At most one per visitor, property and reference-timezone day."""

    __tablename__ = "check_ins"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    visitor_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    visitor_name: Mapped[str | None] = mapped_column(String(100))
    property_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    message: Mapped[str | None] = mapped_column(Text)
    photo_url: Mapped[str | None] = mapped_column(String(500))
    tb_earned: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    @property
    def has_photo(self) -> bool:
        return self.photo_url is not None

    __table_args__ = (
        UniqueConstraint(
            "visitor_id", "property_id", "reference_date", name="uq_check_ins_visitor_property_day"
        ),
    )
