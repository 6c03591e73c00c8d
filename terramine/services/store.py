"""Persistent store for accounts, properties and check-ins."""

import logging
from collections.abc import Iterable
from datetime import date, datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from terramine.engine.boost import DEFAULT_POLICY, BoostState
from terramine.exceptions import (
    AccountExists,
    AccountNotFound,
    AlreadyCheckedInToday,
    AlreadyOwned,
    CellNotFound,
)
from terramine.models import Account, CheckIn, Property

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "nickname", "address")


class AccountStore:
    """Database operations the game service relies on.

    Writes are not committed here; the caller's session (``get_db`` or a
    background loop) owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # Accounts

    async def find_account(self, account_id: str) -> Account | None:
        result = await self.db.execute(select(Account).where(Account.id == account_id))
        return result.scalar()

    async def get_owner_account(self, account_id: str) -> Account:
        """Load an account or raise AccountNotFound."""
        account = await self.find_account(account_id)
        if account is None:
            raise AccountNotFound()
        return account

    async def create_account(
        self,
        account_id: str,
        email: str | None,
        starting_balance: int,
        now: datetime,
        free_boosts: int = DEFAULT_POLICY.free_quota,
    ) -> Account:
        """Insert a new account with a starting balance and a full free-boost quota."""
        if await self.find_account(account_id) is not None:
            raise AccountExists()

        account = Account(
            id=account_id,
            email=email,
            tb_balance=starting_balance,
            total_check_ins=0,
            total_tb_earned=0,
            earnings_total=0.0,
            last_earnings_update=now,
            free_boosts_remaining=free_boosts,
            paid_boosts_used=0,
            created_at=now,
        )
        self.db.add(account)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise AccountExists() from e
        return account

    async def update_profile(self, account: Account, updates: dict) -> Account:
        """Apply profile field updates; unknown keys are ignored."""
        for field in PROFILE_FIELDS:
            if field in updates:
                value = updates[field]
                if isinstance(value, str):
                    value = value.strip() or None
                setattr(account, field, value)
        await self.db.flush()
        return account

    async def set_owner_earnings(
        self, account_id: str, new_total: float, snapshot: datetime
    ) -> Account:
        """Write an absolute earnings total and its snapshot time.

        The accumulator never decreases; a smaller total keeps the stored one.
        """
        account = await self.get_owner_account(account_id)
        if new_total < account.earnings_total:
            logger.warning(
                f"Ignoring earnings decrease for {account_id}: "
                f"{account.earnings_total} -> {new_total}"
            )
            new_total = account.earnings_total
        account.earnings_total = new_total
        account.last_earnings_update = snapshot
        await self.db.flush()
        return account

    async def adjust_balance(self, account_id: str, delta: int, earned: bool = False) -> None:
        """Atomically add ``delta`` TB; ``earned`` also counts it as income."""
        values = {"tb_balance": Account.tb_balance + delta}
        if earned:
            values["total_tb_earned"] = Account.total_tb_earned + delta
        result = await self.db.execute(
            update(Account).where(Account.id == account_id).values(**values)
        )
        if result.rowcount == 0:
            raise AccountNotFound()

    async def increment_check_ins(self, account_id: str) -> None:
        await self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(total_check_ins=Account.total_check_ins + 1)
        )

    async def set_boost_state(self, account_id: str, state: BoostState) -> Account:
        account = await self.get_owner_account(account_id)
        account.apply_boost_state(state)
        await self.db.flush()
        return account

    # Properties

    async def get_owned_cells(self, account_id: str) -> list[Property]:
        result = await self.db.execute(
            select(Property)
            .where(Property.owner_id == account_id)
            .order_by(Property.purchased_at)
        )
        return list(result.scalars().all())

    async def find_cell(self, cell_key: str) -> Property | None:
        result = await self.db.execute(select(Property).where(Property.id == cell_key))
        return result.scalar()

    async def get_cell(self, cell_key: str) -> Property:
        """Load an owned cell or raise CellNotFound."""
        prop = await self.find_cell(cell_key)
        if prop is None:
            raise CellNotFound()
        return prop

    async def list_cells(self, cell_keys: Iterable[str]) -> dict[str, Property]:
        """Owned cells among the given keys, by key."""
        keys = list(cell_keys)
        if not keys:
            return {}
        result = await self.db.execute(select(Property).where(Property.id.in_(keys)))
        return {p.id: p for p in result.scalars().all()}

    async def create_cell(self, prop: Property) -> Property:
        """Insert a property; the primary key makes the first writer win."""
        self.db.add(prop)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyOwned() from e
        return prop

    async def set_cell_nickname(self, prop: Property, nickname: str | None) -> Property:
        prop.nickname = (nickname or "").strip() or None
        await self.db.flush()
        return prop

    async def count_owned_by_type(self) -> dict[str, int]:
        result = await self.db.execute(
            select(Property.mine_type, func.count()).group_by(Property.mine_type)
        )
        return {mine_type.value: count for mine_type, count in result.all()}

    # Check-ins

    async def last_check_in_date(self, visitor_id: str, property_id: str) -> date | None:
        """Reference date of the visitor's latest check-in to a property."""
        result = await self.db.execute(
            select(func.max(CheckIn.reference_date)).where(
                CheckIn.visitor_id == visitor_id,
                CheckIn.property_id == property_id,
            )
        )
        return result.scalar()

    async def record_check_in(self, check_in: CheckIn) -> CheckIn:
        """Insert a check-in; a second one on the same day is rejected."""
        self.db.add(check_in)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyCheckedInToday() from e
        return check_in

    async def check_ins_for_property(self, property_id: str) -> list[CheckIn]:
        result = await self.db.execute(
            select(CheckIn)
            .where(CheckIn.property_id == property_id)
            .order_by(CheckIn.created_at.desc())
        )
        return list(result.scalars().all())

    async def check_ins_by_visitor(self, visitor_id: str) -> list[CheckIn]:
        result = await self.db.execute(
            select(CheckIn)
            .where(CheckIn.visitor_id == visitor_id)
            .order_by(CheckIn.created_at.desc())
        )
        return list(result.scalars().all())
