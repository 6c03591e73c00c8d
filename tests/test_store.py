"""Tests for the account store against an in-memory database."""

from datetime import UTC, date, datetime, timedelta

import pytest

from terramine.engine.boost import BoostState
from terramine.engine.mines import MineType
from terramine.exceptions import (
    AccountExists,
    AccountNotFound,
    AlreadyCheckedInToday,
    AlreadyOwned,
    CellNotFound,
)
from terramine.models import CheckIn, Property

T0 = datetime(2025, 6, 15, 16, 0, tzinfo=UTC)


def _property(key: str, owner_id: str, mine_type: MineType = MineType.ROCK) -> Property:
    x, y = (int(p) for p in key.split("_"))
    return Property(
        id=key,
        grid_x=x,
        grid_y=y,
        owner_id=owner_id,
        mine_type=mine_type,
        center_lat=(x + 0.5) * 0.0001,
        center_lng=(y + 0.5) * 0.0001,
        purchased_at=T0,
    )


def _check_in(visitor_id: str, prop: Property, day: date, minutes: int = 0) -> CheckIn:
    return CheckIn(
        visitor_id=visitor_id,
        visitor_name=visitor_id,
        property_id=prop.id,
        property_owner_id=prop.owner_id,
        tb_earned=1,
        reference_date=day,
        created_at=T0 + timedelta(minutes=minutes),
    )


class TestAccounts:
    """Tests for account persistence."""

    async def test_create_account_defaults(self, store, make_account):
        await make_account("alice", "alice@example.com")
        account = await store.get_owner_account("alice")
        assert account.tb_balance == 1000
        assert account.earnings_total == 0
        assert account.free_boosts_remaining == 4
        assert account.last_earnings_update == T0
        assert account.display_name == "alice"

    async def test_create_duplicate_rejected(self, store, make_account):
        await make_account("alice")
        with pytest.raises(AccountExists):
            await store.create_account("alice", None, starting_balance=1000, now=T0)

    async def test_missing_account(self, store):
        assert await store.find_account("nobody") is None
        with pytest.raises(AccountNotFound):
            await store.get_owner_account("nobody")

    async def test_update_profile_trims_and_clears(self, store, make_account):
        account = await make_account("alice")
        account = await store.update_profile(
            account, {"nickname": "  Digger ", "address": "", "is_admin": True}
        )
        assert account.nickname == "Digger"
        assert account.address is None
        assert account.display_name == "Digger"

    async def test_set_owner_earnings_never_decreases(self, store, make_account):
        await make_account("alice")
        await store.set_owner_earnings("alice", 5.0, T0 + timedelta(minutes=1))
        account = await store.set_owner_earnings("alice", 3.0, T0 + timedelta(minutes=2))
        assert account.earnings_total == 5.0
        assert account.last_earnings_update == T0 + timedelta(minutes=2)

    async def test_adjust_balance(self, store, db_session, make_account):
        await make_account("alice")
        await store.adjust_balance("alice", -100)
        await store.adjust_balance("alice", 5, earned=True)
        account = await store.find_account("alice")
        await db_session.refresh(account)
        assert account.tb_balance == 905
        assert account.total_tb_earned == 5

    async def test_adjust_balance_missing_account(self, store):
        with pytest.raises(AccountNotFound):
            await store.adjust_balance("nobody", 1)

    async def test_boost_state_round_trip(self, store, make_account):
        await make_account("alice")
        state = BoostState(
            free_grants_remaining=2,
            expiry=T0 + timedelta(minutes=60),
            started_at=T0,
            paid_grants_used=1,
            paid_day=date(2025, 6, 15),
        )
        await store.set_boost_state("alice", state)
        account = await store.get_owner_account("alice")
        assert account.boost_state == state


class TestProperties:
    """Tests for property persistence."""

    async def test_create_and_find(self, store, make_account):
        await make_account("alice")
        await store.create_cell(_property("10_20", "alice", MineType.GOLD))
        prop = await store.get_cell("10_20")
        assert prop.owner_id == "alice"
        assert prop.mine_type == MineType.GOLD
        assert [p.id for p in await store.get_owned_cells("alice")] == ["10_20"]

    async def test_second_owner_loses(self, store, db_session, make_account):
        await make_account("alice")
        await make_account("bob")
        await store.create_cell(_property("10_20", "alice"))
        await db_session.commit()
        # A concurrent buyer's session has never seen alice's row
        db_session.expunge_all()

        with pytest.raises(AlreadyOwned):
            await store.create_cell(_property("10_20", "bob"))

        prop = await store.get_cell("10_20")
        assert prop.owner_id == "alice"

    async def test_missing_cell(self, store):
        assert await store.find_cell("1_1") is None
        with pytest.raises(CellNotFound):
            await store.get_cell("1_1")

    async def test_list_cells(self, store, make_account):
        await make_account("alice")
        await store.create_cell(_property("1_1", "alice"))
        await store.create_cell(_property("1_2", "alice"))
        owned = await store.list_cells(["1_1", "1_3"])
        assert list(owned) == ["1_1"]
        assert await store.list_cells([]) == {}

    async def test_count_owned_by_type(self, store, make_account):
        await make_account("alice")
        await store.create_cell(_property("1_1", "alice", MineType.ROCK))
        await store.create_cell(_property("1_2", "alice", MineType.ROCK))
        await store.create_cell(_property("1_3", "alice", MineType.DIAMOND))
        assert await store.count_owned_by_type() == {"rock": 2, "diamond": 1}

    async def test_set_cell_nickname(self, store, make_account):
        await make_account("alice")
        prop = await store.create_cell(_property("1_1", "alice"))
        prop = await store.set_cell_nickname(prop, "  Home ")
        assert prop.nickname == "Home"
        prop = await store.set_cell_nickname(prop, "   ")
        assert prop.nickname is None


class TestCheckIns:
    """Tests for check-in persistence."""

    async def test_last_check_in_date(self, store, make_account):
        await make_account("alice")
        await make_account("bob")
        prop = await store.create_cell(_property("1_1", "alice"))
        assert await store.last_check_in_date("bob", prop.id) is None

        await store.record_check_in(_check_in("bob", prop, date(2025, 6, 14)))
        await store.record_check_in(_check_in("bob", prop, date(2025, 6, 15), minutes=1))
        assert await store.last_check_in_date("bob", prop.id) == date(2025, 6, 15)

    async def test_same_day_duplicate_rejected(self, store, db_session, make_account):
        await make_account("alice")
        await make_account("bob")
        prop = await store.create_cell(_property("1_1", "alice"))
        await store.record_check_in(_check_in("bob", prop, date(2025, 6, 15)))
        await db_session.commit()

        with pytest.raises(AlreadyCheckedInToday):
            await store.record_check_in(_check_in("bob", prop, date(2025, 6, 15), minutes=5))

    async def test_listings_newest_first(self, store, make_account):
        await make_account("alice")
        await make_account("bob")
        first = await store.create_cell(_property("1_1", "alice"))
        second = await store.create_cell(_property("1_2", "alice"))
        await store.record_check_in(_check_in("bob", first, date(2025, 6, 15), minutes=1))
        await store.record_check_in(_check_in("bob", second, date(2025, 6, 15), minutes=2))

        mine = await store.check_ins_by_visitor("bob")
        assert [c.property_id for c in mine] == ["1_2", "1_1"]
        assert [c.visitor_id for c in await store.check_ins_for_property("1_1")] == ["bob"]
