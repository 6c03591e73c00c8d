"""Game operations exposed to the API: purchases, check-ins, earnings and boosts.

The service glues the pure engine to the store. Every operation takes its
time from the injected clock, so tests can drive it deterministically.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta

from terramine.clock import Clock, system_clock
from terramine.config import Settings, get_settings
from terramine.engine import accrual, boost
from terramine.engine.boost import BoostPolicy, BoostState, BoostStatus, GrantKind
from terramine.engine.grid import (
    CellId,
    cell_id_to_center,
    point_to_cell_id,
    validate_coordinates,
)
from terramine.engine.mines import assign_mine_type
from terramine.engine.proximity import (
    can_check_in_today,
    is_adjacent_or_inside,
    is_inside_cell,
    reference_date,
)
from terramine.exceptions import (
    AlreadyCheckedInToday,
    AlreadyOwned,
    InsufficientBalance,
    NotOwnedByOther,
    NotPropertyOwner,
    SelfOwned,
    TooFar,
)
from terramine.models import Account, CheckIn, Property
from terramine.services.location import LocationRegistry, location_registry
from terramine.services.photos import PhotoStore, get_photo_store
from terramine.services.sessions import SessionRegistry, session_registry
from terramine.services.store import AccountStore

logger = logging.getLogger(__name__)

CHECK_IN_BASE_REWARD = 1
CHECK_IN_MESSAGE_BONUS = 2
CHECK_IN_PHOTO_BONUS = 2
OWNER_CHECK_IN_REWARD = 1


def boost_policy_from_settings(settings: Settings) -> BoostPolicy:
    """Boost constants as configured."""
    return BoostPolicy(
        increment=timedelta(minutes=settings.boost_increment_minutes),
        ceiling=timedelta(minutes=settings.boost_ceiling_minutes),
        free_quota=settings.free_boost_quota,
        replenish_cooldown=timedelta(hours=settings.free_boost_cooldown_hours),
        max_paid_grants=settings.max_paid_boosts,
        timezone=settings.reference_tz,
    )


def check_in_reward(message: str | None, has_photo: bool) -> int:
    """TB a visitor earns: 1, plus 2 for a message, plus 2 for a photo."""
    reward = CHECK_IN_BASE_REWARD
    if message:
        reward += CHECK_IN_MESSAGE_BONUS
    if has_photo:
        reward += CHECK_IN_PHOTO_BONUS
    return reward


@dataclass(frozen=True)
class OfflineEarnings:
    """What an account earned since its last snapshot."""

    previous_total: float
    new_earnings: float
    total: float
    seconds_elapsed: float
    boosted_seconds: float


@dataclass(frozen=True)
class LiveEarnings:
    """Money counter value for display."""

    amount: float
    rate_per_second: float
    boost_active: bool
    live_session: bool

    @property
    def formatted(self) -> str:
        return accrual.format_earnings(self.amount)


@dataclass(frozen=True)
class CheckInReceipt:
    """Outcome of a successful check-in."""

    check_in: CheckIn
    visitor_tb_earned: int
    owner_tb_earned: int


class GameService:
    """Operations one request (or background pass) performs for players."""

    def __init__(
        self,
        store: AccountStore,
        *,
        clock: Clock = system_clock,
        sessions: SessionRegistry = session_registry,
        locations: LocationRegistry = location_registry,
        photos: PhotoStore | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.clock = clock
        self.sessions = sessions
        self.locations = locations
        self.settings = settings or get_settings()
        self.photos = photos or get_photo_store()
        self.rng = rng
        self.policy = boost_policy_from_settings(self.settings)

    # Helpers

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.clock.now()

    def _resolve_position(
        self,
        account_id: str,
        latitude: float | None,
        longitude: float | None,
        now: datetime,
    ) -> tuple[float, float]:
        if latitude is None or longitude is None:
            position = self.locations.get_current_position(account_id, now)
            return position.latitude, position.longitude
        validate_coordinates(latitude, longitude)
        return latitude, longitude

    async def _base_rate(self, account_id: str) -> float:
        cells = await self.store.get_owned_cells(account_id)
        return accrual.total_rate(c.mine_type for c in cells)

    def _rebase_session(
        self, account: Account, base_rate: float, now: datetime, force: bool = False
    ) -> None:
        if not force and not self.sessions.is_live(account.id):
            return
        state = account.boost_state
        self.sessions.rebase(
            account.id,
            account.earnings_total,
            base_rate,
            now,
            boost_expiry=state.expiry if state.is_active(now) else None,
        )

    # Earnings

    async def calculate_offline_earnings(
        self, account_id: str, now: datetime | None = None
    ) -> OfflineEarnings:
        """Earnings since the last snapshot, without writing anything."""
        now = self._now(now)
        account = await self.store.get_owner_account(account_id)
        cells = await self.store.get_owned_cells(account_id)
        earned = accrual.accrued_since(
            account.last_earnings_update,
            now,
            (c.mine_type for c in cells),
            account.boost_state.window,
        )
        return OfflineEarnings(
            previous_total=account.earnings_total,
            new_earnings=earned.amount,
            total=account.earnings_total + earned.amount,
            seconds_elapsed=earned.elapsed_seconds,
            boosted_seconds=earned.boosted_seconds,
        )

    async def flush_earnings(self, account_id: str, now: datetime | None = None) -> OfflineEarnings:
        """Persist the accumulated total as of ``now``.

        The absolute total and snapshot are written together, so repeating a
        flush at the same instant is a no-op.
        """
        now = self._now(now)
        earnings = await self.calculate_offline_earnings(account_id, now)
        account = await self.store.set_owner_earnings(account_id, earnings.total, now)
        self._rebase_session(account, await self._base_rate(account_id), now)
        return earnings

    async def start_session(self, account_id: str, now: datetime | None = None) -> OfflineEarnings:
        """Catch up offline earnings, restore boost state and open a live session."""
        now = self._now(now)
        # Catch-up must see the boost window before restore() clears it.
        earnings = await self.flush_earnings(account_id, now)

        account = await self.store.get_owner_account(account_id)
        restored, changed = boost.restore(account.boost_state, now, self.policy)
        if changed:
            account = await self.store.set_boost_state(account_id, restored)
            logger.info(f"Restored boost state for {account_id} at session start")

        self._rebase_session(account, await self._base_rate(account_id), now, force=True)
        if earnings.new_earnings > 0:
            logger.info(
                f"Account {account_id} earned {earnings.new_earnings:.12f} over "
                f"{earnings.seconds_elapsed:.0f}s offline ({earnings.boosted_seconds:.0f}s boosted)"
            )
        return earnings

    async def end_session(self, account_id: str, now: datetime | None = None) -> OfflineEarnings:
        """Flush and close the live session (backgrounding, logout)."""
        earnings = await self.flush_earnings(account_id, now)
        self.sessions.end(account_id)
        return earnings

    async def get_live_display_earnings(
        self, account_id: str, now: datetime | None = None
    ) -> LiveEarnings:
        """Money counter value, extrapolated from the live session when there is one."""
        now = self._now(now)
        account = await self.store.get_owner_account(account_id)
        boost_active = account.boost_state.is_active(now)
        session = self.sessions.get(account_id)
        if session is not None:
            return LiveEarnings(
                amount=session.display_value(now),
                rate_per_second=session.rate_at(now),
                boost_active=boost_active,
                live_session=True,
            )

        earnings = await self.calculate_offline_earnings(account_id, now)
        base_rate = await self._base_rate(account_id)
        return LiveEarnings(
            amount=earnings.total,
            rate_per_second=accrual.effective_rate(base_rate, boost_active),
            boost_active=boost_active,
            live_session=False,
        )

    async def tick_boost(self, account_id: str, now: datetime | None = None) -> BoostState:
        """Apply due boost transitions and persist them if anything changed."""
        now = self._now(now)
        account = await self.store.get_owner_account(account_id)
        state = account.boost_state
        ticked = boost.tick(state, now, self.policy)
        if ticked != state:
            if state.expiry is not None and ticked.expiry is None:
                # Settle boosted income before the window is forgotten.
                await self.flush_earnings(account_id, now)
            await self.store.set_boost_state(account_id, ticked)
        return ticked

    # Boosts

    async def boost_status(self, account_id: str, now: datetime | None = None) -> BoostStatus:
        now = self._now(now)
        account = await self.store.get_owner_account(account_id)
        return boost.status(account.boost_state, now, self.policy)

    async def request_boost(
        self, account_id: str, kind: GrantKind, now: datetime | None = None
    ) -> BoostStatus:
        """Spend a free or paid grant to add boost time."""
        now = self._now(now)
        await self.flush_earnings(account_id, now)
        account = await self.store.get_owner_account(account_id)

        state = boost.tick(account.boost_state, now, self.policy)
        if kind == GrantKind.FREE:
            state = boost.grant_free(state, now, self.policy)
        else:
            state = boost.grant_paid(state, now, self.policy)

        account = await self.store.set_boost_state(account_id, state)
        self._rebase_session(account, await self._base_rate(account_id), now)
        logger.info(f"{kind.value.title()} boost for {account_id}, active until {state.expiry}")
        return boost.status(state, now, self.policy)

    # Properties

    async def purchase_cell(
        self,
        account_id: str,
        latitude: float | None = None,
        longitude: float | None = None,
        *,
        cell_id: CellId | None = None,
        now: datetime | None = None,
    ) -> Property:
        """Buy a cell standing at (latitude, longitude).

        Without ``cell_id`` the cell under the buyer is bought. The buyer must
        be inside or next to the cell and afford it. Omitted coordinates fall
        back to the last reported position.
        """
        now = self._now(now)
        latitude, longitude = self._resolve_position(account_id, latitude, longitude, now)
        if cell_id is None:
            cell_id = point_to_cell_id(latitude, longitude, self.settings.grid_size_degrees)
        account = await self.store.get_owner_account(account_id)
        cost = self.settings.property_cost_tb

        if account.tb_balance < cost:
            raise InsufficientBalance(f"You need {cost} TB to purchase a property")
        if await self.store.find_cell(cell_id.key) is not None:
            raise AlreadyOwned()
        if not is_adjacent_or_inside(latitude, longitude, cell_id, self.settings.grid_size_degrees):
            raise TooFar("You must be within or adjacent to the property to purchase it")

        # Settle income at the old rate before the portfolio changes.
        await self.flush_earnings(account_id, now)

        center = cell_id_to_center(cell_id.grid_x, cell_id.grid_y, self.settings.grid_size_degrees)
        prop = await self.store.create_cell(
            Property(
                id=cell_id.key,
                grid_x=cell_id.grid_x,
                grid_y=cell_id.grid_y,
                owner_id=account_id,
                mine_type=assign_mine_type(self.rng),
                center_lat=center.latitude,
                center_lng=center.longitude,
                purchased_at=now,
            )
        )
        await self.store.adjust_balance(account_id, -cost)

        account = await self.store.get_owner_account(account_id)
        self._rebase_session(account, await self._base_rate(account_id), now)
        logger.info(f"Account {account_id} purchased {prop.id} ({prop.mine_type.value})")
        return prop

    async def rename_cell(self, account_id: str, cell_key: str, nickname: str | None) -> Property:
        prop = await self.store.get_cell(cell_key)
        if prop.owner_id != account_id:
            raise NotPropertyOwner()
        return await self.store.set_cell_nickname(prop, nickname)

    # Check-ins

    async def check_in(
        self,
        visitor_id: str,
        cell_id: CellId,
        latitude: float | None = None,
        longitude: float | None = None,
        message: str | None = None,
        photo: bytes | None = None,
        now: datetime | None = None,
    ) -> CheckInReceipt:
        """Record a visit to someone else's property and pay both parties."""
        now = self._now(now)
        latitude, longitude = self._resolve_position(visitor_id, latitude, longitude, now)
        visitor = await self.store.get_owner_account(visitor_id)

        prop = await self.store.find_cell(cell_id.key)
        if prop is None:
            raise NotOwnedByOther()
        if prop.owner_id == visitor_id:
            raise SelfOwned()
        if not is_inside_cell(latitude, longitude, cell_id, self.settings.grid_size_degrees):
            raise TooFar("You must be within the property boundaries to check in")

        tz = self.settings.reference_tz
        last = await self.store.last_check_in_date(visitor_id, prop.id)
        if not can_check_in_today(last, now, tz):
            raise AlreadyCheckedInToday()

        message = (message or "").strip() or None
        photo_url = None
        if photo:
            key = f"checkins/{prop.id}/{visitor_id}_{int(now.timestamp() * 1000)}"
            photo_url = await self.photos.put(photo, key)

        reward = check_in_reward(message, photo_url is not None)
        check_in = CheckIn(
            visitor_id=visitor_id,
            visitor_name=visitor.display_name,
            property_id=prop.id,
            property_owner_id=prop.owner_id,
            message=message,
            photo_url=photo_url,
            tb_earned=reward,
            reference_date=reference_date(now, tz),
            created_at=now,
        )
        try:
            await self.store.record_check_in(check_in)
        except AlreadyCheckedInToday:
            # A concurrent check-in won; nothing references the photo.
            if photo_url is not None:
                await self.photos.delete(photo_url)
            raise
        await self.store.adjust_balance(visitor_id, reward, earned=True)
        await self.store.increment_check_ins(visitor_id)
        await self.store.adjust_balance(prop.owner_id, OWNER_CHECK_IN_REWARD, earned=True)

        logger.info(
            f"Check-in by {visitor_id} at {prop.id}: visitor +{reward} TB, "
            f"owner {prop.owner_id} +{OWNER_CHECK_IN_REWARD} TB"
        )
        return CheckInReceipt(check_in, reward, OWNER_CHECK_IN_REWARD)
