"""PondEngine: the single entry point for every pond operation.

Wires the ledger, custody, journal and services together. Each mutating
call checks the caller's role, takes the pond's guard and pulls a fresh
ExecutionContext, whose timestamp is the engine's notion of "now".
"""

import logging
from typing import Any

from src.pond_common.enums import STANDARD_PERIODS, AssetKind, PondEventType, PondPeriod, Role
from src.pond_common.errors import InvalidPondTypeError, ZeroAddressError
from src.pond_custody.domain.transfer import AssetTransferProtocol
from src.pond_deposit.application.service import DepositService, TopUpReceipt, TossReceipt
from src.pond_engine.config import EngineConfig
from src.pond_engine.guard import PondGuard
from src.pond_engine.views import ParticipantView, PondStatus, StandardPondView
from src.pond_events.domain.events import ENGINE_SCOPE, EventJournal, PondEvent, emit
from src.pond_gateway.auth.roles import ANONYMOUS, Caller, require_role
from src.pond_ledger.domain.ledger import PondLedger, validate_limits
from src.pond_ledger.domain.models import ConsistencyReport, Pond, WinnerRecord, is_zero_address
from src.pond_ledger.domain.pond_ids import standard_pond_id
from src.pond_reclaim.application.service import ClearResult, RefundBatchResult, ReclaimService
from src.pond_selection.domain.context import ContextProvider
from src.pond_settlement.application.service import SettlementResult, SettlementService
from src.pond_settlement.application.upkeep import UpkeepCheck, UpkeepService
from src.pond_settlement.domain.lifecycle import ResetOutcome

logger = logging.getLogger(__name__)


class PondEngine:
    def __init__(
        self,
        config: EngineConfig,
        custody: AssetTransferProtocol,
        journal: EventJournal,
        context_provider: ContextProvider,
        ledger: PondLedger | None = None,
    ) -> None:
        self._config = config
        self.ledger = ledger or PondLedger()
        self.custody = custody
        self.journal = journal
        self.contexts = context_provider
        self._guard = PondGuard()

        self._deposits = DepositService(self.ledger, custody, journal, self.get_config)
        self._settlement = SettlementService(self.ledger, custody, journal, self.get_config)
        self._upkeep = UpkeepService(self.ledger, self._settlement)
        self._reclaim = ReclaimService(
            self.ledger, custody, journal, self.get_config, self._settlement
        )

    def now(self) -> int:
        return self.contexts.current().timestamp

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_config(self) -> EngineConfig:
        return self._config

    async def update_config(self, caller: Caller, **changes: Any) -> EngineConfig:
        require_role(caller, Role.ADMIN)
        async with self._guard.hold(ENGINE_SCOPE):
            updated = self._config.with_changes(**changes)
            self._config = updated
            logger.info("Config updated by %s: %s", caller.address, sorted(changes))
            await emit(
                self.journal,
                PondEventType.CONFIG_UPDATED,
                ENGINE_SCOPE,
                self.now(),
                changed=sorted(changes),
                updated_by=caller.address,
            )
            return updated

    # ------------------------------------------------------------------
    # Pond lifecycle
    # ------------------------------------------------------------------

    async def create_pond(
        self,
        caller: Caller,
        pond_id: str,
        name: str,
        start_time: int,
        end_time: int,
        min_toss: int,
        max_total_toss: int,
        asset_address: str,
        period: PondPeriod,
    ) -> Pond:
        require_role(caller, Role.FACTORY)
        asset_kind = AssetKind.NATIVE if is_zero_address(asset_address) else AssetKind.TOKEN
        if period.is_standard and pond_id != standard_pond_id(period, asset_address):
            raise InvalidPondTypeError(f"{pond_id} is not the {period.value} id for {asset_address}")
        async with self._guard.hold(pond_id):
            now = self.now()
            pond = self.ledger.create(
                pond_id=pond_id,
                name=name,
                start_time=start_time,
                end_time=end_time,
                min_toss=min_toss,
                max_total_toss=max_total_toss,
                asset_kind=asset_kind,
                asset_address=asset_address,
                period=period,
                now=now,
            )
            await emit(
                self.journal,
                PondEventType.POND_CREATED,
                pond_id,
                now,
                name=name,
                period=period.value,
                asset=asset_address,
                start_time=start_time,
                end_time=end_time,
                min_toss=min_toss,
                max_total_toss=max_total_toss,
            )
            return pond

    async def remove_pond(self, caller: Caller, pond_id: str) -> None:
        require_role(caller, Role.POND_MANAGER)
        async with self._guard.hold(pond_id):
            self.ledger.remove(pond_id)
            await emit(
                self.journal,
                PondEventType.POND_REMOVED,
                pond_id,
                self.now(),
                removed_by=caller.address,
            )

    async def update_pond_limits(
        self,
        caller: Caller,
        pond_id: str,
        min_toss: int | None = None,
        max_total_toss: int | None = None,
    ) -> Pond:
        require_role(caller, Role.POND_MANAGER)
        async with self._guard.hold(pond_id):
            pond = self.ledger.get(pond_id)
            new_min = pond.min_toss if min_toss is None else min_toss
            new_max = pond.max_total_toss if max_total_toss is None else max_total_toss
            validate_limits(new_min, new_max)
            pond.min_toss, pond.max_total_toss = new_min, new_max
            logger.info("Pond %s limits: min_toss=%d max_total_toss=%d", pond_id, new_min, new_max)
            await emit(
                self.journal,
                PondEventType.POND_LIMITS_UPDATED,
                pond_id,
                self.now(),
                min_toss=new_min,
                max_total_toss=new_max,
            )
            return pond

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------

    async def toss(
        self, depositor: str, pond_id: str, amount: int, attached_value: int = 0
    ) -> TossReceipt:
        async with self._guard.hold(pond_id):
            return await self._deposits.toss(pond_id, depositor, amount, attached_value, self.now())

    async def top_up(
        self, sponsor: str, pond_id: str, amount: int, attached_value: int = 0
    ) -> TopUpReceipt:
        async with self._guard.hold(pond_id):
            return await self._deposits.top_up(pond_id, sponsor, amount, attached_value, self.now())

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def settle(self, pond_id: str, caller: Caller = ANONYMOUS) -> SettlementResult:
        async with self._guard.hold(pond_id):
            logger.debug("Settle requested by %s for %s", caller.address, pond_id)
            return await self._settlement.settle(pond_id, self.contexts.current())

    def check_upkeep(self) -> UpkeepCheck:
        return self._upkeep.check_upkeep(self.now())

    async def perform_upkeep(self, pond_id: str) -> SettlementResult:
        async with self._guard.hold(pond_id):
            return await self._upkeep.perform_upkeep(pond_id, self.contexts.current())

    # ------------------------------------------------------------------
    # Reclaim and emergency operations
    # ------------------------------------------------------------------

    async def batch_clear(self, caller: Caller, pond_id: str, start: int, end: int) -> ClearResult:
        require_role(caller, Role.ADMIN)
        async with self._guard.hold(pond_id):
            return await self._reclaim.batch_clear(pond_id, start, end, self.now())

    async def refund_batch(
        self, caller: Caller, pond_id: str, start: int, end: int
    ) -> RefundBatchResult:
        require_role(caller, Role.ADMIN)
        async with self._guard.hold(pond_id):
            return await self._reclaim.refund_batch(pond_id, start, end, self.now())

    async def emergency_reset(self, caller: Caller, pond_id: str) -> ResetOutcome:
        require_role(caller, Role.ADMIN)
        async with self._guard.hold(pond_id):
            return await self._reclaim.emergency_reset(pond_id, self.now())

    async def emergency_withdraw(self, caller: Caller, asset: str, to: str, amount: int) -> None:
        require_role(caller, Role.ADMIN)
        async with self._guard.hold(ENGINE_SCOPE):
            await self._reclaim.emergency_withdraw(asset, to, amount, self.now())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_pond(self, pond_id: str) -> Pond:
        return self.ledger.get(pond_id)

    def get_pond_status(self, pond_id: str, now: int | None = None) -> PondStatus:
        pond = self.ledger.get(pond_id)
        now = self.now() if now is None else now
        stale = pond.stale_participants
        return PondStatus(
            pond_id=pond.id,
            name=pond.name,
            start_time=pond.start_time,
            end_time=pond.end_time,
            total_tosses=pond.total_tosses,
            total_value=pond.total_value,
            total_weight=pond.total_weight,
            participant_count=pond.participant_count,
            prize_distributed=pond.prize_distributed,
            time_until_end=max(0, pond.end_time - now),
            min_toss=pond.min_toss,
            max_total_toss=pond.max_total_toss,
            asset_kind=pond.asset_kind,
            asset_address=pond.asset_address,
            period=pond.period,
            phase=self._settlement.phase(pond, now),
            refund_in_progress=pond.refund is not None,
            pending_clear=0 if stale is None else stale.count - stale.cleared,
        )

    def get_pond_participants(self, pond_id: str) -> list[ParticipantView]:
        pond = self.ledger.get(pond_id)
        return [ParticipantView(address=p.address, amount=p.amount) for p in pond.participants]

    def get_participant_amount(self, pond_id: str, address: str) -> int:
        return self.ledger.get(pond_id).participant_amount(address)

    def get_last_winner(self, pond_id: str) -> WinnerRecord | None:
        return self.ledger.get(pond_id).last_winner

    def get_all_pond_ids(self) -> list[str]:
        return self.ledger.all_ids()

    def get_standard_pond_ids(self, asset_address: str | None = None) -> list[str]:
        return self.ledger.standard_ids(asset_address)

    def get_supported_assets(self) -> list[str]:
        return self.ledger.supported_assets()

    def get_standard_ponds_for_ui(self, asset_address: str) -> list[StandardPondView]:
        if not asset_address:
            raise ZeroAddressError("asset")
        now = self.now()
        rows: list[StandardPondView] = []
        for period in STANDARD_PERIODS:
            pond_id = standard_pond_id(period, asset_address)
            if not self.ledger.exists(pond_id):
                rows.append(StandardPondView(period=period, pond_id=pond_id, exists=False))
                continue
            pond = self.ledger.get(pond_id)
            rows.append(
                StandardPondView(
                    period=period,
                    pond_id=pond_id,
                    exists=True,
                    name=pond.name,
                    start_time=pond.start_time,
                    end_time=pond.end_time,
                    total_tosses=pond.total_tosses,
                    total_value=pond.total_value,
                    participant_count=pond.participant_count,
                    prize_distributed=pond.prize_distributed,
                    time_until_end=max(0, pond.end_time - now),
                )
            )
        return rows

    def debug_pond_data(self, pond_id: str) -> ConsistencyReport:
        return PondLedger.consistency(self.ledger.get(pond_id))

    async def list_events(
        self,
        pond_id: str | None = None,
        event_type: PondEventType | None = None,
        limit: int = 100,
    ) -> list[PondEvent]:
        return await self.journal.list_events(pond_id, event_type, limit)
