"""PondFactory: reference adapter that creates ponds through the engine.

Standard ponds get deterministic ids per (period, asset) and start on the
natural window that contains "now". Custom ponds are keyed by name.
"""

import logging
from collections.abc import Iterable

from src.pond_common.enums import STANDARD_PERIODS, PondPeriod
from src.pond_common.errors import InvalidPondTypeError, PondAlreadyExistsError
from src.pond_common.time_window import period_window
from src.pond_custody.domain.transfer import token_symbol_or_default
from src.pond_engine.engine import PondEngine
from src.pond_gateway.auth.roles import Caller
from src.pond_ledger.domain.models import Pond
from src.pond_ledger.domain.pond_ids import custom_pond_id, standard_pond_id

logger = logging.getLogger(__name__)

PERIOD_LABELS: dict[PondPeriod, str] = {
    PondPeriod.FIVE_MINUTES: "Five-Min",
    PondPeriod.HOURLY: "Hourly",
    PondPeriod.DAILY: "Daily",
    PondPeriod.WEEKLY: "Weekly",
    PondPeriod.MONTHLY: "Monthly",
}


class PondFactory:
    def __init__(self, engine: PondEngine) -> None:
        self._engine = engine

    async def create_standard_ponds(
        self,
        caller: Caller,
        asset_address: str,
        min_toss: int | None = None,
        max_total_toss: int | None = None,
        periods: Iterable[PondPeriod] = STANDARD_PERIODS,
    ) -> list[Pond]:
        """Create every missing standard pond for an asset; existing ones are skipped."""
        config = self._engine.get_config()
        min_toss = config.default_min_toss if min_toss is None else min_toss
        max_total_toss = config.default_max_total_toss if max_total_toss is None else max_total_toss
        symbol = await token_symbol_or_default(self._engine.custody, asset_address)
        now = self._engine.now()

        created: list[Pond] = []
        for period in periods:
            if not period.is_standard:
                raise InvalidPondTypeError("custom ponds are created with create_custom_pond")
            pond_id = standard_pond_id(period, asset_address)
            start, end = period_window(period, now)
            try:
                pond = await self._engine.create_pond(
                    caller,
                    pond_id=pond_id,
                    name=f"{symbol} {PERIOD_LABELS[period]} Pond",
                    start_time=start,
                    end_time=end,
                    min_toss=min_toss,
                    max_total_toss=max_total_toss,
                    asset_address=asset_address,
                    period=period,
                )
            except PondAlreadyExistsError:
                logger.info("Standard pond %s for %s already exists, skipped", period.value, symbol)
                continue
            created.append(pond)
        return created

    async def create_custom_pond(
        self,
        caller: Caller,
        name: str,
        start_time: int,
        end_time: int,
        asset_address: str,
        min_toss: int | None = None,
        max_total_toss: int | None = None,
    ) -> Pond:
        if not name.strip():
            raise InvalidPondTypeError("custom ponds need a name")
        config = self._engine.get_config()
        return await self._engine.create_pond(
            caller,
            pond_id=custom_pond_id(name),
            name=name,
            start_time=start_time,
            end_time=end_time,
            min_toss=config.default_min_toss if min_toss is None else min_toss,
            max_total_toss=config.default_max_total_toss if max_total_toss is None else max_total_toss,
            asset_address=asset_address,
            period=PondPeriod.CUSTOM,
        )
