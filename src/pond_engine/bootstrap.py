"""Wire a PondEngine from settings: journal backend, custody book and context source."""

import logging

from config.settings import Settings
from src.pond_common.database import get_session_factory
from src.pond_custody.infrastructure.memory_custody import InMemoryCustody
from src.pond_engine.config import EngineConfig
from src.pond_engine.engine import PondEngine
from src.pond_events.domain.events import EventJournal
from src.pond_events.infrastructure.memory_journal import InMemoryEventJournal
from src.pond_events.infrastructure.sql_journal import SqlEventJournal
from src.pond_selection.domain.context import LocalContextProvider

logger = logging.getLogger(__name__)


def build_journal(kind: str) -> EventJournal:
    if kind == "memory":
        return InMemoryEventJournal()
    if kind == "sql":
        return SqlEventJournal(get_session_factory())
    raise ValueError(f"unknown event journal backend: {kind!r}")


def build_engine(settings: Settings) -> PondEngine:
    config = EngineConfig.from_settings(settings)
    journal = build_journal(settings.EVENT_JOURNAL)
    custody = InMemoryCustody(engine_address=config.engine_address)
    contexts = LocalContextProvider(engine_address=config.engine_address)
    logger.info(
        "Pond engine ready: journal=%s fee=%d%% timelock=%ds policy=%s",
        settings.EVENT_JOURNAL,
        config.fee_percent,
        config.selection_timelock,
        config.custom_pond_policy.value,
    )
    return PondEngine(config=config, custody=custody, journal=journal, context_provider=contexts)
