# app.py
from __future__ import annotations
from datetime import datetime
from typing import Callable, Optional

from config import Settings
from game_engine import GameEngine
from operation.events.event_bus import EventBus
from operation.logging.logging_config import get_logger, setup_logging
from operation.storage.state_store import InMemoryStateStore, JsonFileStateStore, StateStore

logger = get_logger(__name__)

# ---------------------------
# Composition root
# ---------------------------

def build_store(settings: Settings) -> StateStore:
    if settings.state_dir:
        logger.info(f"Persisting state under {settings.state_dir}")
        return JsonFileStateStore(settings.state_dir)
    logger.info("FINQUEST_STATE_DIR not set, keeping state in memory")
    return InMemoryStateStore()


def build_engine(
    settings: Optional[Settings] = None,
    store: Optional[StateStore] = None,
    bus: Optional[EventBus] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> GameEngine:
    """
    Configure logging and assemble a GameEngine.

    Args:
        settings: Settings to use (read from the environment when omitted)
        store: State store overriding the one chosen from settings
        bus: Event bus the UI subscribes to (a fresh one when omitted)
        clock: Source of the current time
    """
    settings = settings or Settings.from_env()
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    engine = GameEngine(
        store=store if store is not None else build_store(settings),
        bus=bus or EventBus(),
        clock=clock,
    )
    logger.info(f"Engine ready: {len(engine.plans)} plan(s), {engine.xp} XP")
    return engine
