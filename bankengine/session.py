"""bankengine.session

Explicit game session: owns state, history and news for one player.

The resolver takes and returns state by value; this object is the only place
that keeps the running game. Persistence is delegated to an injected
SnapshotStore and happens after a turn has fully resolved.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Protocol

from bankcore.effects import allocate_channels, channel_weights
from bankcore.modifiers import DEFAULT_TABLES, ModifierTables
from bankcore.rng import turn_rng
from bankcore.state import (
    BankType,
    Branding,
    Difficulty,
    GameSettings,
    GameState,
    HistoryEntry,
    NewsEvent,
    NewsLevel,
    default_start_state,
)

from .advisor import RateRecommendation, recommend_rates
from .config import DEFAULT_CONFIG, EngineConfig
from .decisions import TurnDecisions, hold_course
from .resolver import TurnResult, resolve_turn
from .snapshot import dumps_snapshot, make_snapshot, parse_snapshot

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    def load(self) -> Optional[str]:
        ...

    def save(self, payload: str) -> None:
        ...


class JsonFileStore:
    """Single-file autosave slot."""

    def __init__(self, path: str) -> None:
        self.path = str(path)

    def load(self) -> Optional[str]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def save(self, payload: str) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp, self.path)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)


@dataclass(frozen=True)
class SetupChoices:
    bank_name: str = "Pioneer Financial"
    bank_logo: str = "Vault"
    theme_color: str = "blue"
    bank_type: BankType = BankType.RETAIL
    difficulty: Difficulty = Difficulty.NORMAL


def initial_state(setup: SetupChoices, *, tables: ModifierTables = DEFAULT_TABLES) -> GameState:
    """Start state for a new bank: difficulty scales cash, bank type shapes channels."""
    base = default_start_state()
    weights = channel_weights(
        satisfaction=base.customer_satisfaction,
        strategy=base.current_strategy,
        digital_boost=base.digital_channel_boost,
        app_rating=base.app_rating,
        bank_type=setup.bank_type,
        strategies=tables.strategies,
        bank_types=tables.bank_types,
    )
    return replace(
        base,
        cash=base.cash * tables.difficulty(setup.difficulty).cash_modifier,
        bank_type=setup.bank_type,
        difficulty=setup.difficulty,
        channel_usage=allocate_channels(base.total_customers, weights),
        settings=replace(
            base.settings,
            branding=Branding(bank_name=setup.bank_name, bank_logo=setup.bank_logo, theme_color=setup.theme_color),
        ),
    )


@dataclass
class GameSession:
    state: GameState
    history: List[HistoryEntry] = field(default_factory=list)
    news: List[NewsEvent] = field(default_factory=list)  # newest first
    config: EngineConfig = DEFAULT_CONFIG
    tables: ModifierTables = DEFAULT_TABLES
    store: Optional[SnapshotStore] = None

    @property
    def next_news_id(self) -> int:
        return max((n.id for n in self.news), default=0) + 1

    def add_news(self, message: str, level: NewsLevel = NewsLevel.INFO) -> NewsEvent:
        ev = NewsEvent(id=self.next_news_id, message=message, level=level)
        self.news = [ev, *self.news][: self.config.news_cap]
        return ev

    def recommendations(self) -> RateRecommendation:
        return recommend_rates(self.state, self.history, tables=self.tables)

    def play_turn(self, decisions: Optional[TurnDecisions] = None) -> TurnResult:
        """Resolve one week and commit it. Raises GameOverError once the game has ended."""
        result = resolve_turn(
            self.state,
            decisions if decisions is not None else hold_course(self.state),
            rng=turn_rng(self.state.turn, base_seed=self.config.base_seed),
            config=self.config,
            tables=self.tables,
            recent_history=self.history[-2:],
            first_news_id=self.next_news_id,
        )
        self.state = result.state
        if result.history_entry is not None:
            self.history.append(result.history_entry)
        self.news = [*reversed(result.news), *self.news][: self.config.news_cap]
        self.autosave()
        return result

    def update_settings(self, settings: GameSettings) -> None:
        self.state = replace(self.state, settings=settings)
        self.add_news("Game settings updated.", NewsLevel.SUCCESS)
        self.autosave()

    def snapshot(self) -> dict:
        return make_snapshot(self.state, self.history, self.news)

    def export_json(self) -> str:
        return dumps_snapshot(self.snapshot())

    def autosave(self) -> None:
        """Persist unless disabled, storeless or finished (a lost game is not resumable)."""
        if self.store is None or not self.config.autosave or self.state.is_game_over:
            return
        self.store.save(self.export_json())


def new_session(
    setup: SetupChoices = SetupChoices(),
    config: EngineConfig = DEFAULT_CONFIG,
    *,
    tables: ModifierTables = DEFAULT_TABLES,
    store: Optional[SnapshotStore] = None,
) -> GameSession:
    session = GameSession(state=initial_state(setup, tables=tables), config=config, tables=tables, store=store)
    session.add_news(f"Welcome, CEO! {setup.bank_name} is now ready for business.", NewsLevel.SUCCESS)
    logger.info("new session: %s (%s, %s)", setup.bank_name, setup.bank_type.value, setup.difficulty.value)
    session.autosave()
    return session


def load_snapshot(
    payload: Any,
    config: EngineConfig = DEFAULT_CONFIG,
    *,
    tables: ModifierTables = DEFAULT_TABLES,
    store: Optional[SnapshotStore] = None,
) -> GameSession:
    """Session from a snapshot (JSON text or mapping). Raises ValueError if malformed."""
    state, history, news = parse_snapshot(payload)
    return GameSession(
        state=state,
        history=history,
        news=news[: config.news_cap],
        config=config,
        tables=tables,
        store=store,
    )


def restore_or_new(
    store: SnapshotStore,
    config: EngineConfig = DEFAULT_CONFIG,
    *,
    tables: ModifierTables = DEFAULT_TABLES,
) -> Optional[GameSession]:
    """Resume the autosave.

    Returns None when there is nothing saved (the caller shows setup). A
    save that cannot be read falls back to a fresh default game.
    """
    payload = store.load()
    if payload is None:
        return None
    try:
        return load_snapshot(payload, config, tables=tables, store=store)
    except ValueError as e:
        logger.warning("failed to load saved game, starting fresh: %s", e)
        return GameSession(state=default_start_state(), config=config, tables=tables, store=store)

