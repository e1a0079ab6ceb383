"""bankengine.config

Engine configuration passed from the UI / session.
"""

from __future__ import annotations

from dataclasses import dataclass

from bankcore.modifiers import FEEDBACK_CAP, LEDGER_CAP, NEWS_CAP, SMOOTHING_FACTOR


@dataclass(frozen=True)
class EngineConfig:
    base_seed: int = 42
    smoothing_factor: float = SMOOTHING_FACTOR
    ledger_cap: int = LEDGER_CAP
    feedback_cap: int = FEEDBACK_CAP
    news_cap: int = NEWS_CAP
    autosave: bool = True


DEFAULT_CONFIG = EngineConfig()
