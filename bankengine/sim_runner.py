"""bankengine.sim_runner

Headless runner for quick sanity checks.

This keeps tests deterministic and CI-friendly: no UI, no disk.
Policies are plain callables (state, history) -> TurnDecisions.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

from bankcore.state import GameState, HistoryEntry, history_to_dict, state_to_dict

from .advisor import recommend_rates
from .config import EngineConfig
from .decisions import TurnDecisions, hold_course
from .session import SetupChoices, new_session

Policy = Callable[[GameState, Sequence[HistoryEntry]], TurnDecisions]


def hold_policy(state: GameState, history: Sequence[HistoryEntry]) -> TurnDecisions:
    return hold_course(state)


def advisor_policy(state: GameState, history: Sequence[HistoryEntry]) -> TurnDecisions:
    """Follow the rate advisor every week, keep the strategy."""
    rec = recommend_rates(state, history)
    return TurnDecisions(strategy=state.current_strategy, loan_rate=rec.loan.rate, deposit_rate=rec.deposit.rate)


def run_headless_sim(
    turns: int = 48,
    policy: Optional[Policy] = None,
    *,
    setup: SetupChoices = SetupChoices(),
    base_seed: int = 123,
) -> Dict[str, Any]:
    """Run a deterministic simulation and return summary."""
    session = new_session(setup, EngineConfig(base_seed=base_seed, autosave=False))
    policy = policy or advisor_policy

    played = 0
    for _ in range(int(turns)):
        if session.state.is_game_over:
            break
        session.play_turn(policy(session.state, session.history))
        played += 1

    history: List[Dict[str, Any]] = [history_to_dict(h) for h in session.history]
    return {
        "turns": played,
        "final": session.state,
        "final_dict": state_to_dict(session.state),
        "history": history,
        "news": list(session.news),
        "game_over": session.state.is_game_over,
    }
