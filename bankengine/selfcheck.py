"""
bankengine.selfcheck
Minimal "it runs" proof: one in-game year of weeks, invariants after each.

Run:
  python -m bankengine.selfcheck
"""

from __future__ import annotations

from bankcore.effects import usage_total
from bankcore.modifiers import LEDGER_CAP, TURNS_PER_YEAR
from bankcore.state import Strategy, TechUpgradeType

from .config import EngineConfig
from .decisions import CampaignAction, TechInvestAction, TurnDecisions
from .session import SetupChoices, new_session


def run_year_smoke(base_seed: int = 42) -> None:
    session = new_session(SetupChoices(), EngineConfig(base_seed=base_seed, autosave=False))
    strategies = list(Strategy)

    for week in range(TURNS_PER_YEAR):
        state = session.state
        if state.is_game_over:
            break

        # rotate strategies, run one campaign and one project early on
        decisions = TurnDecisions(
            strategy=strategies[(week // 12) % len(strategies)],
            loan_rate=state.loan_interest_rate,
            deposit_rate=state.deposit_interest_rate,
            campaign_action=CampaignAction.launch("SOCIAL_MEDIA_BLITZ", 2000, 2) if week == 2 else None,
            tech_action=TechInvestAction(TechUpgradeType.THEME_UPDATE) if week == 4 else None,
        )
        before = session.state
        result = session.play_turn(decisions)
        state = session.state

        # invariants
        assert 0.0 <= state.reputation <= 100.0
        assert 0.0 <= state.customer_satisfaction <= 100.0
        assert 0.0 <= state.risk_factor <= 100.0
        assert 1.0 <= state.app_rating <= 5.0
        assert len(state.transactions) <= LEDGER_CAP
        assert usage_total(state.channel_usage) == state.total_customers
        if state.is_game_over:
            assert state.game_over_message
            assert result.history_entry is None
        else:
            assert state.turn == before.turn + 1
            assert state.cash >= 0.0
            assert result.history_entry is not None

    print("OK: one-year engine smoke test passed.")
    print(f"Turns played: {len(session.history)}  game over: {session.state.is_game_over}")
    print(f"Final cash: {session.state.cash:,.2f}  customers: {session.state.total_customers}")


if __name__ == "__main__":
    run_year_smoke()
