"""bankengine.advisor

Rate recommendations shown next to the rate sliders.

Pure: reads the current state and the recorded history, never mutates
either, and draws no randomness. Net outcome and default figures only exist
for resolved weeks, so those series come from history alone; balance-derived
series (loan/deposit ratio, customers) also take the current state as their
latest point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from bankcore.modifiers import BASE_WEEKLY_DEFAULT_RATE, DEFAULT_TABLES, TURNS_PER_YEAR, ModifierTables
from bankcore.state import GameState, HistoryEntry, Strategy, clamp

LOAN_RATE_MIN, LOAN_RATE_MAX = 3.0, 9.5
DEPOSIT_RATE_MIN, DEPOSIT_RATE_MAX = 1.0, 5.0
HILL_CLIMB_STEP = 0.125
HILL_CLIMB_MAX_STEPS = 20

PROFITABILITY = "ensuring profitability"


@dataclass(frozen=True)
class Recommendation:
    rate: float
    reason: str


@dataclass(frozen=True)
class RateRecommendation:
    loan: Recommendation
    deposit: Recommendation


DEFAULT_RECOMMENDATION = RateRecommendation(
    loan=Recommendation(5.5, "A balanced base rate to start. Analysis will begin next week."),
    deposit=Recommendation(2.5, "A standard rate to maintain deposit levels."),
)


def trend(values: Sequence[float]) -> float:
    """OLS slope of `values` against 0..n-1 (0 for fewer than two points)."""
    if len(values) < 2:
        return 0.0
    x = np.arange(len(values), dtype=float)
    slope, _ = np.polyfit(x, np.asarray(values, dtype=float), 1)
    return float(slope)


def format_reasons(reasons: Sequence[str], fallback: str) -> str:
    unique: List[str] = list(dict.fromkeys(reasons))
    if not unique:
        return fallback
    if len(unique) == 1:
        return f"This rate is suggested due to {unique[0]}."
    return f"This rate is suggested based on: {', '.join(unique[:-1])}, and {unique[-1]}."


def project_weekly_outcome(state: GameState, loan_rate: float, deposit_rate: float, *,
                           tables: ModifierTables = DEFAULT_TABLES) -> float:
    """Interest margin less running costs and base defaults, without smoothing."""
    income = state.loans * (loan_rate / 100.0) / TURNS_PER_YEAR
    expense = state.deposits * (deposit_rate / 100.0) / TURNS_PER_YEAR
    operational = (state.cash * 0.0001 + 500.0) * tables.bank_type(state.bank_type).operational_cost_modifier
    return income - expense - operational - state.loans * BASE_WEEKLY_DEFAULT_RATE


def _ld_ratio(loans: float, deposits: float) -> float:
    return loans / deposits if deposits > 0 else 1.0


def recommend_rates(state: GameState, history: Sequence[HistoryEntry], *,
                    tables: ModifierTables = DEFAULT_TABLES) -> RateRecommendation:
    if len(history) < 2:
        return DEFAULT_RECOMMENDATION

    recent = list(history)[-5:]
    net_outcomes = [h.net_outcome for h in recent]
    last_defaults = recent[-1].loan_defaults
    last_net_outcome = net_outcomes[-1]

    points = [(h.loans, h.deposits, h.total_customers) for h in list(history)[-2:]]
    points.append((state.loans, state.deposits, state.total_customers))
    last_ld_ratio = _ld_ratio(points[-1][0], points[-1][1])

    profit_trend = trend(net_outcomes)
    customer_trend = trend([p[2] for p in points])
    satisfaction = state.customer_satisfaction

    loan_rate = state.loan_interest_rate
    deposit_rate = state.deposit_interest_rate
    loan_reasons: List[str] = []
    deposit_reasons: List[str] = []

    if profit_trend < -100:
        loan_rate += 0.25
        loan_reasons.append("a declining profit trend")
    if last_defaults > state.loans * 0.005:
        loan_rate += 0.25
        loan_reasons.append("an increase in loan defaults")
    if last_ld_ratio > 0.9:
        loan_rate += 0.125
        loan_reasons.append("a high loan-to-deposit ratio")
    if customer_trend < 1 and satisfaction < 60:
        loan_rate -= 0.125
        loan_reasons.append("stalling customer growth")
    if state.risk_factor > 70:
        loan_rate += 0.25
        loan_reasons.append("a high risk factor")
    if state.current_strategy is Strategy.AGGRESSIVE_LENDING:
        loan_rate -= 0.125
        loan_reasons.append("an 'Aggressive Lending' strategy")

    if last_net_outcome < -5000:
        deposit_rate += 0.5
        deposit_reasons.append("a significant negative cash flow last week")
    elif last_ld_ratio > 0.9:
        deposit_rate += 0.25
        deposit_reasons.append("a high loan-to-deposit ratio needing more funding")
    if satisfaction < 50 and customer_trend < 1:
        deposit_rate += 0.25
        deposit_reasons.append("low customer satisfaction")
    if state.current_strategy is Strategy.BRAND_BUILDING:
        deposit_rate += 0.125
        deposit_reasons.append("a 'Brand Building' strategy")

    loan_rate = clamp(loan_rate, LOAN_RATE_MIN, LOAN_RATE_MAX)
    deposit_rate = clamp(deposit_rate, DEPOSIT_RATE_MIN, DEPOSIT_RATE_MAX)

    # raise the loan rate first, then cut the deposit rate
    steps = 0
    while project_weekly_outcome(state, loan_rate, deposit_rate, tables=tables) < 0 and steps < HILL_CLIMB_MAX_STEPS:
        if loan_rate < LOAN_RATE_MAX:
            loan_rate = min(LOAN_RATE_MAX, loan_rate + HILL_CLIMB_STEP)
        elif deposit_rate > DEPOSIT_RATE_MIN:
            deposit_rate = max(DEPOSIT_RATE_MIN, deposit_rate - HILL_CLIMB_STEP)
        else:
            break
        steps += 1
    if steps:
        loan_reasons.append(PROFITABILITY)
        deposit_reasons.append(PROFITABILITY)

    return RateRecommendation(
        loan=Recommendation(
            round(loan_rate, 4),
            format_reasons(loan_reasons, "Analysis of recent trends indicates stable performance."),
        ),
        deposit=Recommendation(
            round(deposit_rate, 4),
            format_reasons(deposit_reasons, "Analysis of recent trends indicates stable funding levels."),
        ),
    )
