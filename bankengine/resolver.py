"""bankengine.resolver

Core week flow (headless).

Responsibilities:
- Apply the player's standing decisions (strategy, rates, campaign, tech project)
- Resolve one week: projects, risk, interest, defaults, campaign, penalties,
  repayments, reputation, deposits, lending, calendar, solvency, satisfaction,
  app rating, server load, security decay, customers, channels, feedback
- Produce the successor GameState, this week's ledger lines, news and history

This layer is UI-agnostic. The only randomness comes from the Random passed in.
Draw order inside a week is fixed: regulatory penalty (risk > 80 only),
security decay (when eligible), feedback trigger, feedback content.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from bankcontent.feedback import generate_feedback
from bankcore.effects import (
    allocate_channels,
    apply_upgrade_completion,
    channel_weights,
    decay_digital_boost,
    derive_total_customers,
    next_calendar,
    round_rate,
    smooth_toward,
)
from bankcore.ledger import Ledger
from bankcore.modifiers import (
    BASE_WEEKLY_DEFAULT_RATE,
    CAMPAIGN_MAX_BUDGET,
    CAMPAIGN_MAX_WEEKS,
    CAMPAIGN_MIN_BUDGET,
    CAMPAIGN_MIN_WEEKS,
    DEFAULT_TABLES,
    RESERVE_REQUIREMENT,
    TURNS_PER_YEAR,
    WEEKLY_LOAN_REPAYMENT_RATE,
    ModifierTables,
)
from bankcore.state import (
    ActiveCampaign,
    ActiveTechUpgrade,
    CompletedTechUpgrade,
    CustomerFeedback,
    GameState,
    HistoryEntry,
    NewsEvent,
    NewsLevel,
    Sentiment,
    ServerStatus,
    TechCategory,
    TechUpgradeType,
    Transaction,
    TransactionType,
    clamp,
)

from .config import DEFAULT_CONFIG, EngineConfig
from .decisions import LAUNCH, STOP, CampaignAction, TurnDecisions

logger = logging.getLogger(__name__)

INSOLVENCY_MESSAGE = "Insolvency! Your bank has run out of cash reserves."
LOW_CASH_THRESHOLD = 50_000.0
HIGH_LD_RATIO = 0.9
SECURITY_GRACE_TURNS = 24  # 6 months
SECURITY_DECAY_CHANCE = 0.15


class GameOverError(RuntimeError):
    """Raised when a finished game is asked to resolve another week."""


@dataclass(frozen=True)
class TurnResult:
    state: GameState
    ledger_delta: List[Transaction]
    news: List[NewsEvent]  # emission order
    history_entry: Optional[HistoryEntry]

    @property
    def game_over(self) -> bool:
        return bool(self.state.is_game_over)


class NewsLog:
    """Collects news events of one resolution, numbering them from `first_id`."""

    def __init__(self, first_id: int = 1) -> None:
        self._first_id = int(first_id)
        self._next_id = self._first_id
        self.items: List[NewsEvent] = []

    def add(self, message: str, level: NewsLevel = NewsLevel.INFO) -> NewsEvent:
        ev = NewsEvent(id=self._next_id, message=str(message), level=level)
        self._next_id += 1
        self.items.append(ev)
        return ev

    def truncate(self, n: int) -> None:
        self.items = self.items[:n]
        self._next_id = self._first_id + len(self.items)


def usd(x: float) -> str:
    sign = "-" if x < 0 else ""
    return f"{sign}${abs(x):,.2f}"


def _loan_to_deposit(loans: float, deposits: float) -> float:
    if deposits > 0:
        return loans / deposits
    return float("inf") if loans > 0 else 0.0


# -------------------------
# Pre-resolution decisions
# -------------------------


def _apply_campaign_action(state: GameState, action: CampaignAction, *, news: NewsLog,
                           tables: ModifierTables) -> GameState:
    active = state.active_marketing_campaign

    if action.kind == STOP:
        if active is None:
            return state
        news.add(f"Marketing campaign stopped: {tables.campaign(active.type).name}.", NewsLevel.WARNING)
        return replace(state, active_marketing_campaign=None)

    if action.kind != LAUNCH or action.campaign is None:
        raise ValueError(f"invalid campaign action: {action!r}")

    if not (CAMPAIGN_MIN_BUDGET <= action.budget <= CAMPAIGN_MAX_BUDGET):
        news.add(
            f"Campaign budget must be between {usd(CAMPAIGN_MIN_BUDGET)} and {usd(CAMPAIGN_MAX_BUDGET)} per week.",
            NewsLevel.WARNING,
        )
        return state
    if not (CAMPAIGN_MIN_WEEKS <= action.duration <= CAMPAIGN_MAX_WEEKS):
        news.add(f"Campaign duration must be {CAMPAIGN_MIN_WEEKS} to {CAMPAIGN_MAX_WEEKS} weeks.", NewsLevel.WARNING)
        return state

    if active is not None:
        news.add(f"Marketing campaign stopped: {tables.campaign(active.type).name}.", NewsLevel.WARNING)

    spec = tables.campaign(action.campaign)
    campaign = ActiveCampaign(
        type=action.campaign,
        budget=float(action.budget),
        duration=int(action.duration),
        weeks_remaining=int(action.duration),
    )
    news.add(f"Marketing campaign launched: {spec.name} for {campaign.duration} weeks.", NewsLevel.SUCCESS)
    return replace(state, active_marketing_campaign=campaign)


def start_tech_upgrade(state: GameState, upgrade: TechUpgradeType, *, ledger: Ledger, news: NewsLog,
                       tables: ModifierTables = DEFAULT_TABLES) -> GameState:
    """Start a project; rejected projects leave the state untouched."""
    spec = tables.tech(upgrade)
    if state.cash < spec.cost:
        news.add(f"Insufficient funds for {spec.name} project.", NewsLevel.WARNING)
        return state
    if any(u.type is upgrade for u in state.active_tech_upgrades):
        news.add(f"Project '{spec.name}' is already in progress.", NewsLevel.INFO)
        return state
    if any(u.type is upgrade for u in state.completed_tech_upgrades):
        news.add(f"Project '{spec.name}' has already been completed.", NewsLevel.INFO)
        return state

    ledger.post(f"Start Project: {spec.name}", TransactionType.INVESTMENT, -spec.cost)
    news.add(
        f"Started {spec.name} project. Cost: {usd(spec.cost)}. ETA: {spec.duration} weeks.",
        NewsLevel.SUCCESS,
    )
    return replace(
        state,
        cash=state.cash - spec.cost,
        active_tech_upgrades=[*state.active_tech_upgrades, ActiveTechUpgrade(type=upgrade, weeks_remaining=spec.duration)],
        transactions=ledger.entries,
    )


def apply_decisions(state: GameState, decisions: TurnDecisions, *, ledger: Ledger, news: NewsLog,
                    tables: ModifierTables = DEFAULT_TABLES) -> GameState:
    s = state
    if decisions.strategy is not s.current_strategy:
        s = replace(s, current_strategy=decisions.strategy)
        news.add(f"Strategy for next week changed to: {decisions.strategy.value.replace('_', ' ')}.")

    loan_rate = round_rate(decisions.loan_rate)
    if loan_rate != s.loan_interest_rate:
        s = replace(s, loan_interest_rate=loan_rate)
        news.add(f"Loan interest rate adjusted to {loan_rate:.2f}%.")

    deposit_rate = round_rate(decisions.deposit_rate)
    if deposit_rate != s.deposit_interest_rate:
        s = replace(s, deposit_interest_rate=deposit_rate)
        news.add(f"Deposit interest rate adjusted to {deposit_rate:.2f}%.")

    if decisions.campaign_action is not None:
        s = _apply_campaign_action(s, decisions.campaign_action, news=news, tables=tables)
    if decisions.tech_action is not None:
        s = start_tech_upgrade(s, decisions.tech_action.upgrade, ledger=ledger, news=news, tables=tables)
    return s


# -------------------------
# Week resolution
# -------------------------


def resolve_turn(
    state: GameState,
    decisions: Optional[TurnDecisions] = None,
    *,
    rng: random.Random,
    config: EngineConfig = DEFAULT_CONFIG,
    tables: ModifierTables = DEFAULT_TABLES,
    recent_history: Sequence[HistoryEntry] = (),
    first_news_id: int = 1,
) -> TurnResult:
    """Advance the game by one week.

    `state` is never modified. On insolvency the returned state is the
    pre-week state (decisions applied) flagged as game over, and no history
    entry is produced.
    """
    if state.is_game_over:
        raise GameOverError(state.game_over_message or "The game is over.")

    news = NewsLog(first_news_id)
    ledger = Ledger(
        state.transactions,
        turn=state.turn,
        week=state.week,
        month=state.month,
        year=state.year,
        cap=config.ledger_cap,
    )
    pre = apply_decisions(state, decisions, ledger=ledger, news=news, tables=tables) if decisions is not None else state
    pre_entries = ledger.entries
    pre_delta = ledger.delta
    pre_news = len(news.items)

    difficulty = tables.difficulty(pre.difficulty)
    bank = tables.bank_type(pre.bank_type)
    strat = tables.strategy(pre.current_strategy)
    k = float(config.smoothing_factor)

    loan_growth_modifier = (bank.loan_demand_modifier - 1.0) + strat.loan_growth
    risk_modifier = (bank.risk_modifier - 1.0) * 10.0 + strat.risk

    satisfaction = pre.customer_satisfaction
    reputation = pre.reputation
    risk = pre.risk_factor
    server = pre.server_status
    boost = pre.digital_channel_boost or 0.0
    rating = pre.app_rating
    maintenance = pre.monthly_maintenance_cost
    app_version = pre.app_version
    website_version = pre.website_version
    feedback = list(pre.customer_feedback)
    next_feedback_id = max((f.id for f in feedback), default=0) + 1

    # 1) technology projects
    still_active: List[ActiveTechUpgrade] = []
    completed = list(pre.completed_tech_upgrades)
    for upgrade in pre.active_tech_upgrades:
        remaining = upgrade.weeks_remaining - 1
        if remaining > 0:
            still_active.append(replace(upgrade, weeks_remaining=remaining))
            continue
        spec = tables.tech(upgrade.type)
        completed.append(CompletedTechUpgrade(type=upgrade.type, completed_turn=pre.turn))
        out = apply_upgrade_completion(
            spec,
            customer_satisfaction=satisfaction,
            reputation=reputation,
            risk_factor=risk,
            server_status=server,
            digital_channel_boost=boost,
            app_rating=rating,
            monthly_maintenance_cost=maintenance,
            app_version=app_version,
            website_version=website_version,
        )
        satisfaction, reputation, risk = out.customer_satisfaction, out.reputation, out.risk_factor
        server, boost, rating = out.server_status, out.digital_channel_boost, out.app_rating
        maintenance, app_version, website_version = out.monthly_maintenance_cost, out.app_version, out.website_version
        if spec.feedback_effect:
            feedback = [
                CustomerFeedback(id=next_feedback_id, turn=pre.turn, sentiment=Sentiment.POSITIVE, text=spec.feedback_effect),
                *feedback,
            ][: config.feedback_cap]
            next_feedback_id += 1
        news.add(f"{spec.name} project completed and is now live!", NewsLevel.SUCCESS)

    # 2) risk
    risk_change = risk_modifier
    if pre.cash < LOW_CASH_THRESHOLD:
        risk_change += 0.5
    if _loan_to_deposit(pre.loans, pre.deposits) > HIGH_LD_RATIO:
        risk_change += 0.5
    if risk > 55:
        risk_change -= 0.25
    elif risk < 45:
        risk_change += 0.25
    risk = smooth_toward(risk, risk + risk_change, k)

    # 3) interest and running costs
    loans, deposits = pre.loans, pre.deposits
    interest_income = loans * (pre.loan_interest_rate / 100.0) / TURNS_PER_YEAR
    interest_expense = deposits * (pre.deposit_interest_rate / 100.0) / TURNS_PER_YEAR
    operational_costs = (pre.cash * 0.0001 + 500.0) * bank.operational_cost_modifier
    net_profit = interest_income - interest_expense - operational_costs
    ledger.post("Interest Income", TransactionType.INCOME, interest_income)
    ledger.post("Interest Expense", TransactionType.EXPENSE, -interest_expense)
    ledger.post("Operational Costs", TransactionType.EXPENSE, -operational_costs)

    # 4) defaults
    default_rate = max(0.0, BASE_WEEKLY_DEFAULT_RATE + (risk / 100.0) * 0.005 + strat.default_rate_adjust)
    default_rate *= difficulty.risk_modifier
    defaulted = loans * default_rate
    loan_defaults = 0.0
    if defaulted > 0:
        net_profit -= defaulted
        loans -= defaulted
        loan_defaults = defaulted
        ledger.post("Loan Defaults", TransactionType.LOAN_DEFAULT, -defaulted)

    # 5) high-risk bonus
    if risk > 60:
        risk_bonus = net_profit * ((risk - 60.0) / 100.0) * 0.2
        net_profit += risk_bonus
        ledger.post("High-Risk Bonus", TransactionType.INCOME, risk_bonus)

    # 6) marketing campaign
    campaign = pre.active_marketing_campaign
    campaign_reputation = campaign_deposits = campaign_loans = 0.0
    if campaign is not None:
        cspec = tables.campaign(campaign.type)
        if pre.cash >= campaign.budget:
            net_profit -= campaign.budget
            ledger.post(f"Weekly Cost: {cspec.name}", TransactionType.MARKETING_CAMPAIGN, -campaign.budget)
            campaign_reputation = campaign.budget * cspec.effects.reputation
            campaign_deposits = campaign.budget * cspec.effects.deposit_growth
            campaign_loans = campaign.budget * cspec.effects.loan_growth
            campaign = replace(campaign, weeks_remaining=campaign.weeks_remaining - 1)
        else:
            news.add(f"Campaign '{cspec.name}' stopped due to insufficient funds.", NewsLevel.WARNING)
            campaign = None
        if campaign is not None and campaign.weeks_remaining <= 0:
            news.add(f"Campaign '{cspec.name}' has completed.")
            campaign = None

    # 7) regulatory penalty
    reputation_damage = 0.0
    if risk > 80:
        if rng.random() < (risk - 80.0) / 20.0 / 4.0:
            penalty = pre.cash * 0.1
            reputation_damage = 1.25
            net_profit -= penalty
            news.add(
                f"Regulatory Fine! Your bank was fined {usd(penalty)} for risky practices. Reputation damaged.",
                NewsLevel.DANGER,
            )
            ledger.post("Regulatory Penalty", TransactionType.PENALTY, -penalty)

    # 8) cash roll-forward
    cash = pre.cash + net_profit

    # 9) repayments
    repayment = loans * WEEKLY_LOAN_REPAYMENT_RATE
    cash += repayment
    loans -= repayment
    ledger.post("Loan Repayments", TransactionType.LOAN_REPAYMENT, repayment)

    # 10) reputation
    reputation = smooth_toward(reputation, reputation + strat.reputation - reputation_damage + campaign_reputation, k)

    # 11) deposits
    deposit_factor = (
        0.002
        + (pre.deposit_interest_rate / 3.0) ** 2 * 0.005
        + (reputation / 100.0) * 0.003
        + campaign_deposits
        + (bank.deposit_growth_modifier - 1.0)
    )
    new_deposits = deposits * deposit_factor
    deposits += new_deposits
    cash += new_deposits
    if new_deposits > 0:
        ledger.post("New Customer Deposits", TransactionType.DEPOSIT, new_deposits)

    # 12) reserve-constrained lending
    available_for_lending = cash - deposits * RESERVE_REQUIREMENT
    demand_factor = (
        0.003
        + (max(0.0, 8.0 - pre.loan_interest_rate) / 5.0) ** 2 * 0.006
        + (reputation / 100.0) * 0.004
        + loan_growth_modifier
        + campaign_loans
    )
    loan_demand = deposits * demand_factor
    new_loans = 0.0
    if available_for_lending > 0:
        new_loans = max(0.0, min(loan_demand, available_for_lending))
        if new_loans > 0:
            loans += new_loans
            cash -= new_loans
            ledger.post("New Loans Issued", TransactionType.LOAN, -new_loans)
    elif loan_demand > 0:
        news.add(
            f"Loan growth stalled due to insufficient cash reserves to meet the "
            f"{RESERVE_REQUIREMENT * 100:.0f}% requirement.",
            NewsLevel.WARNING,
        )

    # 13) calendar and monthly maintenance
    week, month, year, new_month = next_calendar(pre.week, pre.month, pre.year)
    if new_month and maintenance > 0:
        cash -= maintenance
        ledger.post("Monthly Backend Maintenance", TransactionType.EXPENSE, -maintenance)

    # 14) solvency
    if cash < 0:
        news.truncate(pre_news)
        news.add(INSOLVENCY_MESSAGE, NewsLevel.DANGER)
        logger.info("turn %d: insolvent (cash %.2f), game over", pre.turn, cash)
        over = replace(pre, transactions=pre_entries, is_game_over=True, game_over_message=INSOLVENCY_MESSAGE)
        return TurnResult(state=over, ledger_delta=pre_delta, news=list(news.items), history_entry=None)

    net_outcome = cash - pre.cash

    # 15) satisfaction
    satisfaction_drift = (
        (0.025 if new_loans > 0 else -0.05)
        + (0.025 if new_deposits > 0 else -0.05)
        + strat.satisfaction
    ) * difficulty.satisfaction_modifier
    satisfaction = smooth_toward(satisfaction, satisfaction + satisfaction_drift, k)

    # 16) app rating
    rating_drift = (2.5 + (satisfaction / 100.0) * 2.5 - rating) * 0.05
    if server is ServerStatus.OVERLOADED:
        rating_drift -= 0.02
    rating = clamp(rating + rating_drift, 1.0, 5.0)

    # 17) server load; Optimal has no exit
    total_customers = derive_total_customers(deposits, loans)
    previous_customers = pre.total_customers
    growth = (total_customers - previous_customers) / previous_customers if previous_customers > 0 else 0.0
    performance_in_progress = any(tables.tech(u.type).category is TechCategory.PERFORMANCE for u in still_active)
    if growth > 0.05 and server is ServerStatus.STABLE and not performance_in_progress:
        server = ServerStatus.OVERLOADED
        satisfaction = max(0.0, satisfaction - 3.0)
        news.add("Servers are overloaded due to rapid user growth! Customer satisfaction is suffering.", NewsLevel.WARNING)
    elif server is ServerStatus.OVERLOADED and growth < 0.01:
        server = ServerStatus.STABLE
        news.add("User growth has stabilized, and server performance has returned to normal.")

    # 18) security decay
    security_turns = [u.completed_turn for u in completed if tables.tech(u.type).category is TechCategory.SECURITY]
    stale_security = not security_turns or pre.turn - max(security_turns) > SECURITY_GRACE_TURNS
    if risk > 60 and stale_security:
        if rng.random() < SECURITY_DECAY_CHANCE:
            risk = min(100.0, risk + 0.5)
            news.add("Security vulnerabilities are increasing due to lack of recent system hardening.", NewsLevel.WARNING)

    # 19-20) customers and channels
    weights = channel_weights(
        satisfaction=satisfaction,
        strategy=pre.current_strategy,
        digital_boost=boost,
        app_rating=rating,
        bank_type=pre.bank_type,
        strategies=tables.strategies,
        bank_types=tables.bank_types,
    )
    boost = decay_digital_boost(boost)
    channel_usage = allocate_channels(total_customers, weights)

    # 21) customer feedback
    feedback_chance = min(0.6, (total_customers / 1000.0) * 0.05)
    volatility = abs(satisfaction - 55.0) / 45.0
    if total_customers > 10 and rng.random() < feedback_chance * (1.0 + volatility * 0.5):
        sentiment, text = generate_feedback(rng, satisfaction=satisfaction, server_status=server)
        feedback = [CustomerFeedback(id=next_feedback_id, turn=pre.turn, sentiment=sentiment, text=text), *feedback]
    feedback = feedback[: config.feedback_cap]

    # 22) history
    entry = HistoryEntry(
        turn=pre.turn,
        year=pre.year,
        month=pre.month,
        week=pre.week,
        cash=pre.cash,
        loans=pre.loans,
        deposits=pre.deposits,
        reputation=pre.reputation,
        customer_satisfaction=pre.customer_satisfaction,
        risk_factor=pre.risk_factor,
        total_customers=pre.total_customers,
        loan_interest_rate=pre.loan_interest_rate,
        deposit_interest_rate=pre.deposit_interest_rate,
        net_outcome=net_outcome,
        loan_defaults=loan_defaults,
    )
    last_three = [*list(recent_history)[-2:], entry]
    if len(last_three) == 3 and all(h.net_outcome < 0 for h in last_three):
        news.add("Your bank has lost money three weeks in a row. Review your rates and costs.", NewsLevel.WARNING)
    if pre.settings.notifications.player_alerts:
        news.add(
            f"Weekly report for {pre.settings.branding.bank_name}: "
            f"Net interest income is {usd(interest_income - interest_expense)}."
        )

    new_state = replace(
        pre,
        cash=cash,
        loans=loans,
        deposits=deposits,
        reputation=reputation,
        customer_satisfaction=satisfaction,
        risk_factor=risk,
        total_customers=total_customers,
        year=year,
        month=month,
        week=week,
        turn=pre.turn + 1,
        transactions=ledger.entries,
        active_marketing_campaign=campaign,
        customer_feedback=feedback,
        channel_usage=channel_usage,
        app_rating=rating,
        app_version=app_version,
        website_version=website_version,
        server_status=server,
        active_tech_upgrades=still_active,
        completed_tech_upgrades=completed,
        monthly_maintenance_cost=maintenance,
        digital_channel_boost=boost,
    )
    logger.debug(
        "turn %d resolved: cash=%.2f loans=%.2f deposits=%.2f risk=%.2f customers=%d net=%.2f",
        pre.turn, cash, loans, deposits, risk, total_customers, net_outcome,
    )
    return TurnResult(state=new_state, ledger_delta=ledger.delta, news=list(news.items), history_entry=entry)
