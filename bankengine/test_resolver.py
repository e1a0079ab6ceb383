"""
Unit tests for the weekly turn resolver

Tests cover:
- Baseline week from the start state (balances, calendar, history)
- Pre-resolution decisions (strategy, rates, campaigns, tech projects)
- Campaign billing, completion and cancellation
- Regulatory penalties and security decay under pinned randomness
- Per-step numbers (risk bonus, reputation, deposit growth, app rating, channel boost)
- Server load state machine (including the sticky Optimal status)
- Insolvency and the frozen game
- Determinism
"""

import random
from dataclasses import replace

import pytest

from bankcore.effects import allocate_channels, channel_weights
from bankcore.modifiers import TECH_UPGRADES
from bankcore.state import (
    ActiveCampaign,
    ActiveTechUpgrade,
    BankType,
    CampaignType,
    CompletedTechUpgrade,
    GameSettings,
    HistoryEntry,
    NewsLevel,
    Notifications,
    ServerStatus,
    Strategy,
    TechUpgradeType,
    TransactionType,
    default_start_state,
)
from bankengine.decisions import CampaignAction, TechInvestAction, TurnDecisions, hold_course
from bankengine.resolver import INSOLVENCY_MESSAGE, GameOverError, resolve_turn


class _Pinned(random.Random):
    """Random whose random() always returns the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value

    def getrandbits(self, k):
        return super().getrandbits(k)


def _resolve(state, decisions=None, rng=None, **kwargs):
    return resolve_turn(
        state,
        decisions if decisions is not None else hold_course(state),
        rng=rng if rng is not None else random.Random(1),
        **kwargs,
    )


def _with(state, **kwargs):
    """Decisions that keep the state's strategy and rates."""
    return TurnDecisions(
        strategy=state.current_strategy,
        loan_rate=state.loan_interest_rate,
        deposit_rate=state.deposit_interest_rate,
        **kwargs,
    )


def _messages(result, level=None):
    return [n.message for n in result.news if level is None or n.level is level]


def _history(net_outcome):
    return HistoryEntry(
        turn=0, year=2024, month=1, week=1, cash=100_000.0, loans=400_000.0, deposits=450_000.0,
        reputation=40.0, customer_satisfaction=50.0, risk_factor=40.0, total_customers=474,
        loan_interest_rate=5.5, deposit_interest_rate=2.5, net_outcome=net_outcome, loan_defaults=0.0,
    )


class TestBaselineWeek:
    """Test suite for one week from the start state"""

    def test_calendar_advances(self):
        result = _resolve(default_start_state())
        s = result.state
        assert (s.turn, s.week, s.month, s.year) == (1, 2, 1, 2024)
        assert not s.is_game_over

    def test_loans_follow_ledger(self):
        """Loans move by defaults, repayments and new issuance, nothing else"""
        start = default_start_state()
        result = _resolve(start)
        by_type = {}
        for t in result.ledger_delta:
            by_type[t.type] = by_type.get(t.type, 0.0) + t.amount

        expected = (
            start.loans
            + by_type.get(TransactionType.LOAN_DEFAULT, 0.0)
            - by_type.get(TransactionType.LOAN_REPAYMENT, 0.0)
            - by_type.get(TransactionType.LOAN, 0.0)
        )
        assert result.state.loans == pytest.approx(expected)
        assert result.state.loans < start.loans
        assert by_type[TransactionType.LOAN] < 0  # issuance is a cash outflow

    def test_cash_follows_ledger(self):
        start = default_start_state()
        result = _resolve(start)
        assert result.state.cash == pytest.approx(start.cash + sum(t.amount for t in result.ledger_delta))

    def test_ledger_lines_use_pre_increment_calendar(self):
        result = _resolve(default_start_state())
        assert all((t.turn, t.week) == (0, 1) for t in result.ledger_delta)
        assert result.state.transactions[0] == result.ledger_delta[-1]

    def test_interest_lines(self):
        result = _resolve(default_start_state())
        lines = {t.description: t.amount for t in result.ledger_delta}
        assert lines["Interest Income"] == pytest.approx(400_000 * 0.055 / 48)
        assert lines["Interest Expense"] == pytest.approx(-450_000 * 0.025 / 48)
        assert lines["Operational Costs"] == pytest.approx(-(100_000 * 0.0001 + 500) * 1.1)

    def test_risk_is_smoothed(self):
        """Below 45 the risk drifts up by a quarter point, damped by 0.35"""
        result = _resolve(default_start_state())
        assert result.state.risk_factor == pytest.approx(40.0 + 0.25 * 0.35)

    def test_history_is_pre_turn_snapshot(self):
        start = default_start_state()
        result = _resolve(start)
        h = result.history_entry
        assert h.turn == 0
        assert h.cash == start.cash
        assert h.total_customers == start.total_customers
        assert h.net_outcome == pytest.approx(result.state.cash - start.cash)
        assert h.loan_defaults > 0

    def test_weekly_report(self):
        result = _resolve(default_start_state())
        assert "Weekly report for Pioneer Financial: Net interest income is $223.96." in _messages(result, NewsLevel.INFO)

    def test_weekly_report_can_be_muted(self):
        state = replace(default_start_state(), settings=GameSettings(notifications=Notifications(player_alerts=False)))
        result = _resolve(state)
        assert not [m for m in _messages(result) if m.startswith("Weekly report")]

    def test_input_state_untouched(self):
        start = default_start_state()
        snapshot = replace(start)
        _resolve(start, _with(start, tech_action=TechInvestAction(TechUpgradeType.THEME_UPDATE)))
        assert start == snapshot

    def test_same_seed_same_result(self):
        start = replace(default_start_state(), risk_factor=90.0)
        a = resolve_turn(start, hold_course(start), rng=random.Random(7))
        b = resolve_turn(start, hold_course(start), rng=random.Random(7))
        assert a == b


class TestDecisions:
    """Test suite for decisions applied before the week resolves"""

    def test_strategy_and_rate_changes(self):
        start = default_start_state()
        decisions = TurnDecisions(strategy=Strategy.AGGRESSIVE_LENDING, loan_rate=6.126, deposit_rate=2.5)
        result = _resolve(start, decisions)

        assert result.state.current_strategy is Strategy.AGGRESSIVE_LENDING
        assert result.state.loan_interest_rate == 6.13
        info = _messages(result, NewsLevel.INFO)
        assert "Strategy for next week changed to: AGGRESSIVE LENDING." in info
        assert "Loan interest rate adjusted to 6.13%." in info
        assert not [m for m in info if m.startswith("Deposit interest rate")]
        assert result.history_entry.loan_interest_rate == 6.13

    def test_rates_round_half_up(self):
        """Rates on the advisor's 0.125 grid land on ties; ties go up"""
        start = default_start_state()
        result = _resolve(start, TurnDecisions(strategy=Strategy.BALANCED, loan_rate=5.625, deposit_rate=2.375))

        assert result.state.loan_interest_rate == 5.63
        assert result.state.deposit_interest_rate == 2.38
        assert "Loan interest rate adjusted to 5.63%." in _messages(result, NewsLevel.INFO)
        assert "Deposit interest rate adjusted to 2.38%." in _messages(result, NewsLevel.INFO)

    def test_start_tech_project(self):
        start = default_start_state()
        result = _resolve(start, _with(start, tech_action=TechInvestAction(TechUpgradeType.THEME_UPDATE)))

        spec = TECH_UPGRADES[TechUpgradeType.THEME_UPDATE]
        investment = [t for t in result.ledger_delta if t.type is TransactionType.INVESTMENT]
        assert len(investment) == 1
        assert investment[0].description == "Start Project: UI Theme Update"
        assert investment[0].amount == -spec.cost
        assert result.history_entry.cash == start.cash - spec.cost
        # started this week, one week already worked off
        assert result.state.active_tech_upgrades == [ActiveTechUpgrade(TechUpgradeType.THEME_UPDATE, spec.duration - 1)]
        assert "Started UI Theme Update project. Cost: $7,500.00. ETA: 2 weeks." in _messages(result, NewsLevel.SUCCESS)

    def test_duplicate_active_project_is_noop(self):
        start = replace(default_start_state(), active_tech_upgrades=[ActiveTechUpgrade(TechUpgradeType.THEME_UPDATE, 2)])
        result = _resolve(start, _with(start, tech_action=TechInvestAction(TechUpgradeType.THEME_UPDATE)))

        assert not [t for t in result.ledger_delta if t.type is TransactionType.INVESTMENT]
        assert "Project 'UI Theme Update' is already in progress." in _messages(result, NewsLevel.INFO)
        assert result.state.active_tech_upgrades == [ActiveTechUpgrade(TechUpgradeType.THEME_UPDATE, 1)]
        assert result.history_entry.cash == start.cash

    def test_completed_project_is_noop(self):
        start = replace(default_start_state(), completed_tech_upgrades=[CompletedTechUpgrade(TechUpgradeType.THEME_UPDATE, 0)])
        result = _resolve(start, _with(start, tech_action=TechInvestAction(TechUpgradeType.THEME_UPDATE)))

        assert not [t for t in result.ledger_delta if t.type is TransactionType.INVESTMENT]
        assert "Project 'UI Theme Update' has already been completed." in _messages(result, NewsLevel.INFO)
        assert result.state.active_tech_upgrades == []

    def test_unaffordable_project_is_noop(self):
        start = replace(default_start_state(), cash=5_000.0)
        result = _resolve(start, _with(start, tech_action=TechInvestAction(TechUpgradeType.THEME_UPDATE)))

        assert not [t for t in result.ledger_delta if t.type is TransactionType.INVESTMENT]
        assert "Insufficient funds for UI Theme Update project." in _messages(result, NewsLevel.WARNING)
        assert result.state.active_tech_upgrades == []
        assert not result.state.is_game_over

    def test_launch_replaces_running_campaign(self):
        """The old campaign is announced as stopped exactly once before the new one starts"""
        start = replace(
            default_start_state(),
            active_marketing_campaign=ActiveCampaign(CampaignType.SOCIAL_MEDIA_BLITZ, 2000.0, 2, 2),
        )
        result = _resolve(start, _with(start, campaign_action=CampaignAction.launch("TV_COMMERCIALS", 5000, 3)))

        messages = _messages(result)
        stopped = [m for m in messages if m.startswith("Marketing campaign stopped")]
        assert stopped == ["Marketing campaign stopped: Social Media Blitz."]
        assert messages.index(stopped[0]) < messages.index("Marketing campaign launched: TV Commercials for 3 weeks.")

        campaign = result.state.active_marketing_campaign
        assert campaign.type is CampaignType.TV_COMMERCIALS
        assert campaign.weeks_remaining == 2
        lines = {t.description: t.amount for t in result.ledger_delta}
        assert lines["Weekly Cost: TV Commercials"] == -5000.0
        assert "Weekly Cost: Social Media Blitz" not in lines

    def test_stop_campaign(self):
        start = replace(
            default_start_state(),
            active_marketing_campaign=ActiveCampaign(CampaignType.SOCIAL_MEDIA_BLITZ, 2000.0, 2, 2),
        )
        result = _resolve(start, _with(start, campaign_action=CampaignAction.stop()))

        assert result.state.active_marketing_campaign is None
        assert "Marketing campaign stopped: Social Media Blitz." in _messages(result, NewsLevel.WARNING)
        assert not [t for t in result.ledger_delta if t.type is TransactionType.MARKETING_CAMPAIGN]

    def test_out_of_range_budget_is_rejected(self):
        start = replace(
            default_start_state(),
            active_marketing_campaign=ActiveCampaign(CampaignType.SOCIAL_MEDIA_BLITZ, 2000.0, 2, 2),
        )
        result = _resolve(start, _with(start, campaign_action=CampaignAction.launch("TV_COMMERCIALS", 500, 3)))

        assert "Campaign budget must be between $2,000.00 and $10,000.00 per week." in _messages(result, NewsLevel.WARNING)
        assert result.state.active_marketing_campaign.type is CampaignType.SOCIAL_MEDIA_BLITZ


class TestCampaignBilling:
    """Test suite for weekly campaign billing"""

    def test_last_week_completes(self):
        start = replace(
            default_start_state(),
            active_marketing_campaign=ActiveCampaign(CampaignType.BILLBOARD_ADVERTISING, 2000.0, 2, 1),
        )
        result = _resolve(start)

        assert result.state.active_marketing_campaign is None
        assert "Campaign 'Billboard Advertising' has completed." in _messages(result, NewsLevel.INFO)
        assert {t.description: t.amount for t in result.ledger_delta}["Weekly Cost: Billboard Advertising"] == -2000.0

    def test_unaffordable_campaign_is_cancelled(self):
        start = replace(
            default_start_state(),
            cash=3_000.0,
            active_marketing_campaign=ActiveCampaign(CampaignType.TV_COMMERCIALS, 5000.0, 3, 3),
        )
        result = _resolve(start)

        assert result.state.active_marketing_campaign is None
        assert "Campaign 'TV Commercials' stopped due to insufficient funds." in _messages(result, NewsLevel.WARNING)
        assert not [t for t in result.ledger_delta if t.type is TransactionType.MARKETING_CAMPAIGN]


class TestTechCompletion:
    """Test suite for finishing tech projects"""

    def test_completion_uses_pre_increment_turn(self):
        start = replace(
            default_start_state(),
            turn=5,
            active_tech_upgrades=[ActiveTechUpgrade(TechUpgradeType.THEME_UPDATE, 1)],
        )
        result = _resolve(start)
        s = result.state

        assert s.active_tech_upgrades == []
        assert s.completed_tech_upgrades == [CompletedTechUpgrade(TechUpgradeType.THEME_UPDATE, 5)]
        assert s.turn == 6
        assert s.app_version == "1.0.1"
        assert s.website_version == "1.0.1"
        assert s.monthly_maintenance_cost == 150.0
        assert "UI Theme Update project completed and is now live!" in _messages(result, NewsLevel.SUCCESS)
        texts = [f.text for f in s.customer_feedback]
        assert TECH_UPGRADES[TechUpgradeType.THEME_UPDATE].feedback_effect in texts

    def test_monthly_maintenance_on_rollover(self):
        start = replace(default_start_state(), week=4, monthly_maintenance_cost=500.0)
        result = _resolve(start)

        assert (result.state.week, result.state.month) == (1, 2)
        line = [t for t in result.ledger_delta if t.description == "Monthly Backend Maintenance"]
        assert len(line) == 1
        assert line[0].amount == -500.0
        assert (line[0].week, line[0].month) == (4, 1)

    def test_no_maintenance_mid_month(self):
        start = replace(default_start_state(), week=2, monthly_maintenance_cost=500.0)
        result = _resolve(start)
        assert not [t for t in result.ledger_delta if t.description == "Monthly Backend Maintenance"]


class TestRandomEvents:
    """Test suite for penalty / security decay / feedback draws"""

    def test_penalty_when_draw_hits(self):
        start = replace(default_start_state(), risk_factor=95.0)
        result = _resolve(start, rng=_Pinned(0.0))

        penalties = [t for t in result.ledger_delta if t.type is TransactionType.PENALTY]
        assert len(penalties) == 1
        assert penalties[0].amount == pytest.approx(-10_000.0)
        assert (
            "Regulatory Fine! Your bank was fined $10,000.00 for risky practices. Reputation damaged."
            in _messages(result, NewsLevel.DANGER)
        )
        assert "Security vulnerabilities are increasing due to lack of recent system hardening." in _messages(
            result, NewsLevel.WARNING
        )
        assert len(result.state.customer_feedback) == 1

    def test_no_events_when_draws_miss(self):
        start = replace(default_start_state(), risk_factor=95.0)
        result = _resolve(start, rng=_Pinned(0.99))

        assert not [t for t in result.ledger_delta if t.type is TransactionType.PENALTY]
        assert not [m for m in _messages(result) if m.startswith("Security vulnerabilities")]
        assert result.state.customer_feedback == []

    def test_recent_security_project_prevents_decay(self):
        start = replace(
            default_start_state(),
            turn=20,
            risk_factor=95.0,
            completed_tech_upgrades=[CompletedTechUpgrade(TechUpgradeType.MFA_IMPLEMENTATION, 10)],
        )
        result = _resolve(start, rng=_Pinned(0.0))
        assert not [m for m in _messages(result) if m.startswith("Security vulnerabilities")]

    def test_stale_security_project_allows_decay(self):
        start = replace(
            default_start_state(),
            turn=30,
            risk_factor=95.0,
            completed_tech_upgrades=[CompletedTechUpgrade(TechUpgradeType.MFA_IMPLEMENTATION, 0)],
        )
        result = _resolve(start, rng=_Pinned(0.0))
        assert [m for m in _messages(result) if m.startswith("Security vulnerabilities")]

    def test_low_risk_never_draws_penalty(self):
        result = _resolve(default_start_state(), rng=_Pinned(0.0))
        assert not [t for t in result.ledger_delta if t.type is TransactionType.PENALTY]


class TestWeeklyFormulas:
    """Test suite for the per-step numbers of one resolved week"""

    def test_high_risk_bonus_scales_profit_so_far(self):
        start = replace(default_start_state(), risk_factor=95.0)
        result = _resolve(start, rng=_Pinned(0.99))
        lines = {t.description: t for t in result.ledger_delta}

        risk = 95.0 - 0.25 * 0.35
        so_far = sum(lines[d].amount for d in ("Interest Income", "Interest Expense", "Operational Costs", "Loan Defaults"))
        bonus = lines["High-Risk Bonus"]
        assert bonus.type is TransactionType.INCOME
        assert bonus.amount == pytest.approx(so_far * (risk - 60.0) / 100.0 * 0.2)

    def test_no_bonus_at_moderate_risk(self):
        result = _resolve(default_start_state())
        assert "High-Risk Bonus" not in [t.description for t in result.ledger_delta]

    def test_fine_damages_reputation(self):
        start = replace(default_start_state(), risk_factor=95.0)
        result = _resolve(start, rng=_Pinned(0.0))
        assert result.state.reputation == pytest.approx(40.0 + (38.75 - 40.0) * 0.35)

    def test_campaign_lifts_reputation(self):
        start = replace(
            default_start_state(),
            active_marketing_campaign=ActiveCampaign(CampaignType.TV_COMMERCIALS, 5000.0, 2, 2),
        )
        result = _resolve(start)
        assert result.state.reputation == pytest.approx(40.0 + 5000.0 * 0.0001 * 0.35)

    def test_campaign_deposit_growth(self):
        start = replace(
            default_start_state(),
            active_marketing_campaign=ActiveCampaign(CampaignType.TV_COMMERCIALS, 5000.0, 2, 2),
        )
        result = _resolve(start)
        lines = {t.description: t.amount for t in result.ledger_delta}

        reputation = 40.0 + 0.5 * 0.35
        factor = 0.002 + (2.5 / 3.0) ** 2 * 0.005 + reputation / 100.0 * 0.003 + 5000.0 * 0.00005
        assert lines["New Customer Deposits"] == pytest.approx(450_000.0 * factor)
        assert result.state.deposits == pytest.approx(450_000.0 * (1.0 + factor))

    def test_bank_type_deposit_growth(self):
        """Investment banks lose 10% of deposit growth per week"""
        start = replace(default_start_state(), bank_type=BankType.INVESTMENT)
        result = _resolve(start)

        factor = 0.002 + (2.5 / 3.0) ** 2 * 0.005 + 0.40 * 0.003 + (0.9 - 1.0)
        assert result.state.deposits == pytest.approx(450_000.0 * (1.0 + factor))
        assert "New Customer Deposits" not in [t.description for t in result.ledger_delta]

    def test_app_rating_drifts_toward_satisfaction(self):
        result = _resolve(default_start_state())
        satisfaction = 50.0 + 0.05 * 0.35
        target = 2.5 + satisfaction / 100.0 * 2.5
        assert result.state.app_rating == pytest.approx(4.2 + (target - 4.2) * 0.05)

    def test_overloaded_servers_cost_rating(self):
        start = replace(default_start_state(), server_status=ServerStatus.OVERLOADED)
        result = _resolve(start)
        satisfaction = 50.0 + 0.05 * 0.35
        target = 2.5 + satisfaction / 100.0 * 2.5
        assert result.state.app_rating == pytest.approx(4.2 + (target - 4.2) * 0.05 - 0.02)

    def test_channels_use_boost_before_decay(self):
        start = replace(default_start_state(), digital_channel_boost=0.5)
        s = _resolve(start).state

        weights = channel_weights(
            satisfaction=s.customer_satisfaction,
            strategy=s.current_strategy,
            digital_boost=0.5,
            app_rating=s.app_rating,
            bank_type=s.bank_type,
        )
        assert s.channel_usage == allocate_channels(s.total_customers, weights)
        assert s.digital_channel_boost == pytest.approx(0.49)

    def test_small_boost_runs_out(self):
        start = replace(default_start_state(), digital_channel_boost=0.01)
        assert _resolve(start).state.digital_channel_boost == 0.0


class TestServerLoad:
    """Test suite for the server load state machine"""

    def test_rapid_growth_overloads_stable_servers(self):
        start = replace(default_start_state(), total_customers=100)
        result = _resolve(start)

        assert result.state.server_status is ServerStatus.OVERLOADED
        assert "Servers are overloaded due to rapid user growth! Customer satisfaction is suffering." in _messages(
            result, NewsLevel.WARNING
        )
        # +0.05 drift smoothed by 0.35, then the overload hit
        assert result.state.customer_satisfaction == pytest.approx(50.0 + 0.05 * 0.35 - 3.0)

    def test_performance_project_in_progress_shields_servers(self):
        start = replace(
            default_start_state(),
            total_customers=100,
            active_tech_upgrades=[ActiveTechUpgrade(TechUpgradeType.CDN_INTEGRATION, 3)],
        )
        assert _resolve(start).state.server_status is ServerStatus.STABLE

    def test_optimal_is_never_reverted(self):
        """Optimal has no exit transition, even under rapid growth"""
        start = replace(default_start_state(), total_customers=100, server_status=ServerStatus.OPTIMAL)
        result = _resolve(start)

        assert result.state.server_status is ServerStatus.OPTIMAL
        assert not [m for m in _messages(result) if m.startswith("Servers are overloaded")]

    def test_overload_recovers_when_growth_slows(self):
        start = replace(default_start_state(), server_status=ServerStatus.OVERLOADED)
        result = _resolve(start)

        assert result.state.server_status is ServerStatus.STABLE
        assert "User growth has stabilized, and server performance has returned to normal." in _messages(
            result, NewsLevel.INFO
        )


class TestCashPressure:
    """Test suite for reserve limits, losing streaks and insolvency"""

    def test_reserve_shortfall_stalls_lending(self):
        start = replace(default_start_state(), cash=10_000.0)
        result = _resolve(start)

        assert not [t for t in result.ledger_delta if t.type is TransactionType.LOAN]
        assert "Loan growth stalled due to insufficient cash reserves to meet the 10% requirement." in _messages(
            result, NewsLevel.WARNING
        )
        assert not result.state.is_game_over

    def test_three_losing_weeks_warn(self):
        start = replace(default_start_state(), bank_type=BankType.INVESTMENT)
        result = _resolve(start, recent_history=[_history(-1.0), _history(-1.0)])

        assert result.history_entry.net_outcome < 0
        assert [m for m in _messages(result, NewsLevel.WARNING) if "three weeks in a row" in m]

    def test_one_good_week_breaks_the_streak(self):
        start = replace(default_start_state(), bank_type=BankType.INVESTMENT)
        result = _resolve(start, recent_history=[_history(-1.0), _history(1.0)])
        assert not [m for m in _messages(result) if "three weeks in a row" in m]

    def test_negative_cash_ends_the_game(self):
        start = replace(default_start_state(), cash=100.0, loans=0.0, deposits=0.0)
        result = _resolve(start)
        s = result.state

        assert s.is_game_over
        assert s.game_over_message == INSOLVENCY_MESSAGE
        assert result.history_entry is None
        assert result.ledger_delta == []
        assert s.turn == start.turn
        assert s.cash == start.cash
        assert result.news[-1].level is NewsLevel.DANGER
        assert result.news[-1].message == INSOLVENCY_MESSAGE

    def test_game_over_keeps_pre_turn_decisions(self):
        """A project paid for before the week resolves stays paid for"""
        start = replace(default_start_state(), cash=8_000.0, loans=0.0, deposits=0.0)
        result = _resolve(start, _with(start, tech_action=TechInvestAction(TechUpgradeType.THEME_UPDATE)))
        s = result.state

        assert s.is_game_over
        assert s.cash == 500.0
        assert [t.description for t in result.ledger_delta] == ["Start Project: UI Theme Update"]
        assert s.transactions == result.ledger_delta
        assert _messages(result) == [
            "Started UI Theme Update project. Cost: $7,500.00. ETA: 2 weeks.",
            INSOLVENCY_MESSAGE,
        ]

    def test_finished_game_is_frozen(self):
        start = replace(default_start_state(), is_game_over=True, game_over_message=INSOLVENCY_MESSAGE)
        with pytest.raises(GameOverError):
            _resolve(start)


class TestNewsIds:
    """Test suite for news numbering"""

    def test_ids_start_where_asked(self):
        result = _resolve(default_start_state(), first_news_id=40)
        ids = [n.id for n in result.news]
        assert ids[0] == 40
        assert ids == list(range(40, 40 + len(ids)))
