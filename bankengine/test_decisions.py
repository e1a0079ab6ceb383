"""
Unit tests for decision parsing

Tests cover:
- Enum normalization from names, labels and loose spellings
- Mapping -> TurnDecisions with defaults from the current state
- Boundary errors for unknown values
- Form selections -> campaign actions
"""

import pytest

from bankcore.state import ActiveCampaign, CampaignType, Strategy, TechUpgradeType, default_start_state
from bankengine.decisions import (
    LAUNCH,
    STOP,
    CampaignAction,
    TurnDecisions,
    campaign_action_from_form,
    campaign_action_from_mapping,
    decisions_from_mapping,
    normalize_campaign,
    normalize_strategy,
    normalize_upgrade,
)


class TestNormalizers:
    """Test suite for normalize_* helpers"""

    @pytest.mark.parametrize("raw", ["AGGRESSIVE_LENDING", "aggressive lending", "Aggressive Lending", "aggressive-lending"])
    def test_strategy_spellings(self, raw):
        assert normalize_strategy(raw) is Strategy.AGGRESSIVE_LENDING

    def test_enum_passes_through(self):
        assert normalize_strategy(Strategy.BALANCED) is Strategy.BALANCED

    def test_campaign_display_name(self):
        assert normalize_campaign("Referral Bonus Program") is CampaignType.REFERRAL_BONUS

    def test_upgrade_display_name(self):
        assert normalize_upgrade("Multi-Factor Authentication") is TechUpgradeType.MFA_IMPLEMENTATION

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            normalize_strategy("Hostile Takeover")
        with pytest.raises(ValueError):
            normalize_upgrade("")


class TestDecisionsFromMapping:
    """Test suite for decisions_from_mapping()"""

    def test_full_mapping(self):
        d = decisions_from_mapping(
            {
                "strategy": "Tech Investment",
                "loanRate": "6.25",
                "depositRate": 2,
                "campaignAction": {"kind": "launch", "campaign": "TV Commercials", "budget": 4000, "duration": 2},
                "techAction": {"upgrade": "CDN_INTEGRATION"},
            }
        )
        assert d.strategy is Strategy.TECH_INVESTMENT
        assert d.loan_rate == 6.25
        assert d.deposit_rate == 2.0
        assert d.campaign_action == CampaignAction(kind=LAUNCH, campaign=CampaignType.TV_COMMERCIALS, budget=4000.0, duration=2)
        assert d.tech_action.upgrade is TechUpgradeType.CDN_INTEGRATION

    def test_missing_fields_use_current_state(self):
        state = default_start_state()
        d = decisions_from_mapping({"loanRate": 7.0}, current=state)
        assert d == TurnDecisions(strategy=Strategy.BALANCED, loan_rate=7.0, deposit_rate=2.5)

    def test_missing_fields_without_state_raise(self):
        with pytest.raises(ValueError):
            decisions_from_mapping({"strategy": "BALANCED"})

    def test_stop_action(self):
        assert campaign_action_from_mapping({"kind": "stop"}) == CampaignAction(kind=STOP)

    def test_unknown_action_kind(self):
        with pytest.raises(ValueError):
            campaign_action_from_mapping({"kind": "pause"})

    def test_round_trip_through_dict(self):
        d = decisions_from_mapping(
            {"strategy": "BRAND_BUILDING", "loanRate": 5.0, "depositRate": 3.0, "campaignAction": {"kind": "stop"}}
        )
        assert decisions_from_mapping(d.to_dict()) == d


class TestCampaignActionFromForm:
    """Test suite for campaign_action_from_form()"""

    running = ActiveCampaign(type=CampaignType.TV_COMMERCIALS, budget=4000.0, duration=2, weeks_remaining=2)

    def test_nothing_selected(self):
        assert campaign_action_from_form(None) is None
        assert campaign_action_from_form(self.running) is None

    def test_launch_when_idle(self):
        action = campaign_action_from_form(None, launch=CampaignType.TV_COMMERCIALS, budget=4000, duration=2)
        assert action == CampaignAction(kind=LAUNCH, campaign=CampaignType.TV_COMMERCIALS, budget=4000.0, duration=2)

    def test_same_selection_does_not_restart_running_campaign(self):
        """A launch left selected from last week is not sent again"""
        assert campaign_action_from_form(self.running, launch=CampaignType.TV_COMMERCIALS, budget=4000, duration=2) is None

    def test_other_campaign_replaces_running_one(self):
        action = campaign_action_from_form(self.running, launch=CampaignType.REFERRAL_BONUS, budget=2000, duration=1)
        assert action.kind == LAUNCH
        assert action.campaign is CampaignType.REFERRAL_BONUS

    def test_stop(self):
        assert campaign_action_from_form(self.running, stop=True) == CampaignAction(kind=STOP)
        assert campaign_action_from_form(None, stop=True) is None
