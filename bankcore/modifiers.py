"""
bankcore.modifiers
Static balancing tables (difficulty / bank type / strategy / campaigns / tech).

Kept in core so balancing lives in one place, but the UI can still display labels.
Every table is a total mapping over its closed enumeration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .state import (
    BankType,
    CampaignType,
    Channel,
    Difficulty,
    ServerStatus,
    Strategy,
    TechCategory,
    TechUpgradeType,
)


# --- Financial model ---
TURNS_PER_YEAR = 48  # 4 weeks per month * 12 months
RESERVE_REQUIREMENT = 0.10
WEEKLY_LOAN_REPAYMENT_RATE = 0.02
BASE_WEEKLY_DEFAULT_RATE = 0.001
SMOOTHING_FACTOR = 0.35

# --- Customer model ---
AVG_DEPOSIT_PER_CUSTOMER = 1000.0
AVG_LOAN_PER_CUSTOMER = 5000.0
UNIQUE_LOAN_CUSTOMER_SHARE = 0.3  # 70% of loan holders already hold a deposit

BASE_CHANNEL_PREFERENCES: Dict[Channel, float] = {
    Channel.MOBILE_APP: 0.68,
    Channel.WEB_PORTAL: 0.55,
    Channel.ATM_NETWORK: 0.42,
    Channel.IN_BRANCH: 0.15,
}

# --- Bounds ---
LEDGER_CAP = 100
FEEDBACK_CAP = 20
NEWS_CAP = 20
CAMPAIGN_MIN_BUDGET = 2000.0
CAMPAIGN_MAX_BUDGET = 10000.0
CAMPAIGN_MIN_WEEKS = 1
CAMPAIGN_MAX_WEEKS = 4


@dataclass(frozen=True)
class DifficultySpec:
    cash_modifier: float
    risk_modifier: float
    satisfaction_modifier: float


@dataclass(frozen=True)
class BankTypeSpec:
    """Multipliers; 1.0 means no effect."""
    channel_usage: Dict[Channel, float] = field(default_factory=dict)
    operational_cost_modifier: float = 1.0
    risk_modifier: float = 1.0
    loan_demand_modifier: float = 1.0
    deposit_growth_modifier: float = 1.0

    def channel_modifier(self, channel: Channel) -> float:
        return float(self.channel_usage.get(channel, 1.0))


@dataclass(frozen=True)
class StrategySpec:
    name: str
    description: str
    loan_growth: float = 0.0
    reputation: float = 0.0
    satisfaction: float = 0.0
    risk: float = 0.0
    digital_channel: float = 1.0
    branch_channel: float = 1.0
    default_rate_adjust: float = 0.0


@dataclass(frozen=True)
class CampaignEffects:
    """Per-dollar multipliers, scaled by the weekly budget."""
    deposit_growth: float
    reputation: float
    loan_growth: float = 0.0
    customer_growth: float = 0.0


@dataclass(frozen=True)
class CampaignSpec:
    name: str
    description: str
    effects: CampaignEffects


@dataclass(frozen=True)
class TechEffects:
    satisfaction: float = 0.0
    reputation: float = 0.0
    risk: float = 0.0
    server_status: Optional[ServerStatus] = None
    digital_usage_boost: float = 0.0
    app_rating: float = 0.0


@dataclass(frozen=True)
class TechUpgradeSpec:
    name: str
    description: str
    category: TechCategory
    cost: float
    duration: int  # weeks
    maintenance_cost: float  # monthly
    effects: TechEffects
    feedback_effect: str = ""

    @property
    def bumps_version(self) -> bool:
        return self.category in (TechCategory.UI_UX, TechCategory.FEATURES)


DIFFICULTIES: Dict[Difficulty, DifficultySpec] = {
    Difficulty.NORMAL: DifficultySpec(cash_modifier=1.0, risk_modifier=1.0, satisfaction_modifier=1.0),
    Difficulty.HARDCORE: DifficultySpec(cash_modifier=0.5, risk_modifier=1.25, satisfaction_modifier=0.8),
    Difficulty.SANDBOX: DifficultySpec(cash_modifier=5.0, risk_modifier=0.5, satisfaction_modifier=1.2),
}

BANK_TYPES: Dict[BankType, BankTypeSpec] = {
    BankType.RETAIL: BankTypeSpec(
        channel_usage={Channel.IN_BRANCH: 1.2, Channel.MOBILE_APP: 0.9},
        operational_cost_modifier=1.1,
    ),
    BankType.DIGITAL: BankTypeSpec(
        channel_usage={Channel.IN_BRANCH: 0.5, Channel.MOBILE_APP: 1.25, Channel.WEB_PORTAL: 1.15},
        operational_cost_modifier=0.8,
    ),
    BankType.INVESTMENT: BankTypeSpec(
        risk_modifier=1.15,
        loan_demand_modifier=1.2,
        deposit_growth_modifier=0.9,
    ),
}

STRATEGIES: Dict[Strategy, StrategySpec] = {
    Strategy.BALANCED: StrategySpec(
        name="Balanced",
        description="A stable approach focusing on steady, overall growth.",
    ),
    Strategy.AGGRESSIVE_LENDING: StrategySpec(
        name="Aggressive Lending",
        description="Focus on expanding the loan portfolio, accepting higher risk for potential higher returns.",
        loan_growth=0.00125,
        satisfaction=-0.125,
        risk=0.75,
    ),
    Strategy.BRAND_BUILDING: StrategySpec(
        name="Brand Building",
        description="Invest in marketing and public relations to boost reputation and attract customers.",
        reputation=0.125,
    ),
    Strategy.TECH_INVESTMENT: StrategySpec(
        name="Tech Investment",
        description="Focus on technological innovation to improve customer satisfaction and efficiency.",
        satisfaction=0.1875,
        digital_channel=1.15,
        branch_channel=0.85,
        default_rate_adjust=-0.001,
    ),
}

CAMPAIGNS: Dict[CampaignType, CampaignSpec] = {
    CampaignType.SOCIAL_MEDIA_BLITZ: CampaignSpec(
        name="Social Media Blitz",
        description="Boosts new customers and deposits, especially from young customers.",
        effects=CampaignEffects(deposit_growth=0.00001, reputation=0.00002, customer_growth=0.015),
    ),
    CampaignType.REFERRAL_BONUS: CampaignSpec(
        name="Referral Bonus Program",
        description="Encourages existing customers to invite new users, steadily increasing both deposits and loans.",
        effects=CampaignEffects(deposit_growth=0.00002, reputation=0.0, loan_growth=0.00001, customer_growth=0.02),
    ),
    CampaignType.TV_COMMERCIALS: CampaignSpec(
        name="TV Commercials",
        description="Strong brand awareness campaign to increase customer trust and deposits over time.",
        effects=CampaignEffects(deposit_growth=0.00005, reputation=0.0001, customer_growth=0.005),
    ),
    CampaignType.BILLBOARD_ADVERTISING: CampaignSpec(
        name="Billboard Advertising",
        description="Minor but steady customer growth boost at a low cost.",
        effects=CampaignEffects(deposit_growth=0.0, reputation=0.00001, customer_growth=0.008),
    ),
}

TECH_UPGRADES: Dict[TechUpgradeType, TechUpgradeSpec] = {
    # UI/UX
    TechUpgradeType.THEME_UPDATE: TechUpgradeSpec(
        name="UI Theme Update",
        description="Refresh the app and website with a modern color palette and new icons.",
        category=TechCategory.UI_UX,
        cost=7500,
        duration=2,
        maintenance_cost=150,
        effects=TechEffects(satisfaction=2, app_rating=0.2),
        feedback_effect="The new app theme looks so much cleaner! A nice refresh.",
    ),
    TechUpgradeType.NAVIGATION_REDESIGN: TechUpgradeSpec(
        name="Navigation Redesign",
        description="Streamline menus and workflows to make the app easier to use.",
        category=TechCategory.UI_UX,
        cost=15000,
        duration=4,
        maintenance_cost=300,
        effects=TechEffects(satisfaction=4, app_rating=0.3),
        feedback_effect="It's so much easier to find what I need in the app now. Great update!",
    ),
    TechUpgradeType.ACCESSIBILITY_IMPROVEMENTS: TechUpgradeSpec(
        name="Accessibility Improvements",
        description="Improve support for screen readers and add high-contrast modes.",
        category=TechCategory.UI_UX,
        cost=12000,
        duration=3,
        maintenance_cost=100,
        effects=TechEffects(reputation=3, satisfaction=1, app_rating=0.1),
        feedback_effect="I appreciate the bank making the app accessible for everyone.",
    ),
    # Performance
    TechUpgradeType.SERVER_OPTIMIZATION: TechUpgradeSpec(
        name="Server Optimization",
        description="Upgrade server hardware to improve speed, reliability, and capacity.",
        category=TechCategory.PERFORMANCE,
        cost=25000,
        duration=4,
        maintenance_cost=500,
        effects=TechEffects(satisfaction=3, server_status=ServerStatus.OPTIMAL, app_rating=0.1),
        feedback_effect="The app feels much faster and more responsive lately.",
    ),
    TechUpgradeType.CDN_INTEGRATION: TechUpgradeSpec(
        name="CDN Integration",
        description="Use a Content Delivery Network to speed up load times for users far from our servers.",
        category=TechCategory.PERFORMANCE,
        cost=18000,
        duration=3,
        maintenance_cost=400,
        effects=TechEffects(satisfaction=2),
        feedback_effect="Website loading times have improved noticeably. Good job.",
    ),
    # Features
    TechUpgradeType.MOBILE_CHECK_DEPOSIT: TechUpgradeSpec(
        name="Mobile Check Deposit",
        description="Allow users to deposit checks by taking a photo with their phone.",
        category=TechCategory.FEATURES,
        cost=40000,
        duration=5,
        maintenance_cost=750,
        effects=TechEffects(satisfaction=5, digital_usage_boost=0.10, app_rating=0.4),
        feedback_effect="Mobile check deposit is a game-changer! Saves me so much time.",
    ),
    TechUpgradeType.BUDGET_TOOLS: TechUpgradeSpec(
        name="Budgeting Tools",
        description="Add tools for users to track their spending and set savings goals.",
        category=TechCategory.FEATURES,
        cost=35000,
        duration=4,
        maintenance_cost=600,
        effects=TechEffects(satisfaction=4, digital_usage_boost=0.05, app_rating=0.3),
        feedback_effect="The new budgeting tools are helping me manage my finances better.",
    ),
    # Security
    TechUpgradeType.MFA_IMPLEMENTATION: TechUpgradeSpec(
        name="Multi-Factor Authentication",
        description="Implement two-factor authentication for a significant security boost.",
        category=TechCategory.SECURITY,
        cost=30000,
        duration=4,
        maintenance_cost=600,
        effects=TechEffects(risk=-5, reputation=2, satisfaction=1),
        feedback_effect="I feel much more secure with multi-factor authentication enabled.",
    ),
    TechUpgradeType.ADVANCED_ENCRYPTION: TechUpgradeSpec(
        name="Advanced Encryption",
        description="Upgrade to the latest encryption standards to protect user data.",
        category=TechCategory.SECURITY,
        cost=22000,
        duration=3,
        maintenance_cost=450,
        effects=TechEffects(risk=-3, reputation=1),
        feedback_effect="Glad to see the bank is taking data security seriously.",
    ),
}


@dataclass(frozen=True)
class ModifierTables:
    """Bundle of lookup tables handed to the engine (swap in tests or mods)."""
    difficulties: Dict[Difficulty, DifficultySpec] = field(default_factory=lambda: dict(DIFFICULTIES))
    bank_types: Dict[BankType, BankTypeSpec] = field(default_factory=lambda: dict(BANK_TYPES))
    strategies: Dict[Strategy, StrategySpec] = field(default_factory=lambda: dict(STRATEGIES))
    campaigns: Dict[CampaignType, CampaignSpec] = field(default_factory=lambda: dict(CAMPAIGNS))
    tech_upgrades: Dict[TechUpgradeType, TechUpgradeSpec] = field(default_factory=lambda: dict(TECH_UPGRADES))

    def difficulty(self, key: Difficulty) -> DifficultySpec:
        return self.difficulties[key]

    def bank_type(self, key: BankType) -> BankTypeSpec:
        return self.bank_types[key]

    def strategy(self, key: Strategy) -> StrategySpec:
        return self.strategies[key]

    def campaign(self, key: CampaignType) -> CampaignSpec:
        return self.campaigns[key]

    def tech(self, key: TechUpgradeType) -> TechUpgradeSpec:
        return self.tech_upgrades[key]


DEFAULT_TABLES = ModifierTables()
