"""
bankcore.state
Core domain data models (UI independent).

Field names in the serialized form (camelCase) are the persistence contract;
the Python attributes are snake_case. Use state_to_dict() / state_from_mapping()
to cross that boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


class Strategy(str, Enum):
    BALANCED = "BALANCED"
    AGGRESSIVE_LENDING = "AGGRESSIVE_LENDING"
    BRAND_BUILDING = "BRAND_BUILDING"
    TECH_INVESTMENT = "TECH_INVESTMENT"


class BankType(str, Enum):
    RETAIL = "RETAIL"
    DIGITAL = "DIGITAL"
    INVESTMENT = "INVESTMENT"


class Difficulty(str, Enum):
    NORMAL = "NORMAL"
    HARDCORE = "HARDCORE"
    SANDBOX = "SANDBOX"


class CampaignType(str, Enum):
    SOCIAL_MEDIA_BLITZ = "SOCIAL_MEDIA_BLITZ"
    REFERRAL_BONUS = "REFERRAL_BONUS"
    TV_COMMERCIALS = "TV_COMMERCIALS"
    BILLBOARD_ADVERTISING = "BILLBOARD_ADVERTISING"


class TechCategory(str, Enum):
    UI_UX = "UI/UX"
    PERFORMANCE = "Performance"
    FEATURES = "Features"
    SECURITY = "Security"


class TechUpgradeType(str, Enum):
    THEME_UPDATE = "THEME_UPDATE"
    NAVIGATION_REDESIGN = "NAVIGATION_REDESIGN"
    ACCESSIBILITY_IMPROVEMENTS = "ACCESSIBILITY_IMPROVEMENTS"
    SERVER_OPTIMIZATION = "SERVER_OPTIMIZATION"
    CDN_INTEGRATION = "CDN_INTEGRATION"
    MOBILE_CHECK_DEPOSIT = "MOBILE_CHECK_DEPOSIT"
    BUDGET_TOOLS = "BUDGET_TOOLS"
    MFA_IMPLEMENTATION = "MFA_IMPLEMENTATION"
    ADVANCED_ENCRYPTION = "ADVANCED_ENCRYPTION"


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    INVESTMENT = "INVESTMENT"
    DEPOSIT = "DEPOSIT"
    LOAN = "LOAN"
    PENALTY = "PENALTY"
    MARKETING_CAMPAIGN = "MARKETING_CAMPAIGN"
    LOAN_REPAYMENT = "LOAN_REPAYMENT"
    LOAN_DEFAULT = "LOAN_DEFAULT"


class ServerStatus(str, Enum):
    OPTIMAL = "Optimal"
    STABLE = "Stable"
    OVERLOADED = "Overloaded"


class Channel(str, Enum):
    # Declaration order is the apportionment tie-break order.
    MOBILE_APP = "Mobile App"
    WEB_PORTAL = "Web Portal"
    ATM_NETWORK = "ATM Network"
    IN_BRANCH = "In-Branch"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class NewsLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"
    DANGER = "danger"


CHANNELS: List[Channel] = list(Channel)

ChannelUsage = Dict[Channel, int]


@dataclass(frozen=True)
class Transaction:
    """One ledger line. Inflows positive, outflows negative."""
    id: int
    turn: int
    week: int
    month: int
    year: int
    description: str
    type: TransactionType
    amount: float


@dataclass(frozen=True)
class ActiveCampaign:
    type: CampaignType
    budget: float  # weekly
    duration: int  # weeks
    weeks_remaining: int


@dataclass(frozen=True)
class ActiveTechUpgrade:
    type: TechUpgradeType
    weeks_remaining: int


@dataclass(frozen=True)
class CompletedTechUpgrade:
    type: TechUpgradeType
    completed_turn: int


@dataclass(frozen=True)
class CustomerFeedback:
    id: int
    turn: int
    sentiment: Sentiment
    text: str


@dataclass(frozen=True)
class NewsEvent:
    id: int
    message: str
    level: NewsLevel = NewsLevel.INFO


@dataclass(frozen=True)
class Notifications:
    system_alerts: bool = True
    player_alerts: bool = True


@dataclass(frozen=True)
class Branding:
    bank_name: str = "Pioneer Financial"
    bank_logo: str = "Vault"
    theme_color: str = "blue"


@dataclass(frozen=True)
class GameSettings:
    """Presentation preferences. Only notifications.player_alerts reaches the engine."""
    theme_style: str = "dark"
    simulation_speed: str = "NORMAL"
    report_style: str = "BRIEF"
    notifications: Notifications = field(default_factory=Notifications)
    branding: Branding = field(default_factory=Branding)


@dataclass(frozen=True)
class GameState:
    """Root game state.

    Scores (reputation, customer_satisfaction, risk_factor) live in 0..100,
    app_rating in 1..5. Cash may only be negative transiently inside a turn.
    """

    cash: float
    loans: float
    deposits: float
    reputation: float
    customer_satisfaction: float
    risk_factor: float
    total_customers: int
    loan_interest_rate: float
    deposit_interest_rate: float
    year: int
    month: int
    week: int
    turn: int
    current_strategy: Strategy = Strategy.BALANCED
    is_game_over: bool = False
    game_over_message: str = ""
    transactions: List[Transaction] = field(default_factory=list)
    active_marketing_campaign: Optional[ActiveCampaign] = None
    customer_feedback: List[CustomerFeedback] = field(default_factory=list)
    channel_usage: ChannelUsage = field(default_factory=lambda: {c: 0 for c in CHANNELS})
    app_rating: float = 4.2
    app_version: str = "1.0.0"
    website_version: str = "1.0.0"
    server_status: ServerStatus = ServerStatus.STABLE
    active_tech_upgrades: List[ActiveTechUpgrade] = field(default_factory=list)
    completed_tech_upgrades: List[CompletedTechUpgrade] = field(default_factory=list)
    monthly_maintenance_cost: float = 0.0
    digital_channel_boost: float = 0.0
    bank_type: BankType = BankType.RETAIL
    difficulty: Difficulty = Difficulty.NORMAL
    settings: GameSettings = field(default_factory=GameSettings)


@dataclass(frozen=True)
class HistoryEntry:
    """Pre-turn snapshot plus the outcome of that turn."""
    turn: int
    year: int
    month: int
    week: int
    cash: float
    loans: float
    deposits: float
    reputation: float
    customer_satisfaction: float
    risk_factor: float
    total_customers: int
    loan_interest_rate: float
    deposit_interest_rate: float
    net_outcome: float
    loan_defaults: float


# -------------------------
# Serialization bridge
# -------------------------

_STATE_KEYS: Dict[str, str] = {
    "cash": "cash",
    "loans": "loans",
    "deposits": "deposits",
    "reputation": "reputation",
    "customer_satisfaction": "customerSatisfaction",
    "risk_factor": "riskFactor",
    "total_customers": "totalCustomers",
    "loan_interest_rate": "loanInterestRate",
    "deposit_interest_rate": "depositInterestRate",
    "year": "year",
    "month": "month",
    "week": "week",
    "turn": "turn",
    "is_game_over": "isGameOver",
    "game_over_message": "gameOverMessage",
    "app_rating": "appRating",
    "app_version": "appVersion",
    "website_version": "websiteVersion",
    "monthly_maintenance_cost": "monthlyMaintenanceCost",
    "digital_channel_boost": "digitalChannelBoost",
}

_HISTORY_KEYS: Dict[str, str] = {
    "turn": "turn",
    "year": "year",
    "month": "month",
    "week": "week",
    "cash": "cash",
    "loans": "loans",
    "deposits": "deposits",
    "reputation": "reputation",
    "customer_satisfaction": "customerSatisfaction",
    "risk_factor": "riskFactor",
    "total_customers": "totalCustomers",
    "loan_interest_rate": "loanInterestRate",
    "deposit_interest_rate": "depositInterestRate",
    "net_outcome": "netOutcome",
    "loan_defaults": "loanDefaults",
}

_INT_FIELDS = {"total_customers", "year", "month", "week", "turn"}


def _scalar(name: str, value: Any) -> Any:
    if name in _INT_FIELDS:
        return int(value)
    if name in {"is_game_over"}:
        return bool(value)
    if name in {"game_over_message", "app_version", "website_version"}:
        return str(value)
    return float(value)


def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    return {
        "id": int(t.id),
        "turn": int(t.turn),
        "week": int(t.week),
        "month": int(t.month),
        "year": int(t.year),
        "description": str(t.description),
        "type": t.type.value,
        "amount": float(t.amount),
    }


def transaction_from_mapping(d: Mapping[str, Any]) -> Transaction:
    return Transaction(
        id=int(d.get("id", 0)),
        turn=int(d.get("turn", 0)),
        week=int(d.get("week", 1)),
        month=int(d.get("month", 1)),
        year=int(d.get("year", 2024)),
        description=str(d.get("description", "")),
        type=TransactionType(d.get("type")),
        amount=float(d.get("amount", 0.0)),
    )


def settings_to_dict(s: GameSettings) -> Dict[str, Any]:
    return {
        "themeStyle": s.theme_style,
        "simulationSpeed": s.simulation_speed,
        "reportStyle": s.report_style,
        "notifications": {
            "systemAlerts": bool(s.notifications.system_alerts),
            "playerAlerts": bool(s.notifications.player_alerts),
        },
        "branding": {
            "bankName": s.branding.bank_name,
            "bankLogo": s.branding.bank_logo,
            "themeColor": s.branding.theme_color,
        },
    }


def settings_from_mapping(d: Mapping[str, Any]) -> GameSettings:
    base = GameSettings()
    n = dict(d.get("notifications") or {})
    b = dict(d.get("branding") or {})
    return GameSettings(
        theme_style=str(d.get("themeStyle", base.theme_style)),
        simulation_speed=str(d.get("simulationSpeed", base.simulation_speed)),
        report_style=str(d.get("reportStyle", base.report_style)),
        notifications=Notifications(
            system_alerts=bool(n.get("systemAlerts", True)),
            player_alerts=bool(n.get("playerAlerts", True)),
        ),
        branding=Branding(
            bank_name=str(b.get("bankName", base.branding.bank_name)),
            bank_logo=str(b.get("bankLogo", base.branding.bank_logo)),
            theme_color=str(b.get("themeColor", base.branding.theme_color)),
        ),
    )


def state_to_dict(s: GameState) -> Dict[str, Any]:
    out: Dict[str, Any] = {key: getattr(s, attr) for attr, key in _STATE_KEYS.items()}
    campaign = s.active_marketing_campaign
    out.update(
        {
            "currentStrategy": s.current_strategy.value,
            "transactions": [transaction_to_dict(t) for t in s.transactions],
            "activeMarketingCampaign": None if campaign is None else {
                "type": campaign.type.value,
                "budget": float(campaign.budget),
                "duration": int(campaign.duration),
                "weeksRemaining": int(campaign.weeks_remaining),
            },
            "customerFeedback": [
                {"id": int(f.id), "turn": int(f.turn), "sentiment": f.sentiment.value, "text": f.text}
                for f in s.customer_feedback
            ],
            "channelUsage": {c.value: int(s.channel_usage.get(c, 0)) for c in CHANNELS},
            "serverStatus": s.server_status.value,
            "activeTechUpgrades": [
                {"type": u.type.value, "weeksRemaining": int(u.weeks_remaining)} for u in s.active_tech_upgrades
            ],
            "completedTechUpgrades": [
                {"type": u.type.value, "completedTurn": int(u.completed_turn)} for u in s.completed_tech_upgrades
            ],
            "bankType": s.bank_type.value,
            "difficulty": s.difficulty.value,
            "settings": settings_to_dict(s.settings),
        }
    )
    return out


def state_from_mapping(d: Mapping[str, Any]) -> GameState:
    """Build a GameState from its serialized form.

    Missing scalar keys fall back to default_start_state(); malformed enum
    values raise ValueError.
    """
    base = state_to_dict(default_start_state())
    kwargs: Dict[str, Any] = {}
    for attr, key in _STATE_KEYS.items():
        kwargs[attr] = _scalar(attr, d.get(key, base[key]))

    raw_campaign = d.get("activeMarketingCampaign")
    campaign = None
    if raw_campaign:
        campaign = ActiveCampaign(
            type=CampaignType(raw_campaign["type"]),
            budget=float(raw_campaign.get("budget", 0.0)),
            duration=int(raw_campaign.get("duration", 0)),
            weeks_remaining=int(raw_campaign.get("weeksRemaining", 0)),
        )

    usage_raw = dict(d.get("channelUsage") or base["channelUsage"])
    channel_usage = {c: int(usage_raw.get(c.value, 0)) for c in CHANNELS}

    return GameState(
        current_strategy=Strategy(d.get("currentStrategy", base["currentStrategy"])),
        transactions=[transaction_from_mapping(t) for t in (d.get("transactions") or [])],
        active_marketing_campaign=campaign,
        customer_feedback=[
            CustomerFeedback(
                id=int(f.get("id", 0)),
                turn=int(f.get("turn", 0)),
                sentiment=Sentiment(f.get("sentiment", "neutral")),
                text=str(f.get("text", "")),
            )
            for f in (d.get("customerFeedback") or [])
        ],
        channel_usage=channel_usage,
        server_status=ServerStatus(d.get("serverStatus", base["serverStatus"])),
        active_tech_upgrades=[
            ActiveTechUpgrade(type=TechUpgradeType(u["type"]), weeks_remaining=int(u.get("weeksRemaining", 0)))
            for u in (d.get("activeTechUpgrades") or [])
        ],
        completed_tech_upgrades=[
            CompletedTechUpgrade(type=TechUpgradeType(u["type"]), completed_turn=int(u.get("completedTurn", 0)))
            for u in (d.get("completedTechUpgrades") or [])
        ],
        bank_type=BankType(d.get("bankType", base["bankType"])),
        difficulty=Difficulty(d.get("difficulty", base["difficulty"])),
        settings=settings_from_mapping(d.get("settings") or {}),
        **kwargs,
    )


def history_to_dict(h: HistoryEntry) -> Dict[str, Any]:
    return {key: getattr(h, attr) for attr, key in _HISTORY_KEYS.items()}


def history_from_mapping(d: Mapping[str, Any]) -> HistoryEntry:
    kwargs = {attr: (int(d.get(key, 0)) if attr in _INT_FIELDS else float(d.get(key, 0.0)))
              for attr, key in _HISTORY_KEYS.items()}
    return HistoryEntry(**kwargs)


def news_to_dict(n: NewsEvent) -> Dict[str, Any]:
    return {"id": int(n.id), "message": n.message, "type": n.level.value}


def news_from_mapping(d: Mapping[str, Any]) -> NewsEvent:
    return NewsEvent(id=int(d.get("id", 0)), message=str(d.get("message", "")), level=NewsLevel(d.get("type", "info")))


def default_start_state() -> GameState:
    """Baseline start state.

    Keep it in core so headless tests and the UI share the same baseline.
    The opening channel split uses the same weights as a resolved week
    (app rating and bank-type channel modifiers included), so week one does
    not jump when the first allocation runs.
    """
    from .effects import allocate_channels, channel_weights, derive_total_customers

    cash, loans, deposits = 100_000.0, 400_000.0, 450_000.0
    satisfaction = 50.0
    total = derive_total_customers(deposits, loans)
    weights = channel_weights(
        satisfaction=satisfaction,
        strategy=Strategy.BALANCED,
        digital_boost=0.0,
        app_rating=4.2,
        bank_type=BankType.RETAIL,
    )
    return GameState(
        cash=cash,
        loans=loans,
        deposits=deposits,
        reputation=40.0,
        customer_satisfaction=satisfaction,
        risk_factor=40.0,
        total_customers=total,
        loan_interest_rate=5.5,
        deposit_interest_rate=2.5,
        year=2024,
        month=1,
        week=1,
        turn=0,
        channel_usage=allocate_channels(total, weights),
    )
