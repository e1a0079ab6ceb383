"""
bankcore.effects
Economy / physics rules shared by the resolver and the lifecycle:
- exponential smoothing of soft metrics
- version bumps and rate rounding
- customer derivation and channel allocation
- one-time effects of finished tech projects
- calendar roll-over
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from .apportion import apportion
from .modifiers import (
    AVG_DEPOSIT_PER_CUSTOMER,
    AVG_LOAN_PER_CUSTOMER,
    BANK_TYPES,
    BASE_CHANNEL_PREFERENCES,
    SMOOTHING_FACTOR,
    STRATEGIES,
    UNIQUE_LOAN_CUSTOMER_SHARE,
    BankTypeSpec,
    StrategySpec,
    TechUpgradeSpec,
)
from .state import BankType, CHANNELS, Channel, ChannelUsage, ServerStatus, Strategy, clamp


def smooth_toward(value: float, target: float, factor: float = SMOOTHING_FACTOR,
                  lo: float = 0.0, hi: float = 100.0) -> float:
    """Blend `value` toward `target`; the target is clamped first, the blend is not."""
    target = clamp(target, lo, hi)
    return value + (target - value) * factor


def round_rate(rate: float) -> float:
    """Two decimals, ties rounded up (5.625 -> 5.63)."""
    return float(Decimal(str(rate)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def increment_version(version: str) -> str:
    """Patch bump with carry: patch wraps at 10 into minor, minor wraps at 10 into major."""
    parts = [int(p) for p in str(version).split(".")]
    while len(parts) < 3:
        parts.append(0)
    major, minor, patch = parts[0], parts[1], parts[2] + 1
    if patch >= 10:
        patch = 0
        minor += 1
    if minor >= 10:
        minor = 0
        major += 1
    return f"{major}.{minor}.{patch}"


def derive_total_customers(deposits: float, loans: float) -> int:
    deposit_customers = deposits / AVG_DEPOSIT_PER_CUSTOMER
    unique_loan_customers = (loans / AVG_LOAN_PER_CUSTOMER) * UNIQUE_LOAN_CUSTOMER_SHARE
    # round half up, not banker's rounding
    return int(max(0.0, deposit_customers + unique_loan_customers) + 0.5)


def channel_weights(
    *,
    satisfaction: float,
    strategy: Strategy,
    digital_boost: float,
    app_rating: float,
    bank_type: BankType,
    strategies: Optional[Dict[Strategy, StrategySpec]] = None,
    bank_types: Optional[Dict[BankType, BankTypeSpec]] = None,
) -> Dict[Channel, float]:
    """Preference weight per channel (unnormalized, never negative)."""
    strat = (strategies or STRATEGIES)[strategy]
    bank = (bank_types or BANK_TYPES)[bank_type]

    satisfaction_factor = 0.5 + satisfaction / 100.0
    boost = 1.0 + (digital_boost or 0.0)
    rating_modifier = 1.0 + (app_rating - 3.5) * 0.1
    base = BASE_CHANNEL_PREFERENCES

    return {
        Channel.MOBILE_APP: max(0.0, base[Channel.MOBILE_APP] * satisfaction_factor * strat.digital_channel
                                * boost * rating_modifier * bank.channel_modifier(Channel.MOBILE_APP)),
        Channel.WEB_PORTAL: max(0.0, base[Channel.WEB_PORTAL] * satisfaction_factor * strat.digital_channel
                                * boost * bank.channel_modifier(Channel.WEB_PORTAL)),
        Channel.ATM_NETWORK: max(0.0, base[Channel.ATM_NETWORK]),
        Channel.IN_BRANCH: max(0.0, base[Channel.IN_BRANCH] * strat.branch_channel
                               * bank.channel_modifier(Channel.IN_BRANCH)),
    }


def allocate_channels(total_customers: int, weights: Dict[Channel, float]) -> ChannelUsage:
    """Exclusive partition of customers over channels (degenerate -> In-Branch)."""
    counts = apportion(
        int(total_customers),
        [weights.get(c, 0.0) for c in CHANNELS],
        fallback=CHANNELS.index(Channel.IN_BRANCH),
    )
    return {c: n for c, n in zip(CHANNELS, counts)}


def decay_digital_boost(boost: float) -> float:
    if boost <= 0:
        return 0.0
    boost *= 0.98
    return 0.0 if boost < 0.01 else boost


def next_calendar(week: int, month: int, year: int) -> Tuple[int, int, int, bool]:
    """Advance one week. Returns (week, month, year, month_rolled_over)."""
    week += 1
    if week <= 4:
        return week, month, year, False
    week = 1
    month += 1
    if month > 12:
        month = 1
        year += 1
    return week, month, year, True


@dataclass(frozen=True)
class UpgradeOutcome:
    """Metric values after applying one finished project."""
    customer_satisfaction: float
    reputation: float
    risk_factor: float
    server_status: ServerStatus
    digital_channel_boost: float
    app_rating: float
    monthly_maintenance_cost: float
    app_version: str
    website_version: str


def apply_upgrade_completion(
    spec: TechUpgradeSpec,
    *,
    customer_satisfaction: float,
    reputation: float,
    risk_factor: float,
    server_status: ServerStatus,
    digital_channel_boost: float,
    app_rating: float,
    monthly_maintenance_cost: float,
    app_version: str,
    website_version: str,
) -> UpgradeOutcome:
    fx = spec.effects
    if fx.satisfaction:
        customer_satisfaction = min(100.0, customer_satisfaction + fx.satisfaction)
    if fx.reputation:
        reputation = min(100.0, reputation + fx.reputation)
    if fx.risk:
        risk_factor = max(0.0, risk_factor + fx.risk)
    if fx.server_status is not None:
        server_status = fx.server_status
    if fx.digital_usage_boost:
        digital_channel_boost = (digital_channel_boost or 0.0) + fx.digital_usage_boost
    if fx.app_rating:
        app_rating = min(5.0, app_rating + fx.app_rating)
    if spec.bumps_version:
        # the website follows the app release
        app_version = increment_version(app_version)
        website_version = app_version
    return UpgradeOutcome(
        customer_satisfaction=customer_satisfaction,
        reputation=reputation,
        risk_factor=risk_factor,
        server_status=server_status,
        digital_channel_boost=digital_channel_boost,
        app_rating=app_rating,
        monthly_maintenance_cost=monthly_maintenance_cost + spec.maintenance_cost,
        app_version=app_version,
        website_version=website_version,
    )


def usage_total(usage: ChannelUsage) -> int:
    return int(sum(int(v) for v in usage.values()))


def channel_share(usage: ChannelUsage) -> List[Tuple[Channel, float]]:
    total = usage_total(usage)
    if total <= 0:
        return [(c, 0.0) for c in CHANNELS]
    return [(c, usage.get(c, 0) / total) for c in CHANNELS]
