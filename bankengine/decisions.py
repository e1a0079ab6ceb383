"""bankengine.decisions

Contracts for the player's standing decisions of one week.

Normalizers accept enum names, display labels and lower-case aliases, the
way the UI sends them. A value that cannot be mapped is a caller bug and
raises ValueError; a decision that is well-formed but not allowed by the game
(no cash, duplicate project) is handled by the resolver as an advisory news
event instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from bankcore.modifiers import CAMPAIGNS, STRATEGIES, TECH_UPGRADES
from bankcore.state import ActiveCampaign, CampaignType, GameState, Strategy, TechUpgradeType

E = TypeVar("E", bound=Enum)

LAUNCH = "launch"
STOP = "stop"
ALLOWED_CAMPAIGN_KINDS = {LAUNCH, STOP}


def _key(x: Any) -> str:
    return str(x or "").strip().lower().replace("-", " ").replace("_", " ")


def _normalize(value: Any, enum_cls: Type[E], labels: Mapping[E, str]) -> E:
    if isinstance(value, enum_cls):
        return value
    k = _key(value)
    for member in enum_cls:
        if k in {_key(member.name), _key(member.value), _key(labels.get(member, ""))}:
            return member
    raise ValueError(f"unknown {enum_cls.__name__}: {value!r}")


def normalize_strategy(value: Any) -> Strategy:
    return _normalize(value, Strategy, {k: v.name for k, v in STRATEGIES.items()})


def normalize_campaign(value: Any) -> CampaignType:
    return _normalize(value, CampaignType, {k: v.name for k, v in CAMPAIGNS.items()})


def normalize_upgrade(value: Any) -> TechUpgradeType:
    return _normalize(value, TechUpgradeType, {k: v.name for k, v in TECH_UPGRADES.items()})


@dataclass(frozen=True)
class CampaignAction:
    kind: str  # launch|stop
    campaign: Optional[CampaignType] = None
    budget: float = 0.0  # weekly
    duration: int = 0  # weeks

    @staticmethod
    def launch(campaign: Any, budget: float, duration: int) -> "CampaignAction":
        return CampaignAction(kind=LAUNCH, campaign=normalize_campaign(campaign), budget=float(budget), duration=int(duration))

    @staticmethod
    def stop() -> "CampaignAction":
        return CampaignAction(kind=STOP)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "campaign": None if self.campaign is None else self.campaign.value,
            "budget": float(self.budget),
            "duration": int(self.duration),
        }


@dataclass(frozen=True)
class TechInvestAction:
    upgrade: TechUpgradeType

    def to_dict(self) -> Dict[str, Any]:
        return {"upgrade": self.upgrade.value}


@dataclass(frozen=True)
class TurnDecisions:
    strategy: Strategy
    loan_rate: float
    deposit_rate: float
    campaign_action: Optional[CampaignAction] = None
    tech_action: Optional[TechInvestAction] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "loanRate": float(self.loan_rate),
            "depositRate": float(self.deposit_rate),
            "campaignAction": None if self.campaign_action is None else self.campaign_action.to_dict(),
            "techAction": None if self.tech_action is None else self.tech_action.to_dict(),
        }


def hold_course(state: GameState) -> TurnDecisions:
    """Keep everything as it is this week."""
    return TurnDecisions(
        strategy=state.current_strategy,
        loan_rate=float(state.loan_interest_rate),
        deposit_rate=float(state.deposit_interest_rate),
    )


def campaign_action_from_form(
    active: Optional[ActiveCampaign],
    *,
    stop: bool = False,
    launch: Optional[CampaignType] = None,
    budget: float = 0.0,
    duration: int = 0,
) -> Optional[CampaignAction]:
    """Campaign action for one submitted decisions form.

    Form widgets keep their values between weeks, so a launch of the campaign
    type that is already running is dropped rather than restarting it.
    """
    if launch is not None and (active is None or active.type is not launch):
        return CampaignAction.launch(launch, budget, duration)
    if stop and active is not None:
        return CampaignAction.stop()
    return None


def campaign_action_from_mapping(d: Mapping[str, Any]) -> CampaignAction:
    kind = _key(d.get("kind") or LAUNCH)
    if kind not in ALLOWED_CAMPAIGN_KINDS:
        raise ValueError(f"unknown campaign action: {d.get('kind')!r}")
    if kind == STOP:
        return CampaignAction.stop()
    return CampaignAction.launch(d.get("campaign"), float(d.get("budget", 0.0)), int(d.get("duration", 0)))


def decisions_from_mapping(d: Mapping[str, Any], *, current: Optional[GameState] = None) -> TurnDecisions:
    """Parse decisions; missing rates/strategy default to the current state's."""
    if current is not None:
        base = hold_course(current)
        strategy: Any = d.get("strategy", base.strategy)
        loan_rate: Any = d.get("loanRate", base.loan_rate)
        deposit_rate: Any = d.get("depositRate", base.deposit_rate)
    else:
        try:
            strategy, loan_rate, deposit_rate = d["strategy"], d["loanRate"], d["depositRate"]
        except KeyError as e:
            raise ValueError(f"missing decision field: {e.args[0]}") from e

    raw_campaign = d.get("campaignAction")
    raw_tech = d.get("techAction")
    return TurnDecisions(
        strategy=normalize_strategy(strategy),
        loan_rate=float(loan_rate),
        deposit_rate=float(deposit_rate),
        campaign_action=campaign_action_from_mapping(raw_campaign) if raw_campaign else None,
        tech_action=TechInvestAction(normalize_upgrade(raw_tech.get("upgrade"))) if raw_tech else None,
    )
