from types import MappingProxyType
from typing import Iterable, List, Tuple

from .models import Processor, SmartRouteCandidate, TransactionIntent

AMOUNT_HEADROOM = 1.05

CURRENCY_REGIONS = MappingProxyType({
    "USD": ("na", "global"),
    "EUR": ("eu", "global"),
    "GBP": ("eu", "global"),
    "JPY": ("apac", "global"),
    "AUD": ("apac", "global"),
})

RISK_WEIGHT = MappingProxyType({
    "low": 1.0,
    "medium": 0.85,
    "high": 0.7,
})

SPECIALIZATION_AFFINITY = MappingProxyType({
    "high_risk": MappingProxyType({"low": 0.6, "medium": 0.85, "high": 1.1}),
    "low_risk": MappingProxyType({"low": 1.1, "medium": 1.0, "high": 0.8}),
    "wallets": MappingProxyType({"low": 1.0, "medium": 0.95, "high": 0.9}),
})

DEFAULT_AFFINITY = 0.95
DEGRADED_WEIGHT = 0.75


def currency_regions(currency: str) -> Tuple[str, ...]:
    return CURRENCY_REGIONS.get(currency, ("global",))


def eligible(p: Processor, intent: TransactionIntent) -> bool:
    if p.status == "offline":
        return False
    if intent.currency not in p.currencies:
        return False
    return intent.amount <= p.maxAmount * AMOUNT_HEADROOM


def affinity(p: Processor, risk_level: str) -> float:
    if not p.specialization:
        return 1.0
    return SPECIALIZATION_AFFINITY.get(p.specialization, {}).get(risk_level, DEFAULT_AFFINITY)


def score_processor(p: Processor, intent: TransactionIntent) -> float:
    # Higher is better. Cheaper processors earn a larger fee term.
    success_boost = p.successRate * 1.4
    latency_boost = p.latencyScore * 0.6
    priority_boost = p.priority * 0.05
    fee_penalty = (1 / max(p.baseFee, 0.01)) * 0.12
    risk_mod = RISK_WEIGHT[intent.riskLevel]
    status_weight = DEGRADED_WEIGHT if p.status == "degraded" else 1.0
    return (
        (success_boost + latency_boost + priority_boost + fee_penalty)
        * risk_mod
        * affinity(p, intent.riskLevel)
        * status_weight
    )


def reason_tags(p: Processor, intent: TransactionIntent) -> List[str]:
    reasons = ["status:degraded" if p.status == "degraded" else "status:online"]
    hints = currency_regions(intent.currency)
    if any(region in p.regions for region in hints):
        reasons.append("region:matched")
    else:
        reasons.append("region:partial")
    if p.specialization:
        reasons.append(f"specialization:{p.specialization}")
    return reasons


def build_scorecard(intent: TransactionIntent, processors: Iterable[Processor]) -> List[SmartRouteCandidate]:
    """Score every processor eligible for ``intent``, in registry order.

    An empty list means nothing can take the payment.
    """
    return [
        SmartRouteCandidate(
            processor=p,
            score=score_processor(p, intent),
            reasons=reason_tags(p, intent),
        )
        for p in processors
        if eligible(p, intent)
    ]
