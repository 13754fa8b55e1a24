import random
from typing import Callable

from .models import AttemptResult, TransactionIntent
from .registry import Registry

RISK_PENALTY = {"high": 0.08, "medium": 0.03, "low": 0.0}
DEGRADED_PENALTY = 0.07
LARGE_AMOUNT_PENALTY = 0.10
LARGE_AMOUNT_RATIO = 0.9
TIMEOUT_MARGIN = 0.2


class AttemptSimulator:
    """Stochastic stand-in for a processor settlement call.

    ``draw`` must return a uniform value in [0, 1). Tests pass fixed
    sequences; production uses ``random.random`` or a seeded generator.
    """

    def __init__(self, registry: Registry, draw: Callable[[], float] = random.random) -> None:
        self._registry = registry
        self._draw = draw

    def attempt(self, processor_id: str, intent: TransactionIntent) -> AttemptResult:
        p = self._registry.get_processor(processor_id)
        if not p:
            return AttemptResult(outcome="failure", reason="processor-not-found")

        risk_penalty = RISK_PENALTY.get(intent.riskLevel, 0.0)
        status_penalty = DEGRADED_PENALTY if p.status == "degraded" else 0.0
        amount_penalty = LARGE_AMOUNT_PENALTY if intent.amount > p.maxAmount * LARGE_AMOUNT_RATIO else 0.0
        threshold = p.successRate - risk_penalty - status_penalty - amount_penalty

        roll = self._draw()
        if roll <= threshold:
            return AttemptResult(outcome="success")

        if roll > threshold + TIMEOUT_MARGIN:
            reason = "processor-timeout"
        elif amount_penalty > 0:
            reason = "amount-over-threshold"
        elif risk_penalty > 0:
            reason = "risk-decline"
        else:
            reason = "network-error"
        return AttemptResult(outcome="failure", reason=reason)
