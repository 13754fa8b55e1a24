import logging
from typing import List

from .models import (
    AttemptRecord,
    RouteConflict,
    RouteSuccess,
    SmartRouteCandidate,
    SmartRouteDecision,
    TransactionIntent,
)
from .registry import Registry
from .scoring import build_scorecard
from .simulator import AttemptSimulator

logger = logging.getLogger(__name__)

NO_ELIGIBLE = "no-eligible-processors"
ALL_DECLINED = "all-processors-declined"


def attempt_order(scorecard: List[SmartRouteCandidate], allow_degraded: bool = True) -> List[SmartRouteCandidate]:
    # Online first, degraded as fallback; each tier keeps score order.
    online = [c for c in scorecard if c.processor.status == "online"]
    if not allow_degraded:
        return online
    degraded = [c for c in scorecard if c.processor.status == "degraded"]
    return online + degraded


class SmartRouter:
    def __init__(
        self,
        registry: Registry,
        simulator: AttemptSimulator,
        allow_degraded_fallback: bool = True,
    ) -> None:
        self._registry = registry
        self._simulator = simulator
        self.allow_degraded_fallback = allow_degraded_fallback

    def route(self, intent: TransactionIntent) -> SmartRouteDecision:
        """Greedy best-first traversal of the scorecard.

        Returns a ``RouteSuccess`` for the first processor that settles, or a
        ``RouteConflict`` carrying the last decline reason when none does.
        """
        scorecard = sorted(
            build_scorecard(intent, self._registry.list_processors()),
            key=lambda c: c.score,
            reverse=True,
        )
        if not scorecard:
            logger.info("No eligible processor for %s %s (%s)", intent.amount, intent.currency, intent.reference)
            return RouteConflict(scorecard=scorecard, reason=NO_ELIGIBLE, attempts=[])

        attempts: List[AttemptRecord] = []
        for candidate in attempt_order(scorecard, self.allow_degraded_fallback):
            pid = candidate.processor.id
            result = self._simulator.attempt(pid, intent)
            attempts.append(AttemptRecord(processorId=pid, outcome=result.outcome, reason=result.reason))
            if result.outcome == "success":
                logger.info("Routed %s via %s after %d attempt(s)", intent.reference, pid, len(attempts))
                return RouteSuccess(processor=candidate.processor, scorecard=scorecard, attempts=attempts)
            logger.debug("Attempt on %s declined for %s: %s", pid, intent.reference, result.reason)

        reason = attempts[-1].reason if attempts and attempts[-1].reason else ALL_DECLINED
        logger.info("Routing exhausted for %s after %d attempt(s): %s", intent.reference, len(attempts), reason)
        return RouteConflict(scorecard=scorecard, reason=reason, attempts=attempts)
