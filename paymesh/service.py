import logging
import random
from datetime import timedelta
from typing import List, Optional

from .config import MeshConfig
from .ledger import Ledger
from .models import (
    Conflict,
    Merchant,
    Metrics,
    Processor,
    SmartRouteDecision,
    Transaction,
    TransactionIntent,
)
from .registry import Registry
from .routing import SmartRouter
from .simulator import AttemptSimulator

logger = logging.getLogger(__name__)


class PaymentMesh:
    """The operations collaborators call: route, record, resolve, report."""

    def __init__(self, registry: Registry, router: SmartRouter, ledger: Ledger) -> None:
        self.registry = registry
        self.router = router
        self.ledger = ledger

    def route(self, intent: TransactionIntent) -> SmartRouteDecision:
        return self.router.route(intent)

    def record_and_route(self, intent: TransactionIntent) -> Transaction:
        decision = self.router.route(intent)
        return self.ledger.record_decision(intent, decision)

    def resolve_conflict(self, conflict_id: str, note: Optional[str] = None) -> Optional[Conflict]:
        return self.ledger.resolve_conflict(conflict_id, note)

    def metrics(self) -> Metrics:
        return self.ledger.metrics()

    def list_transactions(self, limit: int = 50) -> List[Transaction]:
        return self.ledger.list_transactions(limit)

    def list_conflicts(self, state: Optional[str] = None) -> List[Conflict]:
        return self.ledger.list_conflicts(state)

    def merchants(self) -> List[Merchant]:
        return self.registry.list_merchants()

    def processors(self) -> List[Processor]:
        return self.registry.list_processors()


def build_mesh(config: MeshConfig, registry: Optional[Registry] = None) -> PaymentMesh:
    registry = registry or Registry.load(config.registry_path)
    draw = random.Random(config.random_seed).random if config.random_seed is not None else random.random
    simulator = AttemptSimulator(registry, draw=draw)
    router = SmartRouter(registry, simulator, allow_degraded_fallback=config.allow_degraded_fallback)
    ledger = Ledger(settlement_delay=timedelta(seconds=config.settlement_delay_seconds))
    logger.info(
        "Mesh ready: %d processors, %d merchants, degraded fallback %s",
        len(registry.list_processors()),
        len(registry.list_merchants()),
        "on" if config.allow_degraded_fallback else "off",
    )
    return PaymentMesh(registry, router, ledger)
