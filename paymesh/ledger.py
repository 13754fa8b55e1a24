import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Optional

from .models import (
    Conflict,
    Metrics,
    RouteSuccess,
    SmartRouteDecision,
    Transaction,
    TransactionIntent,
)

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION_NOTE = "manually-resolved"
SUGGESTION_COUNT = 3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float, places: int) -> float:
    # Halves round away from zero, matching the dashboard figures.
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def new_id() -> str:
    return str(uuid.uuid4())


class Ledger:
    """Append-only store of transactions and routing conflicts.

    All reads and writes go through one lock, so ids never collide and
    metrics never observe a half-recorded decision. Callers get copies.
    """

    def __init__(
        self,
        settlement_delay: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._settlement_delay = settlement_delay
        self._clock = clock
        self._new_id = id_factory
        self._lock = threading.Lock()
        self._transactions: List[Transaction] = []
        self._tx_index: Dict[str, Transaction] = {}
        self._conflicts: List[Conflict] = []
        self._conflict_index: Dict[str, Conflict] = {}

    def record_decision(self, intent: TransactionIntent, decision: SmartRouteDecision) -> Transaction:
        with self._lock:
            created_at = self._clock()
            if isinstance(decision, RouteSuccess):
                txn = Transaction(
                    id=self._new_id(),
                    intent=intent,
                    processorId=decision.processor.id,
                    state="success",
                    createdAt=created_at,
                    settledAt=created_at + self._settlement_delay,
                )
                self._append_transaction(txn)
                logger.debug("Recorded transaction %s settled by %s", txn.id, txn.processorId)
                return txn.model_copy(deep=True)

            txn = Transaction(
                id=self._new_id(),
                intent=intent,
                processorId=None,
                state="conflict",
                createdAt=created_at,
                settledAt=None,
                failureReason=decision.reason,
            )
            self._append_transaction(txn)
            conflict = Conflict(
                id=self._new_id(),
                transactionId=txn.id,
                merchantId=intent.merchantId,
                currency=intent.currency,
                amount=intent.amount,
                reason=decision.reason,
                suggestedProcessorIds=[c.processor.id for c in decision.scorecard[:SUGGESTION_COUNT]],
                createdAt=created_at,
            )
            self._conflicts.append(conflict)
            self._conflict_index[conflict.id] = conflict
            logger.warning(
                "Conflict %s opened for transaction %s (%s)", conflict.id, txn.id, conflict.reason
            )
            return txn.model_copy(deep=True)

    def resolve_conflict(self, conflict_id: str, note: Optional[str] = None) -> Optional[Conflict]:
        """Close an open conflict and fail its transaction.

        Returns ``None`` for unknown or already resolved ids and leaves the
        ledger untouched.
        """
        with self._lock:
            conflict = self._conflict_index.get(conflict_id)
            if not conflict or conflict.state != "open":
                return None
            conflict.state = "resolved"
            conflict.resolvedAt = self._clock()
            conflict.resolutionNote = note
            txn = self._tx_index.get(conflict.transactionId)
            if txn and txn.state == "conflict":
                txn.state = "failed"
                txn.failureReason = note or DEFAULT_RESOLUTION_NOTE
            logger.info("Conflict %s resolved: %s", conflict_id, note)
            return conflict.model_copy(deep=True)

    def metrics(self) -> Metrics:
        with self._lock:
            total = len(self._transactions)
            succeeded = [t for t in self._transactions if t.state == "success"]
            volume = sum(t.intent.amount for t in succeeded)
            return Metrics(
                totalVolume=volume,
                successRate=round_half_up(len(succeeded) / total * 100, 1) if total else 0,
                failureCount=sum(1 for t in self._transactions if t.state == "failed"),
                conflictCount=sum(1 for c in self._conflicts if c.state == "open"),
                avgTicket=round_half_up(volume / len(succeeded), 2) if succeeded else 0,
                transactionCount=total,
            )

    def list_transactions(self, limit: int = 50) -> List[Transaction]:
        with self._lock:
            if limit <= 0:
                return []
            recent = self._transactions[-limit:]
            return [t.model_copy(deep=True) for t in reversed(recent)]

    def list_conflicts(self, state: Optional[str] = None) -> List[Conflict]:
        with self._lock:
            items = [c for c in self._conflicts if state is None or c.state == state]
            items.sort(key=lambda c: (c.createdAt, c.id), reverse=True)
            return [c.model_copy(deep=True) for c in items]

    def get_transaction(self, txn_id: str) -> Optional[Transaction]:
        with self._lock:
            txn = self._tx_index.get(txn_id)
            return txn.model_copy(deep=True) if txn else None

    def get_conflict(self, conflict_id: str) -> Optional[Conflict]:
        with self._lock:
            conflict = self._conflict_index.get(conflict_id)
            return conflict.model_copy(deep=True) if conflict else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)

    def _append_transaction(self, txn: Transaction) -> None:
        self._transactions.append(txn)
        self._tx_index[txn.id] = txn
