from typing import List

from .models import Transaction, TransactionIntent
from .service import PaymentMesh

DEMO_INTENTS = (
    TransactionIntent(amount=482.2, currency="USD", merchantId="mrc_aegis",
                      reference="ORDER-100312", channel="web", riskLevel="medium"),
    TransactionIntent(amount=2199, currency="EUR", merchantId="mrc_omni",
                      reference="ORDER-100441", channel="mobile", riskLevel="low"),
    TransactionIntent(amount=988, currency="GBP", merchantId="mrc_aegis",
                      reference="ORDER-100466", channel="web", riskLevel="high"),
    TransactionIntent(amount=129, currency="USD", merchantId="mrc_aurora",
                      reference="ORDER-200112", channel="web", riskLevel="low"),
)


def prime_demo_data(mesh: PaymentMesh) -> List[Transaction]:
    # Only an empty ledger gets demo traffic.
    if len(mesh.ledger) > 0:
        return []
    return [mesh.record_and_route(intent) for intent in DEMO_INTENTS]
