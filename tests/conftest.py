import pytest

from paymesh.models import Processor, TransactionIntent
from paymesh.registry import Registry


def make_processor(pid, **overrides):
    fields = dict(
        id=pid,
        name=pid.title(),
        regions=["na"],
        currencies=["USD"],
        baseFee=0.02,
        successRate=0.95,
        maxAmount=10000,
        latencyScore=0.8,
        priority=5,
        status="online",
    )
    fields.update(overrides)
    return Processor(**fields)


def make_intent(**overrides):
    fields = dict(
        amount=100.0,
        currency="USD",
        merchantId="mrc_aegis",
        reference="ORDER-1",
        channel="web",
        riskLevel="low",
    )
    fields.update(overrides)
    return TransactionIntent(**fields)


def always(value):
    return lambda: value


@pytest.fixture
def registry():
    return Registry.load()
