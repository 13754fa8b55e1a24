from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Currency = Literal["USD", "EUR", "GBP", "JPY", "AUD"]
RiskLevel = Literal["low", "medium", "high"]
ProcessorStatus = Literal["online", "degraded", "offline"]
Specialization = Literal["high_risk", "low_risk", "wallets"]
TransactionState = Literal["success", "failed", "pending", "conflict"]


class Merchant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    vertical: Literal["ecommerce", "saas", "marketplace"]
    tier: Literal["standard", "enterprise"]
    monthlyVolume: float = Field(ge=0)
    active: bool = True
    preferredCurrencies: List[Currency] = Field(default_factory=list)


class Processor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    regions: List[str] = Field(min_length=1)
    currencies: List[Currency] = Field(min_length=1)
    baseFee: float = Field(ge=0)
    successRate: float = Field(ge=0, le=1)
    maxAmount: float = Field(gt=0)
    latencyScore: float = Field(ge=0, le=1)
    priority: int
    status: ProcessorStatus = "online"
    specialization: Optional[Specialization] = None


class RegistryDocument(BaseModel):
    merchants: List[Merchant] = Field(default_factory=list)
    processors: List[Processor]


class TransactionIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float = Field(gt=0, allow_inf_nan=False)
    currency: Currency
    merchantId: str = Field(min_length=1)
    reference: str
    channel: Literal["web", "mobile", "pos"] = "web"
    riskLevel: RiskLevel = "medium"


class SmartRouteCandidate(BaseModel):
    processor: Processor
    score: float
    reasons: List[str] = Field(default_factory=list)


class AttemptResult(BaseModel):
    outcome: Literal["success", "failure"]
    reason: Optional[str] = None


class AttemptRecord(AttemptResult):
    processorId: str


class RouteSuccess(BaseModel):
    status: Literal["success"] = "success"
    processor: Processor
    scorecard: List[SmartRouteCandidate]
    attempts: List[AttemptRecord] = Field(default_factory=list)


class RouteConflict(BaseModel):
    status: Literal["conflict"] = "conflict"
    scorecard: List[SmartRouteCandidate] = Field(default_factory=list)
    reason: str
    attempts: List[AttemptRecord] = Field(default_factory=list)


SmartRouteDecision = Annotated[
    Union[RouteSuccess, RouteConflict], Field(discriminator="status")
]


class Transaction(BaseModel):
    id: str
    intent: TransactionIntent
    processorId: Optional[str] = None
    state: TransactionState
    createdAt: datetime
    settledAt: Optional[datetime] = None
    failureReason: Optional[str] = None


class Conflict(BaseModel):
    id: str
    transactionId: str
    merchantId: str
    currency: Currency
    amount: float = Field(gt=0)
    reason: str
    suggestedProcessorIds: List[str] = Field(default_factory=list, max_length=3)
    createdAt: datetime
    state: Literal["open", "resolved"] = "open"
    resolutionNote: Optional[str] = None
    resolvedAt: Optional[datetime] = None


class Metrics(BaseModel):
    totalVolume: float
    successRate: float
    failureCount: int
    conflictCount: int
    avgTicket: float
    transactionCount: int
