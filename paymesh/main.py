import math
import random
from typing import Literal, Optional, Union

from fastapi import APIRouter, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from .config import MeshConfig
from .logger import configure_logging
from .models import Currency, RiskLevel, RouteConflict, RouteSuccess, Transaction, TransactionIntent
from .seed import prime_demo_data
from .service import PaymentMesh, build_mesh

router = APIRouter()


class NewTransaction(BaseModel):
    amount: float = Field(gt=0, allow_inf_nan=False)
    currency: Currency
    merchantId: str = Field(min_length=1)
    reference: Optional[str] = None
    channel: Literal["web", "mobile", "pos"] = "web"
    riskLevel: RiskLevel = "medium"

    def to_intent(self) -> TransactionIntent:
        reference = self.reference or f"ORDER-{random.randint(0, 99999)}"
        return TransactionIntent(
            amount=self.amount,
            currency=self.currency,
            merchantId=self.merchantId,
            reference=reference,
            channel=self.channel,
            riskLevel=self.riskLevel,
        )


class ResolveConflictBody(BaseModel):
    conflictId: Optional[str] = None
    note: Optional[str] = None


def _mesh(request: Request) -> PaymentMesh:
    return request.app.state.mesh


def _clamp_limit(raw: Optional[str], config: MeshConfig) -> int:
    # Unparseable or non-finite limits fall back to the default page size.
    try:
        value = float(raw) if raw is not None else math.nan
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        return config.transactions_default_limit
    return int(min(max(value, 1), config.transactions_max_limit))


@router.get("/health")
def health(request: Request):
    mesh = _mesh(request)
    return {"ok": True, "processors": len(mesh.processors()), "merchants": len(mesh.merchants())}


@router.get("/merchants")
def list_merchants(request: Request):
    return {"merchants": [m.model_dump() for m in _mesh(request).merchants()]}


@router.get("/processors")
def list_processors(request: Request):
    return {"processors": [p.model_dump() for p in _mesh(request).processors()]}


@router.get("/transactions")
def list_transactions(request: Request, limit: Optional[str] = None):
    config: MeshConfig = request.app.state.config
    txns = _mesh(request).list_transactions(_clamp_limit(limit, config))
    return {"transactions": [t.model_dump(mode="json") for t in txns]}


@router.post("/transactions", status_code=201)
def create_transaction(body: NewTransaction, request: Request):
    # Routing exhaustion is not an error: the transaction comes back in "conflict".
    txn: Transaction = _mesh(request).record_and_route(body.to_intent())
    return {"transaction": txn.model_dump(mode="json")}


@router.post("/route", response_model=Union[RouteSuccess, RouteConflict])
def preview_route(body: NewTransaction, request: Request):
    return _mesh(request).route(body.to_intent())


@router.get("/conflicts")
def list_conflicts(request: Request):
    return {"conflicts": [c.model_dump(mode="json") for c in _mesh(request).list_conflicts()]}


@router.patch("/conflicts")
def resolve_conflict(body: ResolveConflictBody, request: Request):
    if not body.conflictId:
        raise HTTPException(status_code=400, detail="missing_conflict_id")
    note = body.note if body.note is not None else "manual-resolution"
    updated = _mesh(request).resolve_conflict(body.conflictId, note)
    if not updated:
        raise HTTPException(status_code=404, detail="conflict_not_found")
    return {"conflict": updated.model_dump(mode="json")}


@router.get("/metrics")
def dashboard_metrics(request: Request):
    mesh = _mesh(request)
    return {
        "metrics": mesh.metrics().model_dump(),
        "recentTransactions": [t.model_dump(mode="json") for t in mesh.list_transactions(10)],
        "conflicts": [c.model_dump(mode="json") for c in mesh.list_conflicts(state="open")[:5]],
    }


def create_app(config: Optional[MeshConfig] = None) -> FastAPI:
    config = config or MeshConfig()
    configure_logging(config.log_level)
    mesh = build_mesh(config)
    if config.seed_demo_data:
        prime_demo_data(mesh)

    app = FastAPI(title="Payment Routing Mesh", version="1.0.0")
    app.state.config = config
    app.state.mesh = mesh
    app.include_router(router)
    return app


app = create_app()
