"""
FastAPI application for payment reconciliation.

Tenant resolution happens upstream; requests arrive with the tenant already
resolved in the X-Tenant-ID header.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import structlog

from .config import get_settings
from .errors import ReconciliationError
from .reconciliation import ReconciliationOrchestrator
from .repository import InMemoryReceivablesRepository, ReceivablesRepository

logger = structlog.get_logger()

# In-memory storage, seeded at startup from SEED_FILE when set
repository: ReceivablesRepository = InMemoryReceivablesRepository()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting Receivables Reconciliation API", env=settings.app_env)
    if settings.seed_file and isinstance(repository, InMemoryReceivablesRepository):
        repository.load_file(settings.seed_file)
    yield
    logger.info("Shutting down Receivables Reconciliation API")


app = FastAPI(
    title="Receivables Reconciliation",
    description="Cash application: match received payments to open invoices",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-tenant-id"],
)


# Request/Response models
class MatchRequest(BaseModel):
    payment_id: Optional[str] = None


class PaymentResponse(BaseModel):
    payment_id: str
    amount_received: float
    payment_date: Optional[str]
    status: str
    matched_invoice_id: Optional[str]


class InvoiceMatchResponse(BaseModel):
    invoice_id: str
    invoice_number: str
    amount: float


class SuggestionResponse(BaseModel):
    invoices: List[InvoiceMatchResponse]
    total_amount: float
    difference: float
    confidence: float
    reason: str
    description: str


class MatchResponse(BaseModel):
    status: str
    message: str
    payment: PaymentResponse
    exact_matches: List[InvoiceMatchResponse]
    partial_matches: List[SuggestionResponse]


def get_repository() -> ReceivablesRepository:
    return repository


def get_orchestrator(
    repo: ReceivablesRepository = Depends(get_repository),
) -> ReconciliationOrchestrator:
    return ReconciliationOrchestrator(repo)


def get_tenant_id(x_tenant_id: Optional[str] = Header(default=None)) -> str:
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(401, "Missing tenant header")
    return x_tenant_id.strip()


@app.exception_handler(ReconciliationError)
async def reconciliation_error_handler(request: Request, exc: ReconciliationError):
    if exc.status_code >= 500:
        logger.error(
            "Reconciliation request failed",
            path=request.url.path,
            error=exc.message,
            kind=type(exc).__name__,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("Rejected request body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid JSON payload"})


# API Endpoints
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


@app.get("/api/payments", response_model=List[PaymentResponse])
def list_payments(
    tenant_id: str = Depends(get_tenant_id),
    orchestrator: ReconciliationOrchestrator = Depends(get_orchestrator),
):
    """List the tenant's payments, newest first."""
    return [p.to_dict() for p in orchestrator.list_payments(tenant_id)]


@app.post("/api/payments/match", response_model=MatchResponse)
def match_payment(
    request: MatchRequest,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator: ReconciliationOrchestrator = Depends(get_orchestrator),
):
    """Reconcile one payment against the tenant's open invoices."""
    logger.info("Matching payment", payment_id=request.payment_id, tenant_id=tenant_id)

    result = orchestrator.reconcile(tenant_id, request.payment_id)

    logger.info(
        "Payment matching completed",
        payment_id=request.payment_id,
        status=result.status.value,
        suggestions=len(result.partial_matches),
    )
    return result.to_dict()
