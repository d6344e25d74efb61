"""Payment and invoice models for the reconciliation system."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Dict, Any, Mapping

from ..amounts import normalize_amount
from ..errors import InternalError
from .enums import InvoiceStatus, PaymentStatus


def _parse_date(value: Any) -> Optional[date]:
    """Accept a date or an ISO string (timestamps are truncated to the day)."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class InvoiceSummary:
    """
    An invoice as seen by the matcher.
    Amounts are Decimals in the tenant's currency unit.
    """
    invoice_id: str
    invoice_number: str
    amount: Decimal
    tenant_id: str
    customer_id: Optional[str] = None
    status: InvoiceStatus = InvoiceStatus.OPEN
    due_date: Optional[date] = None

    @property
    def is_open(self) -> bool:
        return self.status == InvoiceStatus.OPEN

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "InvoiceSummary":
        """Build from a loosely typed data-layer row."""
        try:
            return cls(
                invoice_id=str(row["invoice_id"]),
                invoice_number=str(row.get("invoice_number") or ""),
                amount=normalize_amount(row.get("amount")),
                tenant_id=str(row.get("tenant_id") or ""),
                customer_id=row.get("customer_id"),
                status=InvoiceStatus(row.get("status") or InvoiceStatus.OPEN.value),
                due_date=_parse_date(row.get("due_date")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InternalError("Malformed invoice row", details=str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "invoice_id": self.invoice_id,
            "invoice_number": self.invoice_number,
            "amount": float(self.amount),
        }


@dataclass(frozen=True)
class Payment:
    """A received payment awaiting (or done with) reconciliation."""
    payment_id: str
    tenant_id: str
    amount_received: Decimal
    payment_date: Optional[date] = None
    status: PaymentStatus = PaymentStatus.UNMATCHED
    matched_invoice_id: Optional[str] = None

    @property
    def is_matched(self) -> bool:
        return self.status == PaymentStatus.MATCHED

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Payment":
        """Build from a loosely typed data-layer row."""
        matched = row.get("matched_invoice_id")
        try:
            return cls(
                payment_id=str(row["payment_id"]),
                tenant_id=str(row.get("tenant_id") or ""),
                amount_received=normalize_amount(row.get("amount_received")),
                payment_date=_parse_date(row.get("payment_date")),
                status=PaymentStatus(row.get("status") or PaymentStatus.UNMATCHED.value),
                matched_invoice_id=str(matched) if matched else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InternalError("Malformed payment row", details=str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "payment_id": self.payment_id,
            "amount_received": float(self.amount_received),
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "status": self.status.value,
            "matched_invoice_id": self.matched_invoice_id,
        }
