"""PaymentTrack: the lifecycle of one order installment.

Every order has an ``advance`` track (half the subtotal, paid up front)
and a ``final`` track (the rest plus shipping, collected on delivery).
Proof of payment is an opaque reference produced by the upload service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from storefront.domain.exceptions import InvalidTransition, ValidationError
from storefront.domain.model.value_objects import Money


class PaymentKind(Enum):
    ADVANCE = "advance"
    FINAL = "final"


class PaymentStatus(Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


# rejected -> submitted is the only back-edge.
_ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.SUBMITTED}),
    PaymentStatus.SUBMITTED: frozenset({PaymentStatus.APPROVED, PaymentStatus.REJECTED}),
    PaymentStatus.APPROVED: frozenset(),
    PaymentStatus.REJECTED: frozenset({PaymentStatus.SUBMITTED}),
}

DEFAULT_REJECTION_REASON = "Payment could not be verified"


@dataclass
class PaymentTrack:
    kind: PaymentKind
    amount: Money
    status: PaymentStatus = PaymentStatus.PENDING
    proof_reference: str | None = None
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    def submit(self, proof_reference: str, at: datetime) -> None:
        """Attach a proof of payment: pending|rejected -> submitted."""
        if not proof_reference or not proof_reference.strip():
            raise ValidationError("A proof of payment reference is required")
        self._check(PaymentStatus.SUBMITTED)
        self.status = PaymentStatus.SUBMITTED
        self.proof_reference = proof_reference.strip()
        self.submitted_at = at
        self.reviewed_at = None
        self.rejection_reason = None

    def approve(self, at: datetime) -> None:
        """submitted -> approved."""
        self._check(PaymentStatus.APPROVED)
        self.status = PaymentStatus.APPROVED
        self.reviewed_at = at

    def reject(self, reason: str | None, at: datetime) -> None:
        """submitted -> rejected.  The reason is shown to the customer as-is."""
        self._check(PaymentStatus.REJECTED)
        self.status = PaymentStatus.REJECTED
        self.rejection_reason = reason if reason and reason.strip() else DEFAULT_REJECTION_REASON
        self.reviewed_at = at

    def can_move_to(self, target: PaymentStatus) -> bool:
        return target in _ALLOWED_TRANSITIONS[self.status]

    @property
    def is_approved(self) -> bool:
        return self.status is PaymentStatus.APPROVED

    def _check(self, target: PaymentStatus) -> None:
        if not self.can_move_to(target):
            raise InvalidTransition(
                f"{self.kind.value} payment", self.status.value, target.value
            )
