"""Notification requests emitted by the order lifecycle.

Formatting and delivery (email, chat) are handled outside this core;
a request only names the recipient, a template and the data to fill it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ADMIN_RECIPIENT = "admin"


class NotificationTemplate(Enum):
    ORDER_CREATED = "order_created"
    ADVANCE_SUBMITTED = "advance_submitted"
    ADVANCE_APPROVED = "advance_approved"
    ADVANCE_REJECTED = "advance_rejected"
    SHIPPING_ASSIGNED = "shipping_assigned"
    FINAL_PAYMENT_REQUESTED = "final_payment_requested"
    FINAL_SUBMITTED = "final_submitted"
    FINAL_APPROVED = "final_approved"
    FINAL_REJECTED = "final_rejected"
    ORDER_STATUS_CHANGED = "order_status_changed"
    ORDER_CANCELLED = "order_cancelled"


@dataclass(frozen=True)
class NotificationRequest:
    recipient: str
    template: NotificationTemplate
    payload: dict[str, Any] = field(default_factory=dict)
