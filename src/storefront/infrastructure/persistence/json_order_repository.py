"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import ConcurrentModificationError
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    ShippingInfo,
    StatusChange,
)
from storefront.domain.model.payment import PaymentKind, PaymentStatus, PaymentTrack
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        with self._lock:
            orders = self._load_raw()
        for raw in orders:
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()

            if order.id is None:
                order.id = max((o["id"] for o in orders), default=0) + 1

            # Upsert: replace if exists and unmodified, otherwise append
            index = None
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    index = i
                    break

            stored_version = orders[index].get("version", 0) if index is not None else 0
            if stored_version != order.version:
                raise ConcurrentModificationError(order.id, order.version, stored_version)

            order.version += 1
            if index is not None:
                orders[index] = self._to_raw(order)
            else:
                orders.append(self._to_raw(order))

            self._persist_raw(orders)

    # --- Serialization --------------------------------------------------------

    @classmethod
    def _to_raw(cls, order: Order) -> dict:
        return {
            "id": order.id,
            "version": order.version,
            "customer_id": order.customer_id,
            "customer_name": order.customer_name,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
            "currency": order.advance.amount.currency,
            "items": [
                {
                    "item_id": item.item_id,
                    "item_name": item.item_name,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "tier_label": item.tier_label,
                    "color": item.color,
                }
                for item in order.items
            ],
            "discount": str(order.discount.amount),
            "coupon_code": order.coupon_code,
            "shipping_cost": str(order.shipping_cost.amount),
            "order_weight_grams": order.order_weight_grams,
            "billed_kg": order.billed_kg,
            "advance": cls._track_to_raw(order.advance),
            "final": cls._track_to_raw(order.final) if order.final is not None else None,
            "shipping": {
                "carrier": order.shipping.carrier,
                "tracking_number": order.shipping.tracking_number,
                "tracking_url": order.shipping.tracking_url,
            },
            "status_history": [
                {"status": c.status.value, "at": c.at.isoformat(), "note": c.note}
                for c in order.status_history
            ],
            "shipping_assigned_at": _iso(order.shipping_assigned_at),
            "final_payment_requested_at": _iso(order.final_payment_requested_at),
            "delivered_at": _iso(order.delivered_at),
        }

    @classmethod
    def _to_domain(cls, raw: dict) -> Order:
        currency = raw.get("currency", "PKR")
        items = [
            OrderLineItem(
                item_id=i["item_id"],
                item_name=i["item_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), currency),
                tier_label=i.get("tier_label"),
                color=i.get("color"),
            )
            for i in raw["items"]
        ]
        shipping = raw.get("shipping") or {}
        return Order(
            id=raw["id"],
            version=raw.get("version", 0),
            customer_id=raw["customer_id"],
            customer_name=raw["customer_name"],
            items=items,
            advance=cls._track_to_domain(raw["advance"], PaymentKind.ADVANCE, currency),
            # Orders written before split payments have no final track.
            final=(
                cls._track_to_domain(raw["final"], PaymentKind.FINAL, currency)
                if raw.get("final")
                else None
            ),
            discount=Money(Decimal(raw.get("discount", "0")), currency),
            coupon_code=raw.get("coupon_code"),
            shipping_cost=Money(Decimal(raw.get("shipping_cost", "0")), currency),
            order_weight_grams=raw.get("order_weight_grams", 0),
            billed_kg=raw.get("billed_kg", 0),
            status=OrderStatus(raw["status"]),
            shipping=ShippingInfo(
                carrier=shipping.get("carrier"),
                tracking_number=shipping.get("tracking_number"),
                tracking_url=shipping.get("tracking_url"),
            ),
            status_history=[
                StatusChange(
                    status=OrderStatus(c["status"]),
                    at=datetime.fromisoformat(c["at"]),
                    note=c.get("note"),
                )
                for c in raw.get("status_history", [])
            ],
            shipping_assigned_at=_parse(raw.get("shipping_assigned_at")),
            final_payment_requested_at=_parse(raw.get("final_payment_requested_at")),
            delivered_at=_parse(raw.get("delivered_at")),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    @staticmethod
    def _track_to_raw(track: PaymentTrack) -> dict:
        return {
            "amount": str(track.amount.amount),
            "status": track.status.value,
            "proof_reference": track.proof_reference,
            "submitted_at": _iso(track.submitted_at),
            "reviewed_at": _iso(track.reviewed_at),
            "rejection_reason": track.rejection_reason,
        }

    @staticmethod
    def _track_to_domain(raw: dict, kind: PaymentKind, currency: str) -> PaymentTrack:
        return PaymentTrack(
            kind=kind,
            amount=Money(Decimal(raw["amount"]), currency),
            status=PaymentStatus(raw["status"]),
            proof_reference=raw.get("proof_reference"),
            submitted_at=_parse(raw.get("submitted_at")),
            reviewed_at=_parse(raw.get("reviewed_at")),
            rejection_reason=raw.get("rejection_reason"),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        # Readers, in this process or another, never see a half-written file.
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(orders, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
