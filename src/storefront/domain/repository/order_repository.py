"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order, only if unmodified since loaded.

        Implementations compare the stored version with ``order.version``
        and raise ConcurrentModificationError on mismatch; on success the
        version is incremented on both sides.
        """
