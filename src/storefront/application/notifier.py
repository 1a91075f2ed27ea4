"""Port for handing notification requests to the delivery service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.notification import NotificationRequest


class Notifier(ABC):

    @abstractmethod
    def send(self, request: NotificationRequest) -> None:
        """Queue one notification for delivery."""
