"""Abstract repository for promotional campaigns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from storefront.domain.model.campaign import Campaign


class CampaignRepository(ABC):

    @abstractmethod
    def list_live(self, at: datetime) -> list[Campaign]:
        """Return campaigns that are active and running at ``at``."""

    @abstractmethod
    def save(self, campaign: Campaign) -> None:
        """Persist a new or updated campaign."""
