"""Notifier that writes every request to the log.

Email and chat delivery run outside this service and pick requests up
from wherever the log is shipped.
"""

from __future__ import annotations

import json
import logging

from storefront.application.notifier import Notifier
from storefront.domain.model.notification import NotificationRequest

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):

    def send(self, request: NotificationRequest) -> None:
        logger.info(
            "notify %s template=%s payload=%s",
            request.recipient,
            request.template.value,
            json.dumps(request.payload, default=str, sort_keys=True),
        )
