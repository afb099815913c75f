"""Browser push notifications via the Web Push protocol."""
import json
from typing import Any, Dict

from pywebpush import webpush

from apollusia.core import config
from apollusia.core.logging_config import get_logger

logger = get_logger(__name__)


class PushService:
    def build_payload(self, title: str, body: str, url: str) -> str:
        """Payload in the shape the Angular service worker displays."""
        return json.dumps({
            "notification": {
                "title": title,
                "body": body,
                "data": {
                    "onActionClick": {
                        "default": {"operation": "navigateLastFocusedOrOpen", "url": url},
                    },
                },
            },
        })

    def send(self, subscription: Dict[str, Any], title: str, body: str, url: str) -> None:
        """Deliver one notification. Raises WebPushException on delivery errors."""
        settings = config.settings
        if not settings.VAPID_PRIVATE_KEY:
            logger.info("push_skipped", title=title, reason="VAPID_PRIVATE_KEY not configured")
            return

        webpush(
            subscription_info=subscription,
            data=self.build_payload(title, body, url),
            vapid_private_key=settings.VAPID_PRIVATE_KEY,
            vapid_claims={"sub": settings.VAPID_SUBJECT},
        )
        logger.info("push_sent", title=title)


push_service = PushService()
