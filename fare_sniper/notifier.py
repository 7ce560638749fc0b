from __future__ import annotations

import logging

import requests

from .config import Settings, get_settings
from .errors import NotificationError

logger = logging.getLogger(__name__)


class TwilioNotifier:
    """Send deal alerts as SMS through the Twilio Messages REST API."""

    def __init__(
        self,
        settings: Settings | None = None,
        session: requests.Session | None = None,
        timeout: float = 15,
    ) -> None:
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return self.settings.twilio_configured

    @property
    def recipient(self) -> str | None:
        return self.settings.twilio_phone_to

    @property
    def sender(self) -> str | None:
        return self.settings.twilio_phone_from

    def send_sms(self, message: str) -> None:
        """Send *message*; raises ``NotificationError`` on any failure."""
        s = self.settings
        if not self.configured:
            raise NotificationError("Twilio credentials incomplete")

        url = (
            f"{s.twilio_api_url.rstrip('/')}/Accounts/"
            f"{s.twilio_account_sid}/Messages.json"
        )
        try:
            resp = self.session.post(
                url,
                data={
                    "From": s.twilio_phone_from,
                    "To": s.twilio_phone_to,
                    "Body": message,
                },
                auth=(s.twilio_account_sid, s.twilio_auth_token),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise NotificationError(
                f"failed to send SMS to {s.twilio_phone_to}: {exc}"
            ) from exc

        if resp.status_code not in (200, 201):
            raise NotificationError(
                f"failed to send SMS to {s.twilio_phone_to} from "
                f"{s.twilio_phone_from}: HTTP {resp.status_code} – {resp.text[:120]}"
            )
        logger.info("Sent SMS to %s", s.twilio_phone_to)


__all__ = ["TwilioNotifier"]
