"""SMS notification service using the Twilio REST API.

Dispatch is fire-and-forget: failures are logged and reported through
SmsResult, never raised to the caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import httpx

from app.config import SmsConfig

logger = logging.getLogger(__name__)


@dataclass
class SmsResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


def format_phone_number(phone: str) -> str | None:
    """Normalise a phone number to E.164 (+15551234567). Returns None if invalid."""
    if not phone:
        return None
    digits = re.sub(r"\D", "", phone)

    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if phone.strip().startswith("+") and len(digits) >= 10:
        return f"+{digits}"

    logger.warning("Invalid phone number format: %s", phone)
    return None


class SmsNotifier:
    """Sends text messages to on-site contacts."""

    def __init__(self, config: SmsConfig):
        self.config = config

    @property
    def configured(self) -> bool:
        c = self.config
        return bool(c.enabled and c.account_sid and c.auth_token and c.phone_number)

    async def send(self, to: str, message: str) -> SmsResult:
        if not self.configured:
            logger.warning("SMS not configured; message to %s not sent", to)
            return SmsResult(success=False, error="SMS service not configured")

        to_number = format_phone_number(to)
        if not to_number:
            return SmsResult(success=False, error="Invalid phone number format")

        url = f"{self.config.api_base}/Accounts/{self.config.account_sid}/Messages.json"
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                resp = await client.post(
                    url,
                    data={"To": to_number, "From": self.config.phone_number, "Body": message},
                    auth=(self.config.account_sid, self.config.auth_token),
                )
            if resp.status_code >= 400:
                detail = resp.json().get("message", resp.text) if resp.content else resp.reason_phrase
                logger.error("SMS to %s rejected (%s): %s", to_number, resp.status_code, detail)
                return SmsResult(success=False, error=str(detail))
            sid = resp.json().get("sid")
            logger.info("SMS sent to %s (sid=%s)", to_number, sid)
            return SmsResult(success=True, message_id=sid)
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("Failed to send SMS to %s", to_number)
            return SmsResult(success=False, error=str(e))


# ── Message templates ─────────────────────────────────────

def in_route_message(contact_name: str, operator_name: str, job_title: str, company_name: str) -> str:
    contact = contact_name or "there"
    return (
        f"Hey {contact}, this is {operator_name} from {company_name}. "
        f"We are en route to your location for {job_title or 'your job'}. "
        "We'll contact you when we arrive."
    )


def standby_message(
    operator_name: str, reason: str, hourly_rate: float, job_number: str, company_name: str
) -> str:
    return (
        f"{company_name} - Standby Notice\n\n"
        f"{operator_name} is on-site but unable to proceed.\n\n"
        f"Reason: {reason}\n\n"
        f"Standby time is billed at ${hourly_rate:.2f}/hour as per our policy.\n\n"
        f"Job #: {job_number}"
    )
