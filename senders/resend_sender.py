import asyncio
import logging
from typing import List

import requests

from models.outbound_email import OutboundEmail
from senders.base_sender import BaseBatchSender
from utils.errors import SendBatchError, truncate

logger = logging.getLogger("ghost_mailer")


class ResendBatchSender(BaseBatchSender):
    BATCH_API_URL = "https://api.resend.com/emails/batch"

    def __init__(self, api_key: str, timeout: int = 60, session: requests.Session = None):
        if not api_key:
            raise ValueError("Resend requires an 'api_key'")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    async def send_batch(self, emails: List[OutboundEmail]) -> List[str]:
        # requests is blocking, keep it off the event loop
        return await asyncio.to_thread(self._send_batch_sync, emails)

    def _send_batch_sync(self, emails: List[OutboundEmail]) -> List[str]:
        if len(emails) > self.max_batch_size:
            raise SendBatchError(f"Batch size {len(emails)} exceeds maximum {self.max_batch_size}")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = [email.to_provider_payload() for email in emails]

        try:
            response = self.session.post(self.BATCH_API_URL, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise SendBatchError(f"Resend request failed: {e}")

        if response.status_code != 200:
            raise SendBatchError(
                f"Resend API error: {response.status_code} - {truncate(response.text)}",
                status=response.status_code,
            )

        try:
            data = response.json().get("data") or []
        except (ValueError, AttributeError):
            logger.warning("Resend accepted the batch but the response body was not readable")
            return []
        return [item.get("id") for item in data if isinstance(item, dict) and item.get("id")]
