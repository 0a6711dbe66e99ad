from .base_sender import BaseBatchSender
from models.outbound_email import OutboundEmail
from typing import List
from uuid import uuid4
import logging

logger = logging.getLogger("ghost_mailer")


class MockBatchSender(BaseBatchSender):
    """Logs instead of sending. Used when DRY_RUN is set."""

    def __init__(self, provider_name: str = "DryRun"):
        self.provider_name = provider_name

    async def send_batch(self, emails: List[OutboundEmail]) -> List[str]:
        logger.info(f"[{self.provider_name}] Sending batch of {len(emails)} emails...")
        ids = []
        for email in emails:
            logger.debug(f"   From: {email.from_address} To: {', '.join(email.to)} Subject: {email.subject}")
            ids.append(f"dry-run-{uuid4()}")
        return ids
