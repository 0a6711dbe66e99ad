import asyncio
import logging
from typing import Awaitable, Callable, Iterator, List, Sequence

from models.outbound_email import OutboundEmail, BatchOutcome
from models.recipient import Recipient
from senders.base_sender import BaseBatchSender

logger = logging.getLogger("ghost_mailer")

BATCH_SIZE = 100
BATCH_DELAY_SECONDS = 1.0


def chunked(items: Sequence, size: int) -> Iterator[Sequence]:
    """Contiguous slices of at most `size` items, in order."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


class BatchDispatcher:
    def __init__(self, sender: BaseBatchSender, from_address: str,
                 batch_size: int = BATCH_SIZE, batch_delay: float = BATCH_DELAY_SECONDS,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.sender = sender
        self.from_address = from_address
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.sleep = sleep

    def _build_batch(self, batch: Sequence[Recipient], render: Callable[[Recipient], str], subject: str) -> List[OutboundEmail]:
        emails = []
        for recipient in batch:
            logger.debug(f"Preparing email for subscriber: {recipient.email}")
            # RenderError is not caught here: a broken template stops the run
            html = render(recipient)
            emails.append(OutboundEmail(
                from_address=self.from_address,
                to=[recipient.email],
                subject=subject,
                html=html,
            ))
        return emails

    async def dispatch(self, recipients: Sequence[Recipient], render: Callable[[Recipient], str],
                       subject: str) -> List[BatchOutcome]:
        """
        Sends one provider call per group of `batch_size` recipients.

        A failed send is logged and recorded in its BatchOutcome; later
        batches are still attempted. Returns once every batch was tried.
        """
        batches = list(chunked(recipients, self.batch_size))
        outcomes: List[BatchOutcome] = []

        for index, batch in enumerate(batches):
            batch_number = index + 1
            logger.info(f"Processing batch {batch_number}/{len(batches)} with {len(batch)} subscribers")

            emails = await asyncio.to_thread(self._build_batch, batch, render, subject)

            try:
                email_ids = await self.sender.send_batch(emails)
                logger.info(f"Successfully sent batch {batch_number} ({len(emails)} emails)")
                for email_id in email_ids:
                    logger.debug(f"Email sent with ID: {email_id}")
                outcomes.append(BatchOutcome(batch_number=batch_number, size=len(emails), sent=True, email_ids=email_ids))
            except Exception as e:
                logger.error(f"Failed to send batch {batch_number}: {e}")
                outcomes.append(BatchOutcome(batch_number=batch_number, size=len(emails), sent=False, error=str(e)))

            if index < len(batches) - 1:
                logger.debug(f"Sleeping for {self.batch_delay} seconds before next batch")
                await self.sleep(self.batch_delay)

        return outcomes
