from abc import ABC, abstractmethod
from typing import List

from models.outbound_email import OutboundEmail


class BaseBatchSender(ABC):
    max_batch_size = 100

    @abstractmethod
    async def send_batch(self, emails: List[OutboundEmail]) -> List[str]:
        """
        Submits every email in one provider call and returns the provider ids.
        Raises SendBatchError when the batch is not accepted.
        """
