from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum
from datetime import datetime

from models.outbound_email import BatchOutcome


class RunStage(str, Enum):
    RECEIVED = "received"
    HEADER_EXTRACTED = "header_extracted"
    BODY_READ = "body_read"
    JSON_PARSED = "json_parsed"
    SIGNATURE_VERIFIED = "signature_verified"
    SETTINGS_FETCHED = "settings_fetched"
    SUBSCRIBERS_FETCHED = "subscribers_fetched"
    DISPATCHING = "dispatching"
    DONE = "done"


class WebhookRunResult(BaseModel):
    post_id: str
    post_title: str
    recipients: int = 0
    batches: List[BatchOutcome] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def failed_batches(self) -> int:
        return sum(1 for batch in self.batches if not batch.sent)
