from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any


class OutboundEmail(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_address: str
    to: List[str]
    subject: str
    html: str

    def to_provider_payload(self) -> Dict[str, Any]:
        return {
            "from": self.from_address,
            "to": list(self.to),
            "subject": self.subject,
            "html": self.html,
        }


class BatchOutcome(BaseModel):
    batch_number: int
    size: int
    sent: bool
    email_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = None
