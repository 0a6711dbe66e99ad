import hashlib
import hmac
import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger("ghost_mailer")

SIGNATURE_PREFIX = "sha256="
TIMESTAMP_PREFIX = "t="


class RejectReason(str, Enum):
    MISSING_HEADER = "missing_header"
    MALFORMED_HEADER = "malformed_header"
    SIGNATURE_MISMATCH = "signature_mismatch"


class VerificationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    accepted: bool
    reason: Optional[RejectReason] = None
    detail: str = ""

    @classmethod
    def accept(cls) -> "VerificationResult":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectReason, detail: str = "") -> "VerificationResult":
        return cls(accepted=False, reason=reason, detail=detail)


def _hex_hmac(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature_header: Optional[str], secret: str) -> VerificationResult:
    """
    Checks an `x-ghost-signature` header of the form
    ``sha256=<hex>, t=<unix-seconds>`` against the raw request body.

    Ghost signed the body alone before 5.87.1 and body + timestamp since, and
    the receiver cannot tell which version sent the event, so a match on
    either MAC is accepted. The timestamp is not checked for freshness.
    """
    if not signature_header:
        return VerificationResult.reject(RejectReason.MISSING_HEADER, "missing x-ghost-signature header")

    parts = signature_header.split(", ")
    if len(parts) != 2:
        return VerificationResult.reject(
            RejectReason.MALFORMED_HEADER, f"expected 2 header tokens, got {len(parts)}"
        )

    signature_part, timestamp_part = parts
    if not signature_part.startswith(SIGNATURE_PREFIX):
        return VerificationResult.reject(RejectReason.MALFORMED_HEADER, "missing sha256= prefix")
    if not timestamp_part.startswith(TIMESTAMP_PREFIX):
        return VerificationResult.reject(RejectReason.MALFORMED_HEADER, "missing t= prefix")

    received = signature_part[len(SIGNATURE_PREFIX):].lower()
    timestamp = timestamp_part[len(TIMESTAMP_PREFIX):]

    legacy_mac = _hex_hmac(secret, raw_body)
    current_mac = _hex_hmac(secret, raw_body + timestamp.encode("ascii", errors="replace"))

    # both comparisons always run
    legacy_ok = hmac.compare_digest(received.encode("ascii", errors="replace"), legacy_mac.encode("ascii"))
    current_ok = hmac.compare_digest(received.encode("ascii", errors="replace"), current_mac.encode("ascii"))

    if legacy_ok or current_ok:
        logger.debug(f"Webhook signature verified ({'current' if current_ok else 'legacy'} scheme)")
        return VerificationResult.accept()

    return VerificationResult.reject(RejectReason.SIGNATURE_MISMATCH, "signature does not match")
