import binascii
import logging
from typing import Optional

import jwt

from utils.errors import InvalidSecretError
from utils.time_utils import unix_now

logger = logging.getLogger("ghost_mailer")

ADMIN_AUDIENCE = "/admin/"
TOKEN_TTL_SECONDS = 300


def sign_admin_token(admin_id: str, hex_secret: str, now: Optional[int] = None) -> str:
    """
    Mints a Ghost admin API token: an HS256 JWT carrying the admin key id
    in its `kid` header, valid for five minutes from `now`.

    A fresh token is meant to be built for every request; nothing is cached.
    """
    try:
        secret = bytes.fromhex(hex_secret)
    except (ValueError, TypeError, binascii.Error) as e:
        logger.error(f"Failed to decode hex admin secret: {e}")
        raise InvalidSecretError("Invalid hex secret for Ghost admin key")

    issued_at = unix_now() if now is None else now
    claims = {
        "aud": ADMIN_AUDIENCE,
        "iat": issued_at,
        "exp": issued_at + TOKEN_TTL_SECONDS,
    }
    headers = {"kid": admin_id, "typ": "JWT"}

    logger.debug(f"Creating admin token for key id {admin_id}")
    return jwt.encode(claims, secret, algorithm="HS256", headers=headers)
