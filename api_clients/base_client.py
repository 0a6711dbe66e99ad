import requests
from typing import Any, Dict, Optional
import logging

from api_clients.admin_token import sign_admin_token
from utils.errors import UpstreamApiError, DecodeError, truncate

logger = logging.getLogger("ghost_mailer")

ACCEPT_VERSION = "v5.0"
ADMIN_API_PATH = "/ghost/api/admin"


class GhostAdminClient:
    """
    Shared plumbing for the Ghost admin API: one requests session, a newly
    signed token on every call, and uniform error reporting.
    """

    def __init__(self, base_url: str, admin_key_id: str, admin_hex_secret: str,
                 session: Optional[requests.Session] = None, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.admin_key_id = admin_key_id
        self.admin_hex_secret = admin_hex_secret
        self.session = session or requests.Session()
        self.timeout = timeout

    def _auth_headers(self) -> Dict[str, str]:
        token = sign_admin_token(self.admin_key_id, self.admin_hex_secret)
        return {
            "Authorization": f"Ghost {token}",
            "Accept-Version": ACCEPT_VERSION,
        }

    def _get(self, endpoint: str, params: Dict[str, Any] = None) -> Any:
        """GETs an admin endpoint and returns the decoded JSON body."""
        url = f"{self.base_url}{ADMIN_API_PATH}{endpoint}"
        try:
            resp = self.session.get(url, params=params, headers=self._auth_headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to send request to Ghost API {endpoint}: {e}")
            raise UpstreamApiError(f"Ghost API request to {endpoint} failed: {e}")

        logger.debug(f"Ghost API {endpoint} params={params} -> {resp.status_code}")

        if not resp.ok:
            logger.error(f"Ghost API error response ({resp.status_code}): {truncate(resp.text)}")
            raise UpstreamApiError(f"Ghost API returned error: {resp.status_code}", upstream_status=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Ghost API {endpoint} returned invalid JSON: {truncate(resp.text)}")
            raise DecodeError(f"Ghost API {endpoint} returned invalid JSON: {e}", upstream_status=resp.status_code)
