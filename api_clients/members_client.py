import time
import logging
from typing import Callable, Iterator, List

from pydantic import ValidationError

from api_clients.base_client import GhostAdminClient
from models.recipient import Recipient, SubscriberPage
from utils.errors import DecodeError

logger = logging.getLogger("ghost_mailer")

PAGE_SIZE = 100
PAGE_DELAY_SECONDS = 0.1


class MembersClient(GhostAdminClient):

    def __init__(self, *args, sleep: Callable[[float], None] = time.sleep, **kwargs):
        super().__init__(*args, **kwargs)
        self.sleep = sleep

    def iter_pages(self) -> Iterator[SubscriberPage]:
        """
        Yields member pages in order, starting at page 1, until the page
        reported by Ghost reaches the page count. Sleeps briefly between
        requests but never after the last page.
        """
        page = 1
        while True:
            body = self._get("/members/", params={"page": page, "limit": PAGE_SIZE})
            try:
                result = SubscriberPage.model_validate(body)
            except ValidationError as e:
                logger.error(f"Unexpected members response shape on page {page}: {e}")
                raise DecodeError(f"Members page {page} did not match the expected schema")

            pagination = result.meta.pagination
            logger.debug(f"Fetched {len(result.members)} members from page {page} of {pagination.pages}")
            yield result

            if result.is_last:
                break

            page += 1
            self.sleep(PAGE_DELAY_SECONDS)

    def fetch_all(self) -> List[Recipient]:
        members: List[Recipient] = []
        for result in self.iter_pages():
            members.extend(result.members)
        logger.info(f"Fetched {len(members)} members from Ghost")
        return members
