from pydantic import BaseModel, ConfigDict
from typing import Optional, List


class Recipient(BaseModel):
    """A Ghost member as returned by the admin members endpoint."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    email: str
    name: Optional[str] = None
    status: str
    uuid: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    pages: int
    total: int
    next: Optional[int] = None
    prev: Optional[int] = None


class PageMeta(BaseModel):
    pagination: Pagination


class SubscriberPage(BaseModel):
    members: List[Recipient]
    meta: PageMeta

    @property
    def is_last(self) -> bool:
        # pages == 0 for an empty member list
        return self.meta.pagination.page >= self.meta.pagination.pages
