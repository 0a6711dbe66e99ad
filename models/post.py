from pydantic import BaseModel, ConfigDict
from typing import Optional


class Author(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    url: str
    profile_image: Optional[str] = None
    bio: Optional[str] = None


class Post(BaseModel):
    # Fields Ghost adds in later versions are kept but never read
    model_config = ConfigDict(extra="allow")

    id: str
    uuid: str
    title: str
    slug: str
    html: str
    url: str
    excerpt: str
    reading_time: int
    primary_author: Author

    comment_id: Optional[str] = None
    plaintext: Optional[str] = None
    feature_image: Optional[str] = None
    feature_image_alt: Optional[str] = None
    feature_image_caption: Optional[str] = None
    featured: bool = False
    status: Optional[str] = None
    visibility: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    published_at: Optional[str] = None


class PreviousPost(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str
    updated_at: str
    published_at: Optional[str] = None


class PostWrapper(BaseModel):
    current: Post
    previous: PreviousPost


class WebhookPayload(BaseModel):
    post: PostWrapper
