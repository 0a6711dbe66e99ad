import hashlib
import hmac
import json

from unittest.mock import MagicMock

ADMIN_SECRET_HEX = "a1" * 32
WEBHOOK_SECRET = "whsec-test"


def sign_body(body: bytes, secret: str = WEBHOOK_SECRET, timestamp: str = "1700000000", legacy: bool = False) -> str:
    message = body if legacy else body + timestamp.encode()
    mac = hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()
    return f"sha256={mac}, t={timestamp}"


def make_post(**overrides):
    post = {
        "id": "post-1",
        "uuid": "2f1c0e6a-0000-4000-8000-000000000001",
        "title": "Hello",
        "slug": "hello",
        "html": "<p>First <strong>post</strong></p>",
        "comment_id": "post-1",
        "plaintext": "First post",
        "feature_image": None,
        "featured": False,
        "status": "published",
        "visibility": "public",
        "created_at": "2024-01-01T00:00:00.000Z",
        "updated_at": "2024-01-02T00:00:00.000Z",
        "published_at": "2024-01-02T00:00:00.000Z",
        "url": "https://blog.example.com/hello/",
        "excerpt": "First post",
        "reading_time": 2,
        "primary_author": {
            "name": "Ada",
            "url": "https://blog.example.com/author/ada/",
            "profile_image": None,
            "bio": None,
        },
        "feature_image_alt": None,
        "feature_image_caption": None,
    }
    post.update(overrides)
    return post


def make_payload_bytes(**post_overrides) -> bytes:
    payload = {
        "post": {
            "current": make_post(**post_overrides),
            "previous": {"status": "draft", "updated_at": "2024-01-01T00:00:00.000Z", "published_at": None},
        }
    }
    return json.dumps(payload).encode()


def make_members(count: int, start: int = 0):
    return [
        {"id": f"m{i}", "email": f"user{i}@example.com", "name": f"User {i}", "status": "free",
         "created_at": "2024-01-01T00:00:00.000Z", "updated_at": "2024-01-01T00:00:00.000Z"}
        for i in range(start, start + count)
    ]


def members_page(members, page: int, pages: int, total: int = None):
    return {
        "members": members,
        "meta": {"pagination": {"page": page, "limit": 100, "pages": pages,
                                "total": len(members) if total is None else total,
                                "next": page + 1 if page < pages else None,
                                "prev": page - 1 if page > 1 else None}},
    }


def settings_body(**values):
    base = {"title": "Example Blog", "description": "Thoughts and notes", "accent_color": "#123456"}
    base.update(values)
    return {"settings": [{"key": key, "value": value} for key, value in base.items()]}


def json_response(body, status: int = 200):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.json.return_value = body
    resp.text = json.dumps(body)
    return resp
