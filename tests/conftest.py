import pytest

from config import AppConfig
from models.recipient import Recipient
from models.site_settings import SiteSettings
from helpers import ADMIN_SECRET_HEX, WEBHOOK_SECRET, make_members


@pytest.fixture
def app_config():
    return AppConfig(
        ghost_base_url="https://blog.example.com/",
        ghost_admin_key_id="admin-key-id",
        ghost_admin_hex_secret=ADMIN_SECRET_HEX,
        webhook_shared_secret=WEBHOOK_SECRET,
        email_api_key="re_test",
        from_address="Blog <news@example.com>",
    )


@pytest.fixture
def site_settings():
    return SiteSettings(
        title="Example Blog",
        description="Thoughts and notes",
        accent_color="#123456",
        url="https://blog.example.com",
    )


@pytest.fixture
def recipients():
    return [Recipient(**m) for m in make_members(3)]
