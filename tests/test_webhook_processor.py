import json
import os

import pytest
from unittest.mock import AsyncMock, MagicMock

from executor.batch_dispatcher import BatchDispatcher
from executor.template_renderer import EmailRenderer
from executor.webhook_processor import WebhookProcessor, MAX_BODY_SIZE
from models.recipient import Recipient
from utils.errors import (
    AuthenticationError, MalformedInputError, UpstreamApiError, RenderError, SendBatchError,
)
from helpers import WEBHOOK_SECRET, sign_body, make_payload_bytes, make_members

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")


@pytest.fixture
def sender():
    sender = MagicMock()
    sender.send_batch = AsyncMock(side_effect=lambda emails: [f"id-{i}" for i, _ in enumerate(emails)])
    return sender


@pytest.fixture
def settings_client(site_settings):
    client = MagicMock()
    client.fetch.return_value = site_settings
    return client


@pytest.fixture
def members_client(recipients):
    client = MagicMock()
    client.fetch_all.return_value = recipients
    return client


@pytest.fixture
def processor(app_config, sender, settings_client, members_client):
    renderer = EmailRenderer(TEMPLATE_DIR, app_config.ghost_base_url)
    dispatcher = BatchDispatcher(sender, app_config.from_address, sleep=AsyncMock())
    return WebhookProcessor(app_config, sender, renderer,
                            settings_client=settings_client,
                            members_client=members_client,
                            dispatcher=dispatcher)


@pytest.mark.asyncio
async def test_valid_webhook_sends_one_batch(processor, sender, settings_client, members_client):
    body = make_payload_bytes(title="Hello")

    result = await processor.handle(sign_body(body), body)

    assert result.finished_at >= result.started_at
    assert "stage" not in result.model_dump()
    assert result.post_id == "post-1"
    assert result.recipients == 3
    assert result.failed_batches == 0
    assert len(result.batches) == 1
    settings_client.fetch.assert_called_once()
    members_client.fetch_all.assert_called_once()

    emails = sender.send_batch.call_args.args[0]
    assert len(emails) == 3
    assert {e.subject for e in emails} == {"Hello"}
    assert [e.to[0] for e in emails] == ["user0@example.com", "user1@example.com", "user2@example.com"]
    assert all("Example Blog" in e.html for e in emails)


@pytest.mark.asyncio
async def test_legacy_signature_is_accepted(processor, sender):
    body = make_payload_bytes()
    result = await processor.handle(sign_body(body, legacy=True), body)
    assert result.recipients == 3


@pytest.mark.asyncio
async def test_unknown_payload_fields_are_tolerated(processor):
    payload = json.loads(make_payload_bytes())
    payload["post"]["current"]["tiers"] = [{"id": "t1"}]
    payload["post"]["previous"]["newsletter_id"] = "n1"
    body = json.dumps(payload).encode()

    result = await processor.handle(sign_body(body), body)
    assert result.finished_at >= result.started_at


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, ""])
async def test_missing_header_is_401_without_side_effects(processor, settings_client, sender, header):
    with pytest.raises(AuthenticationError) as exc:
        await processor.handle(header, make_payload_bytes())
    assert exc.value.status_code == 401
    settings_client.fetch.assert_not_called()
    sender.send_batch.assert_not_awaited()


@pytest.mark.asyncio
async def test_bad_signature_is_401(processor, settings_client):
    body = make_payload_bytes()
    with pytest.raises(AuthenticationError):
        await processor.handle(sign_body(body, secret="wrong"), body)
    settings_client.fetch.assert_not_called()


@pytest.mark.asyncio
async def test_malformed_header_is_400(processor, settings_client):
    body = make_payload_bytes()
    sig, ts = sign_body(body).split(", ")
    with pytest.raises(MalformedInputError) as exc:
        await processor.handle(f"{ts}, {sig}", body)
    assert exc.value.status_code == 400
    settings_client.fetch.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"not json", b"{}", b'{"post": {"current": {"title": "x"}}}'])
async def test_bad_body_is_400(processor, settings_client, body):
    with pytest.raises(MalformedInputError):
        await processor.handle(sign_body(body), body)
    settings_client.fetch.assert_not_called()


@pytest.mark.asyncio
async def test_oversized_body_is_400(processor):
    body = b" " * (MAX_BODY_SIZE + 1)
    with pytest.raises(MalformedInputError):
        await processor.handle(sign_body(body), body)


@pytest.mark.asyncio
async def test_settings_failure_aborts_before_sending(processor, settings_client, members_client, sender):
    settings_client.fetch.side_effect = UpstreamApiError("Ghost API returned error: 500", upstream_status=500)
    body = make_payload_bytes()

    with pytest.raises(UpstreamApiError) as exc:
        await processor.handle(sign_body(body), body)

    assert exc.value.status_code == 500
    members_client.fetch_all.assert_not_called()
    sender.send_batch.assert_not_awaited()


@pytest.mark.asyncio
async def test_members_failure_aborts_before_sending(processor, members_client, sender):
    members_client.fetch_all.side_effect = UpstreamApiError("Ghost API returned error: 401", upstream_status=401)
    body = make_payload_bytes()

    with pytest.raises(UpstreamApiError):
        await processor.handle(sign_body(body), body)

    sender.send_batch.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_batch_still_completes(processor, members_client, sender):
    members_client.fetch_all.return_value = [Recipient(**m) for m in make_members(250)]
    sender.send_batch.side_effect = [["a"], SendBatchError("Resend API error: 422"), ["c"]]
    body = make_payload_bytes()

    result = await processor.handle(sign_body(body), body)

    assert sender.send_batch.await_count == 3
    assert [b.sent for b in result.batches] == [True, False, True]
    assert result.failed_batches == 1


@pytest.mark.asyncio
async def test_render_failure_propagates(app_config, sender, settings_client, members_client):
    renderer = MagicMock()
    renderer.render.side_effect = RenderError("Template rendering failed")
    processor = WebhookProcessor(app_config, sender, renderer,
                                 settings_client=settings_client,
                                 members_client=members_client,
                                 dispatcher=BatchDispatcher(sender, app_config.from_address, sleep=AsyncMock()))
    body = make_payload_bytes()

    with pytest.raises(RenderError):
        await processor.handle(sign_body(body), body)
    sender.send_batch.assert_not_awaited()


def test_default_clients_are_built_from_config(app_config, sender):
    processor = WebhookProcessor(app_config, sender, MagicMock())
    assert processor.settings_client.base_url == "https://blog.example.com"
    assert processor.members_client.admin_key_id == "admin-key-id"
    assert processor.dispatcher.from_address == app_config.from_address
    assert processor.config.webhook_shared_secret == WEBHOOK_SECRET
