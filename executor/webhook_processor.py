import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from api_clients.members_client import MembersClient
from api_clients.settings_client import SettingsClient
from config import AppConfig
from models.post import WebhookPayload
from models.webhook_run import RunStage, WebhookRunResult
from senders.base_sender import BaseBatchSender
from utils.errors import AuthenticationError, MalformedInputError, UpstreamApiError
from utils.time_utils import utcnow

from .batch_dispatcher import BatchDispatcher
from .signature_verifier import RejectReason, verify_signature
from .template_renderer import EmailRenderer

logger = logging.getLogger("ghost_mailer")

MAX_BODY_SIZE = 5 * 1024 * 1024


class WebhookProcessor:
    """
    Runs one Ghost publish webhook from signature check to the last email
    batch. Failures before the signature is verified have no side effects;
    settings or member failures stop the run before any email is sent.
    """

    def __init__(self, config: AppConfig, sender: BaseBatchSender, renderer: EmailRenderer,
                 settings_client: Optional[SettingsClient] = None,
                 members_client: Optional[MembersClient] = None,
                 dispatcher: Optional[BatchDispatcher] = None):
        self.config = config
        self.renderer = renderer
        client_args = (config.ghost_base_url, config.ghost_admin_key_id, config.ghost_admin_hex_secret)
        self.settings_client = settings_client or SettingsClient(*client_args)
        self.members_client = members_client or MembersClient(*client_args)
        self.dispatcher = dispatcher or BatchDispatcher(sender, config.from_address)

    def _advance(self, stage: RunStage):
        logger.debug(f"Webhook run stage -> {stage.value}")

    async def handle(self, signature_header: Optional[str], body: bytes) -> WebhookRunResult:
        started_at = utcnow()
        self._advance(RunStage.RECEIVED)

        if not signature_header:
            logger.warning("Missing x-ghost-signature header")
            raise AuthenticationError("Missing x-ghost-signature header")
        self._advance(RunStage.HEADER_EXTRACTED)

        if len(body) > MAX_BODY_SIZE:
            logger.error(f"Webhook body of {len(body)} bytes exceeds {MAX_BODY_SIZE}")
            raise MalformedInputError("Request body too large")
        logger.debug(f"Received body of {len(body)} bytes")
        self._advance(RunStage.BODY_READ)

        try:
            payload = WebhookPayload.model_validate_json(body)
        except ValidationError as e:
            logger.error(f"Failed to parse webhook JSON body: {e}")
            raise MalformedInputError("Invalid webhook payload")
        post = payload.post.current
        logger.info(f"Received webhook for post: {post.title} (ID: {post.id})")
        self._advance(RunStage.JSON_PARSED)

        verification = verify_signature(body, signature_header, self.config.webhook_shared_secret)
        if not verification.accepted:
            logger.warning(f"Rejected webhook signature: {verification.reason.value} ({verification.detail})")
            if verification.reason == RejectReason.MALFORMED_HEADER:
                raise MalformedInputError(f"Invalid signature header: {verification.detail}")
            raise AuthenticationError("Invalid webhook signature")
        self._advance(RunStage.SIGNATURE_VERIFIED)

        try:
            settings = await asyncio.to_thread(self.settings_client.fetch)
        except UpstreamApiError as e:
            logger.error(f"Failed to fetch Ghost settings: {e}")
            raise
        self._advance(RunStage.SETTINGS_FETCHED)

        try:
            subscribers = await asyncio.to_thread(self.members_client.fetch_all)
        except UpstreamApiError as e:
            logger.error(f"Failed to fetch subscribers: {e}")
            raise
        self._advance(RunStage.SUBSCRIBERS_FETCHED)

        self._advance(RunStage.DISPATCHING)
        outcomes = await self.dispatcher.dispatch(
            subscribers,
            lambda recipient: self.renderer.render(post, settings, recipient),
            post.title,
        )

        result = WebhookRunResult(
            post_id=post.id,
            post_title=post.title,
            recipients=len(subscribers),
            batches=outcomes,
            started_at=started_at,
            finished_at=utcnow(),
        )
        self._advance(RunStage.DONE)
        logger.info(
            f"Webhook processing completed: {result.recipients} recipients, "
            f"{len(outcomes)} batches, {result.failed_batches} failed"
        )
        return result
