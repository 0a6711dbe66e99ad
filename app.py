from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from functools import lru_cache
import os
import logging

from config import AppConfig, parse_log_level
from executor.template_renderer import EmailRenderer
from executor.webhook_processor import WebhookProcessor, MAX_BODY_SIZE
from senders.base_sender import BaseBatchSender
from senders.mock_senders import MockBatchSender
from senders.resend_sender import ResendBatchSender
from utils.errors import ConfigError, WebhookError


def startup_log_level() -> str:
    # AppConfig reports a bad LOG_LEVEL on the first request
    try:
        return parse_log_level(os.getenv("LOG_LEVEL", "INFO"))
    except ConfigError:
        return "INFO"


# Configure logging to file and console
logging.basicConfig(
    level=startup_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
    handlers=[
        logging.FileHandler('ghost_mailer.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger("ghost_mailer")

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
SIGNATURE_HEADER = "x-ghost-signature"

app = FastAPI(title="Ghost Newsletter Mailer")


def build_sender(config: AppConfig) -> BaseBatchSender:
    if config.dry_run:
        logger.warning("DRY_RUN is set: emails will be logged, not sent")
        return MockBatchSender()
    return ResendBatchSender(config.email_api_key)


def build_processor(config: AppConfig) -> WebhookProcessor:
    renderer = EmailRenderer(TEMPLATE_DIR, config.ghost_base_url)
    return WebhookProcessor(config, build_sender(config), renderer)


async def read_body(request: Request, limit: int = MAX_BODY_SIZE) -> bytes:
    """
    Reads the request body, stopping as soon as it passes `limit` bytes.
    An oversized body comes back truncated to just over the limit so the
    processor still rejects it in its usual order.
    """
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            logger.warning(f"Stopped reading webhook body after {len(body)} bytes")
            del body[limit + 1:]
            break
    return bytes(body)


@lru_cache(maxsize=1)
def get_processor() -> WebhookProcessor:
    # Built on first request so importing the app does not need a full environment
    config = AppConfig.from_env()
    logger.setLevel(config.log_level)
    logger.info(f"Relaying Ghost webhooks from {config.ghost_base_url}")
    return build_processor(config)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.post("/webhook")
async def handle_webhook(request: Request, processor: WebhookProcessor = Depends(get_processor)):
    logger.info("Received webhook request")
    signature_header = request.headers.get(SIGNATURE_HEADER)
    body = await read_body(request)

    try:
        result = await processor.handle(signature_header, body)
    except WebhookError as e:
        logger.error(f"Webhook rejected with {e.status_code}: {e}")
        return JSONResponse(status_code=e.status_code, content={"detail": str(e)})

    return {
        "status": "ok",
        "post_id": result.post_id,
        "recipients": result.recipients,
        "batches": len(result.batches),
        "failed_batches": result.failed_batches,
    }


if __name__ == "__main__":
    import uvicorn
    config = AppConfig.from_env()
    uvicorn.run(app, host="0.0.0.0", port=config.port)
