from typing import Optional


class WebhookError(Exception):
    """Base class for failures that end a webhook run with an HTTP status."""

    status_code = 500


class AuthenticationError(WebhookError):
    status_code = 401


class MalformedInputError(WebhookError):
    status_code = 400


class UpstreamApiError(WebhookError):
    """The Ghost admin API answered with an error or something unreadable."""

    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class DecodeError(UpstreamApiError):
    pass


class SchemaError(UpstreamApiError):
    pass


class InvalidSecretError(UpstreamApiError):
    pass


class RenderError(WebhookError):
    status_code = 500


class SendBatchError(Exception):
    """One batch could not be handed to the email provider. Never aborts a run."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ConfigError(ValueError):
    pass


def truncate(text: str, limit: int = 500) -> str:
    if text is None:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text) - limit} more chars)"
