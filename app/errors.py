"""Errors that end the webhook pipeline with a classified HTTP response."""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import RequestContext


class WebhookError(Exception):
    """Base error for the webhook pipeline.

    Carries the HTTP status the request is answered with. The message is sent
    back verbatim as the plain-text response body.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None, context: "RequestContext | None" = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        # Set once the failing request has been routed
        self.context: "RequestContext | None" = context

    def __str__(self) -> str:
        return self.message


class Unauthorized(WebhookError):
    """Shared secret missing or wrong."""

    status_code = 403


class NotAcceptable(WebhookError):
    """Request is not using Content-Type: application/json."""

    status_code = 406


class BadRequest(WebhookError):
    """Body is empty, not JSON, or not shaped like a GitLab event."""

    status_code = 400


class InternalServerError(WebhookError):
    """Event kind not handled, or the payload could not be re-decoded."""

    status_code = 500


class AcknowledgedError(WebhookError):
    """Business failure answered with 200 OK.

    GitLab retries deliveries that get a non-2xx answer. Configuration and
    processing failures would not be fixed by a retry, so they are reported
    through the response body and the logs instead.
    """

    status_code = 200
