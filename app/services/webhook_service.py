"""Webhook processing service."""
import logging
from typing import Any

from ..context import enrich_context
from ..errors import AcknowledgedError, BadRequest, WebhookError
from ..models import MergeRequestEvent, NoteEvent, decode_envelope, decode_full_payload
from .config_resolver import ConfigResolver
from .event_router import route_event
from .protocols import MergeRequestProcessor

logger = logging.getLogger(__name__)

OK_BODY = "OK"


class WebhookService:
    """Service for processing webhook bodies.

    Follows Single Responsibility Principle:
    - Decodes, routes and resolves config for one delivery
    - Doesn't know about headers, secrets or HTTP responses
    """

    def __init__(self, client: Any, resolver: ConfigResolver, processor: MergeRequestProcessor):
        """Initialize webhook service.

        Args:
            client: Shared GitLab client, passed through to the processor
            resolver: Configuration resolver
            processor: Rule engine entry point
        """
        self.client = client
        self.resolver = resolver
        self.processor = processor

    async def handle(self, body: bytes, empty_body_error: WebhookError | None = None) -> str:
        """Run the pipeline for one webhook body.

        Args:
            body: Raw request body
            empty_body_error: Error already raised for an empty body. Decoding
                still runs and its error is reported after this one.

        Returns:
            Response body on success

        Raises:
            WebhookError: Classified failure, carrying the HTTP status to answer with
        """
        try:
            envelope = decode_envelope(body)
        except BadRequest as e:
            if empty_body_error is not None:
                raise BadRequest(f"{empty_body_error}\n{e}") from e
            raise

        target = route_event(envelope)
        # route_event rejects every other kind
        assert isinstance(envelope, (MergeRequestEvent, NoteEvent))
        ctx = enrich_context(envelope, target)

        ctx.logger(logger).info("POST /gitlab webhook")

        try:
            payload = decode_full_payload(body)
            resolved = await self.resolver.resolve(ctx)
            await self.processor.process_mr(ctx, self.client, resolved, payload)
        except WebhookError as e:
            e.context = ctx
            raise
        except Exception as e:
            raise AcknowledgedError(str(e), context=ctx) from e

        return OK_BODY
