"""Per-request correlation context."""
import logging
from collections.abc import MutableMapping
from dataclasses import asdict, dataclass
from typing import Any

from .models import MergeRequestEvent, NoteEvent
from .services.event_router import EventTarget


@dataclass(frozen=True)
class RequestContext:
    """Correlation fields of one webhook delivery.

    Built once, after the event has been decoded and routed, then passed by
    argument to every downstream call. Frozen: nothing downstream may change it.
    """

    project_id: str
    merge_request_id: str
    commit_sha: str
    event_type: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)

    def logger(self, logger: logging.Logger) -> "ContextLoggerAdapter":
        """Bind a logger to this context."""
        return ContextLoggerAdapter(logger, self)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps every record with the request context.

    The fields are prefixed to the message (readable with the plain text
    formatter) and attached as record attributes for structured handlers.
    """

    def __init__(self, logger: logging.Logger, context: RequestContext):
        super().__init__(logger, context.as_dict())
        self.context = context

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra or {})
        kwargs["extra"] = extra

        prefix = (
            f"[project={self.context.project_id} mr={self.context.merge_request_id} "
            f"sha={self.context.commit_sha} event_type={self.context.event_type}]"
        )
        return f"{prefix} {msg}", kwargs


def enrich_context(envelope: MergeRequestEvent | NoteEvent, target: EventTarget) -> RequestContext:
    """Build the request context from a routed envelope.

    Args:
        envelope: Decoded webhook envelope of a routed kind
        target: Merge request and commit resolved by the event router

    Returns:
        Immutable RequestContext
    """
    return RequestContext(
        project_id=envelope.project.path_with_namespace,
        merge_request_id=str(target.merge_request_iid),
        commit_sha=target.commit_sha,
        event_type=envelope.event_type,
    )
