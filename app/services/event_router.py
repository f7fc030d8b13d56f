"""Event-kind dispatch: find the merge request and commit an event is about."""
from dataclasses import dataclass

from ..errors import InternalServerError
from ..models import MergeRequestEvent, NoteEvent, UnknownEvent


@dataclass(frozen=True)
class EventTarget:
    """The merge request an event refers to, pinned to a commit."""

    merge_request_iid: int
    commit_sha: str


def route_event(envelope: MergeRequestEvent | NoteEvent | UnknownEvent) -> EventTarget:
    """Extract merge request IID and commit SHA based on the event kind.

    Args:
        envelope: Decoded webhook envelope

    Returns:
        EventTarget for the merge request

    Raises:
        InternalServerError: If the event kind is not one we handle
    """
    if isinstance(envelope, MergeRequestEvent):
        return EventTarget(
            merge_request_iid=envelope.object_attributes.iid,
            commit_sha=envelope.object_attributes.last_commit.id,
        )

    if isinstance(envelope, NoteEvent):
        return EventTarget(
            merge_request_iid=envelope.merge_request.iid,
            commit_sha=envelope.merge_request.last_commit.id,
        )

    raise InternalServerError(f"unknown event type: {envelope.event_type}")
