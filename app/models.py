"""Pydantic models for GitLab webhook payloads (relevant fields only)."""
import json
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Discriminator, Field, Tag, TypeAdapter, ValidationError, field_validator

from .errors import BadRequest, InternalServerError


class EventKind(str, Enum):
    """Webhook event kinds the pipeline knows how to route."""

    MERGE_REQUEST = "merge_request"
    NOTE = "note"


class Project(BaseModel):
    path_with_namespace: str = Field(description="Project identity, e.g. 'group/sub/project'")


class LastCommit(BaseModel):
    id: str = Field(description="Commit SHA")


class MergeRequestRef(BaseModel):
    iid: int = Field(description="MR number within the project")
    last_commit: LastCommit


class MergeRequestEvent(BaseModel):
    """Merge request opened, updated, merged, closed, ..."""

    event_type: Literal["merge_request"]
    project: Project
    object_attributes: MergeRequestRef


class NoteEvent(BaseModel):
    """Comment left on a merge request."""

    event_type: Literal["note"]
    project: Project
    merge_request: MergeRequestRef


class UnknownEvent(BaseModel):
    """Any event_type outside EventKind. Decodes fine, but is rejected by routing.

    Nothing else is required, so every unknown kind reaches routing and is
    reported by name. A missing or null event_type reads as "".
    """

    event_type: str = ""
    project: Project | None = None

    @field_validator("event_type", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


def _event_tag(value: Any) -> str | None:
    if not isinstance(value, dict):
        return None

    event_type = value.get("event_type")
    if event_type is None:
        return "unknown"
    if event_type in (EventKind.MERGE_REQUEST.value, EventKind.NOTE.value):
        return event_type
    if isinstance(event_type, str):
        return "unknown"
    return None


WebhookEnvelope = Annotated[
    Union[
        Annotated[MergeRequestEvent, Tag(EventKind.MERGE_REQUEST.value)],
        Annotated[NoteEvent, Tag(EventKind.NOTE.value)],
        Annotated[UnknownEvent, Tag("unknown")],
    ],
    Discriminator(_event_tag),
]

_envelope_adapter: TypeAdapter[MergeRequestEvent | NoteEvent | UnknownEvent] = TypeAdapter(
    WebhookEnvelope
)


def decode_envelope(body: bytes) -> MergeRequestEvent | NoteEvent | UnknownEvent:
    """Decode the raw POST body into a typed webhook envelope.

    Args:
        body: Raw request body

    Returns:
        One of the envelope variants, picked by event_type

    Raises:
        BadRequest: If the body is not JSON or not shaped like a GitLab event
    """
    try:
        return _envelope_adapter.validate_json(body)
    except ValidationError as e:
        raise BadRequest(f"could not decode POST body into Payload struct: {e}") from e


def decode_full_payload(body: bytes) -> Any:
    """Decode the raw POST body into plain Python objects.

    The rule engine gets the complete payload, including everything the typed
    envelope does not model.

    Raises:
        InternalServerError: If the body cannot be decoded. The typed decode
            already accepted it, so this is not the client's fault.
    """
    try:
        return json.loads(body)
    except ValueError as e:
        raise InternalServerError(f"could not decode POST body: {e}") from e
