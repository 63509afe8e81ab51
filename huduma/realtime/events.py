"""
Push events.
A closed set of payloads sent over a live channel. Never persisted.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from huduma.core.jobs.models import Job
from huduma.core.messages.models import Message


class PushEvent(BaseModel):
    """Base class: serializes with camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class NewMessageEvent(PushEvent):
    type: Literal["new_message"] = "new_message"
    message: Message


class NewJobRequestEvent(PushEvent):
    type: Literal["new_job_request"] = "new_job_request"
    job: Job


class JobUpdatedEvent(PushEvent):
    type: Literal["job_updated"] = "job_updated"
    job: Job


AnyPushEvent = Annotated[
    Union[NewMessageEvent, NewJobRequestEvent, JobUpdatedEvent],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter[AnyPushEvent] = TypeAdapter(AnyPushEvent)


def parse_push_event(raw: str | bytes | dict[str, Any]) -> AnyPushEvent:
    """
    Parses a pushed payload into its event class.

    Raises:
        pydantic.ValidationError: unknown type tag or malformed body
    """
    if isinstance(raw, dict):
        return _event_adapter.validate_python(raw)
    return _event_adapter.validate_json(raw)
