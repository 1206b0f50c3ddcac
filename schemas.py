"""Pydantic schemas for RemindMe Service.

This module defines the flow context, handoff and job payload records, the
platform records returned by the lookup service, and the form/toast
responses returned to the UI layer.
IMPORTANT: every datetime is timezone-aware UTC; wire payloads carry epoch
milliseconds.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from time_utils import from_epoch_ms, to_epoch_ms


class FlowContext(BaseModel):
    """Identity of the interaction that invoked a flow stage.

    Either id may be missing (logged-out user, menu opened outside a post).
    """

    actor_id: Optional[str] = Field(None, description="Id of the acting user")
    target_id: Optional[str] = Field(None, description="Id of the post the reminder is attached to")


class ReminderRequest(BaseModel):
    """Parsed reminder waiting for confirmation (lives in the handoff store)."""

    actor_id: str
    target_id: str
    scheduled_at: datetime = Field(..., description="When the user wants to be reminded (UTC)")


class ReminderJobData(BaseModel):
    """Payload stored with a scheduled reminder job.

    Serialized with camelCase keys: {actorId, targetId, initTimestamp}.
    """

    actor_id: str = Field(..., alias="actorId")
    target_id: str = Field(..., alias="targetId")
    init_timestamp: int = Field(..., alias="initTimestamp", description="Confirmation time, epoch ms")

    class Config:
        """Pydantic config"""
        populate_by_name = True

    @property
    def created_at(self) -> datetime:
        return from_epoch_ms(self.init_timestamp)

    @classmethod
    def for_confirmation(cls, actor_id: str, target_id: str, confirmed_at: datetime) -> "ReminderJobData":
        return cls(actor_id=actor_id, target_id=target_id, init_timestamp=to_epoch_ms(confirmed_at))

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class Actor(BaseModel):
    """User record from the lookup service"""

    id: str
    username: str


class Target(BaseModel):
    """Post record from the lookup service"""

    id: str
    title: str
    permalink: str


class PrivateMessage(BaseModel):
    to: str = Field(..., description="Recipient username")
    subject: str
    text: str


class FormField(BaseModel):
    name: str
    label: str
    type: str = "string"
    placeholder: Optional[str] = None
    required: bool = False


class FormDefinition(BaseModel):
    """A form the UI layer should render"""

    title: str
    description: Optional[str] = None
    fields: List[FormField] = Field(default_factory=list)
    accept_label: str = "Submit"
    cancel_label: str = "Cancel"


class MenuItem(BaseModel):
    label: str
    location: str


class FlowResponse(BaseModel):
    """Outcome of a flow stage: an optional toast and/or the next form to show."""

    toast: Optional[str] = None
    form: Optional[FormDefinition] = None


class TimeInputSubmission(FlowContext):
    """Stage 1 request body"""

    time: str = Field(
        ...,
        description="When to remind, in plain English",
        examples=["in one hour", "2 days from now"]
    )


class ConfirmationSubmission(FlowContext):
    """Stage 2 request body"""

    confirmed: bool = Field(True, description="False when the user pressed Cancel")
