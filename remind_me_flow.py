"""The two-step "Remind me" flow.

Step 1 (time input): parse the user's text, park the result in the handoff
store and answer with the confirmation form.
Step 2 (confirmation): take the parked result, validate it and schedule the
reminder job.

Each step is a separate interaction; the FlowContext identifies the user and
the post it was invoked for.
"""

import asyncio
from datetime import datetime
from typing import Optional

from handoff_store import HandoffStore
from logger_config import setup_logger
from reminder_job import REMINDER_JOB_NAME
from scheduler import JobScheduler
from schemas import (
    FlowContext,
    FlowResponse,
    FormDefinition,
    FormField,
    MenuItem,
    ReminderJobData,
    ReminderRequest,
)
from time_parser import parse_reminder_time
from time_utils import format_utc, utc_now

logger = setup_logger(__name__, 'flow.log')

TIME_FIELD = "time"

MENU_ITEM = MenuItem(label="Remind me", location="post")

TIME_INPUT_FORM = FormDefinition(
    title="Remind me",
    fields=[
        FormField(
            name=TIME_FIELD,
            label="When?",
            placeholder="e.g. In one hour, 2 days from now",
            type="string",
            required=True
        )
    ],
    accept_label="Schedule",
    cancel_label="Cancel"
)

PARSE_FAILED_MESSAGE = "I couldn't quite get that!"
NOT_LOGGED_IN_MESSAGE = "I can only remind you if you're logged in"
HANDOFF_MISSING_MESSAGE = "An error occurred while setting the reminder"
PAST_TIME_MESSAGE = "I can't remind you in the past!"


def confirmation_form(scheduled_at: datetime) -> FormDefinition:
    return FormDefinition(
        title="Is this correct?",
        description=f"I will remind you at {format_utc(scheduled_at)}",
        fields=[],
        accept_label="Confirm",
        cancel_label="Cancel"
    )


async def submit_time_input(
    context: FlowContext,
    time_text: str,
    store: HandoffStore,
    now: Optional[datetime] = None
) -> FlowResponse:
    """Handle the time input form.

    Returns:
        FlowResponse: the confirmation form, or a toast if the text was not understood
    """
    scheduled_at = parse_reminder_time(time_text, now or utc_now())
    if scheduled_at is None:
        logger.info(f"Could not parse reminder time {time_text!r}")
        return FlowResponse(toast=PARSE_FAILED_MESSAGE)

    if context.actor_id and context.target_id:
        request = ReminderRequest(
            actor_id=context.actor_id,
            target_id=context.target_id,
            scheduled_at=scheduled_at
        )
        await store.put(context, request)

    return FlowResponse(form=confirmation_form(scheduled_at))


async def submit_time_confirmation(
    context: FlowContext,
    store: HandoffStore,
    scheduler: JobScheduler,
    now: Optional[datetime] = None
) -> FlowResponse:
    """Handle the confirmation form's Confirm button.

    Returns:
        FlowResponse: a toast describing the outcome (empty when invoked outside a post)
    """
    if not context.target_id:
        return FlowResponse()
    if not context.actor_id:
        return FlowResponse(toast=NOT_LOGGED_IN_MESSAGE)

    request = await store.take_and_delete(context)
    if request is None:
        return FlowResponse(toast=HANDOFF_MISSING_MESSAGE)

    now = now or utc_now()
    if request.scheduled_at <= now:
        logger.info(f"Rejected past reminder time {request.scheduled_at.isoformat()} for {context.actor_id}")
        return FlowResponse(toast=PAST_TIME_MESSAGE)

    job_data = ReminderJobData.for_confirmation(context.actor_id, context.target_id, now)
    # Blocking database write; keep it off the event loop
    await asyncio.to_thread(
        scheduler.run_job, REMINDER_JOB_NAME, job_data.to_payload(), request.scheduled_at
    )

    return FlowResponse(
        toast=f"Gotcha! I'll send you a message about this post at {format_utc(request.scheduled_at)}!"
    )


async def cancel_time_confirmation(context: FlowContext, store: HandoffStore) -> FlowResponse:
    """Handle the confirmation form's Cancel button by discarding the parked request."""
    await store.take_and_delete(context)
    return FlowResponse()
