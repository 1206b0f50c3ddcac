"""The reminder job: look up the user and post, then send the private message."""

from datetime import datetime
from typing import Optional, Protocol

from config import settings
from logger_config import setup_logger
from schemas import Actor, PrivateMessage, ReminderJobData, Target
from scheduler import JobScheduler
from time_utils import format_utc

logger = setup_logger(__name__, 'worker.log')

REMINDER_JOB_NAME = "reminder"


class ReminderPlatform(Protocol):
    async def get_user_by_id(self, user_id: str) -> Optional[Actor]: ...

    async def get_post_by_id(self, post_id: str) -> Optional[Target]: ...

    async def send_private_message(self, message: PrivateMessage) -> bool: ...


def compose_reminder_message(actor: Actor, target: Target, created_at: datetime) -> PrivateMessage:
    """Build the reminder message.

    The post title and link are the live values; created_at is when the user
    confirmed the reminder.
    """
    text = (
        f"Hey! You asked me to remind you about [{target.title}]({target.permalink}). "
        f"You set this reminder on {format_utc(created_at)}!"
    )
    return PrivateMessage(
        to=actor.username,
        subject=f"Reminder for '{target.title}' - {settings.APP_NAME}",
        text=text
    )


async def run_reminder_job(data: dict, platform: ReminderPlatform) -> None:
    """Job body for REMINDER_JOB_NAME.

    If the user or the post no longer exists the reminder is dropped silently.
    """
    job = ReminderJobData(**data)

    actor = await platform.get_user_by_id(job.actor_id)
    target = await platform.get_post_by_id(job.target_id)
    if not actor or not target:
        logger.info(
            f"Dropping reminder for user {job.actor_id} on post {job.target_id}: "
            f"user or post no longer available"
        )
        return

    message = compose_reminder_message(actor, target, job.created_at)
    sent = await platform.send_private_message(message)
    if not sent:
        logger.warning(f"Reminder for user {job.actor_id} on post {job.target_id} was not delivered")


def register_reminder_job(scheduler: JobScheduler, platform: ReminderPlatform) -> None:
    async def handler(data: dict) -> None:
        await run_reminder_job(data, platform)

    scheduler.add_job_handler(REMINDER_JOB_NAME, handler)
