"""MCP Server for RemindMe Service.

Lets AI agents run the same two-step "Remind me" flow as the REST API:
`remind_me` parses the time and parks it, `confirm_reminder` schedules it.

Transport Support:
- stdio: Standard input/output (local process communication)
- sse: Server-Sent Events over HTTP (network access)
"""

import os

import redis.asyncio as redis
from mcp.server.fastmcp import FastMCP

import database
import remind_me_flow
from config import settings
from handoff_store import HandoffStore
from logger_config import setup_logger
from scheduler import JobScheduler
from schemas import FlowContext, FlowResponse

logger = setup_logger(__name__, 'mcp.log')

mcp = FastMCP(
    "RemindMeService",
    host=settings.MCP_HOST,
    port=settings.MCP_PORT
)


def format_flow_response(response: FlowResponse) -> str:
    """Render a flow response as plain text for the agent."""
    if response.form:
        lines = [response.form.title]
        if response.form.description:
            lines.append(response.form.description)
        lines.append("Call confirm_reminder to confirm.")
        return "\n".join(lines)
    return response.toast or "Nothing to do."


@mcp.tool()
async def remind_me(actor_id: str, target_id: str, when: str) -> str:
    """Start a reminder on a post.

    Args:
        actor_id: Id of the user asking for the reminder
        target_id: Id of the post to be reminded about
        when: Plain-English time, e.g. "in one hour", "2 days from now"

    Returns:
        The time that will be confirmed, or an error message
    """
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        logger.info(f"remind_me: {actor_id} on {target_id}: {when!r}")
        context = FlowContext(actor_id=actor_id, target_id=target_id)
        response = await remind_me_flow.submit_time_input(context, when, HandoffStore(client))
        return format_flow_response(response)
    except Exception as e:
        logger.error(f"remind_me failed: {str(e)}")
        return f"✗ Error starting reminder: {str(e)}"
    finally:
        await client.aclose()


@mcp.tool()
async def confirm_reminder(actor_id: str, target_id: str, confirm: bool = True) -> str:
    """Confirm (or cancel) the reminder started with remind_me.

    Args:
        actor_id: Id of the user asking for the reminder
        target_id: Id of the post to be reminded about
        confirm: False to discard the pending reminder

    Returns:
        Outcome message
    """
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        context = FlowContext(actor_id=actor_id, target_id=target_id)
        store = HandoffStore(client)
        if not confirm:
            await remind_me_flow.cancel_time_confirmation(context, store)
            return "Reminder cancelled."

        response = await remind_me_flow.submit_time_confirmation(
            context, store, JobScheduler(database.SessionLocal)
        )
        return format_flow_response(response)
    except Exception as e:
        logger.error(f"confirm_reminder failed: {str(e)}")
        return f"✗ Error confirming reminder: {str(e)}"
    finally:
        await client.aclose()


if __name__ == "__main__":
    database.init_db()

    transport = os.getenv("MCP_TRANSPORT", settings.MCP_TRANSPORT).lower()

    if transport == "sse":
        print(f"Starting MCP server with SSE transport on {settings.MCP_HOST}:{settings.MCP_PORT}")
        print(f"SSE endpoint: http://{settings.MCP_HOST}:{settings.MCP_PORT}/sse")
        mcp.run(transport="sse")
    else:
        print("Starting MCP server with stdio transport")
        mcp.run(transport="stdio")
