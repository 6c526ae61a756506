"""Discord interaction router."""
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from hookbot.interactions import ApplicationCommand, InteractionDecodeError, parse_interaction
from hookbot.responses import respond

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/interactions")
async def discord_interactions(request: Request) -> JSONResponse:
    """
    Handle all Discord interactions.

    The body has already passed signature verification by the time it gets here.
    """
    raw_body = await request.body()

    try:
        interaction = parse_interaction(raw_body)
    except InteractionDecodeError as e:
        logger.warning("could not decode interaction: %s", e)
        return JSONResponse({"error": str(e)}, status_code=400)

    if isinstance(interaction, ApplicationCommand):
        logger.info("received application command with name %r", interaction.name)

    return JSONResponse(respond(interaction))
