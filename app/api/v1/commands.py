"""
==============================================================================
Command Endpoints
==============================================================================

Free-text inventory commands ("sold two black velvet sofas").

The transcript is classified by the configured intent classifier and the
resulting intent is applied to the catalog. Unknown commands and stock
updates that match nothing leave the catalog unchanged.

==============================================================================
"""

import logging

from fastapi import APIRouter, Depends

from app.core.dependencies import get_command_interpreter, require_loaded_store
from app.schemas.catalog import CommandRequest
from app.services.catalog_store import CatalogStore
from app.services.commands import CommandInterpreter


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commands", tags=["Commands"])


class CommandController:
    """Controller for command processing."""

    def __init__(self, interpreter: CommandInterpreter):
        self._interpreter = interpreter

    async def run(self, transcript: str) -> dict:
        outcome = await self._interpreter.handle(transcript)
        return {
            "success": outcome.success,
            "message": outcome.message,
            "total": len(outcome.products),
            "products": [p.model_dump(by_alias=True) for p in outcome.products],
        }


@router.post("")
async def run_command(
    body: CommandRequest,
    store: CatalogStore = Depends(require_loaded_store),
    interpreter: CommandInterpreter = Depends(get_command_interpreter),
):
    """
    Classify and apply a command.

    Errors:
    - 422 COMMAND_NOT_UNDERSTOOD: classifier returned UNKNOWN
    - 404 NO_MATCHING_VARIANT: stock update matched nothing
    - 503 CLASSIFIER_UNAVAILABLE: no classifier configured
    """
    return await CommandController(interpreter).run(body.transcript)
