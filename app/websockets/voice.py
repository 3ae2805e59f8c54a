"""
==============================================================================
Voice WebSocket Module
==============================================================================

Voice command capture via WebSocket connection.

The client performs speech recognition and streams the recognized text;
the server owns the single-shot capture guard and applies the command.

Protocol:
---------
1. Client sends {"type": "start"}; server replies "listening", or an
   ALREADY_LISTENING error if a capture is in progress
2. Client sends {"type": "transcript", "text": "..."}; server classifies
   and applies it, replying "result" or "error". Only one transcript is
   processed per start.
3. Client sends {"type": "stop"} to cancel a capture; server replies
   "stopped"

==============================================================================
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.core.exceptions import AppException
from app.services.commands import CommandInterpreter
from app.services.voice import VoiceCaptureSession


logger = logging.getLogger(__name__)

router = APIRouter()


class VoiceWebSocketHandler:
    """
    Handler for one voice command connection.

    Manages the capture session lifecycle and reports each command's
    outcome back to the client.
    """

    def __init__(self, websocket: WebSocket, interpreter: CommandInterpreter):
        self._websocket = websocket
        self._interpreter = interpreter
        self._session = VoiceCaptureSession()

    async def send_error(self, message: str, code: str = "ERROR") -> None:
        """Send error message to client."""
        await self._websocket.send_json({
            "type": "error",
            "code": code,
            "message": message
        })

    async def handle_start(self) -> None:
        if not self._session.start():
            await self.send_error("Already listening", "ALREADY_LISTENING")
            return
        await self._websocket.send_json({"type": "listening", "status": self._session.status})

    async def handle_stop(self) -> None:
        self._session.stop()
        await self._websocket.send_json({"type": "stopped"})

    async def handle_transcript(self, data: dict) -> None:
        """Process one recognized utterance if a capture is armed."""
        text = str(data.get("text") or "")
        if not self._session.is_listening:
            await self.send_error("Not listening", "NOT_LISTENING")
            return

        try:
            outcome = await self._session.deliver(text, self._interpreter.handle)
        except AppException as e:
            logger.info(f"Voice command failed: {e.code}")
            await self.send_error(e.message, e.code)
            return

        await self._websocket.send_json({
            "type": "result",
            "transcript": text,
            "success": outcome.success,
            "message": outcome.message,
            "total": len(outcome.products),
        })

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("Voice WebSocket connected")

        try:
            while True:
                data = await self._websocket.receive_json()
                message_type = data.get("type")

                if message_type == "start":
                    await self.handle_start()
                elif message_type == "transcript":
                    await self.handle_transcript(data)
                elif message_type == "stop":
                    await self.handle_stop()
                else:
                    await self.send_error(f"Unknown message type: {message_type}", "BAD_MESSAGE")

        except WebSocketDisconnect:
            logger.info("Voice client disconnected")
        finally:
            self._session.stop()
            logger.info("Voice WebSocket closed")


@router.websocket("/ws/voice")
async def websocket_voice(websocket: WebSocket):
    """Voice command WebSocket endpoint."""
    interpreter = getattr(websocket.app.state, "command_interpreter", None)
    if interpreter is None:
        await websocket.accept()
        await websocket.send_json({
            "type": "error",
            "code": "CLASSIFIER_UNAVAILABLE",
            "message": "Voice commands are not configured"
        })
        await websocket.close()
        return

    await VoiceWebSocketHandler(websocket, interpreter).run()
