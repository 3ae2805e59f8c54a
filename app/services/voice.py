"""
Voice capture session.

Single-shot listen / transcribe / process cycle. Starting while already
listening is refused, and at most one transcript is processed per listen.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


class VoiceCaptureSession:
    """Guards one voice capture cycle."""

    def __init__(self) -> None:
        self._listening = False
        self._status = ""

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def status(self) -> str:
        return self._status

    def start(self) -> bool:
        """Arm the session. Returns False if it is already listening."""
        if self._listening:
            return False
        self._listening = True
        self._status = "Listening..."
        return True

    def stop(self) -> None:
        """Disarm without delivering a result."""
        self._listening = False
        self._status = ""

    async def deliver(
        self,
        transcript: str,
        process: Callable[[str], Awaitable[T]],
    ) -> Optional[T]:
        """
        Process ``transcript`` if the session is armed, then disarm.

        Returns:
            The result of ``process``, or None when not listening
        """
        if not self._listening:
            logger.debug("Transcript dropped, session not listening")
            return None

        self._listening = False
        self._status = "Processing..."
        try:
            return await process(transcript)
        finally:
            self._status = ""
