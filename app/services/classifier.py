"""
==============================================================================
Intent Classifier Module
==============================================================================

Natural-language classification of inventory commands.

- IntentClassifier: protocol the command interpreter depends on
- GeminiIntentClassifier: google-genai implementation (single prompt,
  strict JSON output, best-effort JSON extraction)

Any classifier failure yields an UNKNOWN intent, never an exception.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from google import genai
from google.genai import types

from app.services.commands import Intent, UnknownIntent, parse_intent


# Module logger
logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """
You are an inventory assistant for a furniture store. You turn a single
spoken or typed command into a structured inventory action.

You MUST respond with STRICT JSON using one of these shapes:

{"type": "CREATE_PRODUCT", "productName": string,
 "data": {"name": string, "category": string, "description": string,
          "basePrice": number, "remarks": string, "alertLimit": number}}

{"type": "UPDATE_STOCK", "productName": string, "sku": string,
 "color": string, "quantityChange": integer}

{"type": "UNKNOWN", "reason": string}

Rules:
- quantityChange is negative when stock is sold, removed or damaged.
- Omit fields the command does not mention.
- Use UNKNOWN when the command is not an inventory action.
""".strip()


class IntentClassifier(Protocol):
    async def classify(self, transcript: str, context: str) -> Intent:
        ...


class GeminiIntentClassifier:
    """
    Gemini-backed intent classifier.

    Args:
        api_key: Gemini API key
        model: Model name
    """

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash") -> None:
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is missing; GeminiIntentClassifier cannot be used.")
        self.client = genai.Client(api_key=api_key)
        self.model = model

    async def classify(self, transcript: str, context: str) -> Intent:
        prompt = (
            f"Current inventory: {context or 'empty'}\n\n"
            f'Command: "{transcript}"\n\n'
            "Return ONLY the JSON object, no explanation."
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_INSTRUCTION,
                    temperature=0.0,
                    response_mime_type="application/json",
                ),
            )
            text = (getattr(response, "text", "") or "").strip()
            if not text:
                logger.warning("GeminiIntentClassifier: empty response")
                return UnknownIntent(reason="Empty response from classifier")

            obj = self._parse_json_object(text)
            if not isinstance(obj, dict):
                return UnknownIntent(reason="Classifier returned no JSON object")
            return parse_intent(obj)
        except Exception as e:
            logger.warning("GeminiIntentClassifier error: %s", e, exc_info=True)
            return UnknownIntent(reason="Failed to process command")

    @staticmethod
    def _parse_json_object(text: str) -> Any:
        """Best-effort extraction of a JSON object from model text."""
        try:
            return json.loads(text)
        except ValueError:
            pass

        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except ValueError:
                return None
        return None
