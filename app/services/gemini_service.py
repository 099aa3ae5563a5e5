from __future__ import annotations

import asyncio
import logging

from google import genai
from google.genai import types

from app.core.errors import ConfigurationError, UpstreamError
from app.core.settings import Settings, get_settings
from app.models.finance import ConversationMessage

logger = logging.getLogger(__name__)

MAX_OUTPUT_TOKENS = 4096
TEMPERATURE = 0.7

SYSTEM_TURN_PREFIX = "[System message]\n"


class GeminiService:
    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()

        if not self._settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        # One client per process, shared by every request.
        self._client = genai.Client(api_key=self._settings.gemini_api_key)

    @staticmethod
    def _to_contents(
        messages: list[ConversationMessage],
    ) -> tuple[str | None, list[types.Content]]:
        system_instruction: str | None = None
        if messages and messages[0].role == "system":
            system_instruction = messages[0].content
            messages = messages[1:]

        contents: list[types.Content] = []
        for msg in messages:
            text = msg.content
            if msg.role == "system":
                # Gemini has no system turn; keep later ones in place as user text.
                role = "user"
                text = SYSTEM_TURN_PREFIX + text
            else:
                # Gemini calls the assistant side of the conversation "model".
                role = "model" if msg.role == "assistant" else "user"
            contents.append(
                types.Content(role=role, parts=[types.Part.from_text(text=text)])
            )

        return system_instruction, contents

    async def generate_completion(
        self, messages: list[ConversationMessage], model: str
    ) -> str:
        system_instruction, contents = self._to_contents(messages)

        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=MAX_OUTPUT_TOKENS,
            temperature=TEMPERATURE,
            response_mime_type="application/json",
        )

        def _send() -> str:
            response = self._client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
            text = getattr(response, "text", None)
            return text if isinstance(text, str) else ""

        try:
            return await asyncio.to_thread(_send)
        except Exception as e:
            logger.exception("Gemini request failed")
            raise UpstreamError(str(e) or "An unknown error occurred") from e
