from __future__ import annotations

import base64
import logging
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import AttachmentError, ValidationError
from app.models.finance import (
    ConversationMessage,
    FileAttachment,
    FinanceRequest,
    FinanceResponse,
)
from app.services.gemini_service import MAX_OUTPUT_TOKENS, TEMPERATURE, GeminiService
from app.services.prompts import (
    IMAGE_ATTACHMENT_PROMPT,
    SYSTEM_PROMPT,
    TEXT_ATTACHMENT_PROMPT,
)
from app.services.response_parser import parse_model_response

logger = logging.getLogger(__name__)

MESSAGES_REQUIRED = "Messages array is required"
MODEL_REQUIRED = "Model selection is required"
NO_FILE_DATA = "No file data"

_ASCII_WHITESPACE = re.compile(r"[\t\n\f\r ]+")


def parse_request(payload: Any) -> FinanceRequest:
    """Validate the raw request body.

    Checks run in a fixed order (messages, model, file data) so the caller
    always gets the error for the first problem found.
    """
    if not isinstance(payload, dict):
        raise ValidationError(MESSAGES_REQUIRED)

    if not isinstance(payload.get("messages"), list):
        raise ValidationError(MESSAGES_REQUIRED)

    model = payload.get("model")
    if not model or not isinstance(model, str):
        raise ValidationError(MODEL_REQUIRED)

    # Falsy scalars (null, false, 0, "") mean no attachment; any object or
    # array counts as one, even when empty.
    file_data = payload.get("fileData")
    if not file_data and not isinstance(file_data, (dict, list)):
        file_data = None
    if file_data is not None and (
        not isinstance(file_data, dict) or not file_data.get("base64")
    ):
        logger.error("No base64 data received")
        raise ValidationError(NO_FILE_DATA)

    try:
        return FinanceRequest.model_validate(
            {
                "messages": payload["messages"],
                "model": model,
                "fileData": file_data,
            }
        )
    except PydanticValidationError as e:
        logger.error("Malformed request body: %s", e)
        if any(err["loc"] and err["loc"][0] == "fileData" for err in e.errors()):
            raise AttachmentError() from e
        raise ValidationError(MESSAGES_REQUIRED) from e


def _b64decode(data: str) -> bytes:
    """Decode base64 the way browsers' ``atob`` does.

    ASCII whitespace (line-wrapped MIME output) is ignored and missing
    ``=`` padding is restored; anything else must be strict base64.
    """
    compact = _ASCII_WHITESPACE.sub("", data)
    if len(compact) % 4 == 1:
        raise ValueError("Invalid base64 length")
    compact += "=" * (-len(compact) % 4)
    return base64.b64decode(compact, validate=True)


def decode_text_attachment(attachment: FileAttachment) -> str:
    try:
        return _b64decode(attachment.base64).decode("utf-8")
    except ValueError as e:
        logger.error("Error processing file content: %s", e)
        raise AttachmentError() from e


def apply_attachment(
    messages: list[ConversationMessage], attachment: FileAttachment
) -> list[ConversationMessage]:
    """Fold the attachment into the latest message of the conversation.

    Text files are decoded and placed ahead of the user's last message.
    Images are never forwarded; the model is told one was uploaded instead.
    Other kinds leave the conversation as it is.
    """
    if attachment.is_text:
        if not messages:
            raise AttachmentError()
        content = TEXT_ATTACHMENT_PROMPT.format(
            file_name=attachment.file_name,
            file_text=decode_text_attachment(attachment),
            message=messages[-1].content,
        )
    elif attachment.is_image:
        if not messages:
            raise AttachmentError()
        content = IMAGE_ATTACHMENT_PROMPT.format(message=messages[-1].content)
    else:
        return messages

    return [*messages[:-1], ConversationMessage(role="user", content=content)]


def build_conversation(request: FinanceRequest) -> list[ConversationMessage]:
    messages = [
        ConversationMessage(role=msg.role, content=msg.content)
        for msg in request.messages
    ]
    if request.file_data is not None:
        messages = apply_attachment(messages, request.file_data)

    return [ConversationMessage(role="system", content=SYSTEM_PROMPT), *messages]


def _describe_payload(payload: Any) -> dict[str, Any]:
    body = payload if isinstance(payload, dict) else {}
    messages = body.get("messages")
    file_data = body.get("fileData")
    return {
        "has_messages": bool(messages),
        "message_count": len(messages) if isinstance(messages, list) else None,
        "has_file_data": bool(file_data),
        "file_type": file_data.get("mediaType") if isinstance(file_data, dict) else None,
        "model": body.get("model"),
    }


def _preview(content: str, limit: int = 50) -> str:
    return content[:limit] + "..."


class FinanceChartService:
    def __init__(self, gemini_service: GeminiService):
        self._gemini = gemini_service

    async def handle(self, payload: Any) -> FinanceResponse:
        logger.info("Finance request received: %s", _describe_payload(payload))

        request = parse_request(payload)
        conversation = build_conversation(request)

        logger.info(
            "Gemini request: model=%s max_tokens=%d temperature=%s message_count=%d",
            request.model,
            MAX_OUTPUT_TOKENS,
            TEMPERATURE,
            len(conversation) - 1,
        )
        logger.debug(
            "Message structure: %s",
            [(msg.role, _preview(msg.content)) for msg in conversation[1:]],
        )

        text = await self._gemini.generate_completion(
            messages=conversation, model=request.model
        )

        logger.info("Gemini response received: content_length=%d", len(text or ""))
        logger.debug("Raw content: %s", text)

        parsed = parse_model_response(text)
        return FinanceResponse(content=parsed.explanation, chart_data=parsed.chart_data)
