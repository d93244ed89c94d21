"""Text <-> message conversion for the game API."""

from __future__ import annotations

import json
from typing import Any, cast

from pydantic import BaseModel, ValidationError

from jippity.errors import MissingDiscriminator, NotStructuredData, SchemaViolation, UnknownKind
from jippity.protocol.messages import MESSAGE_TYPES, Message


def decode(text: str) -> Message:
    """Decode one inbound text frame into a typed message.

    Raises:
        NotStructuredData: the text is not a JSON object.
        MissingDiscriminator: the object has no ``command``.
        UnknownKind: ``command`` is not a known message kind.
        SchemaViolation: the object does not have the shape of its kind.
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise NotStructuredData(f"Message is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise NotStructuredData(f"Message must be a JSON object, got {type(payload).__name__}")
    return decode_payload(payload)


def decode_payload(payload: dict[str, Any]) -> Message:
    kind = payload.get("command")
    if kind is None:
        raise MissingDiscriminator()
    if not isinstance(kind, str):
        raise UnknownKind(str(kind))
    model = MESSAGE_TYPES.get(kind)
    if model is None:
        raise UnknownKind(kind)
    try:
        return cast(Message, model.model_validate(payload))
    except ValidationError as exc:
        raise SchemaViolation(kind, _format_errors(exc)) from exc


def encode(message: Message) -> str:
    """Serialize a message, leaving out optional fields that are not set."""
    return cast(BaseModel, message).model_dump_json(by_alias=True, exclude_none=True)


def _format_errors(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "."
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
