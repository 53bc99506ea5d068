"""Builds AnnotatedDocument records from Document AI JSON documents."""

import json
from typing import Any

from docrouter.decoding.exceptions import DecodingError
from docrouter.processor.models import AnnotatedDocument, Label


def parse_document_bytes(key: str, raw: bytes) -> AnnotatedDocument:
    """Decode and parse one structured-output object.

    Raises:
        DecodingError: if the bytes are not a JSON Document.
    """
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodingError(f"{key} is not valid JSON: {exc}") from exc
    return parse_document(key, payload)


def parse_document(key: str, payload: Any) -> AnnotatedDocument:
    """Build an AnnotatedDocument from a parsed Document.

    Raises:
        DecodingError: if the payload does not have the Document shape.
    """
    if not isinstance(payload, dict):
        raise DecodingError(f"{key}: document must be an object")
    text = payload.get("text") or ""
    if not isinstance(text, str):
        raise DecodingError(f"{key}: 'text' must be a string")
    entities = payload.get("entities") or []
    if not isinstance(entities, list):
        raise DecodingError(f"{key}: 'entities' must be a list")
    labels = tuple(_build_label(key, entity, i) for i, entity in enumerate(entities))
    return AnnotatedDocument(source_output_key=key, raw_text=text, labels=labels)


def _build_label(key: str, raw: Any, index: int) -> Label:
    if not isinstance(raw, dict):
        raise DecodingError(f"{key}: entity at index {index} must be an object")
    label_type = raw.get("type") or raw.get("type_") or ""
    if not isinstance(label_type, str):
        raise DecodingError(f"{key}: entity at index {index}: 'type' must be a string")
    return Label(
        type=label_type,
        confidence=_build_confidence(key, raw.get("confidence", 0.0), index),
        mention_text=_first_str(raw, "mentionText", "mention_text") or "",
        normalized_value=_build_normalized_value(raw),
    )


def _build_confidence(key: str, raw: Any, index: int) -> float:
    if raw is None:
        return 0.0
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise DecodingError(f"{key}: entity at index {index}: 'confidence' must be a number")
    return min(1.0, max(0.0, float(raw)))


def _build_normalized_value(raw: dict[str, Any]) -> str | None:
    value = raw.get("normalizedValue") or raw.get("normalized_value")
    if isinstance(value, dict):
        text = value.get("text")
        return text if isinstance(text, str) and text else None
    if isinstance(value, str) and value:
        return value
    return None


def _first_str(raw: dict[str, Any], *names: str) -> str | None:
    for name in names:
        value = raw.get(name)
        if isinstance(value, str):
            return value
    return None
