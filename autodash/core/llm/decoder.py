"""Best-effort extraction of a JSON object from suggestion service responses."""

from typing import Any, Dict, Optional
import json
import logging
import re

from pydantic import BaseModel

logger = logging.getLogger(__name__)

FENCED_BLOCK = re.compile(r"```[\w-]*\s*\n?(.*?)\n?\s*```", re.DOTALL | re.IGNORECASE)


class DecodeResult(BaseModel):
    """Decoded payload, or the reason decoding failed."""
    payload: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


def extract_json_from_response(response: str) -> str:
    """Extract JSON content from a response, handling markdown code blocks and prose."""
    content = response.strip()

    match = FENCED_BLOCK.search(content)
    if match:
        return match.group(1).strip()

    start = content.find("{")
    end = content.rfind("}")
    if start != -1 and end > start:
        return content[start : end + 1]

    return content


def decode_suggestion_payload(response: Optional[str]) -> DecodeResult:
    """
    Decode the JSON object in a suggestion response.

    Args:
        response: Raw response text

    Returns:
        DecodeResult with the payload dict, or an error message
    """
    if not response or not response.strip():
        return DecodeResult(error="Empty response")

    candidate = extract_json_from_response(response)
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse suggestion response as JSON: {e}")
        logger.debug(f"Response content: {response[:500]}")
        return DecodeResult(error=f"Invalid JSON: {e}")

    if not isinstance(payload, dict):
        return DecodeResult(error=f"Expected a JSON object, got {type(payload).__name__}")

    return DecodeResult(payload=payload)
