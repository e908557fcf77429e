"""
Structured Reply Parsing.

Decodes the completion text as the fixed single-field JSON payload
``{"agentMessage": "..."}``. A parse failure is reported as
MalformedResponseError, never as a transport error, so callers can tell the
two apart.
"""

import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from aistudy.agent.structs import StructuredReply
from aistudy.exceptions.model import MalformedResponseError
from aistudy.providers.models import Usage

logger = logging.getLogger(__name__)

# Models sometimes wrap the payload in a Markdown fence despite instructions.
_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


class ResponseParser:
    """Turns raw completion text into a StructuredReply."""

    def parse(self, text: Optional[str], usage: Optional[Usage] = None) -> StructuredReply:
        """
        Decode ``text`` against the reply schema.

        Raises:
            MalformedResponseError: text is not JSON, not an object, or lacks
                a string ``agentMessage`` field.
        """
        if text is None or not text.strip():
            raise MalformedResponseError("Model returned no text", raw_response=text)

        payload_text = self._strip_fence(text.strip())
        try:
            payload = json.loads(payload_text)
        except json.JSONDecodeError as e:
            logger.warning("Reply is not valid JSON: %s", e)
            raise MalformedResponseError(
                f"Failed to parse the model reply as JSON: {e}",
                raw_response=text,
                original_error=e,
            ) from e

        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(payload).__name__}",
                raw_response=text,
            )

        try:
            reply = StructuredReply.model_validate(payload)
        except ValidationError as e:
            logger.warning("Reply is missing the agentMessage field")
            raise MalformedResponseError(
                "Model reply does not match the expected schema (agentMessage)",
                raw_response=text,
                original_error=e,
            ) from e

        if usage is not None:
            reply.usage = usage
        return reply

    @staticmethod
    def serialize(text: str) -> str:
        """Canonical JSON stored as the content of assistant turns."""
        return StructuredReply(agent_message=text).to_json()

    def decode_turn_content(self, content: str) -> str:
        """
        Recover display text from a stored assistant turn.
        Falls back to the raw content for turns written by older versions.
        """
        try:
            return self.parse(content).agent_message
        except MalformedResponseError:
            return content

    @staticmethod
    def _strip_fence(text: str) -> str:
        match = _FENCE_PATTERN.match(text)
        if match:
            return match.group(1)
        return text
