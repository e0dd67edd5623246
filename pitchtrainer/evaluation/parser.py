"""
Response parser for evaluation replies.

Pulls the JSON object out of the model's reply. The model is asked for bare
JSON, but fenced blocks and surrounding prose are tolerated.
"""

import json
import re
from typing import Any

from pitchtrainer.upstream import UpstreamError


class ResponseParseError(UpstreamError):
    """Raised when the model's reply holds no decodable JSON."""

    def __init__(self, message: str, raw_response: str | None = None):
        self.raw_response = raw_response
        super().__init__(message)


class ResponseParser:
    """Extracts and decodes the JSON value of an evaluation reply."""

    def parse(self, response: str) -> Any:
        """
        Decode the JSON in a model reply.

        The decoded value is returned as is; deciding whether it is a usable
        evaluation is the normalizer's job.

        Raises:
            ResponseParseError: If no JSON can be decoded.
        """
        json_str = self._extract_json(response)

        try:
            return json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ResponseParseError(
                f"Invalid JSON in evaluation response: {e}",
                raw_response=response,
            ) from e

    def _extract_json(self, response: str) -> str:
        """
        Extract JSON from response, handling common formats.

        Args:
            response: Raw response text.

        Returns:
            Extracted JSON string.
        """
        stripped = response.strip()
        if stripped.startswith(("{", "[")):
            return stripped

        # Remove markdown code block if present
        json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", response)
        if json_match:
            return json_match.group(1).strip()

        # Look for the outermost { }
        brace_start = response.find("{")
        if brace_start == -1:
            raise ResponseParseError("No JSON object found in response", raw_response=response)

        depth = 0
        in_string = False
        escaped = False
        for i, char in enumerate(response[brace_start:], start=brace_start):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return response[brace_start : i + 1]

        raise ResponseParseError("Unclosed JSON object in response", raw_response=response)
