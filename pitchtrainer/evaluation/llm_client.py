"""
Chat-completion client for pitch evaluation.

Asks the evaluation model for a JSON object and returns the raw reply text.
Parsing and normalization happen in the layers above.
"""

import logging
from typing import Any

from pitchtrainer.config import Settings
from pitchtrainer.upstream import UpstreamClient, UpstreamError

logger = logging.getLogger(__name__)


class LLMClient(UpstreamClient):
    """Client for the Mistral chat-completions endpoint."""

    purpose = "pitch evaluation"

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.model = settings.mistral_evaluation_model

    def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Generate a JSON reply from the evaluation model.

        Args:
            system_prompt: System message defining the model's role.
            user_prompt: User message with the actual request.
            temperature: Override temperature (uses config default if None).
            max_tokens: Override the reply token limit.

        Returns:
            The reply text, expected to be a JSON object.

        Raises:
            UpstreamError: If the call fails or the reply is empty.
        """
        temp = temperature if temperature is not None else self._settings.llm_temperature
        tokens = max_tokens or self._settings.llm_max_tokens

        messages: list[dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        response = self._call_with_retry(
            "Evaluation",
            lambda: self._client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=temp,
                max_tokens=tokens,
                response_format={"type": "json_object"},
            ),
        )

        if response.choices and response.choices[0].message.content:
            return response.choices[0].message.content

        raise UpstreamError("Evaluation failed: empty response from model")

    def test_connection(self) -> dict[str, Any]:
        """
        Send a minimal request to check the chat API is reachable.

        Returns:
            Connection report; never raises.
        """
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "Test"}],
                max_tokens=5,
            )
        except Exception as e:
            logger.error("Chat API connection test failed: %s", e)
            return {"connected": False, "model": self.model, "error": str(e)}

        content = response.choices[0].message.content if response.choices else None
        return {"connected": True, "model": self.model, "test_response": content}
