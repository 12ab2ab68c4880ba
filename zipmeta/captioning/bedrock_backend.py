"""Caption backend calling an Anthropic model through AWS Bedrock."""

import asyncio
import json
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from zipmeta.exceptions import CaptionBackendError
from zipmeta.utils.config import DEFAULT_PROMPT_TEMPLATE
from zipmeta.utils.logger import get_logger

from .base import BaseCaptionBackend, build_prompt

logger = get_logger(__name__)

ANTHROPIC_BEDROCK_VERSION = "bedrock-2023-05-31"


class BedrockCaptionBackend(BaseCaptionBackend):
    """Single-turn caption requests to a Bedrock-hosted Claude model.

    Args:
        model_id: Bedrock model identifier.
        region: AWS region of the Bedrock runtime endpoint.
        prompt_template: Template containing ``@FILE_CONTENT@``.
        max_tokens: Upper bound on generated tokens.
    """

    def __init__(
        self,
        model_id: str,
        region: str = "eu-central-1",
        prompt_template: str = DEFAULT_PROMPT_TEMPLATE,
        max_tokens: int = 1000,
    ) -> None:
        self.model_id = model_id
        self.region = region
        self.prompt_template = prompt_template
        self.max_tokens = max_tokens
        self._client = None

    @property
    def client(self):
        """Lazy-init the Bedrock runtime client (only on first call)."""
        if self._client is None:
            self._client = boto3.client("bedrock-runtime", region_name=self.region)
        return self._client

    def build_request(self, text: str) -> dict[str, Any]:
        """Build the Anthropic messages body for one caption request."""
        return {
            "anthropic_version": ANTHROPIC_BEDROCK_VERSION,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": build_prompt(self.prompt_template, text)}
                    ],
                }
            ],
        }

    def _invoke(self, body: dict[str, Any]) -> dict[str, Any]:
        response = self.client.invoke_model(
            modelId=self.model_id,
            body=json.dumps(body),
            contentType="application/json",
            accept="application/json",
        )
        return json.loads(response["body"].read())

    async def generate_caption(self, text: str) -> str:
        body = self.build_request(text)
        logger.debug(
            "Invoking %s in %s (prompt %d chars)",
            self.model_id,
            self.region,
            len(body["messages"][0]["content"][0]["text"]),
        )

        try:
            result = await asyncio.to_thread(self._invoke, body)
        except (BotoCoreError, ClientError) as exc:
            raise CaptionBackendError(f"Bedrock call failed: {exc}") from exc
        except ValueError as exc:
            raise CaptionBackendError(f"Bedrock returned invalid JSON: {exc}") from exc

        try:
            return result["content"][0]["text"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise CaptionBackendError(f"Unexpected Bedrock response: {result!r}") from exc
