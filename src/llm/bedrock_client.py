"""AWS Bedrock client for the newsletter LLM calls."""

from __future__ import annotations

import logging
import os
import re
import time
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

if TYPE_CHECKING:
    from mypy_boto3_bedrock_runtime import BedrockRuntimeClient
    from mypy_boto3_bedrock_runtime.type_defs import ContentBlockTypeDef, MessageTypeDef

logger = logging.getLogger(__name__)

# Extraction and digest calls can take a while on long newsletters
REQUEST_TIMEOUT = 120

# Model ID aliases - use these instead of full Bedrock model IDs
MODEL_ALIASES: dict[str, str] = {
    "haiku": "global.anthropic.claude-haiku-4-5-20251001-v1:0",
    "sonnet": "global.anthropic.claude-sonnet-4-5-20250929-v1:0",
    "opus": "global.anthropic.claude-opus-4-5-20251101-v1:0",
}

VALID_MODEL_OPTIONS = frozenset(MODEL_ALIASES.keys())

_JSON_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class BedrockClientError(Exception):
    """Raised when a Bedrock API call fails."""

    pass


def resolve_model_id(model_id: str) -> str:
    """Resolve a model alias to a full model ID.

    :param model_id: Model alias (haiku, sonnet, opus).
    :returns: Full Bedrock model ID.
    :raises ValueError: If model_id is not a valid alias.
    """
    model_lower = model_id.lower()
    if model_lower not in MODEL_ALIASES:
        valid_options = ", ".join(sorted(VALID_MODEL_OPTIONS))
        raise ValueError(f"Invalid model '{model_id}'. Must be one of: {valid_options}")
    return MODEL_ALIASES[model_lower]


class BedrockClient:
    """Client for AWS Bedrock Converse API.

    Low-level wrapper: callers choose the model and prompts for each request
    and parse the text that comes back.
    """

    def __init__(self, region_name: str | None = None) -> None:
        """Initialise the Bedrock client.

        :param region_name: AWS region. Defaults to AWS_REGION env var or eu-west-2.
        """
        self.region_name = region_name or os.environ.get("AWS_REGION", "eu-west-2")

        self._client: BedrockRuntimeClient = boto3.client(
            "bedrock-runtime",
            region_name=self.region_name,
            config=Config(read_timeout=REQUEST_TIMEOUT, retries={"max_attempts": 3}),
        )

        logger.debug(f"Initialised BedrockClient: region={self.region_name}")

    def converse(
        self,
        messages: list[MessageTypeDef],
        model_id: str,
        system_prompt: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> dict[str, Any]:
        """Invoke the Bedrock Converse API.

        :param messages: Conversation messages.
        :param model_id: Model alias (haiku, sonnet, opus) to use for this request.
        :param system_prompt: Optional system prompt.
        :param max_tokens: Maximum tokens in response.
        :param temperature: Sampling temperature (0.0 for deterministic).
        :returns: Converse API response.
        :raises BedrockClientError: If the API call fails.
        :raises ValueError: If model_id is not a valid alias.
        """
        effective_model = resolve_model_id(model_id)
        request_params: dict[str, Any] = {
            "modelId": effective_model,
            "messages": messages,
            "inferenceConfig": {
                "maxTokens": max_tokens,
                "temperature": temperature,
            },
        }

        if system_prompt:
            request_params["system"] = [{"text": system_prompt}]

        try:
            logger.debug(
                f"Calling Bedrock Converse: model={effective_model}, "
                f"messages_count={len(messages)}"
            )
            start_time = time.perf_counter()
            response = self._client.converse(**request_params)
            latency_ms = int((time.perf_counter() - start_time) * 1000)

            logger.debug(
                f"Bedrock response: stop_reason={response.get('stopReason')}, "
                f"usage={response.get('usage', {})}, latency_ms={latency_ms}"
            )
            return dict(response)

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))
            logger.exception(f"Bedrock API error: code={error_code}, message={error_message}")
            raise BedrockClientError(
                f"Bedrock API call failed: {error_code} - {error_message}"
            ) from e
        except BotoCoreError as e:
            logger.exception(f"Bedrock transport error: {e}")
            raise BedrockClientError(f"Bedrock API call failed: {e}") from e

    def parse_text_response(self, response: dict[str, Any]) -> str:
        """Extract text content from a Converse response.

        :param response: Converse API response.
        :returns: Concatenated text content from the response.
        """
        output = response.get("output", {})
        message = output.get("message", {})
        content: list[ContentBlockTypeDef] = message.get("content", [])

        text_parts: list[str] = []
        for block in content:
            if "text" in block:
                text_parts.append(block["text"])

        return "\n".join(text_parts)

    def create_user_message(self, text: str) -> MessageTypeDef:
        """Create a user message.

        :param text: Message text.
        :returns: User message dictionary.
        """
        return {"role": "user", "content": [{"text": text}]}

    @staticmethod
    def extract_json_from_markdown(text: str) -> str:
        """Strip a markdown code fence from around a JSON payload.

        Models often wrap JSON in ```json fences despite being told not to.

        :param text: Raw response text.
        :returns: The JSON text without surrounding fences.
        """
        match = _JSON_FENCE_PATTERN.search(text)
        if match:
            return match.group(1).strip()
        return text.strip()
