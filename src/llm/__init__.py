"""AWS Bedrock client shared by the extraction and digest adapters."""

from src.llm.bedrock_client import (
    MODEL_ALIASES,
    BedrockClient,
    BedrockClientError,
    resolve_model_id,
)

__all__ = [
    "MODEL_ALIASES",
    "BedrockClient",
    "BedrockClientError",
    "resolve_model_id",
]
