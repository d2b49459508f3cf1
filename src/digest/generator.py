"""Digest generator: summarises a set of extracted newsletters."""

import json
import logging

from pydantic import ValidationError

from src.digest.exceptions import DigestGenerationError
from src.digest.models import Digest, DigestInput
from src.digest.prompts import (
    DIGEST_SYSTEM_PROMPT,
    DIGEST_USER_TEMPLATE,
    LENGTH_GUIDANCE,
    LINKS_EXCLUDED,
    LINKS_INCLUDED,
)
from src.enums import SummaryLength
from src.llm.bedrock_client import BedrockClient, BedrockClientError

logger = logging.getLogger(__name__)


class DigestGenerator:
    """Produces a validated Digest from extracted newsletter content."""

    def __init__(self, client: BedrockClient, *, model: str = "haiku") -> None:
        """Initialise the generator.

        :param client: Bedrock client for LLM calls.
        :param model: Model alias to use.
        """
        self._client = client
        self._model = model

    def generate(
        self,
        newsletters: list[DigestInput],
        topics: list[str],
        summary_length: SummaryLength,
        include_links: bool,
        custom_instructions: str | None = None,
    ) -> Digest:
        """Generate a digest.

        :param newsletters: Extracted content of the matched newsletters.
        :param topics: The schedule's topic filter.
        :param summary_length: How long summaries should be.
        :param include_links: Whether to include links.
        :param custom_instructions: Optional extra instructions.
        :returns: The validated digest.
        :raises DigestGenerationError: If the call fails or the response is invalid.
        """
        newsletters_json = json.dumps([n.model_dump(mode="json") for n in newsletters])
        user_prompt = DIGEST_USER_TEMPLATE.format(
            topics=", ".join(topics),
            length_guidance=LENGTH_GUIDANCE[SummaryLength(summary_length)],
            links_guidance=LINKS_INCLUDED if include_links else LINKS_EXCLUDED,
            custom_instructions=(
                f"Additional instructions: {custom_instructions}\n" if custom_instructions else ""
            ),
            newsletters_json=newsletters_json,
        )

        try:
            response = self._client.converse(
                messages=[self._client.create_user_message(user_prompt)],
                model_id=self._model,
                system_prompt=DIGEST_SYSTEM_PROMPT,
                max_tokens=8192,
                temperature=0.2,
            )
        except BedrockClientError as e:
            raise DigestGenerationError(f"Digest generation call failed: {e}") from e

        text = BedrockClient.extract_json_from_markdown(self._client.parse_text_response(response))
        try:
            digest = Digest.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise DigestGenerationError(f"Invalid digest response: {e}") from e

        if not include_links:
            for entry in digest.newsletters:
                entry.top_links = []

        logger.info(
            f"Generated digest for {len(newsletters)} newsletters: "
            f"period={digest.period_covered!r}, highlights={len(digest.highlights)}"
        )
        return digest
