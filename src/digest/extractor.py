"""Content extractor: turns a newsletter body into structured content."""

import json
import logging

from pydantic import ValidationError

from src.digest.exceptions import ExtractionError
from src.digest.models import ExtractedContent
from src.digest.prompts import EXTRACTION_SYSTEM_PROMPT, EXTRACTION_USER_TEMPLATE
from src.llm.bedrock_client import BedrockClient, BedrockClientError

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARSE_RETRIES = 1


class ContentExtractor:
    """Extracts topics, takeaways, sections and links from a newsletter."""

    def __init__(
        self,
        client: BedrockClient,
        *,
        model: str = "haiku",
        max_parse_retries: int = DEFAULT_MAX_PARSE_RETRIES,
    ) -> None:
        """Initialise the extractor.

        :param client: Bedrock client for LLM calls.
        :param model: Model alias to use.
        :param max_parse_retries: Extra attempts when the response does not parse.
        """
        self._client = client
        self._model = model
        self._max_parse_retries = max_parse_retries

    def extract(self, subject: str, body: str, sender: str) -> ExtractedContent:
        """Extract structured content from a newsletter.

        :param subject: The newsletter subject.
        :param body: Plaintext body, already capped to the extraction limit.
        :param sender: The sender's address.
        :returns: The validated extracted content.
        :raises ExtractionError: If the call fails or no valid response is produced.
        """
        user_prompt = EXTRACTION_USER_TEMPLATE.format(sender=sender, subject=subject, body=body)
        last_error: Exception | None = None

        for attempt in range(self._max_parse_retries + 1):
            try:
                response = self._client.converse(
                    messages=[self._client.create_user_message(user_prompt)],
                    model_id=self._model,
                    system_prompt=EXTRACTION_SYSTEM_PROMPT,
                    max_tokens=2048,
                )
            except BedrockClientError as e:
                raise ExtractionError(f"Extraction call failed: {e}") from e

            try:
                content = _parse_extraction(self._client.parse_text_response(response))
            except ExtractionError as e:
                last_error = e
                logger.warning(
                    f"Extraction parse failed (attempt {attempt + 1}/"
                    f"{self._max_parse_retries + 1}): {e}"
                )
                continue

            logger.info(f"Extracted {len(content.topics)} topics from {subject[:60]!r}")
            return content

        raise ExtractionError(f"No valid extraction for {subject[:60]!r}: {last_error}")


def _parse_extraction(response_text: str) -> ExtractedContent:
    """Parse and validate an extraction response.

    :param response_text: Raw text response from the LLM.
    :returns: The validated content.
    :raises ExtractionError: If the response is not valid JSON of the right shape.
    """
    text = BedrockClient.extract_json_from_markdown(response_text)
    try:
        return ExtractedContent.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ExtractionError(f"Invalid extraction response: {e}") from e
