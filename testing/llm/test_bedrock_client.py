"""Tests for BedrockClient."""

import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError, EndpointConnectionError

from src.llm.bedrock_client import (
    MODEL_ALIASES,
    VALID_MODEL_OPTIONS,
    BedrockClient,
    BedrockClientError,
    resolve_model_id,
)


class TestResolveModelId(unittest.TestCase):
    """Tests for resolve_model_id function."""

    def test_resolve_haiku(self) -> None:
        """Test resolving haiku alias."""
        self.assertEqual(resolve_model_id("haiku"), MODEL_ALIASES["haiku"])

    def test_resolve_case_insensitive(self) -> None:
        """Test that model aliases are case insensitive."""
        self.assertEqual(resolve_model_id("SONNET"), MODEL_ALIASES["sonnet"])

    def test_resolve_invalid_raises_error(self) -> None:
        """Test that invalid model alias raises ValueError."""
        with self.assertRaises(ValueError) as ctx:
            resolve_model_id("invalid-model")

        for option in VALID_MODEL_OPTIONS:
            self.assertIn(option, str(ctx.exception))


class TestBedrockClient(unittest.TestCase):
    """Tests for BedrockClient."""

    @patch("src.llm.bedrock_client.boto3.client")
    def test_init_with_custom_region(self, mock_boto_client: MagicMock) -> None:
        """Test client initialisation with custom region."""
        client = BedrockClient(region_name="us-east-1")

        self.assertEqual(client.region_name, "us-east-1")
        self.assertEqual(mock_boto_client.call_args.args[0], "bedrock-runtime")
        self.assertEqual(mock_boto_client.call_args.kwargs["region_name"], "us-east-1")

    @patch("src.llm.bedrock_client.boto3.client")
    def test_init_from_environment(self, mock_boto_client: MagicMock) -> None:
        """Test client reads region from environment variable."""
        with patch.dict("os.environ", {"AWS_REGION": "ap-southeast-1"}):
            client = BedrockClient()

        self.assertEqual(client.region_name, "ap-southeast-1")

    @patch("src.llm.bedrock_client.boto3.client")
    def test_converse_passes_model_and_system_prompt(self, mock_boto_client: MagicMock) -> None:
        """Test that converse resolves the alias and sends the system prompt."""
        mock_bedrock = MagicMock()
        mock_boto_client.return_value = mock_bedrock
        mock_bedrock.converse.return_value = {
            "output": {"message": {"content": [{"text": "Hello"}]}},
            "stopReason": "end_turn",
        }

        client = BedrockClient()
        response = client.converse(
            [client.create_user_message("Hi")],
            model_id="haiku",
            system_prompt="Be terse",
            max_tokens=100,
        )

        self.assertEqual(response["stopReason"], "end_turn")
        call_kwargs = mock_bedrock.converse.call_args.kwargs
        self.assertEqual(call_kwargs["modelId"], MODEL_ALIASES["haiku"])
        self.assertEqual(call_kwargs["system"], [{"text": "Be terse"}])
        self.assertEqual(call_kwargs["inferenceConfig"]["maxTokens"], 100)

    @patch("src.llm.bedrock_client.boto3.client")
    def test_converse_without_system_prompt(self, mock_boto_client: MagicMock) -> None:
        """Test that no system block is sent when no prompt is given."""
        mock_bedrock = MagicMock()
        mock_boto_client.return_value = mock_bedrock
        mock_bedrock.converse.return_value = {"output": {"message": {}}}

        BedrockClient().converse([], model_id="haiku")

        self.assertNotIn("system", mock_bedrock.converse.call_args.kwargs)

    @patch("src.llm.bedrock_client.boto3.client")
    def test_converse_handles_client_error(self, mock_boto_client: MagicMock) -> None:
        """Test that ClientError is converted to BedrockClientError."""
        mock_bedrock = MagicMock()
        mock_boto_client.return_value = mock_bedrock
        mock_bedrock.converse.side_effect = ClientError(
            {"Error": {"Code": "ThrottlingException", "Message": "Slow down"}},
            "Converse",
        )

        with self.assertRaises(BedrockClientError) as ctx:
            BedrockClient().converse([], model_id="haiku")

        self.assertIn("ThrottlingException", str(ctx.exception))

    @patch("src.llm.bedrock_client.boto3.client")
    def test_converse_handles_transport_error(self, mock_boto_client: MagicMock) -> None:
        """Test that BotoCoreError is converted to BedrockClientError."""
        mock_bedrock = MagicMock()
        mock_boto_client.return_value = mock_bedrock
        mock_bedrock.converse.side_effect = EndpointConnectionError(endpoint_url="https://x")

        with self.assertRaises(BedrockClientError):
            BedrockClient().converse([], model_id="haiku")

    @patch("src.llm.bedrock_client.boto3.client")
    def test_parse_text_response_joins_blocks(self, mock_boto_client: MagicMock) -> None:
        """Test that text blocks are concatenated."""
        client = BedrockClient()
        response = {
            "output": {"message": {"content": [{"text": "one"}, {"other": 1}, {"text": "two"}]}}
        }

        self.assertEqual(client.parse_text_response(response), "one\ntwo")


class TestExtractJsonFromMarkdown(unittest.TestCase):
    """Tests for BedrockClient.extract_json_from_markdown."""

    def test_strips_json_fence(self) -> None:
        """Test that fenced JSON is unwrapped."""
        text = 'Here you go:\n```json\n{"a": 1}\n```'

        self.assertEqual(BedrockClient.extract_json_from_markdown(text), '{"a": 1}')

    def test_plain_json_is_returned(self) -> None:
        """Test that unfenced text is returned stripped."""
        self.assertEqual(BedrockClient.extract_json_from_markdown('  {"a": 1} '), '{"a": 1}')


if __name__ == "__main__":
    unittest.main()
