"""Tests for the language-model metadata extractor."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from manualshelf.extraction.llm import MetadataExtractor, build_prompt, parse_reply
from manualshelf.models import ExtractedMetadata


def _client_returning(content: str | None) -> MagicMock:
    client = MagicMock()
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = content
    client.chat.completions.create.return_value = completion
    return client


class TestBuildPrompt:
    """Test build_prompt function."""

    def test_truncates_text(self) -> None:
        """Should embed at most 4000 characters of manual text."""
        prompt = build_prompt("a" * 5000)
        assert "a" * 4000 in prompt
        assert "a" * 4001 not in prompt

    def test_mentions_keys(self) -> None:
        """Should ask for the four keys."""
        prompt = build_prompt("text")
        assert "brand, model, device, manualType" in prompt
        assert '{"brand":"Siemens"' in prompt


class TestParseReply:
    """Test parse_reply function."""

    def test_valid_json(self) -> None:
        """Should map all four fields."""
        reply = '{"brand":"Siemens","model":"EQ700","device":"coffee maker","manualType":"user manual"}'
        assert parse_reply(reply) == ExtractedMetadata(
            brand="Siemens", model="EQ700", device="coffee maker", manualType="user manual"
        )

    def test_missing_fields_default_empty(self) -> None:
        """Should default absent fields to empty strings."""
        assert parse_reply('{"brand":"LG"}') == ExtractedMetadata(brand="LG")

    def test_non_string_fields(self) -> None:
        """Should normalise non-string values."""
        assert parse_reply('{"brand":42,"model":null,"device":["x"]}') == ExtractedMetadata()

    def test_invalid_json(self) -> None:
        """Should return empty metadata for unparsable output."""
        assert parse_reply("Sure! Here it is: brand=LG") == ExtractedMetadata()

    def test_not_an_object(self) -> None:
        """Should return empty metadata for a JSON array."""
        assert parse_reply('["LG"]') == ExtractedMetadata()

    def test_empty(self) -> None:
        """Should handle an empty reply."""
        assert parse_reply(None) == ExtractedMetadata()


class TestMetadataExtractor:
    """Test MetadataExtractor class."""

    def test_extract_success(self) -> None:
        """Should call the chat API and parse the answer."""
        client = _client_returning('{"brand":"Bosch","model":"","device":"dishwasher","manualType":""}')
        extractor = MetadataExtractor(client=client, model="test-model")

        result = extractor.extract("manual text")

        assert result == ExtractedMetadata(brand="Bosch", device="dishwasher")
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 256
        assert "manual text" in kwargs["messages"][1]["content"]

    def test_extract_request_failure(self) -> None:
        """Should swallow API errors into an empty result."""
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("network down")
        extractor = MetadataExtractor(client=client)

        assert extractor.extract("text") == ExtractedMetadata()

    def test_extract_bad_reply(self) -> None:
        """Should return empty metadata for a malformed reply."""
        extractor = MetadataExtractor(client=_client_returning("not json"))

        assert extractor.extract("text").is_empty()

    @patch("manualshelf.extraction.llm.OpenAI")
    def test_client_from_environment(self, mock_openai: MagicMock, monkeypatch) -> None:
        """Should build the client lazily from environment variables."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("OPENAI_API_BASE_URL", "http://localhost:1234/v1")

        extractor = MetadataExtractor()
        mock_openai.assert_not_called()
        _ = extractor.client

        mock_openai.assert_called_once_with(api_key="sk-test", base_url="http://localhost:1234/v1")
