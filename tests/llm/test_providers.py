"""Tests for the provider adapters."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import openai
import pytest
import requests
from langchain_core.messages import AIMessage, HumanMessage

from llm.messages import assistant_message, user_message
from llm.providers.anthropic_provider import AI_PROMPT, HUMAN_PROMPT, AnthropicAdapter, messages_to_transcript
from llm.providers.base import error_result, parse_json_container
from llm.providers.gemini_provider import GeminiAdapter, to_langchain_messages
from llm.providers.ollama_provider import OllamaAdapter, OllamaClient
from llm.providers.openai_provider import OpenAIAdapter
from util.config import AnthropicSettings, ConfigurationError, GeminiSettings, LLMConfig, OpenAISettings


@pytest.fixture
def llm_config():
    return LLMConfig(
        provider="chatgpt",
        model="gpt-4",
        openai=OpenAISettings(api_key="sk-test"),
        anthropic=AnthropicSettings(api_key="ak-test"),
    )


@pytest.fixture
def conversation():
    return [
        user_message("Start the dialogue."),
        assistant_message("Question 1: Name an issue."),
        user_message("Online privacy"),
    ]


def openai_envelope(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestParseJsonContainer:
    """Tests for parse_json_container."""

    def test_object_and_array(self):
        """Test objects and arrays are returned parsed."""
        assert parse_json_container('{"results": []}') == {"results": []}
        assert parse_json_container("[1, 2]") == [1, 2]

    def test_scalars_are_rejected(self):
        """Test valid JSON that is not a container gives None."""
        assert parse_json_container("42") is None
        assert parse_json_container('"text"') is None

    def test_invalid_json(self):
        """Test unparseable text gives None."""
        assert parse_json_container("not json at all") is None

    def test_code_fence_is_stripped(self):
        """Test a markdown fenced JSON block still parses."""
        assert parse_json_container('```json\n{"a": 1}\n```') == {"a": 1}


class TestOpenAIAdapter:
    """Tests for the OpenAI adapter."""

    def test_build_request_passes_messages(self, llm_config, conversation):
        """Test the message list is sent as is, without JSON mode by default."""
        request = OpenAIAdapter(llm_config).build_request(conversation, "gpt-4")
        assert request == {"model": "gpt-4", "messages": conversation}

    def test_build_request_json_mode(self, llm_config, conversation):
        """Test JSON mode adds response_format."""
        request = OpenAIAdapter(llm_config).build_request(conversation, "gpt-4", json_mode=True)
        assert request["response_format"] == {"type": "json_object"}

    def test_build_client_requires_key(self, llm_config):
        """Test a missing API key is a configuration error."""
        llm_config.openai.api_key = ""
        with pytest.raises(ConfigurationError):
            OpenAIAdapter(llm_config).build_client()

    def test_execute_success(self, llm_config):
        """Test the SDK response is returned untouched."""
        client = MagicMock()
        client.chat.completions.create.return_value = openai_envelope("hello")

        raw = OpenAIAdapter(llm_config).execute(client, {"model": "gpt-4", "messages": []})

        assert raw.choices[0].message.content == "hello"
        client.chat.completions.create.assert_called_once_with(model="gpt-4", messages=[])

    def test_execute_api_error_is_tagged(self, llm_config):
        """Test SDK errors become a tagged error value."""
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.OpenAIError("quota exceeded")

        raw = OpenAIAdapter(llm_config).execute(client, {})

        assert raw == error_result("OpenAI API Error: quota exceeded")

    def test_execute_unexpected_error_is_tagged(self, llm_config):
        """Test any other exception is also caught."""
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("boom")

        raw = OpenAIAdapter(llm_config).execute(client, {})

        assert raw == error_result("An unexpected error occurred: boom")

    def test_extract_response_text_mode(self, llm_config):
        """Test text mode returns reasoning and response."""
        adapter = OpenAIAdapter(llm_config)
        result = adapter.extract_response(openai_envelope("<think>hmm</think>Why?"))
        assert result == {"reasoning": "hmm", "response": "Why?"}

    def test_extract_response_json_mode(self, llm_config):
        """Test JSON mode parses the main response."""
        adapter = OpenAIAdapter(llm_config)
        result = adapter.extract_response(openai_envelope('{"results": [{"post_id": 1}]}'), json_mode=True)
        assert result == {"results": [{"post_id": 1}]}

    def test_extract_response_json_mode_unparseable(self, llm_config):
        """Test JSON mode gives None for non-JSON text."""
        adapter = OpenAIAdapter(llm_config)
        assert adapter.extract_response(openai_envelope("Sure! Here you go"), json_mode=True) is None

    def test_extract_response_tagged_error(self, llm_config):
        """Test a tagged error becomes an error string."""
        adapter = OpenAIAdapter(llm_config)
        assert adapter.extract_response(error_result("OpenAI API Error: x")) == "Error: OpenAI API Error: x"

    def test_extract_response_bad_envelope(self, llm_config):
        """Test a malformed envelope becomes an error string rather than raising."""
        adapter = OpenAIAdapter(llm_config)
        assert adapter.extract_response(SimpleNamespace(choices=[])) == (
            "Error: Invalid response structure from OpenAI."
        )


class TestAnthropicAdapter:
    """Tests for the Anthropic adapter."""

    def test_transcript_markers(self, conversation):
        """Test the conversation collapses into Human/Assistant turns ending with an open Assistant turn."""
        transcript = messages_to_transcript(conversation)
        assert transcript == (
            "\n\nHuman:Start the dialogue."
            "\n\nAssistant:Question 1: Name an issue."
            "\n\nHuman:Online privacy"
            "\n\nAssistant:"
        )
        assert transcript.endswith(AI_PROMPT)

    def test_build_request(self, llm_config, conversation):
        """Test the request carries the transcript and the stop sequence."""
        request = AnthropicAdapter(llm_config).build_request(conversation, "claude-2", json_mode=True)
        assert request["prompt"] == messages_to_transcript(conversation)
        assert request["model"] == "claude-2"
        assert request["max_tokens_to_sample"] == 4000
        assert request["stop_sequences"] == [HUMAN_PROMPT]
        assert "response_format" not in request

    def test_execute_api_error_is_tagged(self, llm_config):
        """Test SDK errors become a tagged error value."""
        client = MagicMock()
        client.completions.create.side_effect = anthropic.AnthropicError("overloaded")

        raw = AnthropicAdapter(llm_config).execute(client, {})

        assert raw == error_result("Anthropic API Error: overloaded")

    def test_extract_response_from_dict(self, llm_config):
        """Test a dict envelope with a completion is accepted."""
        result = AnthropicAdapter(llm_config).extract_response({"completion": " What do you mean?"})
        assert result == {"reasoning": None, "response": " What do you mean?"}

    def test_extract_response_json_mode(self, llm_config):
        """Test JSON is parsed from the completion text."""
        raw = SimpleNamespace(completion='<think>ok</think>{"results": []}')
        assert AnthropicAdapter(llm_config).extract_response(raw, json_mode=True) == {"results": []}

    def test_extract_response_missing_completion(self, llm_config):
        """Test an envelope without completion text is an error string."""
        result = AnthropicAdapter(llm_config).extract_response({"stop_reason": "max_tokens"})
        assert result == "Error: Invalid response structure from Anthropic."


class TestOllamaAdapter:
    """Tests for the Ollama adapter."""

    def test_build_request(self, llm_config, conversation):
        """Test the chat payload, with format=json in JSON mode."""
        adapter = OllamaAdapter(llm_config)

        request = adapter.build_request(conversation, "llama3")
        assert request["model"] == "llama3"
        assert request["messages"] == conversation
        assert request["stream"] is False
        assert request["options"] == {"num_ctx": 8192, "temperature": 0.1}
        assert "format" not in request

        assert adapter.build_request(conversation, "llama3", json_mode=True)["format"] == "json"

    def test_send_posts_to_chat_endpoint(self, llm_config):
        """Test the request is POSTed to /api/chat with the timeout."""
        session = MagicMock()
        session.post.return_value.json.return_value = {"message": {"content": "hi"}}
        client = OllamaClient(server_url="http://ollama:11434/", timeout=30, session=session)

        raw = OllamaAdapter(llm_config).execute(client, {"model": "llama3"})

        assert raw == {"message": {"content": "hi"}}
        session.post.assert_called_once_with(
            "http://ollama:11434/api/chat", json={"model": "llama3"}, timeout=30
        )

    def test_http_error_is_tagged(self, llm_config):
        """Test HTTP failures become a tagged error value."""
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("refused")
        client = OllamaClient(server_url="http://ollama:11434", timeout=30, session=session)

        raw = OllamaAdapter(llm_config).execute(client, {})

        assert raw == error_result("Ollama API Error: refused")

    def test_extract_response(self, llm_config):
        """Test content is read from message.content."""
        adapter = OllamaAdapter(llm_config)
        assert adapter.extract_response({"message": {"content": "<think>a</think>b"}}) == {
            "reasoning": "a",
            "response": "b",
        }
        assert adapter.extract_response({"error": "model not found"}) == (
            "Error: Invalid response structure from Ollama."
        )


class TestGeminiAdapter:
    """Tests for the Gemini adapter."""

    def test_langchain_messages(self, conversation):
        converted = to_langchain_messages(conversation)

        assert [type(m) for m in converted] == [HumanMessage, AIMessage, HumanMessage]
        assert converted[2].content == "Online privacy"

    def test_build_client_requires_key(self, llm_config):
        with pytest.raises(ConfigurationError):
            GeminiAdapter(llm_config).build_client()

    def test_send_invokes_model(self, llm_config, conversation):
        llm_config.gemini = GeminiSettings(api_key="g-test")
        adapter = GeminiAdapter(llm_config)
        client = MagicMock()
        client.invoke.return_value = SimpleNamespace(content="Why?")

        raw = adapter.execute(client, adapter.build_request(conversation, "gemini-2.5-flash"))

        assert adapter.extract_response(raw) == {"reasoning": None, "response": "Why?"}
        assert len(client.invoke.call_args.args[0]) == 3

    def test_content_parts_are_joined(self, llm_config):
        raw = SimpleNamespace(content=[{"type": "text", "text": '{"results": '}, {"type": "text", "text": "[]}"}])
        assert GeminiAdapter(llm_config).extract_response(raw, json_mode=True) == {"results": []}
