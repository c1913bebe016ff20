"""Tests for the LLM gateway."""

from typing import Any, List, Optional
from unittest.mock import patch

import pytest

from llm import gateway
from llm.gateway import LLMGateway, is_error_result, register_model, register_provider, resolve_provider
from llm.messages import Message, user_message
from llm.providers.base import ProviderAdapter, error_result
from util.config import ConfigurationError, LLMConfig


class EchoAdapter(ProviderAdapter):
    """Adapter whose 'provider' returns the canned text it was given."""

    name = "echo"
    label = "Echo"

    canned = "<think>pondering</think>What do you think?"

    def build_client(self) -> Any:
        return object()

    def build_request(self, messages: List[Message], model: str, json_mode: bool = False) -> dict:
        return {"model": model, "messages": messages, "json": json_mode}

    def send(self, client: Any, request: dict) -> Any:
        return {"text": self.canned}

    def raw_text(self, raw: Any) -> Optional[str]:
        return raw.get("text")


class FailingAdapter(EchoAdapter):
    def send(self, client: Any, request: dict) -> Any:
        raise RuntimeError("connection reset")


@pytest.fixture(autouse=True)
def isolated_registry(monkeypatch):
    """Registry changes made by a test do not leak into other tests."""
    monkeypatch.setattr(gateway, "PROVIDER_ADAPTERS", dict(gateway.PROVIDER_ADAPTERS))
    monkeypatch.setattr(gateway, "MODEL_PROVIDERS", dict(gateway.MODEL_PROVIDERS))
    monkeypatch.setattr(gateway, "OPEN_MODEL_PROVIDERS", set(gateway.OPEN_MODEL_PROVIDERS))


class TestResolveProvider:
    """Tests for model to provider resolution."""

    def test_known_models(self):
        """Test catalogue models resolve to their provider."""
        assert resolve_provider("chatgpt", "gpt-4") == "chatgpt"
        assert resolve_provider("claude", "claude-2.1") == "claude"
        assert resolve_provider("gemini", "gemini-2.5-flash") == "gemini"

    def test_model_wins_over_configured_provider(self):
        """Test a catalogue model resolves to its own provider even if another was configured."""
        assert resolve_provider("claude", "gpt-4o") == "chatgpt"

    def test_unknown_model_raises(self):
        """Test an unmapped model is a configuration error."""
        with pytest.raises(ConfigurationError, match="not available"):
            resolve_provider("chatgpt", "gpt-99")

    def test_empty_model_raises(self):
        """Test a missing model is a configuration error."""
        with pytest.raises(ConfigurationError):
            resolve_provider("chatgpt", "")

    def test_ollama_accepts_any_model(self):
        """Test locally served models do not need a catalogue entry."""
        assert resolve_provider("ollama", "llama3:8b") == "ollama"

    def test_registered_provider_and_model(self):
        """Test new providers and models can be added without touching adapters."""
        register_provider("echo", EchoAdapter)
        register_model("echo-1", "echo")
        assert resolve_provider("echo", "echo-1") == "echo"

    def test_open_provider_registration(self):
        """Test a provider registered as open accepts unknown models."""
        register_provider("echo", EchoAdapter, accepts_any_model=True)
        assert resolve_provider("echo", "anything") == "echo"

    def test_model_mapped_to_missing_adapter(self):
        """Test a model pointing at an unregistered provider is rejected."""
        register_model("ghost-1", "ghost")
        with pytest.raises(ConfigurationError, match="No adapter"):
            resolve_provider("ghost", "ghost-1")


class TestIsErrorResult:
    """Tests for is_error_result."""

    def test_error_strings(self):
        assert is_error_result("Error: OpenAI API Error: quota")
        assert not is_error_result("A normal string")
        assert not is_error_result({"reasoning": None, "response": "Error: quoted"})
        assert not is_error_result(None)
        assert not is_error_result([])


class TestLLMGateway:
    """Tests for LLMGateway.send."""

    @pytest.fixture
    def echo_config(self):
        register_provider("echo", EchoAdapter)
        register_model("echo-1", "echo")
        return LLMConfig(provider="echo", model="echo-1")

    def test_text_mode(self, echo_config):
        """Test a text reply comes back split into reasoning and response."""
        result = LLMGateway(echo_config).send([user_message("hello")])
        assert result == {"reasoning": "pondering", "response": "What do you think?"}

    def test_json_mode(self, echo_config, monkeypatch):
        """Test JSON mode returns the parsed document."""
        monkeypatch.setattr(EchoAdapter, "canned", '{"results": [{"post_id": 1, "score": 8}]}')
        result = LLMGateway(echo_config).send([user_message("score")], json_mode=True)
        assert result == {"results": [{"post_id": 1, "score": 8}]}

    def test_json_mode_unparseable(self, echo_config, monkeypatch):
        """Test unparseable JSON comes back as None, not an exception."""
        monkeypatch.setattr(EchoAdapter, "canned", "I'd rather not")
        assert LLMGateway(echo_config).send([user_message("score")], json_mode=True) is None

    def test_provider_failure_is_error_string(self, echo_config):
        """Test exceptions from the provider come back as an error string."""
        register_provider("echo", FailingAdapter)
        result = LLMGateway(echo_config).send([user_message("hello")])
        assert result == "Error: An unexpected error occurred: connection reset"
        assert is_error_result(result)

    def test_custom_reasoning_pattern_and_post_processor(self, echo_config):
        """Test the reasoning pattern and post-processor are passed to the adapter."""
        calls = []

        def shout(reasoning, main_response, raw_content, json_mode):
            calls.append(json_mode)
            return reasoning, main_response.upper()

        gw = LLMGateway(echo_config, reasoning_pattern=None, post_processor=shout)
        result = gw.send([user_message("hello")])

        assert result == {"reasoning": None, "response": EchoAdapter.canned.upper()}
        assert calls == [False]

    def test_unknown_model_fails_at_construction(self):
        """Test the gateway refuses to build for an unmapped model."""
        with pytest.raises(ConfigurationError):
            LLMGateway(LLMConfig(provider="chatgpt", model="not-a-model"))

    def test_unregistered_provider_fails_at_construction(self):
        """Test a provider with no adapter is rejected when the gateway is built."""
        with pytest.raises(ConfigurationError, match="not available"):
            LLMGateway(LLMConfig(provider="mistral", model="mistral-small"))

    def test_missing_credentials_fail_at_construction(self):
        """Test a provider without credentials fails before any request."""
        with pytest.raises(ConfigurationError):
            LLMGateway(LLMConfig(provider="chatgpt", model="gpt-4"))

    @patch("llm.providers.openai_provider.OpenAI")
    def test_openai_client_built_from_settings(self, mock_openai):
        """Test the OpenAI client is constructed with the stored key."""
        config = LLMConfig(provider="chatgpt", model="gpt-4")
        config.openai.api_key = "sk-test"

        gw = LLMGateway(config)

        mock_openai.assert_called_once_with(api_key="sk-test")
        assert gw.provider == "chatgpt"
        assert gw.client is mock_openai.return_value

    def test_malformed_conversation_is_rejected(self, echo_config):
        """Test messages with unknown roles never reach the provider."""
        register_provider("echo", FailingAdapter)
        result = LLMGateway(echo_config).send([{"role": "system", "content": "hi"}])
        assert result == "Error: Invalid conversation."
