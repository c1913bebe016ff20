"""
Single entry point for talking to an LLM.

The gateway resolves the configured model to a provider, instantiates that
provider's adapter and runs every request through the same
build_request -> execute -> extract_response lifecycle. Both the ingestion
pipeline and the chat engine go through here.

Providers and models are looked up in two tables, so new ones can be added
with register_provider()/register_model() without touching existing adapters.
"""

import time
from typing import Callable, Dict, List, Set

from llm.messages import Message, is_valid_conversation
from llm.providers.anthropic_provider import AnthropicAdapter
from llm.providers.base import ERROR_PREFIX, NormalizedResponse, ProviderAdapter
from llm.providers.gemini_provider import GeminiAdapter
from llm.providers.ollama_provider import OllamaAdapter
from llm.providers.openai_provider import OpenAIAdapter
from llm.reasoning import DEFAULT_REASONING_PATTERN, PostProcessor, ReasoningExtractor, keep_parts
from util.config import ConfigurationError, LLMConfig
from util.logging_util import log_llm_interaction, setup_logger

logger = setup_logger(__name__)

AdapterFactory = Callable[[LLMConfig, ReasoningExtractor], ProviderAdapter]

PROVIDER_ADAPTERS: Dict[str, AdapterFactory] = {
    "chatgpt": OpenAIAdapter,
    "claude": AnthropicAdapter,
    "ollama": OllamaAdapter,
    "gemini": GeminiAdapter,
}

MODEL_PROVIDERS: Dict[str, str] = {
    "gpt-3.5-turbo-0613": "chatgpt",
    "gpt-3.5-turbo": "chatgpt",
    "gpt-3.5-turbo-16k": "chatgpt",
    "gpt-4-1106-preview": "chatgpt",
    "gpt-4": "chatgpt",
    "gpt-4-32k": "chatgpt",
    "gpt-4o": "chatgpt",
    "gpt-4o-mini": "chatgpt",
    "claude-2": "claude",
    "claude-2.1": "claude",
    "claude-instant-1": "claude",
    "gemini-2.5-flash": "gemini",
    "gemini-3-flash-preview": "gemini",
}

# Providers serving whatever model the operator has installed locally
OPEN_MODEL_PROVIDERS: Set[str] = {"ollama"}


def register_provider(name: str, factory: AdapterFactory, accepts_any_model: bool = False):
    """Make a provider adapter available to the gateway."""
    PROVIDER_ADAPTERS[name] = factory
    if accepts_any_model:
        OPEN_MODEL_PROVIDERS.add(name)


def register_model(model: str, provider: str):
    """Map a model name onto a registered provider."""
    MODEL_PROVIDERS[model] = provider


def resolve_provider(provider: str, model: str) -> str:
    """
    Work out which provider serves the given model.

    Raises:
        ConfigurationError: If the model has no registered provider.
    """
    if not model:
        raise ConfigurationError("No LLM model configured")

    if model in MODEL_PROVIDERS:
        resolved = MODEL_PROVIDERS[model]
        if provider and provider != resolved:
            logger.warning(f"Model '{model}' belongs to provider '{resolved}', not '{provider}'")
    elif provider in OPEN_MODEL_PROVIDERS:
        resolved = provider
    else:
        raise ConfigurationError(f"Chosen model not available: {model}")

    if resolved not in PROVIDER_ADAPTERS:
        raise ConfigurationError(f"No adapter registered for provider '{resolved}'")

    return resolved


def is_error_result(result: NormalizedResponse) -> bool:
    """True if a gateway result is an error string."""
    return isinstance(result, str) and result.startswith(ERROR_PREFIX)


class LLMGateway:
    """Provider agnostic call surface.

    Args:
        config: The LLM section of the application config.
        reasoning_pattern: Regex used to split reasoning from the answer.
        post_processor: Hook run on the extracted (reasoning, answer) pair.

    Raises:
        ConfigurationError: On construction, if the model or credentials are unusable.
    """

    def __init__(
        self,
        config: LLMConfig,
        reasoning_pattern=DEFAULT_REASONING_PATTERN,
        post_processor: PostProcessor = keep_parts,
    ):
        self.config = config
        self.model = config.model
        self.provider = resolve_provider(config.provider, config.model)

        extractor = ReasoningExtractor(pattern=reasoning_pattern, post_processor=post_processor)
        self.adapter = PROVIDER_ADAPTERS[self.provider](config, extractor)
        self.client = self.adapter.build_client()

        logger.info(f"LLM gateway ready: provider={self.provider}, model={self.model}")

    def send(self, messages: List[Message], json_mode: bool = False) -> NormalizedResponse:
        """
        Send a conversation to the configured model.

        Args:
            messages: Ordered conversation, oldest first.
            json_mode: Ask for, and parse, a JSON document.

        Returns:
            An "Error: ..." string, None (JSON mode parse failure), the parsed
            JSON container, or {"reasoning", "response"} in text mode.
        """
        if not is_valid_conversation(messages):
            logger.error(f"Refusing to send malformed conversation: {messages!r}")
            return f"{ERROR_PREFIX}Invalid conversation."

        start_time = time.time()

        request = self.adapter.build_request(messages, self.model, json_mode)
        raw = self.adapter.execute(self.client, request)
        result = self.adapter.extract_response(raw, json_mode)

        duration_ms = (time.time() - start_time) * 1000
        log_llm_interaction(logger, self.adapter.label, request, result, self.model, duration_ms)

        return result
