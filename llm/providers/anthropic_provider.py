"""
Anthropic (Claude) text completions adapter.

The text completions endpoint takes a single prompt string rather than a list
of messages, so the conversation is collapsed into one transcript using the
literal "\\n\\nHuman:" / "\\n\\nAssistant:" turn markers, ending with an open
"\\n\\nAssistant:" turn for the model to complete. There is no JSON mode on
the wire; JSON is requested through the prompt and parsed on the way back.
"""

from typing import Any, List, Optional

import anthropic

from llm.messages import Message, Role
from llm.providers.base import ProviderAdapter
from util.config import ConfigurationError

HUMAN_PROMPT = "\n\nHuman:"
AI_PROMPT = "\n\nAssistant:"


def messages_to_transcript(messages: List[Message]) -> str:
    """Collapse a conversation into a Human/Assistant transcript."""
    prompt = ""
    for message in messages:
        prefix = AI_PROMPT if message["role"] == Role.ASSISTANT.value else HUMAN_PROMPT
        prompt += prefix + message["content"]
    return prompt + AI_PROMPT


class AnthropicAdapter(ProviderAdapter):
    name = "claude"
    label = "Anthropic"
    api_errors = (anthropic.AnthropicError,)

    def build_client(self) -> anthropic.Anthropic:
        settings = self.config.anthropic
        if not settings.api_key:
            raise ConfigurationError("Anthropic API key is not configured")
        return anthropic.Anthropic(
            api_key=settings.api_key,
            default_headers={"anthropic-version": settings.model_version},
        )

    def build_request(self, messages: List[Message], model: str, json_mode: bool = False) -> dict:
        return {
            "prompt": messages_to_transcript(messages),
            "model": model,
            "max_tokens_to_sample": self.config.anthropic.max_tokens_to_sample,
            "stop_sequences": [HUMAN_PROMPT],
        }

    def send(self, client: anthropic.Anthropic, request: dict) -> Any:
        return client.completions.create(**request)

    def raw_text(self, raw: Any) -> Optional[str]:
        if isinstance(raw, dict):
            completion = raw.get("completion")
        else:
            completion = getattr(raw, "completion", None)
        if not isinstance(completion, str):
            return None
        return completion
