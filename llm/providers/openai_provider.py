"""OpenAI (ChatGPT) chat completions adapter."""

from typing import Any, List, Optional

import openai
from openai import OpenAI

from llm.messages import Message
from llm.providers.base import ProviderAdapter
from util.config import ConfigurationError


class OpenAIAdapter(ProviderAdapter):
    name = "chatgpt"
    label = "OpenAI"
    api_errors = (openai.OpenAIError,)

    def build_client(self) -> OpenAI:
        settings = self.config.openai
        if not settings.api_key:
            raise ConfigurationError("OpenAI API key is not configured")
        if settings.base_url:
            return OpenAI(api_key=settings.api_key, base_url=settings.base_url)
        return OpenAI(api_key=settings.api_key)

    def build_request(self, messages: List[Message], model: str, json_mode: bool = False) -> dict:
        request = {
            "model": model,
            "messages": list(messages),
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}
        return request

    def send(self, client: OpenAI, request: dict) -> Any:
        return client.chat.completions.create(**request)

    def raw_text(self, raw: Any) -> Optional[str]:
        try:
            content = raw.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            return None
        if not isinstance(content, str):
            return None
        return content
