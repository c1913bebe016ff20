"""
Gemini adapter built on LangChain's ChatGoogleGenerativeAI.

Registered alongside the three core providers to show the registry being
extended. Like the Anthropic adapter it has no JSON mode on the wire.
"""

from typing import Any, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from llm.messages import Message, Role
from llm.providers.base import ProviderAdapter
from util.config import ConfigurationError


def to_langchain_messages(messages: List[Message]) -> List[BaseMessage]:
    converted = []
    for message in messages:
        if message["role"] == Role.ASSISTANT.value:
            converted.append(AIMessage(content=message["content"]))
        else:
            converted.append(HumanMessage(content=message["content"]))
    return converted


class GeminiAdapter(ProviderAdapter):
    name = "gemini"
    label = "Gemini"

    def build_client(self) -> ChatGoogleGenerativeAI:
        settings = self.config.gemini
        if not settings.api_key:
            raise ConfigurationError("Gemini API key is not configured")
        return ChatGoogleGenerativeAI(
            model=self.config.model,
            google_api_key=settings.api_key,
        )

    def build_request(self, messages: List[Message], model: str, json_mode: bool = False) -> dict:
        return {
            "model": model,
            "messages": to_langchain_messages(messages),
        }

    def send(self, client: ChatGoogleGenerativeAI, request: dict) -> Any:
        return client.invoke(request["messages"])

    def raw_text(self, raw: Any) -> Optional[str]:
        content = getattr(raw, "content", None)

        # Gemini can return content as a list of parts, extract the text
        if isinstance(content, list):
            text_parts = [part.get('text', '') for part in content if isinstance(part, dict) and 'text' in part]
            content = ''.join(text_parts)

        if not isinstance(content, str):
            return None
        return content
