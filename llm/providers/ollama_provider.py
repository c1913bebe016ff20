"""Ollama chat adapter, talking to the server's /api/chat endpoint over HTTP."""

from dataclasses import dataclass, field
from typing import Any, List, Optional

import requests

from llm.messages import Message
from llm.providers.base import ProviderAdapter
from util.config import ConfigurationError


@dataclass
class OllamaClient:
    server_url: str
    timeout: int
    session: requests.Session = field(default_factory=requests.Session)

    @property
    def chat_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/api/chat"


class OllamaAdapter(ProviderAdapter):
    name = "ollama"
    label = "Ollama"
    api_errors = (requests.RequestException,)

    def build_client(self) -> OllamaClient:
        settings = self.config.ollama
        if not settings.server_url:
            raise ConfigurationError("Ollama server URL is not configured")
        return OllamaClient(server_url=settings.server_url, timeout=settings.timeout)

    def build_request(self, messages: List[Message], model: str, json_mode: bool = False) -> dict:
        settings = self.config.ollama
        request = {
            "model": model,
            "messages": list(messages),
            "stream": False,
            "options": {
                "num_ctx": settings.num_ctx,
                "temperature": settings.temperature,
            },
        }
        if json_mode:
            request["format"] = "json"
        return request

    def send(self, client: OllamaClient, request: dict) -> Any:
        resp = client.session.post(client.chat_url, json=request, timeout=client.timeout)
        resp.raise_for_status()
        return resp.json()

    def raw_text(self, raw: Any) -> Optional[str]:
        if not isinstance(raw, dict):
            return None
        message = raw.get("message")
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            return None
        return message["content"]
