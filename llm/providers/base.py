"""
The contract every LLM provider adapter implements.

An adapter turns the provider agnostic message list into the provider's wire
format, performs the call and normalises whatever comes back. Failures never
escape as exceptions: execute() returns a tagged error dict and
extract_response() turns that, or any malformed envelope, into an
"Error: ..." string (or None for unusable JSON).
"""

import json
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple, Type, Union

from llm.messages import Message
from llm.reasoning import ReasoningExtractor
from util.config import LLMConfig
from util.logging_util import setup_logger

logger = setup_logger(__name__)

ERROR_PREFIX = "Error: "

# What extract_response can hand back to the gateway
NormalizedResponse = Union[str, None, dict, list]


def error_result(message: str) -> dict:
    """The tagged error value returned by execute()."""
    return {"error": True, "message": message}


def is_tagged_error(raw: Any) -> bool:
    return isinstance(raw, dict) and raw.get("error") is True and "message" in raw


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def parse_json_container(text: str) -> Optional[Union[dict, list]]:
    """Parse text as JSON, returning None unless the result is an object or array."""
    try:
        decoded = json.loads(_strip_code_fence(text))
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"JSON decode error: {e}")
        logger.debug(f"Content received: {text}")
        return None

    if not isinstance(decoded, (dict, list)):
        logger.error(f"Decoded JSON is not a container: {type(decoded).__name__}")
        return None

    return decoded


class ProviderAdapter(ABC):
    """Base class for provider adapters.

    Subclasses supply the provider specific pieces: client construction,
    request shape, the call itself and how to find the text in the success
    envelope. Reasoning extraction and JSON handling live here so every
    provider behaves the same way.
    """

    name = "provider"
    label = "provider"

    # Provider SDK exceptions reported as API errors rather than unexpected ones
    api_errors: Tuple[Type[BaseException], ...] = ()

    def __init__(self, config: LLMConfig, extractor: Optional[ReasoningExtractor] = None):
        self.config = config
        self.extractor = extractor or ReasoningExtractor()

    @abstractmethod
    def build_client(self) -> Any:
        """Construct the provider handle from stored settings. No network I/O."""

    @abstractmethod
    def build_request(self, messages: List[Message], model: str, json_mode: bool = False) -> dict:
        """Build the provider native payload for the given conversation."""

    @abstractmethod
    def send(self, client: Any, request: dict) -> Any:
        """Perform the call. May raise; execute() handles the errors."""

    @abstractmethod
    def raw_text(self, raw: Any) -> Optional[str]:
        """Return the text payload of a success envelope, or None if the shape is wrong."""

    def execute(self, client: Any, request: dict) -> Any:
        """Perform the call, converting any exception into a tagged error value."""
        try:
            return self.send(client, request)
        except self.api_errors as e:
            logger.error(f"{self.label} API error: {e}")
            return error_result(f"{self.label} API Error: {e}")
        except Exception as e:
            logger.error(f"{self.label} unexpected error: {e}")
            return error_result(f"An unexpected error occurred: {e}")

    def extract_response(self, raw: Any, json_mode: bool = False) -> NormalizedResponse:
        """
        Normalise a raw provider response.

        Returns:
            An "Error: ..." string for tagged errors and malformed envelopes.
            In JSON mode, the parsed dict/list, or None if it does not parse.
            Otherwise {"reasoning": str|None, "response": str}.
        """
        if is_tagged_error(raw):
            return ERROR_PREFIX + str(raw["message"])

        text = self.raw_text(raw)
        if text is None:
            logger.error(f"Invalid {self.label} response structure: {raw!r}")
            return f"{ERROR_PREFIX}Invalid response structure from {self.label}."

        reasoning, main_response = self.extractor.extract(text, json_mode)

        if json_mode:
            return parse_json_container(main_response)

        return {"reasoning": reasoning, "response": main_response}
