"""
Configuration loading for the curation pipeline and the Socratic chat.

Everything is read once from a YAML file into dataclasses, which are then
handed to the gateway, fetcher, scanner, digest and chat engine when they are
constructed. Nothing below this module reads files or the environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from util.constants import DEFAULT_CONFIG_PATH, VALID_DAYS
from util.logging_util import setup_logger

logger = setup_logger(__name__)

DEFAULT_INITIAL_REPLY = "Question 1: Name a digital world issue that interests you in 5 words or under."

KNOWN_PROVIDERS = {"chatgpt", "claude", "ollama", "gemini"}


class ConfigurationError(Exception):
    """Raised when the configuration is missing or unusable.

    These are never retried: a misconfigured install should fail loudly.
    """


@dataclass
class OpenAISettings:
    api_key: str = ""
    base_url: Optional[str] = None


@dataclass
class AnthropicSettings:
    api_key: str = ""
    model_version: str = "2023-06-01"
    max_tokens_to_sample: int = 4000


@dataclass
class OllamaSettings:
    server_url: str = "http://localhost:11434"
    num_ctx: int = 8192
    temperature: float = 0.1
    timeout: int = 120


@dataclass
class GeminiSettings:
    api_key: str = ""


@dataclass
class LLMConfig:
    """Which provider/model to call, plus credentials for every provider."""
    provider: str
    model: str
    openai: OpenAISettings = field(default_factory=OpenAISettings)
    anthropic: AnthropicSettings = field(default_factory=AnthropicSettings)
    ollama: OllamaSettings = field(default_factory=OllamaSettings)
    gemini: GeminiSettings = field(default_factory=GeminiSettings)


@dataclass
class FeedConfig:
    """Configuration for a single RSS feed."""
    name: str
    url: str


@dataclass
class ScoringConfig:
    focus_description: str = ""
    emphasis_aspect: str = ""
    categories: List[str] = field(default_factory=list)
    minimum_threshold_score: int = 0
    max_articles_per_feed: int = 5
    fetch_timeout_seconds: int = 5


@dataclass
class DigestConfig:
    include_other_category: bool = False
    post_category_id: int = 1
    admin_email: str = ""
    admin_author_id: int = 0
    edit_url_template: str = "/wp-admin/post.php?post={post_id}&action=edit"
    digest_day: str = "Sunday"
    collection_cadence: str = "Daily at Midnight"


@dataclass
class ChatConfig:
    starting_prompt: str = ""
    initial_reply: str = DEFAULT_INITIAL_REPLY
    hide_links_in_reply: bool = False
    show_reasoning: bool = False
    links_preamble: str = ""


@dataclass
class NotificationConfig:
    channel: str = "email"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    sender: str = "curator@localhost"
    username: str = ""
    password: str = ""
    use_tls: bool = False
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""


@dataclass
class StorageConfig:
    bookmarks_url: str = "sqlite:///curation.db"
    chats_url: str = "sqlite:///socratic_chats.db"


@dataclass
class AppConfig:
    """Top level configuration object."""
    llm: LLMConfig
    feeds: List[FeedConfig] = field(default_factory=list)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    digest: DigestConfig = field(default_factory=DigestConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "yes", "true", "on")
    return bool(value)


def _parse_llm(data: dict) -> LLMConfig:
    if "provider" not in data or "model" not in data:
        raise ConfigurationError("llm.provider and llm.model are required")

    provider = str(data["provider"]).strip().lower()
    if provider not in KNOWN_PROVIDERS:
        logger.warning(f"Provider '{provider}' is not built in; it must be registered before use")

    openai_data = data.get("openai", {}) or {}
    anthropic_data = data.get("anthropic", {}) or {}
    ollama_data = data.get("ollama", {}) or {}
    gemini_data = data.get("gemini", {}) or {}

    return LLMConfig(
        provider=provider,
        model=str(data["model"]).strip(),
        openai=OpenAISettings(
            api_key=openai_data.get("api_key") or os.environ.get("OPENAI_API_KEY", ""),
            base_url=openai_data.get("base_url"),
        ),
        anthropic=AnthropicSettings(
            api_key=anthropic_data.get("api_key") or os.environ.get("ANTHROPIC_API_KEY", ""),
            model_version=anthropic_data.get("model_version", "2023-06-01"),
            max_tokens_to_sample=int(anthropic_data.get("max_tokens_to_sample", 4000)),
        ),
        ollama=OllamaSettings(
            server_url=ollama_data.get("server_url", "http://localhost:11434"),
            num_ctx=int(ollama_data.get("num_ctx", 8192)),
            temperature=float(ollama_data.get("temperature", 0.1)),
            timeout=int(ollama_data.get("timeout", 120)),
        ),
        gemini=GeminiSettings(
            api_key=gemini_data.get("api_key") or os.environ.get("GOOGLE_API_KEY", ""),
        ),
    )


def _parse_feeds(items: list) -> List[FeedConfig]:
    feeds = []
    for feed_data in items or []:
        if isinstance(feed_data, str):
            feeds.append(FeedConfig(name=feed_data, url=feed_data))
            continue
        if "url" not in feed_data:
            logger.warning(f"Skipping feed without url: {feed_data}")
            continue
        feeds.append(FeedConfig(name=feed_data.get("name", feed_data["url"]), url=feed_data["url"]))
    return feeds


def _parse_digest(data: dict) -> DigestConfig:
    day = data.get("digest_day", "Sunday")
    if day not in VALID_DAYS:
        logger.warning(f"Invalid digest day '{day}', falling back to Sunday")
        day = "Sunday"

    return DigestConfig(
        include_other_category=_as_bool(data.get("include_other_category", False)),
        post_category_id=int(data.get("post_category_id") or 1),
        admin_email=data.get("admin_email", ""),
        admin_author_id=int(data.get("admin_author_id", 0)),
        edit_url_template=data.get("edit_url_template", DigestConfig.edit_url_template),
        digest_day=day,
        collection_cadence=data.get("collection_cadence", "Daily at Midnight"),
    )


def parse_config(data: dict) -> AppConfig:
    """Build an AppConfig from an already-parsed YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping")
    if "llm" not in data:
        raise ConfigurationError("Configuration must contain an 'llm' section")

    scoring_data = data.get("scoring", {}) or {}
    chat_data = data.get("chat", {}) or {}
    notification_data = data.get("notification", {}) or {}
    storage_data = data.get("storage", {}) or {}

    scoring = ScoringConfig(
        focus_description=scoring_data.get("focus_description", ""),
        emphasis_aspect=scoring_data.get("emphasis_aspect", ""),
        categories=[str(c).strip() for c in scoring_data.get("categories", []) if str(c).strip()],
        minimum_threshold_score=int(scoring_data.get("minimum_threshold_score") or 0),
        max_articles_per_feed=int(scoring_data.get("max_articles_per_feed", 5)),
        fetch_timeout_seconds=int(scoring_data.get("fetch_timeout_seconds", 5)),
    )

    chat = ChatConfig(
        starting_prompt=chat_data.get("starting_prompt", ""),
        initial_reply=chat_data.get("initial_reply") or DEFAULT_INITIAL_REPLY,
        hide_links_in_reply=_as_bool(chat_data.get("hide_links_in_reply", False)),
        show_reasoning=_as_bool(chat_data.get("show_reasoning", False)),
        links_preamble=chat_data.get("links_preamble", ""),
    )

    notification = NotificationConfig(
        channel=notification_data.get("channel", "email"),
        smtp_host=notification_data.get("smtp_host", "localhost"),
        smtp_port=int(notification_data.get("smtp_port", 25)),
        sender=notification_data.get("sender", "curator@localhost"),
        username=notification_data.get("username", ""),
        password=notification_data.get("password", ""),
        use_tls=_as_bool(notification_data.get("use_tls", False)),
        telegram_bot_token=notification_data.get("telegram_bot_token", ""),
        telegram_chat_id=str(notification_data.get("telegram_chat_id", "")),
    )

    storage = StorageConfig(
        bookmarks_url=storage_data.get("bookmarks_url", "sqlite:///curation.db"),
        chats_url=storage_data.get("chats_url", "sqlite:///socratic_chats.db"),
    )

    return AppConfig(
        llm=_parse_llm(data["llm"] or {}),
        feeds=_parse_feeds(data.get("feeds", [])),
        scoring=scoring,
        digest=_parse_digest(data.get("digest", {}) or {}),
        chat=chat,
        notification=notification,
        storage=storage,
    )


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load the application configuration from a YAML file.

    Raises:
        ConfigurationError: If the file does not exist or is missing required sections.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Config not found at {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    return parse_config(data or {})
