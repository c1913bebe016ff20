"""Tests for configuration loading."""

from pathlib import Path

import pytest

from util.config import DEFAULT_INITIAL_REPLY, ConfigurationError, load_config, parse_config
from util.constants import DEFAULT_CONFIG_PATH


class TestParseConfig:
    """Tests for parse_config."""

    def test_minimal(self, monkeypatch):
        """Test only the llm section is required and everything else has defaults."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        config = parse_config({"llm": {"provider": "ChatGPT", "model": "gpt-4"}})

        assert config.llm.provider == "chatgpt"
        assert config.llm.model == "gpt-4"
        assert config.llm.openai.api_key == ""
        assert config.feeds == []
        assert config.scoring.minimum_threshold_score == 0
        assert config.scoring.max_articles_per_feed == 5
        assert config.chat.initial_reply == DEFAULT_INITIAL_REPLY
        assert config.digest.digest_day == "Sunday"

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "ak-env")
        config = parse_config({"llm": {"provider": "claude", "model": "claude-2"}})
        assert config.llm.anthropic.api_key == "ak-env"

    def test_missing_llm_section(self):
        with pytest.raises(ConfigurationError):
            parse_config({"feeds": []})

    def test_missing_model(self):
        with pytest.raises(ConfigurationError):
            parse_config({"llm": {"provider": "chatgpt"}})

    def test_unregistered_provider_loads(self):
        """Test a provider that is not built in is left for the gateway to resolve."""
        config = parse_config({"llm": {"provider": "Mistral", "model": "mistral-small"}})
        assert config.llm.provider == "mistral"

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_config(["llm"])

    def test_feeds(self):
        """Test feeds may be plain URLs or mappings, and entries without a url are skipped."""
        config = parse_config({
            "llm": {"provider": "chatgpt", "model": "gpt-4"},
            "feeds": [
                "https://example.com/a.xml",
                {"name": "B", "url": "https://example.com/b.xml"},
                {"name": "No url"},
            ],
        })

        assert [(f.name, f.url) for f in config.feeds] == [
            ("https://example.com/a.xml", "https://example.com/a.xml"),
            ("B", "https://example.com/b.xml"),
        ]

    def test_flags_and_invalid_day(self):
        config = parse_config({
            "llm": {"provider": "chatgpt", "model": "gpt-4"},
            "digest": {"include_other_category": "yes", "digest_day": "Funday"},
            "chat": {"hide_links_in_reply": "0", "show_reasoning": True},
            "scoring": {"categories": ["Privacy", " ", "Copyright "]},
        })

        assert config.digest.include_other_category is True
        assert config.digest.digest_day == "Sunday"
        assert config.chat.hide_links_in_reply is False
        assert config.chat.show_reasoning is True
        assert config.scoring.categories == ["Privacy", "Copyright"]


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.yaml")

    def test_load_yaml(self, tmp_path: Path):
        config_file = tmp_path / "curation.yaml"
        config_file.write_text("""
llm:
  provider: ollama
  model: llama3
  ollama:
    server_url: http://gpu-box:11434
scoring:
  minimum_threshold_score: 7
""")
        config = load_config(config_file)

        assert config.llm.provider == "ollama"
        assert config.llm.ollama.server_url == "http://gpu-box:11434"
        assert config.scoring.minimum_threshold_score == 7

    def test_bundled_config_loads(self):
        """Test the example configuration shipped with the repo is valid."""
        config = load_config(DEFAULT_CONFIG_PATH)

        assert config.llm.model == "gpt-4o-mini"
        assert "Other" not in config.scoring.categories
        assert len(config.feeds) == 2
