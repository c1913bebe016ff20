"""Tests for the scoring prompt."""

from content_screening.models import Link
from content_screening.prompt_builder import PromptBuilder, build_scoring_prompt
from util.config import ScoringConfig


def sample_links():
    return [
        Link(url="https://example.com/a", title="Apps and privacy", excerpt="Tracking in mobile apps."),
        Link(url="https://example.com/b", title="Cake recipes", excerpt="Flour, sugar and eggs."),
    ]


class TestBuildScoringPrompt:
    """Tests for build_scoring_prompt."""

    def test_posts_are_numbered_from_one(self):
        """Test each article appears with its 1-based number, title and excerpt in order."""
        prompt = build_scoring_prompt(sample_links(), "Digital rights")

        assert (
            "<blog_posts>\n"
            "post: 1\ntitle: Apps and privacy\nexcerpt: Tracking in mobile apps.\n\n"
            "post: 2\ntitle: Cake recipes\nexcerpt: Flour, sugar and eggs.\n\n"
            "</blog_posts>"
        ) in prompt
        assert prompt.endswith("</blog_posts>")

    def test_focus_and_emphasis(self):
        """Test the subject area and emphasis are rendered."""
        prompt = build_scoring_prompt(sample_links(), "Digital rights", "surveillance")

        assert "rate its relevance to the main subject area: Digital rights." in prompt
        assert "pay specific attention to: surveillance." in prompt

    def test_missing_focus_and_emphasis(self):
        """Test placeholders are used when nothing is configured."""
        prompt = build_scoring_prompt(sample_links(), "")

        assert "[Main Subject Area not set]" in prompt
        assert "pay specific attention" not in prompt

    def test_categories_with_other_last(self):
        """Test configured categories are listed, followed by Other exactly once."""
        prompt = build_scoring_prompt(sample_links(), "Digital rights", categories=["Privacy", "Other", "Copyright"])

        assert "- Privacy\n- Copyright\n- Other (Use this if no other category fits)" in prompt
        assert prompt.count("- Other") == 1

    def test_no_categories(self):
        prompt = build_scoring_prompt(sample_links(), "Digital rights")
        assert "[No categories set]\n- Other (Use this if no other category fits)" in prompt

    def test_json_envelope_instructions(self):
        """Test the prompt asks for the results envelope the parser expects."""
        prompt = build_scoring_prompt(sample_links(), "Digital rights")

        assert 'a single key named "results"' in prompt
        assert '{"post_id": number, "score": number, "confidence": number, "category": "string"}' in prompt

    def test_long_title_and_excerpt_are_truncated(self):
        """Test titles are cut to 20 words and excerpts to 50."""
        link = Link(url="https://example.com/c", title=" ".join(["word"] * 30), excerpt=" ".join(["text"] * 80))

        prompt = build_scoring_prompt([link], "Digital rights")

        assert "title: " + " ".join(["word"] * 20) + "...\n" in prompt
        assert "excerpt: " + " ".join(["text"] * 50) + "...\n" in prompt


class TestPromptBuilder:
    """Tests for PromptBuilder."""

    def test_messages_is_single_user_turn(self):
        """Test the prompt is sent as one user message built from the scoring settings."""
        builder = PromptBuilder(ScoringConfig(focus_description="Digital rights", categories=["Privacy"]))

        messages = builder.messages(sample_links())

        assert len(messages) == 1
        assert messages[0]["role"] == "user"
        assert messages[0]["content"] == build_scoring_prompt(sample_links(), "Digital rights", "", ["Privacy"])
