"""Tests for reasoning block extraction."""

import re

from llm.reasoning import DEFAULT_REASONING_PATTERN, ReasoningExtractor, keep_parts


class TestReasoningExtractor:
    """Tests for ReasoningExtractor.extract."""

    def test_think_block_is_split_off(self):
        """Test the default pattern separates a leading <think> block."""
        reasoning, main = ReasoningExtractor().extract("<think>internal</think>FINAL")
        assert reasoning == "internal"
        assert main == "FINAL"

    def test_text_without_tags_is_unchanged(self):
        """Test untagged text yields no reasoning and the raw text."""
        raw = "Just an answer, no reasoning here."
        reasoning, main = ReasoningExtractor().extract(raw)
        assert reasoning is None
        assert main == raw

    def test_scratchpad_and_rationale_tags(self):
        """Test the other recognised tag names, case insensitively."""
        extractor = ReasoningExtractor()
        assert extractor.extract("<scratchpad>a</scratchpad>b") == ("a", "b")
        assert extractor.extract("  <RATIONALE>\nwhy\n</RATIONALE>\n\nanswer ") == ("why", "answer")

    def test_mismatched_tags_do_not_match(self):
        """Test a block closed with a different tag is left alone."""
        raw = "<think>x</scratchpad>y"
        assert ReasoningExtractor().extract(raw) == (None, raw)

    def test_block_must_be_leading(self):
        """Test a reasoning block in the middle of the text is not extracted."""
        raw = "Answer first <think>later</think>"
        assert ReasoningExtractor().extract(raw) == (None, raw)

    def test_custom_string_pattern(self):
        """Test a string pattern is compiled and used."""
        extractor = ReasoningExtractor(pattern=r"^\[(notes)\](.*?)\[/notes\](.*)")
        assert extractor.extract("[notes]n[/notes]answer") == ("n", "answer")

    def test_pattern_none_disables_extraction(self):
        """Test extraction can be switched off."""
        raw = "<think>internal</think>FINAL"
        assert ReasoningExtractor(pattern=None).extract(raw) == (None, raw)

    def test_post_processor_receives_all_parts(self):
        """Test the post-processor sees the split parts, the raw text and the mode."""
        calls = []

        def record(reasoning, main, raw, json_mode):
            calls.append((reasoning, main, raw, json_mode))
            return reasoning, main.upper()

        extractor = ReasoningExtractor(post_processor=record)
        result = extractor.extract("<think>r</think>final", json_mode=True)

        assert result == ("r", "FINAL")
        assert calls == [("r", "final", "<think>r</think>final", True)]

    def test_post_processor_returning_none_falls_back_to_raw(self):
        """Test a post-processor that drops the main response gets the raw text back."""
        extractor = ReasoningExtractor(post_processor=lambda r, m, raw, j: (r, None))
        assert extractor.extract("<think>r</think>final") == ("r", "<think>r</think>final")


class TestDefaults:
    """Tests for the default strategy objects."""

    def test_keep_parts_is_identity(self):
        """Test the default post-processor returns its inputs."""
        assert keep_parts("r", "m", "raw", False) == ("r", "m")

    def test_default_pattern_is_compiled(self):
        """Test the default pattern is a compiled regex with three groups."""
        assert isinstance(DEFAULT_REASONING_PATTERN, re.Pattern)
        assert DEFAULT_REASONING_PATTERN.groups == 3
