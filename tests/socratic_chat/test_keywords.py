"""Tests for RAKE keyword extraction."""

from socratic_chat.keywords import phrase_scores, split_sentences, tokenize, top_phrase


class TestTokenizers:
    """Tests for the sentence and word tokenizers handed to RAKE."""

    def test_split_sentences(self):
        assert split_sentences("Online privacy? Social media, platforms.") == [
            "Online privacy", " Social media", " platforms",
        ]

    def test_tokenize_separates_punctuation(self):
        assert tokenize("teens' data -- sold") == ["teens'", "data", "-", "-", "sold"]


class TestPhraseScores:
    """Tests for phrase scoring."""

    def test_longer_phrases_rank_higher(self):
        ranked = phrase_scores("What draws you to online privacy? Think about social media platforms.")
        assert [phrase for phrase, _ in ranked] == ["social media platforms", "online privacy", "draws"]
        assert ranked[0][1] == 9.0

    def test_phrases_are_lowercased(self):
        assert phrase_scores("Online Privacy") == [("online privacy", 4.0)]

    def test_repeated_phrases_are_listed_once(self):
        ranked = phrase_scores("Privacy matters. Privacy matters.")
        assert [phrase for phrase, _ in ranked] == ["privacy matters"]

    def test_only_stop_words(self):
        assert phrase_scores("What do you think?") == []


class TestTopPhrase:
    """Tests for top_phrase."""

    def test_top_phrase(self):
        assert top_phrase("Why do video game studios crunch?") == "video game studios crunch"

    def test_empty(self):
        assert top_phrase("") == ""
        assert top_phrase(None) == ""
        assert top_phrase("Is it?") == ""
