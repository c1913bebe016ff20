from typing import Optional


def truncate_words(text: Optional[str], num_words: int, more: str = "...") -> str:
    """Keep the first num_words whitespace separated words, appending `more` if anything was cut."""
    if not text:
        return ""
    words = text.split()
    if len(words) <= num_words:
        return " ".join(words)
    return " ".join(words[:num_words]) + more
