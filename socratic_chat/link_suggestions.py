"""
Picks published bookmarks related to an assistant reply.

The top RAKE phrase of the reply is cut to at most four words. Stored titles
and excerpts will not necessarily use those words in the same order, or all
of them, so every ordering of the full set and of the subsets one and two
words smaller is tried as a LIKE pattern ("%game% %development%").
"""

from itertools import combinations, permutations
from typing import Iterable, List, Sequence, Tuple

from content_screening.bookmarks import search_published
from socratic_chat.keywords import top_phrase
from socratic_chat.models import SuggestedLink
from util.logging_util import setup_logger

logger = setup_logger(__name__)

MAX_KEYWORDS = 4
MAX_LINKS = 3
LIKE_ESCAPE = "\\"


def extract_keywords(text: str, max_keywords: int = MAX_KEYWORDS) -> List[str]:
    """Up to max_keywords distinct words from the reply's top phrase."""
    keywords = []
    for word in top_phrase(text).split():
        if word not in keywords:
            keywords.append(word)
    return keywords[:max_keywords]


def generate_permutations(items: Sequence[str]) -> List[Tuple[str, ...]]:
    return list(permutations(items))


def generate_combinations(words: Sequence[str]) -> List[str]:
    """
    Space joined orderings of the words, of the words minus one and of the words minus two.

    With two words or fewer only the orderings of all of them are produced.
    """
    words = list(words)
    sizes = [len(words)]
    if len(words) > 2:
        sizes += [len(words) - 1, len(words) - 2]

    results = []
    for size in sizes:
        for subset in combinations(words, size):
            for ordering in generate_permutations(subset):
                joined = " ".join(ordering)
                if joined not in results:
                    results.append(joined)
    return results


def escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_patterns(keywords: Iterable[str]) -> List[str]:
    """LIKE patterns for every keyword ordering, each word wrapped in %."""
    wildcards = [f"%{escape_like(keyword)}%" for keyword in keywords]
    return generate_combinations(wildcards)


class LinkSuggester:
    """Finds up to `limit` published bookmarks for a reply.

    Args:
        hide_links: When set, no links are ever suggested.
        limit: Maximum number of links returned.
    """

    def __init__(self, hide_links: bool = False, limit: int = MAX_LINKS):
        self.hide_links = hide_links
        self.limit = limit

    def suggest(self, response_text: str) -> List[SuggestedLink]:
        if self.hide_links:
            return []

        keywords = extract_keywords(response_text)
        if not keywords:
            return []

        patterns = build_patterns(keywords)
        bookmarks = search_published(patterns, limit=self.limit, escape=LIKE_ESCAPE)
        logger.debug(f"{len(bookmarks)} link(s) for keywords {keywords}")

        return [SuggestedLink(id=b.id, url=b.url, title=b.title) for b in bookmarks]
