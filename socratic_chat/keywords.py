"""
Keyword phrases for a chat reply, ranked with RAKE (rake-nltk).

Text is split into candidate phrases at punctuation and stop words, and each
phrase scores the sum of its words' degree / frequency. The stop list is
passed in and sentences are split here, so no NLTK corpora need downloading.
"""

import re
from typing import List, Tuple

from rake_nltk import Metric, Rake

STOP_WORDS = frozenset("""
a about above after again against all almost also although always am among an and another any
anyone anything are around as at be because been before being below between both but by can
cannot could did do does doing done down during each either else enough especially even ever
every few for from further get gets getting give given gives go goes going got had has have
having he her here hers herself him himself his how however i if in into is it its itself just
least less let like likely made make makes many may me might more most mostly much must my
myself neither no nor not now of off often on once one only or other others otherwise our ours
ourselves out over own perhaps please quite rather really same several shall she should since
so some something sometimes still such than that the their theirs them themselves then there
therefore these they thing things think this those though through thus to together too toward
towards under until up upon us use used uses using very via was way ways we well were what
whatever when where whether which while who whom whose why will with within without would yet
you your yours yourself yourselves
""".split())

SENTENCE_DELIMITERS = re.compile(r"[.!?,;:\t\\\"()\[\]{}’‘“”–—|/]|\s-\s|\n")
TOKEN_PATTERN = re.compile(r"\w[\w'\-]*|[^\w\s]")


def split_sentences(text: str) -> List[str]:
    return [part for part in SENTENCE_DELIMITERS.split(text) if part.strip()]


def tokenize(sentence: str) -> List[str]:
    return TOKEN_PATTERN.findall(sentence)


def _rake() -> Rake:
    return Rake(
        stopwords=STOP_WORDS,
        ranking_metric=Metric.DEGREE_TO_FREQUENCY_RATIO,
        sentence_tokenizer=split_sentences,
        word_tokenizer=tokenize,
    )


def phrase_scores(text: str) -> List[Tuple[str, float]]:
    """Distinct phrases with their scores, best first."""
    rake = _rake()
    rake.extract_keywords_from_text(text or "")

    ranked: List[Tuple[str, float]] = []
    seen = set()
    for score, phrase in rake.get_ranked_phrases_with_scores():
        if phrase not in seen:
            seen.add(phrase)
            ranked.append((phrase, score))
    return ranked


def top_phrase(text: str) -> str:
    """The highest scoring phrase, or an empty string if the text has none."""
    ranked = phrase_scores(text)
    if not ranked:
        return ""
    return ranked[0][0]
