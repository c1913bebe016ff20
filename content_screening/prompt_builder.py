"""
Builds the scoring prompt sent to the LLM.

The wording of score_articles.jinja2 is what the scoring parser depends on:
the "results" envelope, the four keys and the 1-based post numbers.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from content_screening.constants import PROMPT_EXCERPT_WORDS, PROMPT_TITLE_WORDS, SCORE_PROMPT_PATH
from content_screening.models import Link
from llm.messages import Message, user_message
from llm.prompting import render_template
from util.config import ScoringConfig
from util.constants import OTHER_CATEGORY
from util.text import truncate_words


def _posts_for_prompt(articles: Sequence[Link]) -> List[dict]:
    return [
        {
            "number": index + 1,
            "title": truncate_words(link.title, PROMPT_TITLE_WORDS),
            "excerpt": truncate_words(link.excerpt, PROMPT_EXCERPT_WORDS),
        }
        for index, link in enumerate(articles)
    ]


def build_scoring_prompt(
    articles: Sequence[Link],
    focus_description: str,
    emphasis_aspect: Optional[str] = None,
    categories: Sequence[str] = (),
    template_path: Path = SCORE_PROMPT_PATH,
) -> str:
    """
    Render the scoring prompt for an ordered batch of articles.

    Args:
        articles: Links in submission order. Post N in the prompt is articles[N - 1].
        focus_description: The subject area posts are rated against.
        emphasis_aspect: Optional aspect to pay particular attention to.
        categories: Admin configured categories. "Other" is always appended.
        template_path: Jinja2 template to render.

    Returns:
        The prompt text.
    """
    params = {
        "focus_description": (focus_description or "").strip(),
        "emphasis_aspect": (emphasis_aspect or "").strip(),
        "categories": [c for c in categories if c and c != OTHER_CATEGORY],
        "other_category": OTHER_CATEGORY,
        "posts": _posts_for_prompt(articles),
    }
    return render_template(template_path, params).rstrip()


class PromptBuilder:
    """Binds the scoring settings so the pipeline only has to pass articles."""

    def __init__(self, scoring: ScoringConfig, template_path: Path = SCORE_PROMPT_PATH):
        self.scoring = scoring
        self.template_path = template_path

    def build(self, articles: Sequence[Link]) -> str:
        return build_scoring_prompt(
            articles,
            self.scoring.focus_description,
            self.scoring.emphasis_aspect,
            self.scoring.categories,
            self.template_path,
        )

    def messages(self, articles: Sequence[Link]) -> List[Message]:
        """The prompt wrapped as a one-message conversation."""
        return [user_message(self.build(articles))]
