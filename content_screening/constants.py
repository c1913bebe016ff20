"""
Constants for the content screening system.
"""

from pathlib import Path

MODULE_ROOT = Path(__file__).parent

PROMPTS_DIR = MODULE_ROOT / "prompts"

SCORE_PROMPT_PATH = PROMPTS_DIR / "score_articles.jinja2"

DB_NAME = "curation.db"

# Article page fetches
FETCH_TIMEOUT_SECONDS = 5
ESCAPED_AMPERSAND = "&#038;"
USER_AGENT = "Mozilla/5.0 (compatible; content-curator/1.0)"

# Word limits applied to what is sent to the LLM
PROMPT_TITLE_WORDS = 20
PROMPT_EXCERPT_WORDS = 50

# Word limits applied to what is stored as a bookmark
BOOKMARK_TITLE_WORDS = 20
BOOKMARK_EXCERPT_WORDS = 25

DIGEST_TITLE_PREFIX = "News of the week for the week of"
UNKNOWN_CATEGORY = "Unknown Category"
