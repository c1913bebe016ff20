from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent

CONFIG_DIR = REPO_ROOT / "config"

DEFAULT_CONFIG_PATH = CONFIG_DIR / "curation.yaml"

# Sentinel category for articles that fit none of the configured categories
OTHER_CATEGORY = "Other"

VALID_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
