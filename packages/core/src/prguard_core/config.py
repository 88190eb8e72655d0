import os
from pathlib import Path
from typing import Optional

import yaml

from prguard_core.messages import DEFAULT_APPROVE_MSG

DEFAULT_CONFIG: dict = {
    "review_comments_total_max": 200,  # 0 or null = no ceiling
    "review_comments_max": 10,  # inline comments per submitted review
    "branches_ignore": [],
    "skip_draft_prs": False,
    "skip_folders": [],  # directories from the repository root, e.g. "vendor"
    "file_extensions": [],  # empty = every extension that is not a known non-code one
    "dismiss_stale_reviews": True,
    "report_no_issues_found": False,
    "autoapprove": False,
    "autoapprove_label": None,
    "approve_message": DEFAULT_APPROVE_MSG,
    "status_context": "prguard",
    "status_target_url": None,
    "pr_lookup_attempts": 2,
    "pr_lookup_delay": 10,
    "page_delay": 2,
    "github_base_url": "https://api.github.com",
    "http_timeout": 20,
}

_LIST_KEYS = ("branches_ignore", "skip_folders", "file_extensions")
_NUMBER_KEYS = (
    "review_comments_max",
    "pr_lookup_attempts",
    "pr_lookup_delay",
    "page_delay",
    "http_timeout",
)


def load_config(config_path: str = ".prguard.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prguard.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, **{key: list(DEFAULT_CONFIG[key]) for key in _LIST_KEYS}}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping of settings")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    validate_config(config)
    return config


def validate_config(config: dict) -> None:
    """Raise ValueError for settings that would misbehave later instead of failing now."""
    for key in _LIST_KEYS:
        value = config.get(key)
        if value is None:
            config[key] = []
        elif not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"'{key}' must be a list of strings, got {value!r}")

    for key in _NUMBER_KEYS:
        value = config.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValueError(f"'{key}' must be a non-negative number, got {value!r}")

    total_max = config.get("review_comments_total_max")
    if total_max is not None and (isinstance(total_max, bool) or not isinstance(total_max, int) or total_max < 0):
        raise ValueError(f"'review_comments_total_max' must be a non-negative integer or null, got {total_max!r}")

    if config["review_comments_max"] < 1:
        raise ValueError("'review_comments_max' must be at least 1")
