import os
from pathlib import Path
from typing import Optional

import yaml

from promptlens_core.api.client import DEFAULT_API_URL, DEFAULT_TIMEOUT_MS
from promptlens_core.report import PR_COMMENT_MAX_LENGTH, TRUNCATION_NOTICE

DEFAULT_CONFIG: dict = {
    "api_url": DEFAULT_API_URL,
    "timeout_ms": DEFAULT_TIMEOUT_MS,
    "max_comment_chars": PR_COMMENT_MAX_LENGTH,
    "system_overview": None,  # path to a markdown file describing the wider system
    "post_review_verdict": True,
}


def load_config(config_path: str = ".promptlens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .promptlens.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping, got {type(file_config).__name__}.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if int(config["max_comment_chars"]) < len(TRUNCATION_NOTICE):
        raise ValueError(
            f"max_comment_chars must be at least {len(TRUNCATION_NOTICE)} to fit the truncation notice, "
            f"got {config['max_comment_chars']}."
        )

    # Credentials only ever come from the environment.
    config["api_key"] = os.environ.get("PROMPTLENS_API_KEY")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
